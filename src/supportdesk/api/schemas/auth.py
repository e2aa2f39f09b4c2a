"""Authentication request/response schemas."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class SignInRequest(BaseModel):
    """Email/password sign-in request."""

    email: EmailStr
    password: str = Field(min_length=1, max_length=128)


class SessionUser(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str | None = None
    email: str | None = None
    role: str
    tenant_id: str | None = Field(default=None, alias="tenantId")
    store_id: str | None = Field(default=None, alias="storeId")


class AcknowledgmentRequest(BaseModel):
    """Optional body of the send-acknowledgment internal call."""

    model_config = ConfigDict(populate_by_name=True)

    in_reply_to: str | None = Field(default=None, alias="inReplyTo")
