"""Shared schemas used across all endpoints."""

from __future__ import annotations

from pydantic import BaseModel


class PaginationMeta(BaseModel):
    """Pagination metadata in list responses."""

    page: int
    limit: int
    total_items: int
    total_pages: int
