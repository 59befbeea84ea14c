# This project was developed with assistance from AI tools.
"""Shared schema components."""

from pydantic import BaseModel


class Pagination(BaseModel):
    """Page-based pagination metadata for list responses."""

    total: int
    page: int
    limit: int
    total_pages: int
    has_more: bool

    @classmethod
    def build(cls, *, total: int, page: int, limit: int) -> "Pagination":
        total_pages = (total + limit - 1) // limit if limit else 0
        return cls(
            total=total,
            page=page,
            limit=limit,
            total_pages=total_pages,
            has_more=page < total_pages,
        )
