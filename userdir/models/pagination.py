"""
Pagination query and page arithmetic.
"""

import math
from typing import Optional

from pydantic import BaseModel, Field, field_validator

DEFAULT_PAGE_SIZE = 10

# Columns a caller may order listings by; anything else uses the default order
ORDERABLE_COLUMNS: frozenset[str] = frozenset(
    {"first_name", "last_name", "email", "role", "created_at", "updated_at"}
)


class PaginationQuery(BaseModel):
    """
    Page request for user listings.

    Attributes:
        size: Page size. Zero (or unset) selects DEFAULT_PAGE_SIZE.
        page: 1-based page number. Values below 1 are treated as 1.
        order_by: Optional column name from ORDERABLE_COLUMNS.
    """

    size: int = Field(default=DEFAULT_PAGE_SIZE, ge=1)
    page: int = Field(default=1)
    order_by: Optional[str] = Field(default=None)

    @field_validator("size", mode="before")
    @classmethod
    def default_size(cls, v):
        if v is None or v == 0 or v == "":
            return DEFAULT_PAGE_SIZE
        return v

    @field_validator("page", mode="before")
    @classmethod
    def clamp_page(cls, v):
        if v is None or v == "":
            return 1
        return max(1, int(v))

    @field_validator("order_by")
    @classmethod
    def known_column(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip().lower()
        return v if v in ORDERABLE_COLUMNS else None

    @property
    def offset(self) -> int:
        """Number of rows to skip."""
        return (self.page - 1) * self.size

    @property
    def limit(self) -> int:
        return self.size


def get_total_pages(total_count: int, size: int) -> int:
    """Return ceil(total_count / size)."""
    return math.ceil(total_count / size)


def get_has_more(page: int, total_count: int, size: int) -> bool:
    """Return True when rows exist beyond the given page."""
    return page * size < total_count
