"""
Page container for LIMIT/OFFSET listings.
"""

import math
from typing import Generic, List, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class Page(BaseModel, Generic[T]):
    """One page of results with its metadata."""
    data: List[T]
    total: int
    per_page: int
    current_page: int
    last_page: int

    @classmethod
    def build(cls, items: List[T], total: int, page: int, per_page: int) -> "Page[T]":
        return cls(
            data=items,
            total=total,
            per_page=per_page,
            current_page=page,
            last_page=max(1, math.ceil(total / per_page)),
        )


def page_offset(page: int, per_page: int) -> int:
    """Offset of the first row of a 1-based page."""
    return (page - 1) * per_page
