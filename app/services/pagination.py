"""Pagination helpers."""
import math
from typing import Generic, List, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class Pagination(BaseModel):
    """Pagination metadata returned alongside list results."""

    page: int
    limit: int
    total: int
    pages: int

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(page=page, limit=limit, total=total, pages=math.ceil(total / limit) if limit else 0)


class Page(BaseModel, Generic[T]):
    """A page of results."""

    items: List[T]
    pagination: Pagination


def offset_for(page: int, limit: int) -> int:
    return (page - 1) * limit
