"""Response envelope shared by all API endpoints."""
from typing import Any, Dict, Generic, List, Optional, TypeVar

from fastapi import Query
from pydantic import BaseModel

from app.core.config import settings
from app.services.pagination import Pagination

T = TypeVar("T")


class Envelope(BaseModel, Generic[T]):
    """Standard response: ``{success, data?, message?}``."""

    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None


class PaginatedEnvelope(BaseModel, Generic[T]):
    """Standard list response with pagination metadata."""

    success: bool = True
    data: List[T]
    pagination: Pagination


class ErrorEnvelope(BaseModel):
    success: bool = False
    message: str
    errors: Optional[List[Dict[str, Any]]] = None


class PageParams:
    """Common ``page``/``limit`` query parameters."""

    def __init__(
        self,
        page: int = Query(1, ge=1),
        limit: int = Query(settings.default_page_limit, ge=1, le=settings.max_page_limit),
    ):
        self.page = page
        self.limit = limit


def client_host(request) -> str:
    return request.client.host if request.client else "unknown"
