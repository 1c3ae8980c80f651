"""Order API endpoints."""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request

from app.api.responses import Envelope, PageParams, PaginatedEnvelope, client_host
from app.core.config import settings
from app.core.dependencies import get_order_ledger, get_stats_aggregator
from app.core.errors import AppError, ServerError
from app.services.ordering.ledger import OrderLedgerService
from app.services.ordering.models import OrderCreate, OrderOut, OrderStatus, StatusUpdate
from app.services.stats.aggregator import StatsAggregator
from app.services.stats.models import OrderStats, TopSeller


router = APIRouter(prefix="/api/orders")
logger = logging.getLogger(__name__)


def _server_error(action: str, e: Exception) -> ServerError:
    logger.error(f"[ORDERS] Error {action} - Error: {type(e).__name__}: {str(e)}", exc_info=True)
    return ServerError(f"Server error while {action}")


@router.get("", response_model=PaginatedEnvelope[OrderOut])
async def list_orders(
    request: Request,
    status: Optional[OrderStatus] = None,
    sort_by: str = Query("createdAt", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder"),
    paging: PageParams = Depends(),
    ledger: OrderLedgerService = Depends(get_order_ledger),
):
    """List orders with optional status filter, sorting and pagination."""
    logger.info(
        f"[ORDERS] List request - status: {status}, sort: {sort_by} {sort_order}, "
        f"page: {paging.page}, limit: {paging.limit}, Client: {client_host(request)}"
    )
    try:
        page = await ledger.list_orders(
            status=status,
            sort_by=sort_by,
            sort_order=sort_order,
            page=paging.page,
            limit=paging.limit,
        )
        logger.info(f"[ORDERS] Returning {len(page.items)} of {page.pagination.total} orders")
        return PaginatedEnvelope[OrderOut](data=page.items, pagination=page.pagination)
    except AppError:
        raise
    except Exception as e:
        raise _server_error("fetching orders", e)


@router.get("/search", response_model=PaginatedEnvelope[OrderOut])
async def search_orders(
    q: Optional[str] = None,
    paging: PageParams = Depends(),
    ledger: OrderLedgerService = Depends(get_order_ledger),
):
    """Substring search over order numbers, customer names and item names."""
    logger.info(f"[ORDERS] Search request - q: {q!r}, page: {paging.page}")
    try:
        page = await ledger.search_orders(q, page=paging.page, limit=paging.limit)
        return PaginatedEnvelope[OrderOut](data=page.items, pagination=page.pagination)
    except AppError:
        raise
    except Exception as e:
        raise _server_error("searching orders", e)


@router.get("/stats", response_model=Envelope[OrderStats])
async def get_order_stats(stats: StatsAggregator = Depends(get_stats_aggregator)):
    """Order counts and revenue by status, overall and for today."""
    try:
        return Envelope[OrderStats](data=await stats.get_stats())
    except AppError:
        raise
    except Exception as e:
        logger.error(f"[STATS] Error fetching order statistics - Error: {type(e).__name__}: {str(e)}", exc_info=True)
        raise ServerError("Server error while fetching order statistics")


@router.get("/analytics/top-sellers", response_model=Envelope[List[TopSeller]])
async def get_top_sellers(
    limit: int = Query(settings.top_sellers_default_limit, ge=1, le=settings.max_page_limit),
    stats: StatsAggregator = Depends(get_stats_aggregator),
):
    """Best-selling menu items across non-cancelled orders."""
    try:
        return Envelope[List[TopSeller]](data=await stats.top_sellers(limit=limit))
    except AppError:
        raise
    except Exception as e:
        logger.error(f"[STATS] Error fetching top sellers - Error: {type(e).__name__}: {str(e)}", exc_info=True)
        raise ServerError("Server error while fetching top selling items")


@router.get("/{order_id}", response_model=Envelope[OrderOut])
async def get_order(order_id: str, ledger: OrderLedgerService = Depends(get_order_ledger)):
    """Get a single order with menu item details."""
    try:
        return Envelope[OrderOut](data=await ledger.get_order(order_id))
    except AppError:
        raise
    except Exception as e:
        raise _server_error("fetching order", e)


@router.post("", response_model=Envelope[OrderOut], status_code=201)
async def create_order(payload: OrderCreate, ledger: OrderLedgerService = Depends(get_order_ledger)):
    """Create an order from menu item references."""
    logger.info(
        f"[ORDERS] Create request - {len(payload.items)} lines, "
        f"customer: {payload.customer_name!r}, table: {payload.table_number}"
    )
    try:
        order = await ledger.create_order(payload)
        return Envelope[OrderOut](message="Order created successfully", data=order)
    except AppError:
        raise
    except Exception as e:
        raise _server_error("creating order", e)


@router.patch("/{order_id}/status", response_model=Envelope[OrderOut])
async def update_order_status(
    order_id: str,
    payload: StatusUpdate,
    ledger: OrderLedgerService = Depends(get_order_ledger),
):
    """Move an order to a new status."""
    logger.info(f"[ORDERS] Status request - id: {order_id}, status: {payload.status.value}")
    try:
        order = await ledger.update_status(order_id, payload.status)
        return Envelope[OrderOut](message=f"Order status updated to {payload.status.value}", data=order)
    except AppError:
        raise
    except Exception as e:
        raise _server_error("updating order status", e)
