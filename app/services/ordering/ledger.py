"""Order ledger service.

Owns order creation (pricing, totals, order numbers), the status state
machine and order read queries.
"""
import logging
from typing import Dict, List, Optional

from sqlalchemy import asc, desc, func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.clock import Clock, utcnow
from app.core.errors import (
    AvailabilityError,
    ConflictError,
    InvalidTransitionError,
    ItemReferenceError,
    NotFoundError,
    ValidationError,
)
from app.core.ids import parse_id
from app.db.models import MenuItem, Order, OrderLine
from app.services.menu.catalog import MenuCatalogService
from app.services.ordering.derivation import compute_total, format_order_number, order_number_prefix
from app.services.ordering.models import (
    OrderCreate,
    OrderOut,
    OrderStatus,
    PricedLine,
    SortField,
    SortOrder,
)
from app.services.ordering.state_machine import INITIAL_STATUS, ensure_transition
from app.services.pagination import Page, Pagination, offset_for

logger = logging.getLogger(__name__)

SORT_COLUMNS = {
    SortField.CREATED_AT: Order.created_at,
    SortField.TOTAL_AMOUNT: Order.total_amount,
    SortField.CUSTOMER_NAME: Order.customer_name,
    SortField.ORDER_NUMBER: Order.order_number,
}


def _like_pattern(q: str) -> str:
    escaped = q.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class OrderLedgerService:
    """Service for creating, transitioning and reading orders."""

    def __init__(
        self,
        db: AsyncSession,
        clock: Clock = utcnow,
        max_attempts: int = 25,
    ):
        self.db = db
        self.clock = clock
        self.max_attempts = max_attempts
        self.catalog = MenuCatalogService(db)

    async def create_order(self, payload: OrderCreate) -> OrderOut:
        """Create an order from a validated request.

        Every referenced menu item must exist and be available; otherwise
        nothing is written. Prices are snapshotted from the catalog, the total
        is derived from the lines, and the order number is assigned with a
        retry on unique-index collisions from concurrent creations.
        """
        lines = await self.price_lines(payload)
        total = compute_total(lines)

        for attempt in range(1, self.max_attempts + 1):
            now = self.clock()
            order_number = await self.next_order_number(now)
            order = Order(
                order_number=order_number,
                total_amount=total,
                status=INITIAL_STATUS.value,
                customer_name=payload.customer_name,
                table_number=payload.table_number,
                created_at=now,
                updated_at=now,
                items=[
                    OrderLine(
                        position=position,
                        menu_item_id=line.menu_item,
                        quantity=line.quantity,
                        price=line.price,
                    )
                    for position, line in enumerate(lines)
                ],
            )
            self.db.add(order)
            try:
                await self.db.commit()
            except IntegrityError:
                await self.db.rollback()
                logger.warning(
                    f"[ORDERS] Order number {order_number} already taken "
                    f"(attempt {attempt}/{self.max_attempts}), retrying"
                )
                continue

            logger.info(
                f"[ORDERS] Created order {order_number} - {len(lines)} lines, "
                f"total: {total}, table: {payload.table_number}"
            )
            return await self.get_order(order.id)

        logger.error(f"[ORDERS] Could not assign a unique order number after {self.max_attempts} attempts")
        raise ConflictError("Duplicate order number generated")

    async def price_lines(self, payload: OrderCreate) -> List[PricedLine]:
        """Resolve requested lines against the catalog and snapshot prices."""
        menu_items = await self.catalog.get_records([line.menu_item for line in payload.items])

        for line in payload.items:
            if line.menu_item not in menu_items:
                raise ItemReferenceError(f"Menu item with ID {line.menu_item} not found")
        for line in payload.items:
            menu_item = menu_items[line.menu_item]
            if not menu_item.is_available:
                raise AvailabilityError(f"Menu item {menu_item.name} is not available")

        return [
            PricedLine(
                menu_item=line.menu_item,
                quantity=line.quantity,
                price=menu_items[line.menu_item].price,
            )
            for line in payload.items
        ]

    async def next_order_number(self, created_at) -> str:
        """Next order number for the creation date: existing same-day count + 1."""
        prefix = order_number_prefix(created_at)
        count = await self.db.scalar(
            select(func.count()).select_from(Order).where(Order.order_number.startswith(prefix, autoescape=True))
        )
        return format_order_number(created_at, (count or 0) + 1)

    async def update_status(self, order_id: str, status: OrderStatus) -> OrderOut:
        """Move an order to a new status if the transition table allows it.

        The write is a compare-and-set on the observed status, so of two
        racing requests from the same status at most one is applied.
        """
        order = await self._load(order_id)
        current = OrderStatus(order.status)
        requested = OrderStatus(status)
        ensure_transition(current, requested)

        applied = await self.compare_and_set_status(order.id, current, requested)
        if not applied:
            latest = await self._load(order.id)
            logger.warning(
                f"[ORDERS] Status race on {order.order_number}: expected {current.value}, "
                f"found {latest.status}, requested {requested.value}"
            )
            raise InvalidTransitionError(
                latest.status,
                requested.value,
                message=f"Order status changed to {latest.status}; cannot change status to {requested.value}",
            )

        logger.info(f"[ORDERS] Order {order.order_number} status {current.value} -> {requested.value}")
        return await self.get_order(order.id)

    async def compare_and_set_status(self, order_id: str, expected: OrderStatus, new: OrderStatus) -> bool:
        """Atomically set ``new`` status if the order is still ``expected``."""
        result = await self.db.execute(
            update(Order)
            .where(Order.id == order_id, Order.status == OrderStatus(expected).value)
            .values(status=OrderStatus(new).value, updated_at=self.clock())
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()
        return result.rowcount == 1

    async def get_order(self, order_id: str) -> OrderOut:
        order = await self._load(order_id)
        menu_items = await self.catalog.get_records([line.menu_item_id for line in order.items])
        return OrderOut.from_record(order, menu_items)

    async def list_orders(
        self,
        status: Optional[OrderStatus] = None,
        sort_by: str = SortField.CREATED_AT.value,
        sort_order: str = SortOrder.DESC.value,
        page: int = 1,
        limit: int = 20,
    ) -> Page[OrderOut]:
        """List orders, optionally filtered by status, sorted and paginated."""
        try:
            column = SORT_COLUMNS[SortField(sort_by)]
        except ValueError:
            raise ValidationError.for_field(
                "sortBy", f"sortBy must be one of: {', '.join(f.value for f in SortField)}"
            )
        try:
            direction = desc if SortOrder(sort_order) is SortOrder.DESC else asc
        except ValueError:
            raise ValidationError.for_field("sortOrder", "sortOrder must be one of: asc, desc")

        conditions = []
        if status is not None:
            conditions.append(Order.status == OrderStatus(status).value)

        total = await self.db.scalar(select(func.count()).select_from(Order).where(*conditions))
        result = await self.db.execute(
            select(Order)
            .where(*conditions)
            .options(selectinload(Order.items))
            .order_by(direction(column), direction(Order.id))
            .offset(offset_for(page, limit))
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        orders = result.scalars().all()
        return Page(items=await self._expand(orders), pagination=Pagination.build(page, limit, total or 0))

    async def search_orders(self, q: Optional[str], page: int = 1, limit: int = 20) -> Page[OrderOut]:
        """Case-insensitive substring match on order number, customer and item names."""
        q = (q or "").strip()
        if not q:
            raise ValidationError("Search query is required", errors=[{"field": "q", "message": "Search query is required"}])

        pattern = _like_pattern(q)
        matching_items = (
            select(OrderLine.order_id)
            .join(MenuItem, MenuItem.id == OrderLine.menu_item_id)
            .where(MenuItem.name.ilike(pattern, escape="\\"))
        )
        condition = or_(
            Order.order_number.ilike(pattern, escape="\\"),
            Order.customer_name.ilike(pattern, escape="\\"),
            Order.id.in_(matching_items),
        )

        total = await self.db.scalar(select(func.count()).select_from(Order).where(condition))
        result = await self.db.execute(
            select(Order)
            .where(condition)
            .options(selectinload(Order.items))
            .order_by(desc(Order.created_at), desc(Order.id))
            .offset(offset_for(page, limit))
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        orders = result.scalars().all()
        logger.debug(f"[ORDERS] Search '{q}' matched {total} orders")
        return Page(items=await self._expand(orders), pagination=Pagination.build(page, limit, total or 0))

    async def count(self) -> int:
        return await self.db.scalar(select(func.count()).select_from(Order)) or 0

    async def _expand(self, orders) -> List[OrderOut]:
        menu_items: Dict[str, MenuItem] = await self.catalog.get_records(
            [line.menu_item_id for order in orders for line in order.items]
        )
        return [OrderOut.from_record(order, menu_items) for order in orders]

    async def _load(self, order_id: str) -> Order:
        order_id = parse_id(order_id, "order")
        result = await self.db.execute(
            select(Order)
            .where(Order.id == order_id)
            .options(selectinload(Order.items))
            .execution_options(populate_existing=True)
        )
        order = result.scalar_one_or_none()
        if order is None:
            raise NotFoundError("Order not found")
        return order
