"""Order statistics service."""
import logging
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import local_day_bounds
from app.db.models import MenuItem, Order, OrderLine
from app.services.menu.models import MenuItemSummary
from app.services.ordering.models import OrderStatus
from app.services.stats.models import OrderStats, StatusTotals, TopSeller

logger = logging.getLogger(__name__)


def _money(value) -> float:
    return float(value) if value is not None else 0.0


class StatsAggregator:
    """Read-only aggregations over committed orders, computed on demand."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def status_breakdown(self) -> Dict[str, StatusTotals]:
        """Order count and revenue for every status value."""
        result = await self.db.execute(
            select(Order.status, func.count(Order.id), func.sum(Order.total_amount)).group_by(Order.status)
        )
        breakdown = {status.value: StatusTotals() for status in OrderStatus}
        for status, count, revenue in result.all():
            breakdown[status] = StatusTotals(count=count, total_revenue=_money(revenue))
        return breakdown

    async def totals(self, start: Optional[datetime] = None, end: Optional[datetime] = None) -> tuple:
        """(order count, revenue) over all orders or those created in [start, end)."""
        query = select(func.count(Order.id), func.sum(Order.total_amount))
        if start is not None:
            query = query.where(Order.created_at >= start)
        if end is not None:
            query = query.where(Order.created_at < end)
        count, revenue = (await self.db.execute(query)).one()
        return count or 0, _money(revenue)

    async def get_stats(self, moment: Optional[datetime] = None) -> OrderStats:
        """Overall, per-status and today's order statistics.

        ``moment`` (aware datetime, defaults to now) selects the local day
        reported as "today".
        """
        by_status = await self.status_breakdown()
        total_orders, total_revenue = await self.totals()
        start, end = local_day_bounds(moment)
        today_orders, today_revenue = await self.totals(start, end)
        logger.debug(f"[STATS] {total_orders} orders, {today_orders} today ({start} - {end} UTC)")
        return OrderStats(
            by_status=by_status,
            total_orders=total_orders,
            total_revenue=total_revenue,
            today_orders=today_orders,
            today_revenue=today_revenue,
        )

    async def top_sellers(self, limit: int = 5) -> List[TopSeller]:
        """Menu items ranked by quantity sold, ignoring cancelled orders.

        Item attributes come from the current catalog, so renamed items show
        their new name; lines whose item was deleted are dropped.
        """
        total_quantity = func.sum(OrderLine.quantity).label("total_quantity")
        total_revenue = func.sum(OrderLine.price * OrderLine.quantity).label("total_revenue")
        order_count = func.count(func.distinct(OrderLine.order_id)).label("order_count")

        result = await self.db.execute(
            select(MenuItem, total_quantity, total_revenue, order_count)
            .select_from(OrderLine)
            .join(Order, Order.id == OrderLine.order_id)
            .join(MenuItem, MenuItem.id == OrderLine.menu_item_id)
            .where(Order.status != OrderStatus.CANCELLED.value)
            .group_by(MenuItem.id)
            .order_by(desc(total_quantity), MenuItem.name)
            .limit(limit)
        )
        return [
            TopSeller(
                menu_item=MenuItemSummary.from_record(menu_item),
                total_quantity=quantity,
                total_revenue=_money(revenue),
                order_count=orders,
            )
            for menu_item, quantity, revenue, orders in result.all()
        ]
