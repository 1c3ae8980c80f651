"""Statistics models."""
from typing import Dict

from app.services.menu.models import CamelModel, MenuItemSummary


class StatusTotals(CamelModel):
    count: int = 0
    total_revenue: float = 0.0


class OrderStats(CamelModel):
    """Order counts and revenue, overall, per status and for today."""

    by_status: Dict[str, StatusTotals]
    total_orders: int
    total_revenue: float
    today_orders: int
    today_revenue: float


class TopSeller(CamelModel):
    """A menu item ranked by quantity sold across non-cancelled orders."""

    menu_item: MenuItemSummary
    total_quantity: int
    total_revenue: float
    order_count: int
