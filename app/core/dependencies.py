"""FastAPI dependencies."""
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.db.database import get_db
from app.services.menu.catalog import MenuCatalogService
from app.services.ordering.ledger import OrderLedgerService
from app.services.stats.aggregator import StatsAggregator


def get_menu_catalog(db: AsyncSession = Depends(get_db)) -> MenuCatalogService:
    """Get menu catalog service bound to the request session."""
    return MenuCatalogService(db)


def get_order_ledger(db: AsyncSession = Depends(get_db)) -> OrderLedgerService:
    """Get order ledger service bound to the request session."""
    return OrderLedgerService(db, max_attempts=settings.order_number_max_attempts)


def get_stats_aggregator(db: AsyncSession = Depends(get_db)) -> StatsAggregator:
    """Get stats aggregator bound to the request session."""
    return StatsAggregator(db)
