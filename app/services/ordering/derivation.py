"""Derived order fields: order number (ORD-<YYYYMMDD>-<NNNN>) and total."""
from datetime import datetime
from decimal import Decimal
from typing import Iterable


def order_number_prefix(created_at: datetime) -> str:
    return f"ORD-{created_at:%Y%m%d}-"


def format_order_number(created_at: datetime, sequence: int) -> str:
    return f"{order_number_prefix(created_at)}{sequence:04d}"


def compute_total(lines: Iterable) -> Decimal:
    """Sum of price x quantity over the given lines."""
    return sum((Decimal(line.price) * line.quantity for line in lines), Decimal("0"))
