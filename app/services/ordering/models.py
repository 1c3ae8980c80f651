"""Order models."""
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import Field, field_validator

from app.core.ids import is_valid_id
from app.services.menu.models import CamelModel, MenuItemSummary, format_money


class OrderStatus(str, Enum):
    """Order lifecycle states."""

    PENDING = "Pending"
    PREPARING = "Preparing"
    READY = "Ready"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


class SortField(str, Enum):
    """Sortable order fields, by their API names."""

    CREATED_AT = "createdAt"
    TOTAL_AMOUNT = "totalAmount"
    CUSTOMER_NAME = "customerName"
    ORDER_NUMBER = "orderNumber"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class OrderLineRequest(CamelModel):
    """Requested order line."""

    menu_item: str
    quantity: int = Field(ge=1, le=99)

    @field_validator("menu_item")
    @classmethod
    def valid_menu_item_id(cls, value: str) -> str:
        if not is_valid_id(value):
            raise ValueError("Valid menu item ID is required for each item")
        return value


class OrderCreate(CamelModel):
    """Payload for creating an order."""

    items: List[OrderLineRequest] = Field(min_length=1)
    customer_name: str = Field(max_length=100)
    table_number: int = Field(ge=1, le=99)

    @field_validator("customer_name", mode="before")
    @classmethod
    def strip_name(cls, value):
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("customer_name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        if not value:
            raise ValueError("Customer name is required")
        return value


class StatusUpdate(CamelModel):
    status: OrderStatus


class PricedLine(CamelModel):
    """An order line with its snapshotted price, ready to persist."""

    menu_item: str
    quantity: int
    price: Decimal


class OrderLineOut(CamelModel):
    menu_item: Optional[MenuItemSummary] = None
    quantity: int
    price: float


class OrderOut(CamelModel):
    """Order as returned by the API, with menu item summaries expanded."""

    id: str
    order_number: str
    items: List[OrderLineOut]
    total_amount: float
    status: OrderStatus
    customer_name: str
    table_number: int
    created_at: datetime
    updated_at: datetime
    formatted_total: str
    item_count: int

    @classmethod
    def from_record(cls, order, menu_items: dict) -> "OrderOut":
        lines = []
        for line in order.items:
            menu_item = menu_items.get(line.menu_item_id)
            lines.append(
                OrderLineOut(
                    menu_item=MenuItemSummary.from_record(menu_item) if menu_item is not None else None,
                    quantity=line.quantity,
                    price=float(line.price),
                )
            )
        return cls(
            id=order.id,
            order_number=order.order_number,
            items=lines,
            total_amount=float(order.total_amount),
            status=OrderStatus(order.status),
            customer_name=order.customer_name,
            table_number=order.table_number,
            created_at=order.created_at,
            updated_at=order.updated_at,
            formatted_total=format_money(order.total_amount),
            item_count=sum(line.quantity for line in order.items),
        )
