"""Database models."""
from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    JSON,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import declarative_base, relationship

from app.core.clock import utcnow
from app.core.ids import new_id

Base = declarative_base()

MONEY = Numeric(10, 2)


class MenuItem(Base):
    """Menu item model."""

    __tablename__ = "menu_items"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(100), unique=True, nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(32), nullable=False)
    price = Column(MONEY, nullable=False)
    ingredients = Column(JSON, nullable=False)  # ordered list of strings
    is_available = Column(Boolean, default=True, nullable=False)
    preparation_time = Column(Integer, nullable=True)  # minutes
    image_url = Column(String, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    __table_args__ = (
        Index("ix_menu_items_category_available", "category", "is_available"),
    )


class Order(Base):
    """Order model."""

    __tablename__ = "orders"

    id = Column(String(36), primary_key=True, default=new_id)
    order_number = Column(String(20), unique=True, nullable=False)
    total_amount = Column(MONEY, nullable=False)
    status = Column(String(16), default="Pending", nullable=False)  # see OrderStatus
    customer_name = Column(String(100), nullable=False, index=True)
    table_number = Column(Integer, nullable=False)
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    # Relationships
    items = relationship(
        "OrderLine",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderLine.position",
    )

    __table_args__ = (
        Index("ix_orders_status_created_at", "status", "created_at"),
    )


class OrderLine(Base):
    """Order line model.

    ``menu_item_id`` is a plain reference, not a foreign key: deleting a menu
    item leaves historical orders untouched.
    """

    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(String(36), ForeignKey("orders.id"), nullable=False, index=True)
    position = Column(Integer, nullable=False)
    menu_item_id = Column(String(36), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    price = Column(MONEY, nullable=False)  # snapshot at order time

    # Relationships
    order = relationship("Order", back_populates="items")
