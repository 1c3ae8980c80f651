"""Menu catalog models."""
import re
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

DEFAULT_INGREDIENTS = ["Not specified"]
MAX_PRICE = Decimal("9999.99")
IMAGE_URL_PATTERN = re.compile(r"^https?://.+\..+")


class Category(str, Enum):
    """Menu categories."""

    APPETIZER = "Appetizer"
    MAIN_COURSE = "Main Course"
    DESSERT = "Dessert"
    BEVERAGE = "Beverage"


class CamelModel(BaseModel):
    """Base model exposing camelCase field names on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def format_money(amount: Decimal) -> str:
    return f"${Decimal(amount):.2f}"


def _clean_ingredients(value: Optional[List[str]]) -> Optional[List[str]]:
    if value is None:
        return None
    cleaned = []
    for ingredient in value:
        ingredient = ingredient.strip()
        if not ingredient:
            raise ValueError("Ingredients array must contain non-empty strings")
        if len(ingredient) > 50:
            raise ValueError("Ingredient name cannot exceed 50 characters")
        cleaned.append(ingredient)
    return cleaned


def _clean_image_url(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None
    if not IMAGE_URL_PATTERN.match(value):
        raise ValueError("Image URL must be a valid URL")
    return value


class MenuItemFields(CamelModel):
    """Field constraints shared by create and update payloads."""

    name: Optional[str] = Field(default=None, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    category: Optional[Category] = None
    price: Optional[Decimal] = Field(default=None, ge=0, le=MAX_PRICE)
    ingredients: Optional[List[str]] = None
    is_available: Optional[bool] = None
    preparation_time: Optional[int] = Field(default=None, ge=1, le=180)
    image_url: Optional[str] = None

    @field_validator("name", "description", mode="before")
    @classmethod
    def strip_text(cls, value):
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value:
            raise ValueError("Name is required")
        return value

    @field_validator("ingredients")
    @classmethod
    def check_ingredients(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        return _clean_ingredients(value)

    @field_validator("image_url")
    @classmethod
    def check_image_url(cls, value: Optional[str]) -> Optional[str]:
        return _clean_image_url(value)


class MenuItemCreate(MenuItemFields):
    """Payload for creating a menu item."""

    name: str = Field(max_length=100)
    category: Category
    price: Decimal = Field(ge=0, le=MAX_PRICE)
    is_available: bool = True


class MenuItemUpdate(MenuItemFields):
    """Partial update payload; only supplied fields change."""

    @model_validator(mode="after")
    def required_fields_not_null(self) -> "MenuItemUpdate":
        for field in ("name", "category", "price", "ingredients", "is_available"):
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{to_camel(field)} cannot be null")
        return self


class MenuItemOut(CamelModel):
    """Menu item as returned by the API."""

    id: str
    name: str
    description: Optional[str] = None
    category: str
    price: float
    ingredients: List[str]
    is_available: bool
    preparation_time: Optional[int] = None
    image_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    formatted_price: str

    @classmethod
    def from_record(cls, item) -> "MenuItemOut":
        return cls(
            id=item.id,
            name=item.name,
            description=item.description,
            category=item.category,
            price=float(item.price),
            ingredients=list(item.ingredients or DEFAULT_INGREDIENTS),
            is_available=item.is_available,
            preparation_time=item.preparation_time,
            image_url=item.image_url,
            created_at=item.created_at,
            updated_at=item.updated_at,
            formatted_price=format_money(item.price),
        )


class MenuItemSummary(CamelModel):
    """Menu item attributes embedded in orders and rankings."""

    id: str
    name: str
    price: float
    category: str
    image_url: Optional[str] = None

    @classmethod
    def from_record(cls, item) -> "MenuItemSummary":
        return cls(
            id=item.id,
            name=item.name,
            price=float(item.price),
            category=item.category,
            image_url=item.image_url,
        )
