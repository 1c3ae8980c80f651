"""Menu catalog service."""
import logging
import re
from typing import Dict, List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import utcnow
from app.core.errors import ConflictError, NotFoundError, ValidationError
from app.core.ids import parse_id
from app.db.models import MenuItem
from app.services.menu.models import (
    DEFAULT_INGREDIENTS,
    Category,
    MenuItemCreate,
    MenuItemOut,
    MenuItemUpdate,
)
from app.services.pagination import Page, Pagination, offset_for

logger = logging.getLogger(__name__)

_WORD_RE = re.compile(r"[a-z0-9]+")


def _stem(word: str) -> str:
    if len(word) > 3 and word.endswith("s"):
        return word[:-1]
    return word


def tokenize(text: str) -> List[str]:
    """Split text into lowercase, lightly stemmed words."""
    return [_stem(word) for word in _WORD_RE.findall(text.lower())]


def relevance(item: MenuItem, terms: List[str]) -> int:
    """Count how many words of the item's name and ingredients match a term."""
    words = tokenize(item.name)
    for ingredient in item.ingredients or []:
        words.extend(tokenize(ingredient))
    term_set = set(terms)
    return sum(1 for word in words if word in term_set)


class MenuCatalogService:
    """Service for menu item CRUD, filtering and search."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_items(
        self,
        category: Optional[Category] = None,
        availability: Optional[bool] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Page[MenuItemOut]:
        """List menu items matching all supplied filters."""
        conditions = []
        if category is not None:
            conditions.append(MenuItem.category == Category(category).value)
        if availability is not None:
            conditions.append(MenuItem.is_available == availability)
        if min_price is not None:
            conditions.append(MenuItem.price >= min_price)
        if max_price is not None:
            conditions.append(MenuItem.price <= max_price)

        total = await self.db.scalar(select(func.count()).select_from(MenuItem).where(*conditions))
        result = await self.db.execute(
            select(MenuItem)
            .where(*conditions)
            .order_by(MenuItem.category, MenuItem.name)
            .offset(offset_for(page, limit))
            .limit(limit)
        )
        items = [MenuItemOut.from_record(item) for item in result.scalars().all()]
        return Page(items=items, pagination=Pagination.build(page, limit, total or 0))

    async def search_items(self, q: Optional[str], page: int = 1, limit: int = 20) -> Page[MenuItemOut]:
        """Full-text search over item names and ingredients, most relevant first."""
        terms = tokenize(q or "")
        if not terms:
            raise ValidationError("Search query is required", errors=[{"field": "q", "message": "Search query is required"}])

        result = await self.db.execute(select(MenuItem))
        scored: List[Tuple[int, MenuItem]] = []
        for item in result.scalars().all():
            score = relevance(item, terms)
            if score:
                scored.append((score, item))
        scored.sort(key=lambda pair: (-pair[0], pair[1].name))
        logger.debug(f"[MENU] Search terms {terms} matched {len(scored)} items")

        start = offset_for(page, limit)
        items = [MenuItemOut.from_record(item) for _, item in scored[start:start + limit]]
        return Page(items=items, pagination=Pagination.build(page, limit, len(scored)))

    async def get_item(self, item_id: str) -> MenuItemOut:
        return MenuItemOut.from_record(await self._load(item_id))

    async def get_records(self, item_ids: List[str]) -> Dict[str, MenuItem]:
        """Fetch menu item records by id; unknown ids are simply absent."""
        if not item_ids:
            return {}
        result = await self.db.execute(select(MenuItem).where(MenuItem.id.in_(set(item_ids))))
        return {item.id: item for item in result.scalars().all()}

    async def create_item(self, data: MenuItemCreate) -> MenuItemOut:
        """Create a menu item; names must be unique."""
        await self._ensure_name_free(data.name)
        now = utcnow()
        item = MenuItem(
            name=data.name,
            description=data.description,
            category=data.category.value,
            price=data.price,
            ingredients=data.ingredients or list(DEFAULT_INGREDIENTS),
            is_available=data.is_available,
            preparation_time=data.preparation_time,
            image_url=data.image_url,
            created_at=now,
            updated_at=now,
        )
        self.db.add(item)
        await self._commit(data.name)
        await self.db.refresh(item)
        logger.info(f"[MENU] Created item '{item.name}' ({item.id})")
        return MenuItemOut.from_record(item)

    async def update_item(self, item_id: str, data: MenuItemUpdate) -> MenuItemOut:
        """Apply a partial update to a menu item."""
        item = await self._load(item_id)
        changes = data.model_dump(exclude_unset=True)
        if "name" in changes and changes["name"] != item.name:
            await self._ensure_name_free(changes["name"], exclude_id=item.id)
        if "category" in changes:
            changes["category"] = Category(changes["category"]).value
        if "ingredients" in changes and not changes["ingredients"]:
            changes["ingredients"] = list(DEFAULT_INGREDIENTS)

        for field, value in changes.items():
            setattr(item, field, value)
        item.updated_at = utcnow()
        await self._commit(item.name)
        await self.db.refresh(item)
        logger.info(f"[MENU] Updated item {item.id} - fields: {sorted(changes)}")
        return MenuItemOut.from_record(item)

    async def delete_item(self, item_id: str) -> None:
        item = await self._load(item_id)
        await self.db.delete(item)
        await self.db.commit()
        logger.info(f"[MENU] Deleted item '{item.name}' ({item.id})")

    async def toggle_availability(self, item_id: str) -> MenuItemOut:
        """Flip an item's availability and persist it."""
        item = await self._load(item_id)
        item.is_available = not item.is_available
        item.updated_at = utcnow()
        await self.db.commit()
        await self.db.refresh(item)
        logger.info(f"[MENU] Item {item.id} availability -> {item.is_available}")
        return MenuItemOut.from_record(item)

    async def count(self) -> int:
        return await self.db.scalar(select(func.count()).select_from(MenuItem)) or 0

    async def _load(self, item_id: str) -> MenuItem:
        item_id = parse_id(item_id, "menu item")
        item = await self.db.get(MenuItem, item_id)
        if item is None:
            raise NotFoundError("Menu item not found")
        return item

    async def _ensure_name_free(self, name: str, exclude_id: Optional[str] = None) -> None:
        query = select(MenuItem.id).where(MenuItem.name == name)
        if exclude_id is not None:
            query = query.where(MenuItem.id != exclude_id)
        if await self.db.scalar(query) is not None:
            raise ConflictError("Menu item with this name already exists")

    async def _commit(self, name: str) -> None:
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            logger.warning(f"[MENU] Unique name violation for '{name}'")
            raise ConflictError("Menu item with this name already exists")
