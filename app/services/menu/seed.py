"""Load menu items from a YAML file into the catalog."""
import logging
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import ConflictError, ValidationError
from app.services.menu.catalog import MenuCatalogService
from app.services.menu.models import MenuItemCreate, MenuItemOut

logger = logging.getLogger(__name__)

DEFAULT_MENU_FILE = Path(__file__).parent / "data" / "menu.yaml"


def load_menu_file(menu_file: Optional[str] = None) -> List[MenuItemCreate]:
    """Parse a YAML menu file into validated create payloads."""
    path = Path(menu_file) if menu_file else DEFAULT_MENU_FILE
    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}

    items = []
    for index, raw in enumerate(data.get("items", [])):
        try:
            items.append(MenuItemCreate.model_validate(raw))
        except PydanticValidationError as e:
            raise ValidationError(
                f"Invalid menu item #{index + 1} in {path.name}",
                errors=[{"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]} for err in e.errors()],
            ) from e
    return items


async def seed_menu(db: AsyncSession, menu_file: Optional[str] = None) -> List[MenuItemOut]:
    """Insert items from the menu file whose names are not in the catalog yet.

    Returns the newly created items.
    """
    catalog = MenuCatalogService(db)
    created = []
    for payload in load_menu_file(menu_file):
        try:
            created.append(await catalog.create_item(payload))
        except ConflictError:
            logger.debug(f"[SEED] Skipping existing item '{payload.name}'")
    logger.info(f"[SEED] Seeded {len(created)} menu items")
    return created
