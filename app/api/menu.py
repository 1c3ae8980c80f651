"""Menu API endpoints."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from app.api.responses import Envelope, PageParams, PaginatedEnvelope, client_host
from app.core.dependencies import get_menu_catalog
from app.core.errors import AppError, ServerError
from app.services.menu.catalog import MenuCatalogService
from app.services.menu.models import Category, MenuItemCreate, MenuItemOut, MenuItemUpdate


router = APIRouter(prefix="/api/menu")
logger = logging.getLogger(__name__)


def _server_error(action: str, e: Exception) -> ServerError:
    logger.error(f"[MENU] Error {action} - Error: {type(e).__name__}: {str(e)}", exc_info=True)
    return ServerError(f"Server error while {action}")


@router.get("", response_model=PaginatedEnvelope[MenuItemOut])
async def list_menu_items(
    request: Request,
    category: Optional[Category] = None,
    availability: Optional[bool] = None,
    min_price: Optional[float] = Query(None, alias="minPrice", ge=0),
    max_price: Optional[float] = Query(None, alias="maxPrice", ge=0),
    paging: PageParams = Depends(),
    catalog: MenuCatalogService = Depends(get_menu_catalog),
):
    """List menu items with optional filters."""
    logger.info(
        f"[MENU] List request - category: {category}, availability: {availability}, "
        f"price: {min_price}-{max_price}, page: {paging.page}, Client: {client_host(request)}"
    )
    try:
        page = await catalog.list_items(
            category=category,
            availability=availability,
            min_price=min_price,
            max_price=max_price,
            page=paging.page,
            limit=paging.limit,
        )
        return PaginatedEnvelope[MenuItemOut](data=page.items, pagination=page.pagination)
    except AppError:
        raise
    except Exception as e:
        raise _server_error("fetching menu items", e)


@router.get("/search", response_model=PaginatedEnvelope[MenuItemOut])
async def search_menu_items(
    q: Optional[str] = None,
    paging: PageParams = Depends(),
    catalog: MenuCatalogService = Depends(get_menu_catalog),
):
    """Search menu items by name and ingredients."""
    logger.info(f"[MENU] Search request - q: {q!r}, page: {paging.page}")
    try:
        page = await catalog.search_items(q, page=paging.page, limit=paging.limit)
        return PaginatedEnvelope[MenuItemOut](data=page.items, pagination=page.pagination)
    except AppError:
        raise
    except Exception as e:
        raise _server_error("searching menu items", e)


@router.get("/{item_id}", response_model=Envelope[MenuItemOut])
async def get_menu_item(item_id: str, catalog: MenuCatalogService = Depends(get_menu_catalog)):
    """Get a single menu item."""
    try:
        return Envelope[MenuItemOut](data=await catalog.get_item(item_id))
    except AppError:
        raise
    except Exception as e:
        raise _server_error("fetching menu item", e)


@router.post("", response_model=Envelope[MenuItemOut], status_code=201)
async def create_menu_item(payload: MenuItemCreate, catalog: MenuCatalogService = Depends(get_menu_catalog)):
    """Create a menu item."""
    logger.info(f"[MENU] Create request - name: {payload.name!r}, category: {payload.category.value}")
    try:
        item = await catalog.create_item(payload)
        return Envelope[MenuItemOut](message="Menu item created successfully", data=item)
    except AppError:
        raise
    except Exception as e:
        raise _server_error("creating menu item", e)


@router.put("/{item_id}", response_model=Envelope[MenuItemOut])
async def update_menu_item(
    item_id: str,
    payload: MenuItemUpdate,
    catalog: MenuCatalogService = Depends(get_menu_catalog),
):
    """Update a menu item; omitted fields are left unchanged."""
    logger.info(f"[MENU] Update request - id: {item_id}, fields: {sorted(payload.model_fields_set)}")
    try:
        item = await catalog.update_item(item_id, payload)
        return Envelope[MenuItemOut](message="Menu item updated successfully", data=item)
    except AppError:
        raise
    except Exception as e:
        raise _server_error("updating menu item", e)


@router.delete("/{item_id}", response_model=Envelope[None])
async def delete_menu_item(item_id: str, catalog: MenuCatalogService = Depends(get_menu_catalog)):
    """Delete a menu item. Existing orders keep their lines."""
    logger.info(f"[MENU] Delete request - id: {item_id}")
    try:
        await catalog.delete_item(item_id)
        return Envelope[None](message="Menu item deleted successfully")
    except AppError:
        raise
    except Exception as e:
        raise _server_error("deleting menu item", e)


@router.patch("/{item_id}/availability", response_model=Envelope[MenuItemOut])
async def toggle_menu_item_availability(item_id: str, catalog: MenuCatalogService = Depends(get_menu_catalog)):
    """Flip a menu item's availability."""
    try:
        item = await catalog.toggle_availability(item_id)
        state = "available" if item.is_available else "unavailable"
        return Envelope[MenuItemOut](message=f"Menu item marked as {state}", data=item)
    except AppError:
        raise
    except Exception as e:
        raise _server_error("updating availability", e)
