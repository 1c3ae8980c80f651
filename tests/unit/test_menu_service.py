"""Unit tests for the menu catalog service and seed loader."""
from decimal import Decimal

import pytest
from pydantic import ValidationError as PydanticValidationError

from app.core.errors import ConflictError, MalformedIdError, NotFoundError, ValidationError
from app.services.menu.catalog import MenuCatalogService, tokenize
from app.services.menu.models import Category, MenuItemCreate, MenuItemUpdate
from app.services.menu.seed import load_menu_file, seed_menu

MISSING_ID = "00000000-0000-4000-8000-000000000000"


def make_item(**overrides) -> MenuItemCreate:
    data = {
        "name": "Pizza",
        "description": "Wood-fired pizza",
        "category": "Main Course",
        "price": 12.99,
        "ingredients": ["dough", "tomato", "mozzarella"],
        "preparationTime": 20,
        "imageUrl": "https://example.com/pizza.jpg",
    }
    data.update(overrides)
    return MenuItemCreate.model_validate(data)


class TestMenuSeed:
    """Test loading menu items from YAML."""

    def test_load_menu_file(self, test_menu_path):
        """Test parsing the fixture menu into create payloads."""
        items = load_menu_file(str(test_menu_path))

        assert [item.name for item in items] == ["Burger", "Fries", "Soda"]
        assert items[0].category is Category.MAIN_COURSE
        assert items[0].price == Decimal("10.0")
        assert items[2].is_available is False

    def test_bundled_menu_is_valid(self):
        """Test the bundled sample menu parses cleanly."""
        items = load_menu_file()
        assert len(items) > 0
        assert {item.category for item in items} == set(Category)

    @pytest.mark.asyncio
    async def test_seed_skips_existing_names(self, test_db, test_menu_path):
        """Test seeding twice does not duplicate items."""
        first = await seed_menu(test_db, str(test_menu_path))
        second = await seed_menu(test_db, str(test_menu_path))

        assert len(first) == 3
        assert second == []
        assert await MenuCatalogService(test_db).count() == 3


class TestMenuItemValidation:
    """Test field constraints on menu item payloads."""

    def test_name_is_trimmed_and_required(self):
        assert make_item(name="  Pizza  ").name == "Pizza"
        with pytest.raises(PydanticValidationError):
            make_item(name="   ")

    def test_name_length_limit(self):
        with pytest.raises(PydanticValidationError):
            make_item(name="x" * 101)

    @pytest.mark.parametrize("price", [-0.01, 10000])
    def test_price_out_of_range(self, price):
        with pytest.raises(PydanticValidationError):
            make_item(price=price)

    def test_unknown_category(self):
        with pytest.raises(PydanticValidationError):
            make_item(category="Snack")

    @pytest.mark.parametrize("minutes", [0, 181])
    def test_preparation_time_range(self, minutes):
        with pytest.raises(PydanticValidationError):
            make_item(preparationTime=minutes)

    def test_blank_ingredient_rejected(self):
        with pytest.raises(PydanticValidationError):
            make_item(ingredients=["dough", "  "])

    def test_long_ingredient_rejected(self):
        with pytest.raises(PydanticValidationError):
            make_item(ingredients=["x" * 51])

    def test_image_url_must_be_http(self):
        with pytest.raises(PydanticValidationError):
            make_item(imageUrl="ftp://example.com/pizza.jpg")
        assert make_item(imageUrl="").image_url is None

    def test_update_rejects_null_required_field(self):
        with pytest.raises(PydanticValidationError):
            MenuItemUpdate.model_validate({"price": None})
        assert MenuItemUpdate.model_validate({"description": None}).model_fields_set == {"description"}


class TestMenuCatalog:
    """Test menu catalog CRUD."""

    @pytest.mark.asyncio
    async def test_create_item(self, test_db):
        """Test creating an item stores every field."""
        catalog = MenuCatalogService(test_db)

        item = await catalog.create_item(make_item())

        assert item.id
        assert item.name == "Pizza"
        assert item.category == "Main Course"
        assert item.price == 12.99
        assert item.ingredients == ["dough", "tomato", "mozzarella"]
        assert item.is_available is True
        assert item.preparation_time == 20
        assert item.formatted_price == "$12.99"

    @pytest.mark.asyncio
    async def test_create_item_defaults_ingredients(self, test_db):
        """Test missing or empty ingredients become the placeholder."""
        catalog = MenuCatalogService(test_db)

        omitted = await catalog.create_item(make_item(name="Water", ingredients=None))
        empty = await catalog.create_item(make_item(name="Ice", ingredients=[]))

        assert omitted.ingredients == ["Not specified"]
        assert empty.ingredients == ["Not specified"]

    @pytest.mark.asyncio
    async def test_create_duplicate_name(self, test_db, menu_items):
        """Test creating an item with an existing name fails."""
        with pytest.raises(ConflictError):
            await MenuCatalogService(test_db).create_item(make_item(name="Burger"))

    @pytest.mark.asyncio
    async def test_get_item(self, test_db, menu_items):
        catalog = MenuCatalogService(test_db)
        burger = menu_items["Burger"]

        first = await catalog.get_item(burger.id)
        second = await catalog.get_item(burger.id)

        assert first == second
        assert first.name == "Burger"

    @pytest.mark.asyncio
    async def test_get_item_not_found(self, test_db):
        with pytest.raises(NotFoundError):
            await MenuCatalogService(test_db).get_item(MISSING_ID)

    @pytest.mark.asyncio
    async def test_malformed_id(self, test_db):
        catalog = MenuCatalogService(test_db)
        with pytest.raises(MalformedIdError):
            await catalog.get_item("not-an-id")
        with pytest.raises(MalformedIdError):
            await catalog.delete_item("12345")

    @pytest.mark.asyncio
    async def test_partial_update(self, test_db, menu_items):
        """Test update changes only the supplied fields."""
        catalog = MenuCatalogService(test_db)
        burger = menu_items["Burger"]

        updated = await catalog.update_item(burger.id, MenuItemUpdate.model_validate({"price": 11.5}))

        assert updated.price == 11.5
        assert updated.name == "Burger"
        assert updated.ingredients == burger.ingredients

    @pytest.mark.asyncio
    async def test_update_to_taken_name(self, test_db, menu_items):
        catalog = MenuCatalogService(test_db)
        with pytest.raises(ConflictError):
            await catalog.update_item(menu_items["Fries"].id, MenuItemUpdate(name="Burger"))

    @pytest.mark.asyncio
    async def test_update_not_found(self, test_db):
        with pytest.raises(NotFoundError):
            await MenuCatalogService(test_db).update_item(MISSING_ID, MenuItemUpdate(price=Decimal("1")))

    @pytest.mark.asyncio
    async def test_delete_item(self, test_db, menu_items):
        catalog = MenuCatalogService(test_db)
        soda = menu_items["Soda"]

        await catalog.delete_item(soda.id)

        with pytest.raises(NotFoundError):
            await catalog.get_item(soda.id)
        with pytest.raises(NotFoundError):
            await catalog.delete_item(soda.id)

    @pytest.mark.asyncio
    async def test_toggle_availability_twice_restores(self, test_db, menu_items):
        """Test each toggle flips availability."""
        catalog = MenuCatalogService(test_db)
        burger = menu_items["Burger"]

        flipped = await catalog.toggle_availability(burger.id)
        restored = await catalog.toggle_availability(burger.id)

        assert flipped.is_available is False
        assert restored.is_available is True


class TestMenuListing:
    """Test filtering, pagination and search."""

    @pytest.mark.asyncio
    async def test_list_orders_by_category_then_name(self, test_db, menu_items):
        page = await MenuCatalogService(test_db).list_items()

        assert [item.name for item in page.items] == ["Fries", "Soda", "Burger"]
        assert page.pagination.total == 3
        assert page.pagination.pages == 1

    @pytest.mark.asyncio
    async def test_list_filters(self, test_db, menu_items):
        catalog = MenuCatalogService(test_db)

        available = await catalog.list_items(availability=True)
        mains = await catalog.list_items(category=Category.MAIN_COURSE)
        cheap = await catalog.list_items(min_price=2, max_price=5)

        assert {item.name for item in available.items} == {"Burger", "Fries"}
        assert [item.name for item in mains.items] == ["Burger"]
        assert {item.name for item in cheap.items} == {"Fries", "Soda"}

    @pytest.mark.asyncio
    async def test_list_pagination(self, test_db, menu_items):
        catalog = MenuCatalogService(test_db)

        page_two = await catalog.list_items(page=2, limit=2)

        assert [item.name for item in page_two.items] == ["Burger"]
        assert page_two.pagination.model_dump() == {"page": 2, "limit": 2, "total": 3, "pages": 2}

    @pytest.mark.asyncio
    async def test_search_by_ingredient(self, test_db, menu_items):
        page = await MenuCatalogService(test_db).search_items("potatoes")

        assert [item.name for item in page.items] == ["Fries"]

    @pytest.mark.asyncio
    async def test_search_orders_by_relevance(self, test_db, menu_items):
        catalog = MenuCatalogService(test_db)
        await catalog.create_item(make_item(name="Cheese Board", ingredients=["cheese", "crackers"]))

        page = await catalog.search_items("cheese")

        assert [item.name for item in page.items] == ["Cheese Board", "Burger"]

    @pytest.mark.asyncio
    async def test_search_requires_query(self, test_db):
        with pytest.raises(ValidationError):
            await MenuCatalogService(test_db).search_items("   ")

    def test_tokenize(self):
        assert tokenize("Mozzarella Sticks!") == ["mozzarella", "stick"]
