"""
Tests for the cart models and CartStore
"""

import json
import logging
from decimal import Decimal

import pytest

from storefront.cart import CartLineItem, CartState, CartStore
from storefront.errors import ValidationError
from storefront.services.models import Product
from storefront.storage import MemoryStorage


class FailingStorage(MemoryStorage):
    """Storage whose writes always fail."""

    async def set(self, key, value):
        raise ConnectionError("disk full")


class UnreadableStorage(MemoryStorage):
    async def get(self, key):
        raise ConnectionError("storage offline")


class TestCartLineItem:
    """Tests for CartLineItem dataclass."""

    def test_create_normalizes_string_price(self):
        item = CartLineItem(product_id=1, name="Burger", unit_price="11.99", quantity=2)

        assert item.unit_price == Decimal("11.99")
        assert isinstance(item.unit_price, Decimal)

    def test_line_total(self):
        item = CartLineItem(product_id=1, name="Burger", unit_price=11.99, quantity=2)

        assert item.line_total == Decimal("23.98")

    def test_invalid_quantity_rejected(self):
        with pytest.raises(ValidationError):
            CartLineItem(product_id=1, name="Burger", unit_price=1, quantity=0)

    def test_invalid_price_rejected(self):
        with pytest.raises(ValidationError):
            CartLineItem(product_id=1, name="Burger", unit_price="free", quantity=1)

    def test_to_dict(self):
        item = CartLineItem(
            product_id=1,
            name="Burger",
            unit_price=11.99,
            quantity=2,
            image_url="burger.jpg",
            description="Tasty",
        )

        assert item.to_dict() == {
            "id": 1,
            "name": "Burger",
            "image": "burger.jpg",
            "description": "Tasty",
            "price": "11.99",
            "quantity": 2,
        }

    def test_from_dict_accepts_numeric_string_and_image_url(self):
        item = CartLineItem.from_dict(
            {"_id": "abc", "name": "Pizza", "price": "14.99", "quantity": 3, "imageUrl": "pizza.jpg"}
        )

        assert item.product_id == "abc"
        assert item.unit_price == Decimal("14.99")
        assert item.image_url == "pizza.jpg"

    def test_from_product_model(self, sample_products):
        product = Product.model_validate(sample_products[1])
        item = CartLineItem.from_product(product, quantity=2)

        assert item.product_id == 2
        assert item.unit_price == Decimal("14.99")
        assert item.image_url == "https://images.example.com/pizza.jpg"


class TestCartState:
    """Tests for CartState dataclass."""

    def test_empty_cart(self):
        cart = CartState()

        assert cart.is_empty
        assert cart.count == 0
        assert cart.total == 0

    def test_totals(self):
        cart = CartState(items=[
            CartLineItem(product_id=1, name="Burger", unit_price=11.99, quantity=2),
            CartLineItem(product_id=2, name="Salad", unit_price=9.99, quantity=1),
        ])

        assert cart.total == Decimal("33.97")
        assert cart.count == 3

    def test_from_list_merges_duplicate_ids(self):
        cart = CartState.from_list([
            {"id": 1, "name": "Burger", "price": 11.99, "quantity": 1},
            {"id": 1, "name": "Burger", "price": 11.99, "quantity": 2},
        ])

        assert len(cart.items) == 1
        assert cart.items[0].quantity == 3

    def test_from_list_rejects_non_list(self):
        with pytest.raises(TypeError):
            CartState.from_list({"items": []})


class TestCartStore:
    """Tests for CartStore."""

    @pytest.mark.asyncio
    async def test_repeat_adds_merge_into_one_line(self, cart_store, sample_products):
        await cart_store.initialize()

        for quantity in (1, 2, 4):
            await cart_store.add_item(sample_products[0], quantity)

        assert len(cart_store.items) == 1
        assert cart_store.items[0].quantity == 7
        assert cart_store.count() == 7

    @pytest.mark.asyncio
    async def test_add_normalizes_price(self, cart_store, sample_products):
        await cart_store.initialize()

        line = await cart_store.add_item(sample_products[1])

        assert line.unit_price == Decimal("14.99")
        assert line.quantity == 1

    @pytest.mark.asyncio
    async def test_add_product_model(self, cart_store, sample_products):
        await cart_store.initialize()

        await cart_store.add_item(Product.model_validate(sample_products[2]), 2)

        assert cart_store.total() == Decimal("19.98")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("quantity", [0, -1, 1.5, True])
    async def test_add_rejects_non_positive_quantity(self, cart_store, storage, sample_products, quantity):
        await cart_store.initialize()

        with pytest.raises(ValidationError):
            await cart_store.add_item(sample_products[0], quantity)

        assert cart_store.is_empty
        assert await storage.get(storage.keys.cart) is None

    @pytest.mark.asyncio
    async def test_add_rejects_product_without_price(self, cart_store):
        await cart_store.initialize()

        with pytest.raises(ValidationError):
            await cart_store.add_item({"id": 9, "name": "Mystery"})

    @pytest.mark.asyncio
    @pytest.mark.parametrize("quantity", [0, -1])
    async def test_set_quantity_below_one_removes_line(self, cart_store, sample_products, quantity):
        await cart_store.initialize()
        await cart_store.add_item(sample_products[0], 2)
        await cart_store.add_item(sample_products[2], 1)

        result = await cart_store.set_quantity(1, quantity)

        assert result is None
        assert cart_store.get_item(1) is None
        assert cart_store.count() == 1
        assert cart_store.total() == Decimal("9.99")

    @pytest.mark.asyncio
    async def test_set_quantity_overwrites(self, cart_store, sample_products):
        await cart_store.initialize()
        await cart_store.add_item(sample_products[0], 2)

        line = await cart_store.set_quantity(1, 5)

        assert line.quantity == 5
        assert cart_store.count() == 5

    @pytest.mark.asyncio
    async def test_set_quantity_absent_is_noop(self, cart_store, storage):
        await cart_store.initialize()

        assert await cart_store.set_quantity(42, 3) is None
        assert cart_store.is_empty
        assert await storage.get(storage.keys.cart) is None

    @pytest.mark.asyncio
    async def test_remove_item(self, cart_store, sample_products):
        await cart_store.initialize()
        await cart_store.add_item(sample_products[0])
        await cart_store.add_item(sample_products[1])

        await cart_store.remove_item(1)
        await cart_store.remove_item(999)

        assert [item.product_id for item in cart_store.items] == [2]

    @pytest.mark.asyncio
    async def test_clear(self, cart_store, storage, sample_products):
        await cart_store.initialize()
        await cart_store.add_item(sample_products[0], 3)

        await cart_store.clear()

        assert cart_store.is_empty
        assert cart_store.total() == 0
        assert json.loads(await storage.get(storage.keys.cart)) == []

    @pytest.mark.asyncio
    async def test_total_scenario_and_idempotence(self, cart_store, sample_products):
        await cart_store.initialize()
        await cart_store.add_item(sample_products[0], 2)
        await cart_store.add_item(sample_products[2], 1)

        first = cart_store.total()
        second = cart_store.total()

        assert first == second == Decimal("33.97")
        assert cart_store.count() == 3
        assert cart_store.items[0].quantity == 2

    @pytest.mark.asyncio
    async def test_insertion_order_preserved(self, cart_store, sample_products):
        await cart_store.initialize()
        for product in reversed(sample_products):
            await cart_store.add_item(product)
        await cart_store.add_item(sample_products[2])

        assert [item.product_id for item in cart_store.items] == [3, 2, 1]

    @pytest.mark.asyncio
    async def test_every_mutation_writes_through(self, cart_store, storage, sample_products):
        await cart_store.initialize()

        await cart_store.add_item(sample_products[0], 2)
        assert json.loads(await storage.get(storage.keys.cart))[0]["quantity"] == 2

        await cart_store.set_quantity(1, 4)
        assert json.loads(await storage.get(storage.keys.cart))[0]["quantity"] == 4

        await cart_store.remove_item(1)
        assert json.loads(await storage.get(storage.keys.cart)) == []

    @pytest.mark.asyncio
    async def test_reload_round_trip_keeps_decimal_prices(self, cart_store, storage, sample_products):
        await cart_store.initialize()
        await cart_store.add_item(sample_products[0], 2)
        await cart_store.add_item(sample_products[1], 1)

        reloaded = CartStore(storage)
        await reloaded.initialize()

        assert reloaded.items == cart_store.items
        assert all(isinstance(item.unit_price, Decimal) for item in reloaded.items)
        assert reloaded.total() == cart_store.total()

    @pytest.mark.asyncio
    async def test_initialize_normalizes_persisted_prices(self, storage):
        await storage.set(storage.keys.cart, json.dumps([
            {"id": 1, "name": "Burger", "price": "11.99", "quantity": 2},
            {"id": 2, "name": "Salad", "price": 9.99, "quantity": 1},
        ]))
        store = CartStore(storage)

        await store.initialize()

        assert [item.unit_price for item in store.items] == [Decimal("11.99"), Decimal("9.99")]
        assert store.total() == Decimal("33.97")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("snapshot", [
        "{not json",
        json.dumps({"id": 1}),
        json.dumps([{"id": 1, "name": "Burger", "price": "abc", "quantity": 1}]),
        json.dumps([{"name": "No id", "price": 1, "quantity": 1}]),
        json.dumps(["junk"]),
    ])
    async def test_corrupt_snapshot_resets_to_empty(self, storage, snapshot, caplog):
        await storage.set(storage.keys.cart, snapshot)
        store = CartStore(storage)

        with caplog.at_level(logging.WARNING, logger="storefront.cart.service"):
            await store.initialize()

        assert store.is_empty
        assert store.initialized
        assert await storage.get(storage.keys.cart) is None
        assert "Corrupted cart snapshot" in caplog.text

    @pytest.mark.asyncio
    async def test_unreadable_storage_starts_empty(self):
        store = CartStore(UnreadableStorage())

        await store.initialize()

        assert store.is_empty

    @pytest.mark.asyncio
    async def test_write_failure_is_logged_not_raised(self, sample_products, caplog):
        store = CartStore(FailingStorage())
        await store.initialize()

        with caplog.at_level(logging.ERROR, logger="storefront.cart.service"):
            await store.add_item(sample_products[0], 2)

        assert store.count() == 2
        assert "Failed to save cart" in caplog.text

    @pytest.mark.asyncio
    async def test_mutation_before_initialize_warns(self, cart_store, sample_products, caplog):
        with caplog.at_level(logging.WARNING, logger="storefront.cart.service"):
            await cart_store.add_item(sample_products[0])

        assert "Cart modified before initialize()" in caplog.text

        caplog.clear()
        await cart_store.initialize()
        with caplog.at_level(logging.WARNING, logger="storefront.cart.service"):
            await cart_store.add_item(sample_products[1])

        assert "before initialize()" not in caplog.text

    @pytest.mark.asyncio
    async def test_summary(self, cart_store, sample_products):
        await cart_store.initialize()
        assert cart_store.summary()["is_empty"] is True

        await cart_store.add_item(sample_products[0], 2)
        summary = cart_store.summary()

        assert summary["is_empty"] is False
        assert summary["count"] == 2
        assert summary["total"] == 23.98
        assert summary["items"][0]["unit_price"] == 11.99
