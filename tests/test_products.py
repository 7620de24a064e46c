"""Unit tests for product administration and product detail."""

from __future__ import annotations

import pytest
from bson import ObjectId
from pydantic import ValidationError

from errors import DuplicateProductError, ProductNotFound
from models.product import ProductCreate, ProductUpdate
from services.products import create_product, delete_product, get_product, update_product


def _payload(**overrides) -> dict:
    data = {
        "name": "Desk Lamp",
        "description": "LED lamp with adjustable brightness",
        "price": 39.99,
        "category": "Furniture",
        "stock": 30,
    }
    data.update(overrides)
    return ProductCreate(**data).to_document()


class TestProductModels:
    """Tests for request validation of products."""

    def test_text_fields_are_trimmed(self) -> None:
        """Test surrounding whitespace is stripped."""
        product = ProductCreate(
            name="  Lamp  ", description="A long enough description", price=1, category=" Home ", stock=0
        )

        assert product.name == "Lamp"
        assert product.category == "Home"

    def test_price_precision(self) -> None:
        """Test prices with more than two decimals are rejected."""
        with pytest.raises(ValidationError):
            ProductCreate(name="Lamp", description="A long enough description", price=1.234, category="Home", stock=1)

    def test_negative_stock_rejected(self) -> None:
        """Test stock cannot be negative."""
        with pytest.raises(ValidationError):
            ProductCreate(name="Lamp", description="A long enough description", price=1, category="Home", stock=-1)

    def test_image_url_stored_as_string(self) -> None:
        """Test the image URL becomes a plain string in the document."""
        doc = _payload(image_url="https://img.test/lamp.png")

        assert doc["image_url"] == "https://img.test/lamp.png"

    def test_empty_update_rejected(self) -> None:
        """Test an update needs at least one field."""
        with pytest.raises(ValidationError):
            ProductUpdate()

    @pytest.mark.parametrize("field", ["name", "description", "price", "category", "stock"])
    def test_update_rejects_null(self, field) -> None:
        """Test required product fields cannot be nulled through an update."""
        with pytest.raises(ValidationError):
            ProductUpdate(**{field: None})

    def test_update_only_carries_given_fields(self) -> None:
        """Test unset fields are not part of the update."""
        assert ProductUpdate(stock=3).to_update() == {"stock": 3}


class TestCreateProduct:
    """Tests for product creation."""

    def test_creates_with_timestamps(self, db) -> None:
        """Test the stored product gets an id and timestamps."""
        product = create_product(db, _payload())

        stored = db.products.find_one({"_id": ObjectId(product["id"])})
        assert stored["name"] == "Desk Lamp"
        assert stored["created_at"] is not None
        assert stored["updated_at"] is not None

    def test_duplicate_name_is_case_insensitive(self, db) -> None:
        """Test a name differing only in case is a duplicate."""
        create_product(db, _payload())

        with pytest.raises(DuplicateProductError):
            create_product(db, _payload(name="DESK LAMP"))

        assert db.products.count_documents({}) == 1

    def test_name_with_regex_characters(self, db) -> None:
        """Test names are compared literally, not as patterns."""
        create_product(db, _payload(name="Lamp (v2)"))

        create_product(db, _payload(name="Lamp v2"))

        assert db.products.count_documents({}) == 2


class TestUpdateProduct:
    """Tests for product updates."""

    def test_partial_update(self, db, make_product) -> None:
        """Test only the supplied fields change."""
        product = make_product(name="Mouse", price=20.0, stock=5)

        updated = update_product(db, str(product["_id"]), {"price": 25.0})

        assert updated["price"] == 25.0
        assert updated["stock"] == 5
        assert updated["name"] == "Mouse"

    def test_rename_to_existing_name_rejected(self, db, make_product) -> None:
        """Test renaming onto another product's name is refused."""
        make_product(name="Mouse")
        keyboard = make_product(name="Keyboard")

        with pytest.raises(DuplicateProductError):
            update_product(db, str(keyboard["_id"]), {"name": "mouse"})

    def test_keeping_own_name_is_allowed(self, db, make_product) -> None:
        """Test sending the current name again is not a duplicate."""
        mouse = make_product(name="Mouse")

        assert update_product(db, str(mouse["_id"]), {"name": "Mouse", "stock": 1})["stock"] == 1

    def test_missing_product(self, db) -> None:
        """Test updating an unknown product raises ProductNotFound."""
        with pytest.raises(ProductNotFound):
            update_product(db, str(ObjectId()), {"stock": 1})


class TestDeleteAndDetail:
    """Tests for deletion and product detail."""

    def test_delete_with_stock_is_allowed(self, db, make_product) -> None:
        """Test products are deleted regardless of remaining stock."""
        product = make_product(stock=12)

        delete_product(db, str(product["_id"]))

        assert db.products.count_documents({}) == 0

    def test_delete_missing(self, db) -> None:
        """Test deleting an unknown product raises ProductNotFound."""
        with pytest.raises(ProductNotFound):
            delete_product(db, str(ObjectId()))

    def test_detail_in_stock(self, db, make_product) -> None:
        """Test an in-stock product is marked available."""
        product = make_product(stock=3)

        assert get_product(db, str(product["_id"]))["availability"] == "in_stock"

    def test_detail_out_of_stock_still_returned(self, db, make_product) -> None:
        """Test a product with no stock is still returned, flagged out of stock."""
        product = make_product(stock=0)

        detail = get_product(db, str(product["_id"]))

        assert detail["availability"] == "out_of_stock"
        assert detail["id"] == str(product["_id"])
