"""Unit tests for catalog filtering and pagination."""

from __future__ import annotations

from services.catalog import (
    build_product_filter,
    list_categories,
    list_products,
    low_stock_products,
    paginate,
)


class TestBuildProductFilter:
    """Tests for filter composition."""

    def test_no_filters_only_requires_stock(self) -> None:
        """Test absent filters are omitted and stock > 0 is always applied."""
        assert build_product_filter() == {"stock": {"$gt": 0}}

    def test_search_matches_name_or_description(self) -> None:
        """Test search text becomes a case-insensitive OR on name and description."""
        query = build_product_filter(search="desk")

        assert query["$or"] == [
            {"name": {"$regex": "desk", "$options": "i"}},
            {"description": {"$regex": "desk", "$options": "i"}},
        ]

    def test_user_text_is_escaped(self) -> None:
        """Test regex metacharacters are matched literally."""
        query = build_product_filter(category="a+b")

        assert query["category"] == {"$regex": r"a\+b", "$options": "i"}

    def test_price_bounds_are_independent(self) -> None:
        """Test either price bound can be given alone."""
        assert build_product_filter(min_price=5)["price"] == {"$gte": 5}
        assert build_product_filter(max_price=9)["price"] == {"$lte": 9}
        assert build_product_filter(min_price=5, max_price=9)["price"] == {"$gte": 5, "$lte": 9}

    def test_stock_constraint_can_be_disabled(self) -> None:
        """Test the stock constraint is left out for non-public queries."""
        assert "stock" not in build_product_filter(in_stock_only=False)


class TestPaginate:
    """Tests for pagination metadata."""

    def test_last_page(self) -> None:
        """Test 25 results at 10 per page on page 3."""
        assert paginate(3, 10, 25) == {
            "page": 3,
            "limit": 10,
            "total": 25,
            "pages": 3,
            "has_next": False,
            "has_prev": True,
        }

    def test_first_page(self) -> None:
        """Test the first page has a next page but no previous one."""
        meta = paginate(1, 10, 25)

        assert meta["has_next"] is True
        assert meta["has_prev"] is False

    def test_empty_result(self) -> None:
        """Test no results means zero pages."""
        meta = paginate(1, 10, 0)

        assert meta["pages"] == 0
        assert meta["has_next"] is False


class TestListProducts:
    """Tests for the listing query against the store."""

    def test_third_page_of_twenty_five(self, db, make_product) -> None:
        """Test page 3 of 25 matching products at limit 10 returns 5 items."""
        for _ in range(25):
            make_product()

        items, meta = list_products(db, page=3, limit=10)

        assert len(items) == 5
        assert (meta["total"], meta["pages"], meta["has_next"], meta["has_prev"]) == (25, 3, False, True)

    def test_price_range_excludes_out_of_stock(self, db, make_product) -> None:
        """Test 50 <= price <= 150 with stock-0 products excluded."""
        make_product(name="cheap", price=49.99)
        make_product(name="low edge", price=50.0)
        make_product(name="middle", price=99.0)
        make_product(name="middle but empty", price=99.0, stock=0)
        make_product(name="high edge", price=150.0)
        make_product(name="expensive", price=150.01)

        items, meta = list_products(db, min_price=50, max_price=150)

        assert sorted(p["name"] for p in items) == ["high edge", "low edge", "middle"]
        assert all(50 <= p["price"] <= 150 and p["stock"] > 0 for p in items)
        assert meta["total"] == 3

    def test_newest_first(self, db, make_product) -> None:
        """Test results are sorted by creation time, newest first."""
        make_product(name="old")
        make_product(name="new")

        items, _ = list_products(db)

        assert [p["name"] for p in items] == ["new", "old"]

    def test_search_is_case_insensitive_substring(self, db, make_product) -> None:
        """Test search matches inside names and descriptions regardless of case."""
        make_product(name="Standing Desk", description="Adjustable height frame")
        make_product(name="Lamp", description="Bright light for any DESK surface")
        make_product(name="Chair", description="Ergonomic seat")

        items, _ = list_products(db, search="desk")

        assert sorted(p["name"] for p in items) == ["Lamp", "Standing Desk"]

    def test_filters_combine(self, db, make_product) -> None:
        """Test category and price filters are AND-combined."""
        make_product(name="A", category="Home Furniture", price=120.0)
        make_product(name="B", category="furniture", price=20.0)
        make_product(name="C", category="Electronics", price=120.0)

        items, _ = list_products(db, category="FURNITURE", min_price=100)

        assert [p["name"] for p in items] == ["A"]

    def test_items_are_serialized(self, db, make_product) -> None:
        """Test ObjectIds are exposed as string ids."""
        product = make_product()

        items, _ = list_products(db)

        assert items[0]["id"] == str(product["_id"])
        assert "_id" not in items[0]


class TestCatalogReports:
    """Tests for low-stock and category queries."""

    def test_low_stock_excludes_empty_and_sorts_ascending(self, db, make_product) -> None:
        """Test low stock keeps 0 < stock <= threshold, lowest first."""
        make_product(name="five", stock=5)
        make_product(name="one", stock=1)
        make_product(name="zero", stock=0)
        make_product(name="plenty", stock=50)
        make_product(name="ten", stock=10)

        items = low_stock_products(db, threshold=10)

        assert [p["name"] for p in items] == ["one", "five", "ten"]

    def test_categories_are_distinct_and_sorted(self, db, make_product) -> None:
        """Test categories are deduplicated and sorted case-insensitively."""
        make_product(category="furniture")
        make_product(category="Electronics")
        make_product(category="Appliances")
        make_product(category="Electronics")

        assert list_categories(db) == ["Appliances", "Electronics", "furniture"]
