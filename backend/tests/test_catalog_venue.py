"""
Catalog and venue tests.

Verifies:
- Product/menu CRUD with SKU and slug uniqueness
- Stock is seeded on create and never edited afterwards
- Table occupancy fields move together with status
- Courts and the guest-facing court list
"""

import pytest

from courtside.errors import ConflictError, InvalidStateError, NotFoundError, ValidationError
from courtside.services import catalog_service, venue_service
from courtside.services.slug_service import slugify


# =============================================================================
# PRODUCTS AND MENUS
# =============================================================================


class TestProducts:

    def test_create_product(self, db_session, sell_product):
        assert sell_product.slug == "energy-drink"
        assert sell_product.stock == 10
        assert sell_product.is_active is True

    def test_stock_defaults_to_zero(self, db_session):
        product = catalog_service.create_product({"name": "Grip Tape", "type": "SELL", "price_cents": 500000})
        assert product.stock == 0

    def test_duplicate_sku_conflicts(self, db_session, sell_product):
        with pytest.raises(ConflictError):
            catalog_service.create_product({"name": "Other", "sku": "SELL-001", "type": "SELL", "price_cents": 1})

    def test_same_name_gets_suffixed_slug(self, db_session, sell_product):
        again = catalog_service.create_product({"name": "Energy Drink", "type": "SELL", "price_cents": 1})
        assert again.slug == "energy-drink-2"

    def test_stock_cannot_be_edited(self, db_session, sell_product):
        with pytest.raises(ValidationError, match="stock cannot be edited"):
            catalog_service.update_product(sell_product.id, {"stock": 50})
        assert sell_product.stock == 10

    def test_rename_updates_slug(self, db_session, sell_product):
        product = catalog_service.update_product(sell_product.id, {"name": "Isotonic Drink", "price_cents": 1200000})
        assert product.slug == "isotonic-drink"
        assert product.price_cents == 1200000

    @pytest.mark.parametrize(
        "payload",
        [
            {"name": "X", "type": "SELL"},
            {"name": "X", "type": "LEASE", "price_cents": 1},
            {"name": "X", "type": "SELL", "price_cents": -1},
            {"name": "X", "type": "SELL", "price_cents": 10.5},
            {"name": "X", "type": "SELL", "price_cents": 1, "stock": -3},
            {"name": "X", "type": "SELL", "price_cents": 1, "slug": "x"},
        ],
    )
    def test_rejects_bad_payload(self, db_session, payload):
        with pytest.raises(ValidationError):
            catalog_service.create_product(payload)

    def test_unknown_category(self, db_session):
        with pytest.raises(NotFoundError):
            catalog_service.create_product(
                {"name": "X", "type": "SELL", "price_cents": 1, "product_category_id": 999}
            )

    def test_menu_stock_is_optional(self, db_session, menu, tracked_menu):
        assert menu.stock is None
        assert tracked_menu.stock == 3
        with pytest.raises(ValidationError):
            catalog_service.update_menu(menu.id, {"stock": 5})

    def test_deactivate_is_soft(self, db_session, sell_product):
        catalog_service.set_product_active(sell_product.id, False)

        rows, total = catalog_service.list_products(active=True)
        assert total == 0
        rows, total = catalog_service.list_products()
        assert [p.id for p in rows] == [sell_product.id]

    def test_search_by_sku(self, db_session, sell_product, rent_product):
        rows, _ = catalog_service.list_products(search="rent-")
        assert [p.name for p in rows] == ["Padel Racket"]


class TestCategories:

    def test_duplicate_name_conflicts(self, db_session):
        catalog_service.create_category("product", {"name": "Drinks"})
        with pytest.raises(ConflictError):
            catalog_service.create_category("product", {"name": "Drinks"})

    def test_kinds_are_independent(self, db_session):
        product_cat = catalog_service.create_category("product", {"name": "Drinks"})
        menu_cat = catalog_service.create_category("menu", {"name": "Drinks"})
        assert product_cat.slug == menu_cat.slug == "drinks"

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("Hot Coffee", "hot-coffee"),
            ("  Snacks & Bites! ", "snacks-bites"),
            ("???", "item"),
        ],
    )
    def test_slugify(self, name, expected):
        assert slugify(name) == expected


# =============================================================================
# TABLES
# =============================================================================


class TestTables:

    def test_occupy_and_release(self, db_session, table):
        seated = venue_service.set_table_status(table.id, "OCCUPIED", customer_name="  Budi ", customer_phone="0812")

        assert seated.status == "OCCUPIED"
        assert seated.current_customer_name == "Budi"
        assert seated.occupied_at is not None

        released = venue_service.set_table_status(table.id, "EMPTY")
        assert released.status == "EMPTY"
        assert released.current_customer_name is None
        assert released.current_customer_phone is None
        assert released.occupied_at is None

    def test_occupy_requires_customer(self, db_session, table):
        with pytest.raises(ValidationError):
            venue_service.set_table_status(table.id, "OCCUPIED")
        assert table.status == "EMPTY"

    def test_unknown_status(self, db_session, table):
        with pytest.raises(ValidationError):
            venue_service.set_table_status(table.id, "RESERVED", customer_name="Budi")

    def test_cannot_deactivate_occupied(self, db_session, table):
        venue_service.set_table_status(table.id, "OCCUPIED", customer_name="Budi")
        with pytest.raises(InvalidStateError):
            venue_service.set_table_active(table.id, False)

    def test_duplicate_code(self, db_session, table):
        with pytest.raises(ConflictError):
            venue_service.create_table({"code": "T01", "name": "Again"})

    def test_capacity_must_be_positive(self, db_session):
        with pytest.raises(ValidationError):
            venue_service.create_table({"code": "T09", "name": "Bar", "capacity": 0})

    def test_seed_skips_existing(self, db_session, table):
        created = venue_service.seed_tables(3)

        assert [t.code for t in created] == ["T02", "T03"]
        assert [t.code for t in venue_service.list_tables()] == ["T01", "T02", "T03"]

    def test_validate_table_code(self, db_session, table):
        assert venue_service.validate_table_code("T01") == (True, table)
        assert venue_service.validate_table_code("T99") == (False, None)

        venue_service.set_table_active(table.id, False)
        assert venue_service.validate_table_code("T01") == (False, None)

    def test_status_route(self, client, kasir_headers, table):
        resp = client.post(
            f"/api/tables/{table.id}/status",
            json={"status": "OCCUPIED", "customer_name": "Sari"},
            headers=kasir_headers,
        )

        assert resp.status_code == 200
        body = resp.get_json()["table"]
        assert body["status"] == "OCCUPIED"
        assert body["current_customer_name"] == "Sari"
        assert body["occupied_at"].endswith("Z")


# =============================================================================
# COURTS
# =============================================================================


class TestCourts:

    def test_create_court_route(self, client, owner_headers):
        resp = client.post(
            "/api/courts",
            json={"name": "Court B", "type": "OUTDOOR", "surface": "Grass", "price_per_hour_cents": 8000000},
            headers=owner_headers,
        )

        assert resp.status_code == 201
        body = resp.get_json()["court"]
        assert body["slug"] == "court-b"
        assert body["status"] == "ACTIVE"
        assert body["is_visible"] is True

    def test_rejects_unknown_type(self, db_session):
        with pytest.raises(ValidationError):
            venue_service.create_court({"name": "Court X", "type": "ROOFTOP", "price_per_hour_cents": 1})

    def test_public_list_hides_inactive_and_hidden(self, client, db_session, court):
        hidden = venue_service.create_court({"name": "Court H", "price_per_hour_cents": 1, "is_visible": False})
        closed = venue_service.create_court({"name": "Court C", "price_per_hour_cents": 1})
        venue_service.deactivate_court(closed.id)

        resp = client.get("/api/courts/public")
        assert [c["name"] for c in resp.get_json()["courts"]] == ["Court A"]

        staff_view = venue_service.list_courts()
        assert {c.id for c in staff_view} == {court.id, hidden.id, closed.id}

    def test_reactivate(self, db_session, court):
        venue_service.deactivate_court(court.id)
        assert venue_service.activate_court(court.id).status == "ACTIVE"

    def test_unknown_court(self, db_session):
        with pytest.raises(NotFoundError):
            venue_service.get_court(424242)
