"""
Authorization tests for Courtside.

Verifies:
- Unauthenticated requests return 401
- Kasir role denied manager-only operations (403)
- Owner/Admin can perform privileged operations
- Guest endpoints stay public
- Login, logout and session revocation
"""

import pytest

from courtside.services import auth_service, session_service
from courtside.services.auth_service import PasswordValidationError

from conftest import PASSWORD, auth_headers


# =============================================================================
# UNAUTHENTICATED ACCESS (401)
# =============================================================================


class TestUnauthenticatedAccess:
    """All protected endpoints return 401 without a token."""

    @pytest.mark.parametrize(
        "method,path",
        [
            ("GET", "/api/auth/me"),
            ("POST", "/api/auth/users"),
            ("GET", "/api/products"),
            ("POST", "/api/products"),
            ("GET", "/api/menus"),
            ("GET", "/api/product-categories"),
            ("GET", "/api/menu-categories"),
            ("GET", "/api/tables"),
            ("GET", "/api/courts"),
            ("GET", "/api/transactions"),
            ("POST", "/api/transactions"),
            ("GET", "/api/bookings"),
            ("GET", "/api/order-requests"),
            ("GET", "/api/product-rents"),
            ("GET", "/api/product-sells"),
            ("GET", "/api/inventories"),
            ("GET", "/api/notifications"),
            ("GET", "/api/reports/dashboard"),
            ("GET", "/api/reports/sales"),
        ],
    )
    def test_requires_auth(self, client, db_session, method, path):
        resp = getattr(client, method.lower())(path)
        assert resp.status_code == 401, f"{method} {path} returned {resp.status_code}"

    def test_garbage_token_rejected(self, client, db_session):
        resp = client.get("/api/auth/me", headers=auth_headers("not-a-real-token"))
        assert resp.status_code == 401
        assert resp.get_json()["error"] == "Invalid or expired token"


# =============================================================================
# KASIR DENIED MANAGER OPERATIONS (403)
# =============================================================================


class TestKasirDeniedManagerOperations:
    """Kasir role cannot perform privileged operations."""

    @pytest.mark.parametrize(
        "method,path",
        [
            ("POST", "/api/auth/users"),
            ("POST", "/api/products"),
            ("POST", "/api/menus"),
            ("POST", "/api/product-categories"),
            ("POST", "/api/tables"),
            ("POST", "/api/courts"),
            ("POST", "/api/inventories"),
            ("GET", "/api/reports/dashboard"),
            ("GET", "/api/reports/sales"),
            ("GET", "/api/reports/product-rentals"),
        ],
    )
    def test_forbidden(self, client, kasir_headers, method, path):
        resp = getattr(client, method.lower())(path, json={}, headers=kasir_headers)
        assert resp.status_code == 403, f"{method} {path} returned {resp.status_code}"

    def test_forbidden_body_names_roles(self, client, kasir_headers):
        resp = client.post("/api/courts", json={}, headers=kasir_headers)
        body = resp.get_json()
        assert body["error"] == "Permission denied"
        assert body["required_roles"] == ["OWNER", "ADMIN"]

    def test_kasir_can_read_catalog(self, client, kasir_headers, sell_product):
        resp = client.get("/api/products", headers=kasir_headers)
        assert resp.status_code == 200
        assert resp.get_json()["products"][0]["sku"] == "SELL-001"


# =============================================================================
# MANAGERS ALLOWED
# =============================================================================


class TestManagersAllowed:

    def test_admin_can_create_user(self, client, admin_headers):
        resp = client.post(
            "/api/auth/users",
            json={"name": "Kasir 2", "email": "Kasir2@Courtside.test", "password": PASSWORD, "role": "KASIR"},
            headers=admin_headers,
        )
        assert resp.status_code == 201
        assert resp.get_json()["user"]["email"] == "kasir2@courtside.test"

    def test_duplicate_email_is_409(self, client, owner_headers, kasir):
        resp = client.post(
            "/api/auth/users",
            json={"name": "Dup", "email": kasir.email, "password": PASSWORD, "role": "KASIR"},
            headers=owner_headers,
        )
        assert resp.status_code == 409

    def test_weak_password_is_400(self, client, owner_headers):
        resp = client.post(
            "/api/auth/users",
            json={"name": "Weak", "email": "weak@courtside.test", "password": "short", "role": "KASIR"},
            headers=owner_headers,
        )
        assert resp.status_code == 400

    def test_owner_reads_dashboard(self, client, owner_headers):
        assert client.get("/api/reports/dashboard", headers=owner_headers).status_code == 200


# =============================================================================
# PUBLIC GUEST ENDPOINTS
# =============================================================================


class TestPublicEndpoints:

    def test_public_courts(self, client, court):
        resp = client.get("/api/courts/public")
        assert resp.status_code == 200
        assert [c["name"] for c in resp.get_json()["courts"]] == ["Court A"]

    def test_validate_table(self, client, table):
        assert client.get(f"/api/order-requests/validate-table/{table.code}").status_code == 200

    def test_health(self, client, db_session):
        assert client.get("/health").status_code == 200


# =============================================================================
# LOGIN / LOGOUT / SESSIONS
# =============================================================================


class TestSessions:

    def test_login_returns_token(self, client, kasir):
        resp = client.post("/api/auth/login", json={"email": "KASIR@courtside.test", "password": PASSWORD})

        assert resp.status_code == 200
        body = resp.get_json()
        assert body["user"]["role"] == "KASIR"
        assert len(body["token"]) == 64

        me = client.get("/api/auth/me", headers=auth_headers(body["token"]))
        assert me.get_json()["user"]["id"] == kasir.id

    def test_wrong_password(self, client, kasir):
        resp = client.post("/api/auth/login", json={"email": kasir.email, "password": "Wrong12345"})
        assert resp.status_code == 401

    def test_missing_credentials(self, client, db_session):
        assert client.post("/api/auth/login", json={"email": "x@y.z"}).status_code == 400

    def test_inactive_user_cannot_login(self, client, kasir):
        auth_service.set_user_active(kasir.id, False)
        resp = client.post("/api/auth/login", json={"email": kasir.email, "password": PASSWORD})
        assert resp.status_code == 401

    def test_logout_revokes_token(self, client, kasir):
        _, token = session_service.create_session(kasir.id)

        assert client.post("/api/auth/logout", headers=auth_headers(token)).status_code == 200
        assert client.get("/api/auth/me", headers=auth_headers(token)).status_code == 401
        assert client.post("/api/auth/logout", headers=auth_headers(token)).status_code == 401

    def test_deactivated_user_token_rejected(self, db_session, kasir):
        _, token = session_service.create_session(kasir.id)
        auth_service.set_user_active(kasir.id, False)
        assert session_service.validate_session(token) is None

    def test_idle_session_revoked(self, db_session, kasir):
        session, token = session_service.create_session(kasir.id)
        session.last_used_at = session.last_used_at - session_service.SESSION_IDLE_TIMEOUT * 2
        db_session.commit()

        assert session_service.validate_session(token) is None
        db_session.refresh(session)
        assert session.is_revoked is True
        assert session.revoked_reason == "Idle timeout"

    def test_only_hash_is_stored(self, db_session, kasir):
        session, token = session_service.create_session(kasir.id)
        assert session.token_hash == session_service.hash_token(token)
        assert session.token_hash != token

    @pytest.mark.parametrize("password", ["short1A", "alllowercase1", "ALLUPPERCASE1", "NoDigitsHere"])
    def test_password_policy(self, password):
        with pytest.raises(PasswordValidationError):
            auth_service.validate_password_strength(password)
