"""Server-rendered pages: login redirects, role redirects, gated sections."""

from datetime import datetime

import pytest
from httpx import AsyncClient

from app.auth.navigation import RedirectNavigator
from app.auth.revocation import TokenRevocation
from app.models.dealer import Dealer, DealerStatus


@pytest.mark.unit
class TestRedirectNavigator:

    def test_first_target_wins(self):
        navigator = RedirectNavigator()
        navigator.replace("/dashboard")
        navigator.replace("/elsewhere")

        assert navigator.location == "/dashboard"
        assert navigator.calls == 2
        response = navigator.response()
        assert response.status_code == 303
        assert response.headers["location"] == "/dashboard"

    def test_response_without_redirect_is_an_error(self):
        with pytest.raises(RuntimeError):
            RedirectNavigator().response()


@pytest.mark.api
@pytest.mark.asyncio
class TestPageGuards:

    async def test_anonymous_visitor_sent_to_login(self, client: AsyncClient):
        response = await client.get("/dashboard")

        assert response.status_code == 303
        assert response.headers["location"] == "/login"

    async def test_invalid_cookie_is_anonymous(self, client: AsyncClient):
        client.cookies.set("access_token", "not-a-jwt")

        response = await client.get("/admin")

        assert response.status_code == 303
        assert response.headers["location"] == "/login"

    async def test_dealer_user_dashboard_hides_admin_sections(self, client: AsyncClient, session_cookie):
        client.cookies.update(session_cookie("dealer_user", "D1"))

        response = await client.get("/dashboard")

        assert response.status_code == 200
        assert "Dealer User" in response.text
        assert 'href="/dealers/D1"' in response.text
        assert 'href="/admin"' not in response.text
        assert 'href="/dealer/settings"' not in response.text
        assert response.headers["content-security-policy"].startswith("default-src 'self'")

    async def test_super_admin_dashboard_shows_everything(self, client: AsyncClient, session_cookie):
        client.cookies.update(session_cookie("super_admin"))

        response = await client.get("/dashboard")

        assert response.status_code == 200
        assert 'href="/admin"' in response.text
        assert 'href="/admin/system"' in response.text
        assert 'href="/dealer/settings"' in response.text

    async def test_dealer_admin_redirected_from_admin(self, client: AsyncClient, session_cookie):
        client.cookies.update(session_cookie("dealer_admin", "D1"))

        response = await client.get("/admin")

        assert response.status_code == 303
        assert response.headers["location"] == "/dashboard"

    async def test_admin_redirected_from_system_settings(self, client: AsyncClient, session_cookie):
        client.cookies.update(session_cookie("admin"))

        response = await client.get("/admin/system")

        assert response.status_code == 303
        assert response.headers["location"] == "/dashboard"

    async def test_super_admin_sees_system_settings(self, client: AsyncClient, session_cookie):
        client.cookies.update(session_cookie("super_admin"))

        response = await client.get("/admin/system")

        assert response.status_code == 200
        assert "System settings" in response.text

    async def test_dealer_admin_sees_dealer_settings(self, client: AsyncClient, session_cookie):
        client.cookies.update(session_cookie("dealer_admin", "D1"))

        response = await client.get("/dealer/settings")

        assert response.status_code == 200

    async def test_readonly_redirected_from_dealer_settings(self, client: AsyncClient, session_cookie):
        client.cookies.update(session_cookie("readonly", "D1"))

        response = await client.get("/dealer/settings")

        assert response.status_code == 303

    async def test_bearer_header_also_works(self, client: AsyncClient, session_cookie):
        token = session_cookie("admin")["access_token"]

        response = await client.get("/admin", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 200


@pytest.mark.api
@pytest.mark.asyncio
class TestDealerPage:

    async def test_other_dealer_shows_fallback(self, client: AsyncClient, session_cookie):
        client.cookies.update(session_cookie("dealer_admin", "D1"))

        response = await client.get("/dealers/D2")

        assert response.status_code == 403
        assert "You do not have access to this dealer." in response.text

    async def test_own_dealer_rendered(self, client: AsyncClient, fake_db, session_cookie):
        fake_db.add(Dealer(
            id="D1",
            code="AAA",
            name="Lakeside RV",
            status=DealerStatus.ACTIVE,
            created_at=datetime(2026, 1, 1),
        ))
        client.cookies.update(session_cookie("dealer_user", "D1"))

        response = await client.get("/dealers/D1")

        assert response.status_code == 200
        assert "Lakeside RV" in response.text
        assert "AAA" in response.text

    async def test_admin_missing_dealer_is_404(self, client: AsyncClient, session_cookie):
        client.cookies.update(session_cookie("admin"))

        response = await client.get("/dealers/nope")

        assert response.status_code == 404


@pytest.mark.api
@pytest.mark.asyncio
class TestRevokedSessions:

    async def test_deactivated_user_loses_page_access(
        self, client: AsyncClient, session_cookie, monkeypatch
    ):
        async def _revoked(user_id):
            return user_id == "root-1"

        monkeypatch.setattr(TokenRevocation, "is_user_revoked", staticmethod(_revoked))
        client.cookies.update(session_cookie("super_admin", user_id="root-1"))

        response = await client.get("/admin/system")

        assert response.status_code == 303
        assert response.headers["location"] == "/login"

    async def test_other_users_keep_access(self, client: AsyncClient, session_cookie, monkeypatch):
        async def _revoked(user_id):
            return user_id == "root-1"

        monkeypatch.setattr(TokenRevocation, "is_user_revoked", staticmethod(_revoked))
        client.cookies.update(session_cookie("super_admin", user_id="root-2"))

        response = await client.get("/admin/system")

        assert response.status_code == 200
