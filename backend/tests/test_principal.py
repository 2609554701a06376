"""Tests for Principal, SessionState and the Permission view."""

import pytest

from app.auth.principal import Permission, Principal, SessionState, principal_from_claims
from app.auth.roles import UserRole


@pytest.mark.unit
class TestPrincipal:

    def test_enum_role_is_normalised_to_value(self):
        assert Principal(role=UserRole.ADMIN).role == "admin"

    def test_empty_dealer_id_becomes_none(self):
        assert Principal(role="dealer_user", dealer_id="").dealer_id is None

    def test_is_immutable(self):
        principal = Principal(role="readonly")
        with pytest.raises(AttributeError):
            principal.role = "admin"  # type: ignore[misc]

    def test_from_access_claims(self):
        principal = principal_from_claims(
            {"sub": "u1", "role": "dealer_admin", "dealer_id": "D1", "type": "access"}
        )
        assert principal == Principal(role="dealer_admin", dealer_id="D1", user_id="u1")

    def test_from_claims_rejects_empty_and_refresh_tokens(self):
        assert principal_from_claims({}) is None
        assert principal_from_claims({"sub": "u1", "type": "refresh"}) is None
        assert principal_from_claims({"role": "admin", "type": "access"}) is None


@pytest.mark.unit
class TestSessionState:

    def test_statuses(self):
        assert SessionState.loading().status == "loading"
        assert SessionState.anonymous().status == "unauthenticated"
        assert SessionState.authenticated(Principal(role="admin")).status == "authenticated"


@pytest.mark.unit
class TestPermission:

    def test_everything_false_without_principal(self):
        for session in (SessionState.loading(), SessionState.anonymous()):
            permission = Permission(session)
            assert not permission.has_role("readonly")
            assert not permission.is_admin()
            assert not permission.is_super_admin()
            assert not permission.is_dealer_admin()
            assert not permission.is_dealer_user()
            assert not permission.can_access_dealer("D1")
            assert permission.role is None
            assert permission.dealer_id is None

    def test_dealer_admin(self):
        permission = Permission(
            SessionState.authenticated(Principal(role="dealer_admin", dealer_id="D1"))
        )
        assert permission.has_role("dealer_user")
        assert not permission.has_role("admin")
        assert permission.is_dealer_admin()
        assert permission.is_dealer_user()
        assert not permission.is_admin()
        assert permission.can_access_dealer("D1")
        assert not permission.can_access_dealer("D2")
        assert permission.dealer_id == "D1"

    def test_super_admin(self):
        permission = Permission(SessionState.authenticated(Principal(role="super_admin")))
        assert permission.is_super_admin()
        assert permission.is_admin()
        assert not permission.is_dealer_user()
        assert permission.can_access_dealer("anything")

    def test_loading_flag_passes_through(self):
        assert Permission(SessionState.loading()).is_loading
        assert not Permission(SessionState.anonymous()).is_loading
