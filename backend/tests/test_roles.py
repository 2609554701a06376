"""Tests for the role hierarchy and dealer-scoping policy."""

import itertools

import pytest

from app.auth.roles import (
    DEFAULT_BADGE_COLOR,
    ROLE_HIERARCHY,
    UNKNOWN_ROLE_LEVEL,
    UserRole,
    assignable_roles,
    can_access_dealer,
    get_role_level,
    has_role,
    is_admin,
    parse_role,
    role_badge_color,
    role_label,
)

# highest privilege first
ORDERED = ["super_admin", "admin", "dealer_admin", "dealer_user", "readonly"]


@pytest.mark.unit
class TestRoleHierarchy:
    """hasRole over the fixed total order."""

    def test_levels_increase_with_privilege(self):
        levels = [get_role_level(r) for r in reversed(ORDERED)]
        assert levels == [0, 1, 2, 3, 4]

    def test_hierarchy_is_read_only(self):
        with pytest.raises(TypeError):
            ROLE_HIERARCHY["readonly"] = 99  # type: ignore[index]

    @pytest.mark.parametrize("role", ORDERED)
    def test_reflexive(self, role):
        assert has_role(role, role)

    def test_strict_order_is_antisymmetric(self):
        for i, j in itertools.combinations(range(len(ORDERED)), 2):
            higher, lower = ORDERED[i], ORDERED[j]
            assert has_role(higher, lower), f"{higher} should satisfy {lower}"
            assert not has_role(lower, higher), f"{lower} should not satisfy {higher}"

    def test_specific_pairs(self):
        assert has_role("super_admin", "admin")
        assert has_role("admin", "dealer_admin")
        assert has_role("dealer_admin", "readonly")
        assert not has_role("admin", "super_admin")
        assert not has_role("dealer_user", "dealer_admin")
        assert not has_role("readonly", "dealer_user")

    def test_accepts_enum_members(self):
        assert has_role(UserRole.ADMIN, UserRole.DEALER_ADMIN)
        assert has_role("admin", UserRole.ADMIN)
        assert not has_role(UserRole.DEALER_USER, "admin")

    def test_unknown_actual_role_is_below_everything(self):
        assert not has_role("unknown_role", "readonly")
        assert not has_role("ADMIN", "readonly")

    def test_unknown_required_role_is_satisfied_by_known_roles(self):
        assert has_role("dealer_user", "unknown_role")
        assert has_role("readonly", "unknown_role")

    @pytest.mark.parametrize("value", ["", None, 42, ["admin"], object()])
    def test_empty_and_non_string_roles_rank_as_unknown(self, value):
        assert get_role_level(value) == UNKNOWN_ROLE_LEVEL
        assert not has_role(value, "readonly")
        assert has_role("readonly", value)

    def test_repeated_evaluation_is_stable(self):
        results = {has_role("dealer_admin", "dealer_user") for _ in range(10)}
        assert results == {True}


@pytest.mark.unit
class TestIsAdmin:

    @pytest.mark.parametrize("role", ORDERED + ["unknown", ""])
    def test_matches_platform_roles(self, role):
        assert is_admin(role) == (role in ("admin", "super_admin"))

    @pytest.mark.parametrize("role", ORDERED + ["unknown"])
    def test_consistent_with_has_role_admin(self, role):
        assert is_admin(role) == has_role(role, "admin")


@pytest.mark.unit
class TestCanAccessDealer:
    """Two-tier tenant isolation."""

    def test_platform_roles_bypass_scoping(self):
        assert can_access_dealer("super_admin", None, "dealer-123")
        assert can_access_dealer("admin", "other-dealer", "dealer-456")
        assert can_access_dealer("admin", None, None)

    def test_tenant_roles_see_own_dealer(self):
        assert can_access_dealer("dealer_admin", "dealer-123", "dealer-123")
        assert can_access_dealer("dealer_user", "dealer-123", "dealer-123")
        assert can_access_dealer("readonly", "dealer-123", "dealer-123")

    def test_tenant_roles_denied_other_dealers(self):
        assert not can_access_dealer("dealer_admin", "dealer-123", "dealer-456")
        assert not can_access_dealer("dealer_user", "dealer-123", "dealer-456")

    def test_no_home_dealer_denies_tenant_roles(self):
        assert not can_access_dealer("dealer_user", None, "dealer-123")
        assert not can_access_dealer("dealer_admin", "", "")
        assert not can_access_dealer("dealer_admin", None, None)

    def test_unknown_role_is_tenant_scoped(self):
        assert can_access_dealer("mystery", "dealer-123", "dealer-123")
        assert not can_access_dealer("mystery", "dealer-123", "dealer-456")

    def test_no_partial_matches(self):
        assert not can_access_dealer("dealer_admin", "dealer-1", "dealer-12")


@pytest.mark.unit
class TestRoleLookups:
    """Total mappings: unknown keys resolve to explicit defaults."""

    def test_parse_role(self):
        assert parse_role("dealer_admin") is UserRole.DEALER_ADMIN
        assert parse_role(UserRole.ADMIN) is UserRole.ADMIN
        assert parse_role("root") is None
        assert parse_role("") is None
        assert parse_role(None) is None

    def test_labels(self):
        assert role_label("super_admin") == "Super Admin"
        assert role_label(UserRole.READONLY) == "Read Only"
        assert role_label("ghost") == "Unknown"
        assert role_label(None) == "Unknown"

    def test_badge_colors(self):
        assert role_badge_color("dealer_admin") == "bg-indigo-100 text-indigo-800"
        assert role_badge_color("ghost") == DEFAULT_BADGE_COLOR
        assert role_badge_color(None) == DEFAULT_BADGE_COLOR


@pytest.mark.unit
class TestAssignableRoles:

    def test_super_admin_can_assign_everything(self):
        assert assignable_roles("super_admin") == list(UserRole)

    def test_admin_cannot_mint_super_admins(self):
        roles = assignable_roles("admin")
        assert UserRole.SUPER_ADMIN not in roles
        assert UserRole.ADMIN in roles

    def test_dealer_admin_assigns_tenant_roles_only(self):
        assert assignable_roles("dealer_admin") == [
            UserRole.DEALER_ADMIN,
            UserRole.DEALER_USER,
            UserRole.READONLY,
        ]

    def test_unknown_actor_assigns_nothing(self):
        assert assignable_roles("ghost") == []
        assert assignable_roles("") == []
