import pytest

from resourcio.services.rbac import (
    ACCESS_RULES,
    AccessRule,
    Permission,
    Principal,
    Role,
    ROLE_PERMISSIONS,
    accessible_navigation,
    can_access,
    can_access_route,
    has_all_permissions,
    has_any_permission,
    has_any_role,
    has_permission,
    has_role,
    permissions_for_role,
    permissions_for_roles,
)


def test_every_role_has_permissions():
    assert set(ROLE_PERMISSIONS) == set(Role)
    assert ROLE_PERMISSIONS[Role.ADMIN] == frozenset(Permission)


def test_regular_user_permissions():
    assert permissions_for_role("regular_user") == {"time_logging", "dashboard"}
    assert permissions_for_role(Role.REGULAR_USER) == {"time_logging", "dashboard"}


def test_unknown_role_has_no_permissions():
    assert permissions_for_role("manager") == frozenset()


def test_permissions_are_union_of_roles():
    perms = permissions_for_roles(["regular_user", "business_controller"])
    assert perms == {"time_logging", "dashboard", "reports", "submission_overview"}


def test_principal_from_roles():
    user = Principal.from_roles([Role.CHANGE_LEAD], user_id=3)
    assert has_role(user, "change_lead")
    assert has_role(user, Role.CHANGE_LEAD)
    assert has_permission(user, Permission.CHANGE_LEAD_REPORTS)
    assert not has_permission(user, "resource_management")


def test_predicates_on_plain_dicts():
    user = {"roles": ["regular_user"], "permissions": ["dashboard"]}
    assert has_permission(user, "dashboard")
    assert not has_permission(user, "time_logging")  # explicit permissions win over role derivation
    assert has_any_role(user, ["admin", "regular_user"])
    assert not has_any_role(user, [])
    assert has_any_permission(user, ["reports", "dashboard"])
    assert has_all_permissions(user, ["dashboard"])
    assert not has_all_permissions(user, ["dashboard", "reports"])


def test_predicates_never_raise_on_missing_user():
    assert not has_permission(None, "dashboard")
    assert not has_role(None, "admin")
    assert not can_access_route({"roles": ["admin"]}, None)


def test_require_all_roles():
    route = {"roles": ["admin"], "requireAll": True}
    assert not can_access_route(route, {"roles": ["manager"]})
    assert can_access_route(route, {"roles": ["admin", "manager"]})


def test_any_permission_by_default():
    route = {"permissions": ["reports", "dashboard"], "require_all": False}
    assert can_access_route(route, {"roles": [], "permissions": ["dashboard"]})
    assert can_access_route({"permissions": ["reports", "dashboard"]}, {"permissions": ["dashboard"]})


def test_require_all_permissions():
    route = AccessRule("x", permissions=(Permission.REPORTS, Permission.DASHBOARD), require_all=True)
    assert not can_access_route(route, {"permissions": ["dashboard"]})
    assert can_access_route(route, Principal.from_roles(["business_controller"]))


def test_both_dimensions_must_pass():
    route = AccessRule("x", roles=(Role.ADMIN, Role.MANAGER_CHANGE), permissions=(Permission.ROLE_MANAGEMENT,))
    # role ok, permission missing
    assert not can_access_route(route, Principal.from_roles(["manager_change"]))
    # permission ok, role missing
    assert not can_access_route(route, {"roles": ["regular_user"], "permissions": ["role_management"]})
    assert can_access_route(route, Principal.from_roles(["admin"]))


def test_undeclared_route_allows_everyone():
    assert can_access_route(AccessRule("open"), Principal())
    assert can_access_route({}, {"roles": []})


def test_can_access_unknown_key_denies():
    assert not can_access("nope", Principal.from_roles(["admin"]))


@pytest.mark.parametrize("role,expected", [
    ("regular_user", ["dashboard", "time_logging"]),
    ("change_lead", ["dashboard", "time_logging", "reports", "change_lead_reports"]),
    ("business_controller", ["dashboard", "time_logging", "reports", "submission_overview"]),
])
def test_navigation_per_role(role, expected):
    keys = [key for key, _ in accessible_navigation(Principal.from_roles([role]))]
    assert keys == expected


def test_admin_sees_every_navigation_item():
    keys = [key for key, _ in accessible_navigation(Principal.from_roles(["admin"]))]
    assert keys == [k for k, r in ACCESS_RULES.items() if r.in_navigation]


def test_navigation_matches_endpoint_rules():
    manager = Principal.from_roles(["manager_change"])
    assert can_access("projects", manager) and can_access("projects.write", manager)
    regular = Principal.from_roles(["regular_user"])
    assert not can_access("resources", regular) and not can_access("resources.write", regular)


def test_principal_derives_permissions_from_roles():
    p = Principal(roles=["change_lead"])
    assert p.roles == frozenset({"change_lead"})
    assert p.permissions == permissions_for_roles(["change_lead"])
    assert has_permission(p, Permission.CHANGE_LEAD_REPORTS)
    assert Principal(roles=[Role.ADMIN]) == Principal.from_roles(["admin"])

    explicit = Principal(roles=["admin"], permissions=["dashboard"])
    assert explicit.permissions == frozenset({"dashboard"})
