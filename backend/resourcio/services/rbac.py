"""
Role-based access control.

Permissions are never stored per user: a user's permission set is the
union of ROLE_PERMISSIONS over the roles they hold. ACCESS_RULES is the one
table both the SPA navigation (/api/rbac/navigation) and the server-side
`require_access` dependency read from.

Every predicate here returns a bool. Unknown role or permission strings
are accepted and simply never match.
"""

import enum
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional


class Role(str, enum.Enum):
    REGULAR_USER = "regular_user"
    CHANGE_LEAD = "change_lead"
    MANAGER_CHANGE = "manager_change"
    BUSINESS_CONTROLLER = "business_controller"
    ADMIN = "admin"


class Permission(str, enum.Enum):
    TIME_LOGGING = "time_logging"
    REPORTS = "reports"
    CHANGE_LEAD_REPORTS = "change_lead_reports"
    RESOURCE_MANAGEMENT = "resource_management"
    PROJECT_MANAGEMENT = "project_management"
    USER_MANAGEMENT = "user_management"
    SYSTEM_ADMIN = "system_admin"
    DASHBOARD = "dashboard"
    CALENDAR = "calendar"
    SUBMISSION_OVERVIEW = "submission_overview"
    SETTINGS = "settings"
    ROLE_MANAGEMENT = "role_management"


P = Permission

ROLE_PERMISSIONS: dict[Role, frozenset[Permission]] = {
    Role.REGULAR_USER: frozenset({P.TIME_LOGGING, P.DASHBOARD}),
    Role.CHANGE_LEAD: frozenset({P.TIME_LOGGING, P.CHANGE_LEAD_REPORTS, P.DASHBOARD, P.REPORTS}),
    Role.MANAGER_CHANGE: frozenset({
        P.TIME_LOGGING, P.REPORTS, P.CHANGE_LEAD_REPORTS, P.RESOURCE_MANAGEMENT,
        P.PROJECT_MANAGEMENT, P.DASHBOARD, P.CALENDAR, P.SUBMISSION_OVERVIEW, P.SETTINGS,
    }),
    Role.BUSINESS_CONTROLLER: frozenset({P.TIME_LOGGING, P.REPORTS, P.DASHBOARD, P.SUBMISSION_OVERVIEW}),
    Role.ADMIN: frozenset(Permission),
}

ROLE_DISPLAY_NAMES = {
    Role.REGULAR_USER: "Regular User",
    Role.CHANGE_LEAD: "Change Lead",
    Role.MANAGER_CHANGE: "Manager Change",
    Role.BUSINESS_CONTROLLER: "Business Controller",
    Role.ADMIN: "Administrator",
}

ROLE_DESCRIPTIONS = {
    Role.REGULAR_USER: "Logs own time and sees the personal dashboard",
    Role.CHANGE_LEAD: "Leads change projects and reviews their effort reports",
    Role.MANAGER_CHANGE: "Manages resources, projects and the submission overview",
    Role.BUSINESS_CONTROLLER: "Follows reporting and weekly submissions",
    Role.ADMIN: "Full system access including user and role management",
}

PERMISSION_DISPLAY_NAMES = {
    P.TIME_LOGGING: "Time Logging",
    P.REPORTS: "Reports",
    P.CHANGE_LEAD_REPORTS: "Change Lead Reports",
    P.RESOURCE_MANAGEMENT: "Resource Management",
    P.PROJECT_MANAGEMENT: "Project Management",
    P.USER_MANAGEMENT: "User Management",
    P.SYSTEM_ADMIN: "System Administration",
    P.DASHBOARD: "Dashboard",
    P.CALENDAR: "Calendar",
    P.SUBMISSION_OVERVIEW: "Submission Overview",
    P.SETTINGS: "Settings",
    P.ROLE_MANAGEMENT: "Role Management",
}

PERMISSION_CATEGORIES = {
    "core": (P.TIME_LOGGING, P.DASHBOARD, P.CALENDAR),
    "reporting": (P.REPORTS, P.CHANGE_LEAD_REPORTS),
    "management": (P.RESOURCE_MANAGEMENT, P.PROJECT_MANAGEMENT, P.SUBMISSION_OVERVIEW),
    "administration": (P.USER_MANAGEMENT, P.SYSTEM_ADMIN, P.SETTINGS, P.ROLE_MANAGEMENT),
}


def _value(item) -> str:
    # str-enum members hash by name, so compare on the plain value
    return item.value if isinstance(item, enum.Enum) else str(item)


def _values(items: Optional[Iterable]) -> frozenset[str]:
    return frozenset(_value(i) for i in (items or ()))


def is_known_role(role) -> bool:
    return _value(role) in {r.value for r in Role}


def permissions_for_role(role) -> frozenset[str]:
    try:
        return _values(ROLE_PERMISSIONS[Role(_value(role))])
    except ValueError:
        return frozenset()


def permissions_for_roles(roles: Iterable) -> frozenset[str]:
    granted: set[str] = set()
    for role in roles or ():
        granted |= permissions_for_role(role)
    return frozenset(granted)


@dataclass(frozen=True)
class Principal:
    """The authenticated caller as RBAC sees it."""

    user_id: Any = None
    resource_id: Optional[int] = None
    email: Optional[str] = None
    roles: frozenset[str] = field(default_factory=frozenset)
    permissions: frozenset[str] = field(default_factory=frozenset)

    def __post_init__(self):
        object.__setattr__(self, "roles", _values(self.roles))
        if not self.permissions:
            object.__setattr__(self, "permissions", permissions_for_roles(self.roles))
        else:
            object.__setattr__(self, "permissions", _values(self.permissions))

    @classmethod
    def from_roles(cls, roles: Iterable, **kwargs) -> "Principal":
        return cls(roles=roles, **kwargs)


def _roles_of(user) -> frozenset[str]:
    if user is None:
        return frozenset()
    roles = user.get("roles") if isinstance(user, dict) else getattr(user, "roles", None)
    return _values(roles)


def _permissions_of(user) -> frozenset[str]:
    if user is None:
        return frozenset()
    perms = user.get("permissions") if isinstance(user, dict) else getattr(user, "permissions", None)
    if perms is None:
        return permissions_for_roles(_roles_of(user))
    return _values(perms)


# ── Predicates ──


def has_permission(user, permission) -> bool:
    return _value(permission) in _permissions_of(user)


def has_role(user, role) -> bool:
    return _value(role) in _roles_of(user)


def has_any_role(user, roles: Iterable) -> bool:
    return bool(_roles_of(user) & _values(roles))


def has_all_roles(user, roles: Iterable) -> bool:
    return _values(roles) <= _roles_of(user)


def has_any_permission(user, permissions: Iterable) -> bool:
    return bool(_permissions_of(user) & _values(permissions))


def has_all_permissions(user, permissions: Iterable) -> bool:
    return _values(permissions) <= _permissions_of(user)


# ── Access table ──


@dataclass(frozen=True)
class AccessRule:
    label: str
    path: Optional[str] = None
    roles: tuple = ()
    permissions: tuple = ()
    require_all: bool = False
    in_navigation: bool = False


def can_access_route(route, user) -> bool:
    """Every declared dimension must pass; require_all picks AND over OR within one."""
    if isinstance(route, dict):
        roles = route.get("roles") or ()
        permissions = route.get("permissions") or ()
        require_all = bool(route.get("require_all", route.get("requireAll", False)))
    else:
        roles, permissions, require_all = route.roles, route.permissions, route.require_all

    if roles:
        ok = has_all_roles(user, roles) if require_all else has_any_role(user, roles)
        if not ok:
            return False
    if permissions:
        ok = has_all_permissions(user, permissions) if require_all else has_any_permission(user, permissions)
        if not ok:
            return False
    return True


ACCESS_RULES: dict[str, AccessRule] = {
    # pages, in sidebar order
    "dashboard": AccessRule("Dashboard", "/dashboard", permissions=(P.DASHBOARD,), in_navigation=True),
    "time_logging": AccessRule("Time Logging", "/time-logging", permissions=(P.TIME_LOGGING,), in_navigation=True),
    "projects": AccessRule("Projects", "/projects", permissions=(P.PROJECT_MANAGEMENT,), in_navigation=True),
    "resources": AccessRule("Resources", "/resources", permissions=(P.RESOURCE_MANAGEMENT,), in_navigation=True),
    "calendar": AccessRule("Calendar", "/calendar", permissions=(P.CALENDAR,), in_navigation=True),
    "reports": AccessRule("Reports", "/reports", permissions=(P.REPORTS,), in_navigation=True),
    "change_lead_reports": AccessRule(
        "Change Lead Reports", "/change-lead-reports", permissions=(P.CHANGE_LEAD_REPORTS,), in_navigation=True,
    ),
    "submission_overview": AccessRule(
        "Submission Overview", "/submission-overview", permissions=(P.SUBMISSION_OVERVIEW,), in_navigation=True,
    ),
    "users": AccessRule(
        "User Management", "/users", roles=(Role.ADMIN,), permissions=(P.USER_MANAGEMENT,), in_navigation=True,
    ),
    "settings": AccessRule("Settings", "/settings", permissions=(P.SETTINGS,), in_navigation=True),
    "admin": AccessRule("Administration", "/admin", roles=(Role.ADMIN,), in_navigation=True),

    # API endpoints
    "resources.read": AccessRule("Read resources", permissions=(P.RESOURCE_MANAGEMENT, P.DASHBOARD)),
    "resources.write": AccessRule("Edit resources", permissions=(P.RESOURCE_MANAGEMENT,)),
    "resources.delete": AccessRule(
        "Delete resources", roles=(Role.ADMIN, Role.MANAGER_CHANGE), permissions=(P.RESOURCE_MANAGEMENT,),
    ),
    "projects.read": AccessRule("Read projects", permissions=(P.PROJECT_MANAGEMENT, P.DASHBOARD)),
    "projects.write": AccessRule("Edit projects", permissions=(P.PROJECT_MANAGEMENT,)),
    "projects.delete": AccessRule(
        "Delete projects", roles=(Role.ADMIN, Role.MANAGER_CHANGE), permissions=(P.PROJECT_MANAGEMENT,),
    ),
    "allocations.read": AccessRule(
        "Read allocations", permissions=(P.PROJECT_MANAGEMENT, P.RESOURCE_MANAGEMENT, P.DASHBOARD),
    ),
    "allocations.write": AccessRule("Edit allocations", permissions=(P.PROJECT_MANAGEMENT,)),
    "time.log": AccessRule("Log time", permissions=(P.TIME_LOGGING,)),
    "submissions.review": AccessRule("Review submissions", permissions=(P.SUBMISSION_OVERVIEW,)),
    "dashboard.read": AccessRule("Dashboard data", permissions=(P.DASHBOARD, P.REPORTS)),
    "rbac.read": AccessRule("Read user roles", permissions=(P.USER_MANAGEMENT, P.ROLE_MANAGEMENT)),
    "users.manage": AccessRule("Manage users", permissions=(P.USER_MANAGEMENT,)),
    "departments.read": AccessRule(
        "Read departments", permissions=(P.RESOURCE_MANAGEMENT, P.DASHBOARD, P.SETTINGS),
    ),
    "rbac.manage": AccessRule("Change user roles", permissions=(P.ROLE_MANAGEMENT,)),
}


def can_access(key: str, user) -> bool:
    rule = ACCESS_RULES.get(key)
    if rule is None:
        return False
    return can_access_route(rule, user)


def accessible_navigation(user) -> list[tuple[str, AccessRule]]:
    return [
        (key, rule)
        for key, rule in ACCESS_RULES.items()
        if rule.in_navigation and can_access_route(rule, user)
    ]
