"""Static role to permission matrix.

Every role lists its permissions explicitly; there is no inheritance between
roles. The hierarchy weights are used only for "at least this role" checks
and for the role-mutation guardrails in the membership services.
"""

from collections.abc import Iterable
from enum import Enum


class Role(str, Enum):
    """Role of a user within one organization."""

    VIEWER = "viewer"
    MEMBER = "member"
    MANAGER = "manager"
    ADMIN = "admin"
    OWNER = "owner"
    ACCOUNTANT = "accountant"


class Permission(str, Enum):
    """Namespaced "<resource>:<action>" permission tokens."""

    # Organization
    ORG_READ = "org:read"
    ORG_UPDATE = "org:update"
    ORG_DELETE = "org:delete"
    ORG_INVITE = "org:invite"
    ORG_REMOVE_MEMBER = "org:remove_member"
    ORG_MANAGE_ROLES = "org:manage_roles"
    ORG_TRANSFER_OWNERSHIP = "org:transfer_ownership"

    # Projects
    PROJECT_CREATE = "project:create"
    PROJECT_READ = "project:read"
    PROJECT_UPDATE = "project:update"
    PROJECT_DELETE = "project:delete"
    PROJECT_ARCHIVE = "project:archive"
    PROJECT_MANAGE_MEMBERS = "project:manage_members"

    # Tasks
    TASK_CREATE = "task:create"
    TASK_READ = "task:read"
    TASK_UPDATE = "task:update"
    TASK_DELETE = "task:delete"
    TASK_ASSIGN = "task:assign"
    TASK_CHANGE_STATUS = "task:change_status"

    # Project expenses
    EXPENSE_CREATE = "expense:create"
    EXPENSE_READ = "expense:read"
    EXPENSE_UPDATE = "expense:update"
    EXPENSE_DELETE = "expense:delete"
    EXPENSE_APPROVE = "expense:approve"
    EXPENSE_REJECT = "expense:reject"

    # Audit trail
    AUDIT_READ = "audit:read"

    # Organization finance
    ORG_FINANCE_READ = "org_finance:read"
    ORG_FINANCE_CREATE = "org_finance:create"
    ORG_FINANCE_UPDATE = "org_finance:update"
    ORG_FINANCE_DELETE = "org_finance:delete"
    ORG_FINANCE_REQUEST_DELETE = "org_finance:request_delete"
    ORG_FINANCE_APPROVE = "org_finance:approve"
    ORG_FINANCE_REPORT = "org_finance:report"
    ORG_FINANCE_MANAGE_ACCOUNTS = "org_finance:manage_accounts"


class CheckMode(str, Enum):
    """How a set of permissions is combined."""

    ALL = "all"
    ANY = "any"


P = Permission

ROLE_PERMISSIONS: dict[Role, frozenset[Permission]] = {
    Role.VIEWER: frozenset(
        {
            P.ORG_READ,
            P.PROJECT_READ,
            P.TASK_READ,
            P.EXPENSE_READ,
            P.ORG_FINANCE_READ,
        }
    ),
    Role.MEMBER: frozenset(
        {
            P.ORG_READ,
            P.PROJECT_READ,
            P.PROJECT_CREATE,
            P.TASK_READ,
            P.TASK_CREATE,
            P.TASK_UPDATE,
            P.TASK_CHANGE_STATUS,
            P.EXPENSE_READ,
            P.EXPENSE_CREATE,
            P.EXPENSE_UPDATE,
            P.ORG_FINANCE_READ,
        }
    ),
    Role.MANAGER: frozenset(
        {
            P.ORG_READ,
            P.PROJECT_READ,
            P.PROJECT_CREATE,
            P.PROJECT_UPDATE,
            P.PROJECT_ARCHIVE,
            P.PROJECT_MANAGE_MEMBERS,
            P.TASK_READ,
            P.TASK_CREATE,
            P.TASK_UPDATE,
            P.TASK_DELETE,
            P.TASK_ASSIGN,
            P.TASK_CHANGE_STATUS,
            P.EXPENSE_READ,
            P.EXPENSE_CREATE,
            P.EXPENSE_UPDATE,
            P.EXPENSE_DELETE,
            P.EXPENSE_APPROVE,
            P.EXPENSE_REJECT,
            P.ORG_FINANCE_READ,
            P.ORG_FINANCE_CREATE,
            P.ORG_FINANCE_UPDATE,
            P.ORG_FINANCE_REQUEST_DELETE,
            P.ORG_FINANCE_REPORT,
        }
    ),
    Role.ADMIN: frozenset(
        {
            P.ORG_READ,
            P.ORG_UPDATE,
            P.ORG_INVITE,
            P.ORG_REMOVE_MEMBER,
            P.ORG_MANAGE_ROLES,
            P.AUDIT_READ,
            P.PROJECT_READ,
            P.PROJECT_CREATE,
            P.PROJECT_UPDATE,
            P.PROJECT_DELETE,
            P.PROJECT_ARCHIVE,
            P.PROJECT_MANAGE_MEMBERS,
            P.TASK_READ,
            P.TASK_CREATE,
            P.TASK_UPDATE,
            P.TASK_DELETE,
            P.TASK_ASSIGN,
            P.TASK_CHANGE_STATUS,
            P.EXPENSE_READ,
            P.EXPENSE_CREATE,
            P.EXPENSE_UPDATE,
            P.EXPENSE_DELETE,
            P.EXPENSE_APPROVE,
            P.EXPENSE_REJECT,
            P.ORG_FINANCE_READ,
            P.ORG_FINANCE_CREATE,
            P.ORG_FINANCE_UPDATE,
            P.ORG_FINANCE_DELETE,
            P.ORG_FINANCE_REQUEST_DELETE,
            P.ORG_FINANCE_APPROVE,
            P.ORG_FINANCE_REPORT,
            P.ORG_FINANCE_MANAGE_ACCOUNTS,
        }
    ),
    Role.OWNER: frozenset(
        {
            P.ORG_READ,
            P.ORG_UPDATE,
            P.ORG_DELETE,
            P.ORG_INVITE,
            P.ORG_REMOVE_MEMBER,
            P.ORG_MANAGE_ROLES,
            P.ORG_TRANSFER_OWNERSHIP,
            P.AUDIT_READ,
            P.PROJECT_READ,
            P.PROJECT_CREATE,
            P.PROJECT_UPDATE,
            P.PROJECT_DELETE,
            P.PROJECT_ARCHIVE,
            P.PROJECT_MANAGE_MEMBERS,
            P.TASK_READ,
            P.TASK_CREATE,
            P.TASK_UPDATE,
            P.TASK_DELETE,
            P.TASK_ASSIGN,
            P.TASK_CHANGE_STATUS,
            P.EXPENSE_READ,
            P.EXPENSE_CREATE,
            P.EXPENSE_UPDATE,
            P.EXPENSE_DELETE,
            P.EXPENSE_APPROVE,
            P.EXPENSE_REJECT,
            P.ORG_FINANCE_READ,
            P.ORG_FINANCE_CREATE,
            P.ORG_FINANCE_UPDATE,
            P.ORG_FINANCE_DELETE,
            P.ORG_FINANCE_REQUEST_DELETE,
            P.ORG_FINANCE_APPROVE,
            P.ORG_FINANCE_REPORT,
            P.ORG_FINANCE_MANAGE_ACCOUNTS,
        }
    ),
    # Finance-only specialist: sees no project or task data
    Role.ACCOUNTANT: frozenset(
        {
            P.ORG_READ,
            P.EXPENSE_READ,
            P.ORG_FINANCE_READ,
            P.ORG_FINANCE_CREATE,
            P.ORG_FINANCE_UPDATE,
            P.ORG_FINANCE_DELETE,
            P.ORG_FINANCE_REQUEST_DELETE,
            P.ORG_FINANCE_APPROVE,
            P.ORG_FINANCE_REPORT,
        }
    ),
}

ROLE_WEIGHTS: dict[Role, int] = {
    Role.VIEWER: 0,
    Role.MEMBER: 1,
    Role.MANAGER: 2,
    Role.ADMIN: 3,
    Role.OWNER: 4,
    Role.ACCOUNTANT: 5,
}

# Roles on the linear VIEWER..OWNER ladder. Weight comparisons are only
# meaningful between these.
HIERARCHY_ROLES: frozenset[Role] = frozenset(
    {Role.VIEWER, Role.MEMBER, Role.MANAGER, Role.ADMIN, Role.OWNER}
)

# Rank used when one member changes or removes another. ACCOUNTANT sits
# outside the linear hierarchy and compares as a MANAGER here.
MANAGEMENT_RANKS: dict[Role, int] = {
    **{role: weight for role, weight in ROLE_WEIGHTS.items() if role is not Role.ACCOUNTANT},
    Role.ACCOUNTANT: ROLE_WEIGHTS[Role.MANAGER],
}


def _check_tables() -> None:
    roles = set(Role)
    for name, table in (
        ("ROLE_PERMISSIONS", ROLE_PERMISSIONS),
        ("ROLE_WEIGHTS", ROLE_WEIGHTS),
        ("MANAGEMENT_RANKS", MANAGEMENT_RANKS),
    ):
        if set(table) != roles:
            missing = sorted(r.value for r in roles - set(table))
            raise RuntimeError(f"{name} does not cover every role (missing: {missing})")
    if len(set(ROLE_WEIGHTS.values())) != len(ROLE_WEIGHTS):
        raise RuntimeError("ROLE_WEIGHTS must assign a distinct weight to every role")


_check_tables()


def _coerce_role(role: Role | str) -> Role | None:
    try:
        return Role(role)
    except ValueError:
        return None


def _coerce_permission(permission: Permission | str) -> Permission | None:
    try:
        return Permission(permission)
    except ValueError:
        return None


def has_permission(role: Role | str, permission: Permission | str) -> bool:
    """True when `role` grants `permission`. Unknown values are never granted."""
    resolved_role = _coerce_role(role)
    resolved_permission = _coerce_permission(permission)
    if resolved_role is None or resolved_permission is None:
        return False
    return resolved_permission in ROLE_PERMISSIONS[resolved_role]


def require_all(role: Role | str, permissions: Iterable[Permission | str]) -> bool:
    return all(has_permission(role, p) for p in permissions)


def require_any(role: Role | str, permissions: Iterable[Permission | str]) -> bool:
    return any(has_permission(role, p) for p in permissions)


def check_permissions(
    role: Role | str,
    permissions: Iterable[Permission | str],
    mode: CheckMode = CheckMode.ALL,
) -> bool:
    if mode is CheckMode.ANY:
        return require_any(role, permissions)
    return require_all(role, permissions)


def permissions_for(role: Role | str) -> frozenset[Permission]:
    resolved = _coerce_role(role)
    return ROLE_PERMISSIONS[resolved] if resolved is not None else frozenset()


def role_weight(role: Role | str) -> int:
    """Hierarchy weight of `role`.

    Raises:
        ValueError: If `role` is not a known role.
    """
    return ROLE_WEIGHTS[Role(role)]


def has_minimum_role(role: Role | str, min_role: Role | str) -> bool:
    """True when `role` weighs at least `min_role`. Unknown roles never qualify.

    Only meaningful between VIEWER and OWNER; ACCOUNTANT is a parallel role.
    """
    resolved = _coerce_role(role)
    if resolved is None:
        return False
    return role_weight(resolved) >= role_weight(min_role)


def management_rank(role: Role | str) -> int:
    """Rank used by role-mutation guardrails.

    Raises:
        ValueError: If `role` is not a known role.
    """
    return MANAGEMENT_RANKS[Role(role)]
