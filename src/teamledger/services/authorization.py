"""Authorization gate - identity, organization context and permission checks.

Each stage short-circuits with a typed error:

1. authenticate: bearer access token -> Identity (Unauthenticated)
2. resolve_organization: X-Organization-ID header -> OrganizationContext
   (BadRequest for a missing/unknown organization, Forbidden for non-members)
3. require: role + permissions -> None (Forbidden)

The optional variants run the same logic but return None instead of raising.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from uuid import UUID

from src.teamledger.core.exceptions import (
    AppError,
    BadRequest,
    Forbidden,
    Unauthenticated,
)
from src.teamledger.core.logging import get_logger
from src.teamledger.core.permissions import (
    HIERARCHY_ROLES,
    CheckMode,
    Permission,
    Role,
    check_permissions,
    has_minimum_role,
)
from src.teamledger.core.security import TokenService, TokenType, extract_bearer_token
from src.teamledger.models import User
from src.teamledger.repositories import (
    MembershipRepository,
    OrganizationRepository,
    UserRepository,
)
from src.teamledger.services.membership_cache import MembershipCache

logger = get_logger(__name__)

AUTHORIZATION_HEADER = "authorization"
ORGANIZATION_HEADER = "x-organization-id"


@dataclass(frozen=True)
class Identity:
    """Authenticated caller."""

    user_id: UUID
    email: str
    user: User


@dataclass(frozen=True)
class OrganizationContext:
    """Caller's membership in the organization named by the request."""

    organization_id: UUID
    user_id: UUID
    role: Role
    from_cache: bool = False


def _get_header(headers: Mapping[str, str], name: str) -> str | None:
    value = headers.get(name)
    if value is not None:
        return value
    for key, candidate in headers.items():
        if key.lower() == name:
            return candidate
    return None


class AuthorizationGate:
    """Stateless per request; holds process-wide collaborators."""

    def __init__(
        self,
        token_service: TokenService,
        user_repo: UserRepository,
        organization_repo: OrganizationRepository,
        membership_repo: MembershipRepository,
        membership_cache: MembershipCache,
    ):
        self.token_service = token_service
        self.user_repo = user_repo
        self.organization_repo = organization_repo
        self.membership_repo = membership_repo
        self.membership_cache = membership_cache

    async def authenticate(self, headers: Mapping[str, str]) -> Identity:
        token = extract_bearer_token(_get_header(headers, AUTHORIZATION_HEADER))
        if token is None:
            raise Unauthenticated("Missing or invalid authorization header")

        payload = self.token_service.verify(token, TokenType.ACCESS)
        if payload is None:
            raise Unauthenticated("Invalid or expired token")

        user = await self.user_repo.get_by_id(payload.user_id)
        if user is None:
            logger.info("Token subject no longer exists", user_id=str(payload.user_id))
            raise Unauthenticated("User not found")

        return Identity(user_id=user.id, email=user.email, user=user)

    async def authenticate_optional(self, headers: Mapping[str, str]) -> Identity | None:
        try:
            return await self.authenticate(headers)
        except Unauthenticated:
            return None

    async def resolve_organization(
        self, identity: Identity, headers: Mapping[str, str]
    ) -> OrganizationContext:
        raw_org_id = _get_header(headers, ORGANIZATION_HEADER)
        if not raw_org_id:
            raise BadRequest("Organization ID is required (X-Organization-ID header)")
        try:
            organization_id = UUID(raw_org_id.strip())
        except ValueError as e:
            raise BadRequest("Invalid organization ID") from e

        cached = await self.membership_cache.get(organization_id, identity.user_id)
        if cached is not None:
            return OrganizationContext(
                organization_id=organization_id,
                user_id=identity.user_id,
                role=cached.role,
                from_cache=True,
            )

        organization = await self.organization_repo.get_active(organization_id)
        if organization is None:
            raise BadRequest("Organization not found")

        membership = await self.membership_repo.get_membership(identity.user_id, organization_id)
        if membership is None:
            logger.info(
                "Organization access denied: not a member",
                organization_id=str(organization_id),
                user_id=str(identity.user_id),
            )
            raise Forbidden("You are not a member of this organization")

        role = Role(membership.role)
        await self.membership_cache.set(organization_id, identity.user_id, role)
        return OrganizationContext(
            organization_id=organization_id,
            user_id=identity.user_id,
            role=role,
        )

    async def resolve_organization_optional(
        self, identity: Identity | None, headers: Mapping[str, str]
    ) -> OrganizationContext | None:
        if identity is None:
            return None
        try:
            return await self.resolve_organization(identity, headers)
        except AppError:
            return None

    @staticmethod
    def authorize(
        role: Role,
        permissions: Iterable[Permission],
        mode: CheckMode = CheckMode.ALL,
    ) -> bool:
        return check_permissions(role, permissions, mode)

    def require(
        self,
        role: Role,
        permissions: Iterable[Permission],
        mode: CheckMode = CheckMode.ALL,
    ) -> None:
        required = list(permissions)
        if not self.authorize(role, required, mode):
            logger.info(
                "Permission denied",
                role=role.value,
                required=[p.value for p in required],
                mode=mode.value,
            )
            raise Forbidden("Insufficient permissions")

    @staticmethod
    def require_role(role: Role, *allowed: Role) -> None:
        if role not in allowed:
            names = ", ".join(r.value for r in allowed)
            raise Forbidden(f"This action requires one of the roles: {names}")

    @staticmethod
    def require_minimum_role(role: Role, min_role: Role) -> None:
        # ACCOUNTANT and any other off-ladder role only satisfies itself
        if role is min_role:
            return
        if role not in HIERARCHY_ROLES or not has_minimum_role(role, min_role):
            raise Forbidden(f"This action requires at least the {min_role.value} role")
