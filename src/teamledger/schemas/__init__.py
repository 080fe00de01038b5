from src.teamledger.schemas.audit import AuditLogRead
from src.teamledger.schemas.auth import (
    ChangePasswordRequest,
    ForgotPasswordRequest,
    LoginRequest,
    LoginResponse,
    LogoutAllResponse,
    LogoutRequest,
    MessageResponse,
    RefreshRequest,
    ResendOtpRequest,
    ResetPasswordRequest,
    SessionResponse,
    SignupRequest,
    SignupResponse,
    TokenResponse,
    VerifyEmailRequest,
)
from src.teamledger.schemas.invite import (
    AcceptInviteResponse,
    InviteCreateRequest,
    InviteDetailsResponse,
    InviteRead,
    InviteTokenRequest,
)
from src.teamledger.schemas.organization import (
    MemberRead,
    MemberRoleUpdate,
    OrganizationCreate,
    OrganizationRead,
    OrganizationUpdate,
    OrganizationWithRoleRead,
    TransferOwnershipRequest,
)
from src.teamledger.schemas.pagination import PaginatedResponse
from src.teamledger.schemas.user import UserRead

__all__ = [
    # Audit
    "AuditLogRead",
    # Auth
    "ChangePasswordRequest",
    "ForgotPasswordRequest",
    "LoginRequest",
    "LoginResponse",
    "LogoutAllResponse",
    "LogoutRequest",
    "MessageResponse",
    "RefreshRequest",
    "ResendOtpRequest",
    "ResetPasswordRequest",
    "SessionResponse",
    "SignupRequest",
    "SignupResponse",
    "TokenResponse",
    "VerifyEmailRequest",
    # Invite
    "AcceptInviteResponse",
    "InviteCreateRequest",
    "InviteDetailsResponse",
    "InviteRead",
    "InviteTokenRequest",
    # Organization
    "MemberRead",
    "MemberRoleUpdate",
    "OrganizationCreate",
    "OrganizationRead",
    "OrganizationUpdate",
    "OrganizationWithRoleRead",
    "TransferOwnershipRequest",
    # Pagination
    "PaginatedResponse",
    # User
    "UserRead",
]
