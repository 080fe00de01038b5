"""Authentication endpoints - signup, verification, sessions and passwords."""

from fastapi import APIRouter, status
from starlette.requests import Request

from src.teamledger.api.dependencies import AuthServiceDep, CurrentIdentity
from src.teamledger.core.config import get_settings
from src.teamledger.core.rate_limit import limiter
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
from src.teamledger.schemas.organization import OrganizationWithRoleRead
from src.teamledger.schemas.user import UserRead

router = APIRouter(prefix="/auth", tags=["auth"])

# Same answer whether or not the email is registered
CODE_SENT_MESSAGE = "If an account exists for this email, a code has been sent"


def _auth_limit() -> str:
    return get_settings().auth_rate_limit


def _login_limit() -> str:
    return get_settings().login_rate_limit


@router.post(
    "/signup",
    response_model=SignupResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Invalid invite token"},
        409: {"description": "Email already registered"},
    },
)
@limiter.limit(_auth_limit)
async def signup(
    request: Request, data: SignupRequest, service: AuthServiceDep
) -> SignupResponse:
    """Create an account. Returns no tokens until the email is verified."""
    result = await service.signup(
        email=data.email,
        password=data.password,
        name=data.name,
        organization_name=data.organization_name,
        invite_token=data.invite_token,
    )
    return SignupResponse(
        user=UserRead.model_validate(result.user),
        organization_id=result.organization_id,
    )


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={401: {"description": "Invalid credentials or email not verified"}},
)
@limiter.limit(_login_limit)
async def login(request: Request, data: LoginRequest, service: AuthServiceDep) -> LoginResponse:
    result = await service.login(data.email, data.password)
    return LoginResponse(
        access_token=result.tokens.access_token,
        refresh_token=result.tokens.refresh_token,
        user=UserRead.model_validate(result.user),
        organizations=[
            OrganizationWithRoleRead.model_validate({**org.model_dump(), "role": role})
            for org, role in result.organizations
        ],
    )


@router.post(
    "/verify-email",
    response_model=SessionResponse,
    responses={400: {"description": "Invalid or expired code"}},
)
@limiter.limit(_auth_limit)
async def verify_email(
    request: Request, data: VerifyEmailRequest, service: AuthServiceDep
) -> SessionResponse:
    result = await service.verify_email(data.email, data.code)
    return SessionResponse(
        access_token=result.tokens.access_token,
        refresh_token=result.tokens.refresh_token,
        user=UserRead.model_validate(result.user),
    )


@router.post("/resend-otp", response_model=MessageResponse)
@limiter.limit(_auth_limit)
async def resend_otp(
    request: Request, data: ResendOtpRequest, service: AuthServiceDep
) -> MessageResponse:
    await service.resend_otp(data.email, data.type)
    return MessageResponse(message=CODE_SENT_MESSAGE)


@router.post("/forgot-password", response_model=MessageResponse)
@limiter.limit(_auth_limit)
async def forgot_password(
    request: Request, data: ForgotPasswordRequest, service: AuthServiceDep
) -> MessageResponse:
    await service.forgot_password(data.email)
    return MessageResponse(message=CODE_SENT_MESSAGE)


@router.post(
    "/reset-password",
    response_model=MessageResponse,
    responses={400: {"description": "Invalid or expired code"}},
)
@limiter.limit(_auth_limit)
async def reset_password(
    request: Request, data: ResetPasswordRequest, service: AuthServiceDep
) -> MessageResponse:
    await service.reset_password(data.email, data.code, data.new_password)
    return MessageResponse(message="Password has been reset. Please log in again")


@router.post(
    "/refresh-token",
    response_model=TokenResponse,
    responses={401: {"description": "Invalid, expired or revoked refresh token"}},
)
@limiter.limit(_auth_limit)
async def refresh_token(
    request: Request, data: RefreshRequest, service: AuthServiceDep
) -> TokenResponse:
    """Rotate the refresh token. The presented token is revoked."""
    tokens = await service.refresh_tokens(data.refresh_token)
    return TokenResponse(access_token=tokens.access_token, refresh_token=tokens.refresh_token)


@router.post("/logout", response_model=MessageResponse)
async def logout(data: LogoutRequest, service: AuthServiceDep) -> MessageResponse:
    await service.logout(data.refresh_token)
    return MessageResponse(message="Logged out")


@router.post("/logout-all", response_model=LogoutAllResponse)
async def logout_all(identity: CurrentIdentity, service: AuthServiceDep) -> LogoutAllResponse:
    revoked = await service.logout_all(identity.user_id)
    return LogoutAllResponse(sessions_revoked=revoked)


@router.post(
    "/change-password",
    response_model=MessageResponse,
    responses={401: {"description": "Current password is incorrect"}},
)
async def change_password(
    data: ChangePasswordRequest, identity: CurrentIdentity, service: AuthServiceDep
) -> MessageResponse:
    await service.change_password(identity.user_id, data.current_password, data.new_password)
    return MessageResponse(message="Password changed. Please log in again")


@router.get("/me", response_model=UserRead)
async def me(identity: CurrentIdentity, service: AuthServiceDep) -> UserRead:
    user = await service.me(identity.user_id)
    return UserRead.model_validate(user)
