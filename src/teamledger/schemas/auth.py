from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator

from src.teamledger.core.validators import validate_password_strength
from src.teamledger.models import OtpType
from src.teamledger.schemas.organization import OrganizationWithRoleRead
from src.teamledger.schemas.user import UserRead


class SignupRequest(BaseModel):
    """Signup creates an unverified user plus a workspace, unless joining by invite."""

    email: EmailStr
    password: str = Field(min_length=8, max_length=100)
    name: str = Field(min_length=1, max_length=100)
    organization_name: str | None = Field(default=None, min_length=1, max_length=100)
    invite_token: str | None = Field(default=None, min_length=16, max_length=128)

    @field_validator("password")
    @classmethod
    def check_password_strength(cls, v: str) -> str:
        return validate_password_strength(v)


class SignupResponse(BaseModel):
    user: UserRead
    organization_id: UUID | None = None
    message: str = "Please check your email for the verification code"


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=100)


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class SessionResponse(TokenResponse):
    user: UserRead


class LoginResponse(SessionResponse):
    organizations: list[OrganizationWithRoleRead] = []


class VerifyEmailRequest(BaseModel):
    email: EmailStr
    code: str = Field(min_length=4, max_length=10, pattern=r"^\d+$")


class ResendOtpRequest(BaseModel):
    email: EmailStr
    type: OtpType = OtpType.EMAIL_VERIFICATION


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    email: EmailStr
    code: str = Field(min_length=4, max_length=10, pattern=r"^\d+$")
    new_password: str = Field(min_length=8, max_length=100)

    @field_validator("new_password")
    @classmethod
    def check_password_strength(cls, v: str) -> str:
        return validate_password_strength(v)


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(min_length=1, max_length=100)
    new_password: str = Field(min_length=8, max_length=100)

    @field_validator("new_password")
    @classmethod
    def check_password_strength(cls, v: str) -> str:
        return validate_password_strength(v)


class RefreshRequest(BaseModel):
    refresh_token: str


class LogoutRequest(BaseModel):
    refresh_token: str


class LogoutAllResponse(BaseModel):
    message: str = "Logged out from all devices"
    sessions_revoked: int


class MessageResponse(BaseModel):
    message: str
