"""Repository for User entity."""

from sqlalchemy import func
from sqlmodel import select

from src.teamledger.models import User
from src.teamledger.models.base import utc_now
from src.teamledger.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Credential store. Email lookups are case-insensitive."""

    model = User

    async def get_by_email(self, email: str) -> User | None:
        result = await self.session.execute(
            select(User).where(func.lower(User.email) == email.strip().lower())
        )
        return result.scalar_one_or_none()

    async def exists_by_email(self, email: str) -> bool:
        user = await self.get_by_email(email)
        return user is not None

    def mark_email_verified(self, user: User) -> User:
        """Flag the email as verified (one-way, no commit)."""
        now = utc_now()
        user.is_email_verified = True
        user.email_verified_at = now
        user.updated_at = now
        self.session.add(user)
        return user

    def set_password_hash(self, user: User, hashed_password: str) -> User:
        user.hashed_password = hashed_password
        user.updated_at = utc_now()
        self.session.add(user)
        return user
