from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr


class UserRead(BaseModel):
    id: UUID
    email: EmailStr
    name: str
    is_email_verified: bool
    created_at: datetime

    model_config = {"from_attributes": True}
