"""Pydantic schemas for dealer-portal user management."""

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field

from app.auth.roles import UserRole
from app.models.user import UserStatus


class UserCreate(BaseModel):
    """Create a user. Tenant roles need a dealer; platform roles must not have one."""
    email: EmailStr
    password: str = Field(..., min_length=8)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    role: UserRole = UserRole.DEALER_USER
    dealer_id: str | None = None


class UserSummary(BaseModel):
    id: str
    email: str
    first_name: str
    last_name: str
    role: UserRole
    status: UserStatus
    dealer_id: str | None
    created_at: datetime

    model_config = {"from_attributes": True}
