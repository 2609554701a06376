from pydantic import BaseModel, EmailStr

from app.auth.roles import UserRole


class UserOut(BaseModel):
    id: str
    email: str
    first_name: str
    last_name: str
    role: str
    role_label: str
    role_level: int
    status: str
    dealer_id: str | None
    is_admin: bool

    model_config = {"from_attributes": True}


# ── Login ────────────────────────────────────────────────────

class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    user: UserOut


# ── Token refresh ────────────────────────────────────────────

class RefreshRequest(BaseModel):
    refresh_token: str


# ── Role catalogue ───────────────────────────────────────────

class RoleOut(BaseModel):
    value: UserRole
    level: int
    label: str
    badge_color: str
    assignable: bool
