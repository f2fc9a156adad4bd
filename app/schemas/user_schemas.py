from datetime import datetime
from uuid import UUID
from pydantic import EmailStr, Field

from app.schemas.schemas import CamelModel
from app.schemas.status_schema import ApprovalStatus, UserRole


class UserCreate(CamelModel):
    email: EmailStr
    display_name: str | None = None
    photo_url: str | None = Field(default=None, alias="photoURL")


class UserResponse(CamelModel):
    id: UUID
    email: str
    display_name: str | None = None
    photo_url: str | None = Field(default=None, alias="photoURL")
    role: UserRole
    created_at: datetime
    last_login_at: datetime | None = None


class UserLoginResponse(CamelModel):
    message: str
    created: bool
    user: UserResponse


class UserRoleUpdate(CamelModel):
    approval_status: ApprovalStatus


class UserRoleResponse(CamelModel):
    role: UserRole
