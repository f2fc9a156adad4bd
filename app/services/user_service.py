from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.models import User, utc_now
from app.schemas.status_schema import ApprovalStatus, UserRole
from app.schemas.user_schemas import (
    UserCreate,
    UserLoginResponse,
    UserResponse,
    UserRoleResponse,
)
from app.utils.logger_config import setup_logger

logger = setup_logger()


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


async def create_user(db: AsyncSession, user_data: UserCreate) -> UserLoginResponse:
    """
    Register a user on first login.

    Returning users are not duplicated; their last login time is refreshed.
    """
    existing_user = await get_user_by_email(db, user_data.email)
    if existing_user:
        existing_user.last_login_at = utc_now()
        await db.commit()
        return UserLoginResponse(
            message="existing user logging in.",
            created=False,
            user=UserResponse.model_validate(existing_user),
        )

    user = User(
        email=user_data.email,
        display_name=user_data.display_name,
        photo_url=user_data.photo_url,
        role=UserRole.USER.value,
        last_login_at=utc_now(),
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)

    logger.info(f"User {user.email} registered")

    return UserLoginResponse(
        message="user created.", created=True, user=UserResponse.model_validate(user)
    )


async def get_users(
    db: AsyncSession, skip: int = 0, limit: int = 20, search_text: str | None = None
) -> list[UserResponse]:
    stmt = select(User)
    if search_text:
        stmt = stmt.where(User.display_name.ilike(f"%{search_text}%"))
    stmt = stmt.order_by(User.created_at.desc()).offset(skip).limit(limit)

    result = await db.execute(stmt)
    return [UserResponse.model_validate(user) for user in result.scalars().all()]


async def update_user_role(
    db: AsyncSession, user_id: UUID, approval_status: ApprovalStatus
) -> UserResponse:
    """approved -> admin, removed -> back to a plain user"""
    user = await db.get(User, user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="User not found"
        )

    user.role = (
        UserRole.ADMIN.value
        if approval_status == ApprovalStatus.APPROVED
        else UserRole.USER.value
    )
    await db.commit()
    await db.refresh(user)

    logger.info(f"User {user.email} role set to {user.role}")
    return UserResponse.model_validate(user)


async def get_user_role(db: AsyncSession, email: str) -> UserRoleResponse:
    user = await get_user_by_email(db, email)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="User not found"
        )
    return UserRoleResponse(role=user.role)
