from uuid import UUID
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.auth import get_current_admin, get_current_email
from app.database.database import get_db
from app.models.models import User
from app.schemas.user_schemas import (
    UserCreate,
    UserLoginResponse,
    UserResponse,
    UserRoleResponse,
    UserRoleUpdate,
)
from app.services import user_service


router = APIRouter(prefix="/users", tags=["Users"])


@router.post("", status_code=status.HTTP_200_OK)
async def create_user(
    user_data: UserCreate,
    db: AsyncSession = Depends(get_db),
) -> UserLoginResponse:
    """
    Register a user the first time they log in. Returning users get a
    message and their existing record.
    """
    return await user_service.create_user(db=db, user_data=user_data)


@router.get("", status_code=status.HTTP_200_OK)
async def get_users(
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    search_text: str | None = Query(None, alias="searchText"),
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(get_current_admin),
) -> list[UserResponse]:
    return await user_service.get_users(
        db=db, skip=skip, limit=limit, search_text=search_text
    )


@router.patch("/{user_id}/role", status_code=status.HTTP_200_OK)
async def update_user_role(
    user_id: UUID,
    data: UserRoleUpdate,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(get_current_admin),
) -> UserResponse:
    """Approve a user as admin, or remove their admin role."""
    return await user_service.update_user_role(
        db=db, user_id=user_id, approval_status=data.approval_status
    )


@router.get("/{email}/role", status_code=status.HTTP_200_OK)
async def get_user_role(
    email: str,
    db: AsyncSession = Depends(get_db),
    current_email: str = Depends(get_current_email),
) -> UserRoleResponse:
    return await user_service.get_user_role(db=db, email=email)
