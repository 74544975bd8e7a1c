from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_current_admin, get_current_staff, get_current_user
from app.models.user import Role, User
from app.schemas.bulk_import import BulkImportRequest, BulkImportResult
from app.schemas.profile import ProfileResponse
from app.schemas.user import (
    RoleChangeRequest,
    UserListResponse,
    UserResponse,
    UserUpdate,
)
from app.services.user_import_service import UserImportService
from app.services.user_service import UserService
from core.db import get_db
from core.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("/me", response_model=UserResponse)
async def get_me(
    current_user: User = Depends(get_current_user),
) -> UserResponse:
    return UserResponse.model_validate(current_user)


@router.put("/me", response_model=UserResponse)
async def update_me(
    data: UserUpdate,
    db_session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> UserResponse:
    user = await UserService(db_session).update_me(current_user, data)
    return UserResponse.model_validate(user)


@router.get("/me/profile", response_model=ProfileResponse)
async def get_my_profile(
    db_session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ProfileResponse:
    profile = await UserService(db_session).get_profile(current_user)
    return ProfileResponse.model_validate(profile)


@router.get("/", response_model=UserListResponse)
async def list_users(
    role: Role = Query(..., description="Role to list"),
    db_session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_staff),
) -> UserListResponse:
    """Active users of one role, ordered by display name. Staff only."""
    users = await UserService(db_session).list_by_role(role)
    return UserListResponse(
        items=[UserResponse.model_validate(u) for u in users],
        total=len(users),
    )


@router.put("/{user_id}/role", response_model=UserResponse)
async def change_role(
    user_id: str,
    data: RoleChangeRequest,
    db_session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_admin),
) -> UserResponse:
    user = await UserService(db_session).change_role(current_user, user_id, data.role)
    return UserResponse.model_validate(user)


@router.post("/bulk-import", response_model=BulkImportResult)
async def bulk_import_users(
    data: BulkImportRequest,
    db_session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> BulkImportResult:
    """
    Create accounts and profiles from parsed CSV rows. Admin only.

    Rows are processed in order; a failed row is reported and skipped.
    """
    logger.info(f"Bulk import of {len(data.users)} rows requested by {current_user.id}")
    return await UserImportService(db_session).import_users(current_user, data.users)
