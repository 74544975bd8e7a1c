from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_current_teacher, get_current_user
from app.models.user import User
from app.schemas.seminar import SeminarCreate, SeminarListResponse, SeminarResponse
from app.services.seminar_service import SeminarService
from core.db import get_db
from core.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/seminars", tags=["Seminars"])


@router.post("/", response_model=SeminarResponse, status_code=status.HTTP_201_CREATED)
async def create_seminar(
    data: SeminarCreate,
    db_session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_teacher),
) -> SeminarResponse:
    """Create a seminar owned by the caller. Teacher or admin."""
    seminar = await SeminarService(db_session).create_seminar(current_user, data)
    return SeminarResponse.model_validate(seminar)


@router.get("/", response_model=SeminarListResponse)
async def list_active_seminars(
    db_session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> SeminarListResponse:
    seminars = await SeminarService(db_session).list_active()
    return SeminarListResponse(
        items=[SeminarResponse.model_validate(s) for s in seminars],
        total=len(seminars),
    )


@router.get("/mine", response_model=SeminarListResponse)
async def list_my_seminars(
    db_session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_teacher),
) -> SeminarListResponse:
    seminars = await SeminarService(db_session).list_for_teacher(current_user.id)
    return SeminarListResponse(
        items=[SeminarResponse.model_validate(s) for s in seminars],
        total=len(seminars),
    )


@router.get("/{class_id}", response_model=SeminarResponse)
async def get_seminar(
    class_id: str,
    db_session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> SeminarResponse:
    seminar = await SeminarService(db_session).get_seminar(class_id)
    return SeminarResponse.model_validate(seminar)
