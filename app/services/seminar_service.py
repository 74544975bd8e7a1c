"""Seminar creation and ownership checks."""

from typing import Iterable, List, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.seminar import Seminar
from app.models.user import Role, User
from app.schemas.seminar import SeminarCreate
from core.config import config
from core.exceptions.base import ForbiddenException, NotFoundException
from core.logging import get_logger

logger = get_logger(__name__)


class SeminarService:
    """Service for seminar operations."""

    def __init__(self, db_session: AsyncSession):
        self.db_session = db_session

    async def create_seminar(self, teacher: User, data: SeminarCreate) -> Seminar:
        seminar = Seminar(
            **data.model_dump(exclude={"capacity"}),
            capacity=data.capacity or config.DEFAULT_CLASS_CAPACITY,
            teacher_id=teacher.id,
        )
        self.db_session.add(seminar)
        await self.db_session.commit()
        await self.db_session.refresh(seminar)
        logger.info(f"Seminar {seminar.id} created by teacher {teacher.id}")
        return seminar

    async def get_seminar(self, class_id: str) -> Seminar:
        seminar = await Seminar.get_by_id(self.db_session, class_id)
        if not seminar:
            raise NotFoundException(message="Seminar not found")
        return seminar

    async def get_owned_seminar(
        self,
        user: User,
        class_id: str,
        also_allowed: Iterable[Role] = (Role.ADMIN,),
    ) -> Seminar:
        """Seminar the user teaches, or any seminar for the roles in ``also_allowed``."""
        seminar = await self.get_seminar(class_id)
        if seminar.teacher_id != user.id and user.role not in also_allowed:
            raise ForbiddenException(message="Not authorized for this seminar")
        return seminar

    async def list_active(self) -> Sequence[Seminar]:
        return await Seminar.get_active(self.db_session)

    async def list_for_teacher(self, teacher_id: str) -> Sequence[Seminar]:
        return await Seminar.get_by_teacher(self.db_session, teacher_id)

    async def get_ids_by_teacher(self, teacher_id: str) -> List[str]:
        return await Seminar.get_ids_by_teacher(self.db_session, teacher_id)
