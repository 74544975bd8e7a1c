"""Audit trail of administrative and attendance actions."""

from typing import Any, Dict, Optional
from uuid import uuid4

from sqlalchemy import JSON, String
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Mapped, mapped_column

from core.db import Base, TimestampMixin
from core.logging import get_logger

logger = get_logger(__name__)


class AuditLog(Base, TimestampMixin):
    """Append-only audit entry."""

    __tablename__ = "audit_logs"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid4())
    )
    user_id: Mapped[Optional[str]] = mapped_column(
        String(36), nullable=True, index=True
    )  # Actor
    action: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    resource_type: Mapped[str] = mapped_column(String(50), nullable=False)
    resource_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    details: Mapped[Dict[str, Any]] = mapped_column(JSON, default=dict, nullable=False)

    @classmethod
    async def record(
        cls,
        db_session: AsyncSession,
        user_id: Optional[str],
        action: str,
        resource_type: str,
        resource_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> Optional["AuditLog"]:
        """Write an audit entry. Failures are logged, never raised."""
        entry = cls(
            user_id=user_id,
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            details=details or {},
        )
        try:
            db_session.add(entry)
            await db_session.commit()
        except SQLAlchemyError as e:
            await db_session.rollback()
            logger.error(f"Failed to write audit log '{action}': {e}")
            return None
        return entry
