from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import Field

from app.models.seminar import SeminarStatus
from app.schemas.base import BaseSchema


class SeminarCreate(BaseSchema):
    """Schema for a teacher creating a seminar."""

    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    room: Optional[str] = Field(None, max_length=50)
    capacity: Optional[int] = Field(None, ge=1)
    hour: int = Field(1, ge=1, le=7)
    community_partner: Optional[str] = Field(None, max_length=200)
    notes: Optional[str] = None
    credits: Decimal = Field(Decimal("1.00"), ge=0)
    credit_type: str = Field("general", min_length=1, max_length=50)


class SeminarResponse(BaseSchema):
    id: str
    title: str
    description: Optional[str]
    room: Optional[str]
    capacity: int
    hour: int
    community_partner: Optional[str]
    notes: Optional[str]
    credits: float
    credit_type: str
    status: SeminarStatus
    rating: Optional[float]
    teacher_id: str
    created_at: datetime


class SeminarListResponse(BaseSchema):
    items: List[SeminarResponse]
    total: int
