from typing import Any, List

from pydantic import Field

from app.schemas.base import BaseSchema


class BulkImportRequest(BaseSchema):
    """Already-parsed CSV rows.

    Rows stay loosely typed so one bad row is reported instead of rejecting
    the whole payload.
    """

    users: List[Any]


class BulkImportRowError(BaseSchema):
    row: int  # 1-based, in input order
    email: str
    error: str


class BulkImportResult(BaseSchema):
    success_count: int = 0
    error_count: int = 0
    errors: List[BulkImportRowError] = Field(default_factory=list)
