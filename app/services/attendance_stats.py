"""Attendance and credit aggregation.

Pure functions over records that were already fetched from the store. They
do no I/O and keep no state between calls, so every result can be rebuilt
from its inputs alone.

Records may be ORM rows, mappings (snake_case or camelCase keys) or any
object exposing the same attributes. Malformed records never raise: a record
whose status matches no bucket still counts toward ``total_records`` but
contributes to nothing else.
"""

from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Mapping, Optional

from app.models.attendance import AttendanceStatus
from app.models.credit import DEFAULT_CREDIT_TYPE

ZERO = Decimal("0")

UNKNOWN_STUDENT_NAME = "Unknown Student"

# Buckets that count toward the attendance rate; excused is left out
RATE_STATUSES = (
    AttendanceStatus.PRESENT,
    AttendanceStatus.ABSENT,
    AttendanceStatus.LATE,
)


@dataclass(frozen=True)
class AttendanceRow:
    """Normalized attendance record."""

    id: Optional[str]
    student_id: Optional[str]
    class_id: Optional[str]
    date: Optional[date]
    status: Optional[AttendanceStatus]
    notes: str
    credit_awarded: Decimal


@dataclass(frozen=True)
class CreditRow:
    """Normalized credit record."""

    id: Optional[str]
    student_id: Optional[str]
    credit_type: str
    credit_amount: Decimal
    earned_date: Optional[date]
    description: Optional[str]
    class_id: Optional[str] = None


@dataclass
class StudentAbsences:
    """Absence count for one student with the profile shown in reports."""

    student: Dict[str, str]
    count: int


@dataclass
class DailyAttendance:
    """Per-status counts for one calendar date."""

    date: date
    present: int = 0
    absent: int = 0
    late: int = 0
    excused: int = 0


@dataclass
class AttendanceStats:
    """Everything the attendance report views need."""

    total_records: int
    stats_by_status: Dict[str, int]
    overall_attendance_rate: int
    absences_by_student: List[StudentAbsences]
    attendance_over_time: List[DailyAttendance]


@dataclass
class CreditTypeTotal:
    earned: Decimal = ZERO
    count: int = 0


@dataclass
class CreditSummary:
    total_earned: Decimal = ZERO
    types: Dict[str, CreditTypeTotal] = field(default_factory=dict)


@dataclass
class CreditReport:
    """Credit totals plus the records behind them, most recent first."""

    summary: CreditSummary
    details: List[CreditRow]


def _field(record: Any, *names: str) -> Any:
    """First non-None value among several key/attribute spellings."""
    for name in names:
        if isinstance(record, Mapping):
            value = record.get(name)
        else:
            value = getattr(record, name, None)
        if value is not None:
            return value
    return None


def to_calendar_date(value: Any) -> Optional[date]:
    """Date component of a date, datetime or ISO string; None otherwise."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            return None
    return None


def to_decimal(value: Any) -> Decimal:
    """Coerce an amount to Decimal; anything non-numeric becomes 0."""
    if isinstance(value, bool) or value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value if value.is_finite() else ZERO
    if isinstance(value, (int, float)):
        value = str(value)
    if isinstance(value, str):
        try:
            amount = Decimal(value.strip())
        except InvalidOperation:
            return ZERO
        return amount if amount.is_finite() else ZERO
    return ZERO


def _student_id_of(entry: Any) -> Optional[str]:
    if isinstance(entry, str):
        return entry
    return _field(entry, "student_id", "studentId")


def normalize_attendance_record(record: Any) -> AttendanceRow:
    if isinstance(record, AttendanceRow):
        return record
    return AttendanceRow(
        id=_field(record, "id"),
        student_id=_field(record, "student_id", "studentId"),
        class_id=_field(record, "class_id", "classId"),
        date=to_calendar_date(_field(record, "date")),
        status=AttendanceStatus.parse(_field(record, "status")),
        notes=_field(record, "notes") or "",
        credit_awarded=to_decimal(_field(record, "credit_awarded", "creditAwarded")),
    )


def normalize_credit_record(record: Any) -> CreditRow:
    if isinstance(record, CreditRow):
        return record
    return CreditRow(
        id=_field(record, "id"),
        student_id=_field(record, "student_id", "studentId"),
        credit_type=_field(record, "credit_type", "creditType") or DEFAULT_CREDIT_TYPE,
        credit_amount=to_decimal(_field(record, "credit_amount", "creditAmount")),
        earned_date=to_calendar_date(_field(record, "earned_date", "earnedDate")),
        description=_field(record, "description"),
        class_id=_field(record, "class_id", "classId"),
    )


def _student_profile(student_id: str, students: Mapping[str, Any]) -> Dict[str, str]:
    profile = students.get(student_id)
    if profile is None:
        return {"id": student_id, "display_name": UNKNOWN_STUDENT_NAME, "email": ""}
    return {
        "id": student_id,
        "display_name": _field(profile, "display_name", "displayName") or UNKNOWN_STUDENT_NAME,
        "email": _field(profile, "email") or "",
    }


def attendance_rate(present: int, absent: int, late: int) -> int:
    """Whole-number percentage of present over present+absent+late, half-up."""
    denominator = present + absent + late
    if denominator == 0:
        return 0
    rate = Decimal(100 * present) / Decimal(denominator)
    return int(rate.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def compute_attendance_stats(
    records: Iterable[Any],
    students: Optional[Mapping[str, Any]] = None,
) -> AttendanceStats:
    """Status counts, attendance rate, absence ranking and daily series."""
    rows = [normalize_attendance_record(r) for r in records]
    students = students or {}

    stats_by_status: Dict[str, int] = {}
    absences: "OrderedDict[str, int]" = OrderedDict()
    by_date: Dict[date, DailyAttendance] = {}

    for row in rows:
        if row.status is None:
            continue
        stats_by_status[row.status.value] = stats_by_status.get(row.status.value, 0) + 1

        if row.status == AttendanceStatus.ABSENT and row.student_id is not None:
            absences[row.student_id] = absences.get(row.student_id, 0) + 1

        if row.date is not None:
            day = by_date.setdefault(row.date, DailyAttendance(date=row.date))
            setattr(day, row.status.value, getattr(day, row.status.value) + 1)

    present, absent, late = (stats_by_status.get(s.value, 0) for s in RATE_STATUSES)

    # sorted() is stable, so equal counts keep first-occurrence order
    absences_by_student = sorted(
        (
            StudentAbsences(student=_student_profile(student_id, students), count=count)
            for student_id, count in absences.items()
        ),
        key=lambda item: item.count,
        reverse=True,
    )

    return AttendanceStats(
        total_records=len(rows),
        stats_by_status=stats_by_status,
        overall_attendance_rate=attendance_rate(present, absent, late),
        absences_by_student=absences_by_student,
        attendance_over_time=[by_date[d] for d in sorted(by_date)],
    )


def summarize_status_counts(records: Iterable[Any]) -> Dict[str, int]:
    """Counts for all four statuses, zero when unobserved."""
    counts = {status.value: 0 for status in AttendanceStatus}
    for record in records:
        status = normalize_attendance_record(record).status
        if status is not None:
            counts[status.value] += 1
    return counts


def total_credits_awarded(records: Iterable[Any]) -> Decimal:
    """Sum of credit_awarded over attendance records."""
    return sum(
        (normalize_attendance_record(r).credit_awarded for r in records), ZERO
    )


def compute_credit_summary(credit_records: Iterable[Any]) -> CreditReport:
    """Total and per-type credit sums, with details newest first."""
    rows = [normalize_credit_record(r) for r in credit_records]
    summary = CreditSummary()

    for row in rows:
        summary.total_earned += row.credit_amount
        bucket = summary.types.setdefault(row.credit_type, CreditTypeTotal())
        bucket.earned += row.credit_amount
        bucket.count += 1

    # Undated records go last
    details = sorted(
        rows,
        key=lambda row: (row.earned_date is not None, row.earned_date or date.min),
        reverse=True,
    )
    return CreditReport(summary=summary, details=details)


def compute_daily_roster_defaults(
    roster: Iterable[Any],
    existing_records_for_date: Iterable[Any],
) -> Dict[str, Dict[str, Any]]:
    """Draft attendance for one date: existing entries reused, everyone else absent."""
    existing: Dict[str, AttendanceRow] = {}
    for record in existing_records_for_date:
        row = normalize_attendance_record(record)
        if row.student_id is not None and row.student_id not in existing:
            existing[row.student_id] = row

    draft: Dict[str, Dict[str, Any]] = {}
    for entry in roster:
        student_id = _student_id_of(entry)
        if student_id is None:
            continue
        row = existing.get(student_id)
        if row is None:
            draft[student_id] = {
                "status": AttendanceStatus.ABSENT.value,
                "notes": "",
                "credit_awarded": ZERO,
            }
        else:
            draft[student_id] = {
                "id": row.id,
                "status": (row.status or AttendanceStatus.ABSENT).value,
                "notes": row.notes,
                "credit_awarded": row.credit_awarded,
            }
    return draft


def apply_mark_all_present(
    current_draft: Mapping[str, Mapping[str, Any]],
    roster: Iterable[Any],
) -> Dict[str, Dict[str, Any]]:
    """Copy of the draft with every roster student set to present."""
    draft = {student_id: dict(entry) for student_id, entry in current_draft.items()}
    for entry in roster:
        student_id = _student_id_of(entry)
        if student_id is None:
            continue
        draft.setdefault(student_id, {})["status"] = AttendanceStatus.PRESENT.value
    return draft
