"""Unit tests for the pure attendance/credit aggregation functions."""

from datetime import date, datetime
from decimal import Decimal

from app.models.attendance import AttendanceStatus
from app.services.attendance_stats import (
    UNKNOWN_STUDENT_NAME,
    apply_mark_all_present,
    attendance_rate,
    compute_attendance_stats,
    compute_credit_summary,
    compute_daily_roster_defaults,
    normalize_attendance_record,
    summarize_status_counts,
    total_credits_awarded,
)


def _record(student_id, status, day, **extra):
    return {"student_id": student_id, "status": status, "date": day, **extra}


MIXED_RECORDS = [
    _record("s1", "present", date(2024, 3, 4)),
    _record("s2", "absent", date(2024, 3, 4)),
    _record("s3", "late", date(2024, 3, 4)),
    _record("s2", "absent", date(2024, 3, 1)),
    _record("s1", "absent", date(2024, 3, 1)),
    _record("s3", "excused", date(2024, 3, 5)),
    _record("s4", "on_vacation", date(2024, 3, 5)),
    _record("s3", "present", None),
]


class TestNormalizeAttendanceRecord:
    def test_accepts_camel_case_and_legacy_status(self):
        row = normalize_attendance_record(
            {
                "studentId": "s1",
                "classId": "c1",
                "status": "Tardy",
                "date": "2024-03-04T10:15:00Z",
                "creditAwarded": "1.5",
            }
        )
        assert row.student_id == "s1"
        assert row.class_id == "c1"
        assert row.status == AttendanceStatus.LATE
        assert row.date == date(2024, 3, 4)
        assert row.credit_awarded == Decimal("1.5")

    def test_malformed_values_do_not_raise(self):
        row = normalize_attendance_record(
            {"status": 42, "date": "not a date", "credit_awarded": "lots"}
        )
        assert row.status is None
        assert row.date is None
        assert row.credit_awarded == Decimal("0")

    def test_datetime_is_truncated_to_date(self):
        row = normalize_attendance_record(
            _record("s1", "present", datetime(2024, 3, 4, 23, 59))
        )
        assert row.date == date(2024, 3, 4)


class TestComputeAttendanceStats:
    def test_empty_input(self):
        stats = compute_attendance_stats([])
        assert stats.total_records == 0
        assert stats.stats_by_status == {}
        assert stats.overall_attendance_rate == 0
        assert stats.absences_by_student == []
        assert stats.attendance_over_time == []

    def test_status_counts_cover_known_records(self):
        stats = compute_attendance_stats(MIXED_RECORDS)
        assert stats.total_records == len(MIXED_RECORDS)
        assert stats.stats_by_status == {
            "present": 2,
            "absent": 3,
            "late": 1,
            "excused": 1,
        }
        # one record has an unknown status
        assert sum(stats.stats_by_status.values()) == stats.total_records - 1

    def test_rate_ignores_excused(self):
        stats = compute_attendance_stats(MIXED_RECORDS)
        # 2 present of 6 counted records
        assert stats.overall_attendance_rate == 33

    def test_rate_is_zero_when_only_excused(self):
        stats = compute_attendance_stats([_record("s1", "excused", date(2024, 3, 4))])
        assert stats.overall_attendance_rate == 0

    def test_rate_rounds_half_up(self):
        # 1/8 = 12.5%
        assert attendance_rate(1, 7, 0) == 13
        # 5/8 = 62.5%
        assert attendance_rate(5, 3, 0) == 63
        assert attendance_rate(3, 0, 0) == 100

    def test_absences_sorted_descending_with_profiles(self):
        students = {"s2": {"display_name": "Bea", "email": "bea@example.com"}}
        stats = compute_attendance_stats(MIXED_RECORDS, students)

        counts = [item.count for item in stats.absences_by_student]
        assert counts == sorted(counts, reverse=True)
        assert sum(counts) == stats.stats_by_status["absent"]

        top, second = stats.absences_by_student
        assert top.student == {"id": "s2", "display_name": "Bea", "email": "bea@example.com"}
        assert top.count == 2
        assert second.student["display_name"] == UNKNOWN_STUDENT_NAME

    def test_absence_ties_keep_first_occurrence(self):
        records = [
            _record("s9", "absent", date(2024, 3, 1)),
            _record("s1", "absent", date(2024, 3, 2)),
        ]
        stats = compute_attendance_stats(records)
        assert [a.student["id"] for a in stats.absences_by_student] == ["s9", "s1"]

    def test_daily_series_ascending_and_complete(self):
        stats = compute_attendance_stats(MIXED_RECORDS)
        days = [d.date for d in stats.attendance_over_time]
        assert days == [date(2024, 3, 1), date(2024, 3, 4), date(2024, 3, 5)]

        march_4 = stats.attendance_over_time[1]
        assert (march_4.present, march_4.absent, march_4.late, march_4.excused) == (1, 1, 1, 0)

        # unknown status and undated records are left out of the series
        march_5 = stats.attendance_over_time[2]
        assert march_5.present + march_5.absent + march_5.late + march_5.excused == 1

    def test_accepts_objects_with_attributes(self):
        class Row:
            def __init__(self, student_id, status, day):
                self.student_id = student_id
                self.status = status
                self.date = day

        stats = compute_attendance_stats(
            [Row("s1", AttendanceStatus.PRESENT, date(2024, 3, 4))]
        )
        assert stats.stats_by_status == {"present": 1}
        assert stats.overall_attendance_rate == 100


class TestStatusHelpers:
    def test_summarize_status_counts_defaults_to_zero(self):
        counts = summarize_status_counts([_record("s1", "late", date(2024, 3, 4))])
        assert counts == {"present": 0, "absent": 0, "late": 1, "excused": 0}

    def test_total_credits_awarded(self):
        records = [
            {"credit_awarded": Decimal("1.50")},
            {"creditAwarded": 2},
            {"credit_awarded": None},
        ]
        assert total_credits_awarded(records) == Decimal("3.50")


class TestComputeCreditSummary:
    def test_empty(self):
        report = compute_credit_summary([])
        assert report.summary.total_earned == 0
        assert report.summary.types == {}
        assert report.details == []

    def test_totals_by_type(self):
        records = [
            {"credit_type": "service", "credit_amount": 2, "earned_date": date(2024, 1, 10)},
            {"credit_type": "service", "credit_amount": 3, "earned_date": date(2024, 2, 10)},
            {"credit_type": "academic", "credit_amount": 1, "earned_date": date(2024, 1, 20)},
        ]
        report = compute_credit_summary(records)

        assert report.summary.total_earned == 6
        assert report.summary.types["service"].earned == 5
        assert report.summary.types["service"].count == 2
        assert report.summary.types["academic"].earned == 1
        assert report.summary.types["academic"].count == 1

    def test_details_newest_first_undated_last(self):
        records = [
            {"id": "old", "credit_amount": 1, "earned_date": date(2024, 1, 1)},
            {"id": "undated", "credit_amount": 1},
            {"id": "new", "credit_amount": 1, "earnedDate": "2024-05-01"},
        ]
        report = compute_credit_summary(records)
        assert [row.id for row in report.details] == ["new", "old", "undated"]
        assert report.details[0].credit_type == "general"

    def test_non_numeric_amounts_count_as_zero(self):
        report = compute_credit_summary(
            [{"credit_amount": "n/a"}, {"creditAmount": "1.25"}]
        )
        assert report.summary.total_earned == Decimal("1.25")
        assert report.summary.types["general"].count == 2


class TestDailyRosterDefaults:
    def test_absent_unless_already_recorded(self):
        existing = [
            {
                "id": "a1",
                "student_id": "s1",
                "status": "late",
                "notes": "bus",
                "credit_awarded": Decimal("2"),
            }
        ]
        draft = compute_daily_roster_defaults(["s1", {"student_id": "s2"}], existing)

        assert draft["s1"] == {
            "id": "a1",
            "status": "late",
            "notes": "bus",
            "credit_awarded": Decimal("2"),
        }
        assert draft["s2"]["status"] == "absent"
        assert "id" not in draft["s2"]

    def test_idempotent(self):
        roster = ["s1", "s2"]
        assert compute_daily_roster_defaults(roster, []) == compute_daily_roster_defaults(
            roster, []
        )


class TestMarkAllPresent:
    def test_marks_roster_and_keeps_fields(self):
        draft = {"s1": {"status": "late", "notes": "x"}}
        result = apply_mark_all_present(draft, ["s1", "s2"])
        assert result == {
            "s1": {"status": "present", "notes": "x"},
            "s2": {"status": "present"},
        }

    def test_does_not_mutate_input_or_touch_non_roster(self):
        draft = {"s1": {"status": "absent"}, "gone": {"status": "absent"}}
        result = apply_mark_all_present(draft, [{"studentId": "s1"}])
        assert draft["s1"]["status"] == "absent"
        assert result["s1"]["status"] == "present"
        assert result["gone"]["status"] == "absent"
