"""
Tests for the attendance aggregator.

The conftest attendance report has three Barre 57 Monday 7:15 AM sessions
(5, 7 and 6 checked in) spelled three different ways, one HIIT session,
one Cardio Barre session with a non-numeric count and four rows to skip.
"""

import io
from datetime import date

import pytest
from pydantic import ValidationError

from src.schedule_analyzer.attendance import (
    parse_count,
    parse_report_date,
    process_attendance_csv,
    process_attendance_data,
)
from src.schedule_analyzer.config import reset_config
from src.schedule_analyzer.errors import ReportNotFoundError, StructuralParseError
from src.schedule_analyzer.models import AttendanceAggregate

from tests.conftest import ATTENDANCE_HEADER, REPORT_NAME

BARRE_KEY = "studio barre 57|monday|7:15 am|kwality house kemps corner"
HIIT_KEY = "studio hiit|tuesday|7:15 am|supreme hq bandra"
CARDIO_KEY = "studio cardio barre|monday|9:00 am|kwality house kemps corner"


class TestParsing:

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("2025-08-18", date(2025, 8, 18)),
            (" 18 Aug 2025 ", date(2025, 8, 18)),
            ("18 August 2025", date(2025, 8, 18)),
            ("Aug 18 2025", date(2025, 8, 18)),
            ("Mon Aug 18 2025", date(2025, 8, 18)),
            ("08/18/2025", date(2025, 8, 18)),
        ],
    )
    def test_report_dates(self, text, expected):
        assert parse_report_date(text) == expected

    def test_unparseable_date(self):
        assert parse_report_date("not a date") is None

    @pytest.mark.parametrize(
        "value, expected",
        [("12", 12), (" 7 ", 7), ("3 guests", 3), ("abc", 0), ("", 0), (None, 0)],
    )
    def test_counts(self, value, expected):
        assert parse_count(value) == expected


class TestProcessAttendanceCsv:

    def test_slots(self, attendance_csv):
        attendance = process_attendance_csv(attendance_csv)
        assert set(attendance) == {BARRE_KEY, HIIT_KEY, CARDIO_KEY}

    def test_average_over_spelling_variants(self, attendance_csv):
        barre = process_attendance_csv(attendance_csv)[BARRE_KEY]
        assert barre.avg_attendance == "6.00"
        assert barre.total_classes == 3
        assert barre.checked_in_count == 18

    def test_counters_summed(self, attendance_csv):
        barre = process_attendance_csv(attendance_csv)[BARRE_KEY]
        assert barre.participants == 20
        assert barre.late_cancellations == 1
        assert barre.non_paid_customers == 1
        assert barre.comps_checked_in == 1

    def test_single_session(self, attendance_csv):
        hiit = process_attendance_csv(attendance_csv)[HIIT_KEY]
        assert hiit.avg_attendance == "10.00"
        assert hiit.total_classes == 1

    def test_non_numeric_count_is_zero(self, attendance_csv):
        cardio = process_attendance_csv(attendance_csv)[CARDIO_KEY]
        assert cardio.avg_attendance == "0.00"
        assert cardio.total_classes == 1

    def test_average_rounded_to_two_decimals(self):
        csv_text = "\n".join([
            ATTENDANCE_HEADER,
            'HIIT,"2025-08-19, 7:15 AM",Bandra,1,1,0,0,0',
            'HIIT,"2025-08-12, 7:15 AM",Bandra,1,1,0,0,0',
            'HIIT,"2025-08-05, 7:15 AM",Bandra,2,2,0,0,0',
        ])
        assert process_attendance_csv(csv_text)[HIIT_KEY].avg_attendance == "1.33"

    def test_weekday_derived_from_date(self):
        csv_text = "\n".join([
            ATTENDANCE_HEADER,
            'HIIT,"24 Aug 2025, 10:00 AM",Bandra,4,4,0,0,0',
        ])
        assert list(process_attendance_csv(csv_text)) == [
            "studio hiit|sunday|10:00 am|supreme hq bandra"
        ]

    def test_header_only(self):
        assert process_attendance_csv(ATTENDANCE_HEADER) == {}

    def test_results_are_frozen(self, attendance_csv):
        barre = process_attendance_csv(attendance_csv)[BARRE_KEY]
        with pytest.raises(ValidationError):
            barre.avg_attendance = "99.00"


class TestProcessAttendanceData:

    def test_reads_report_from_zip(self, attendance_zip):
        attendance = process_attendance_data(attendance_zip)
        assert attendance[BARRE_KEY].avg_attendance == "6.00"
        assert len(attendance) == 3

    def test_accepts_path_and_file_object(self, attendance_zip, tmp_path):
        path = tmp_path / "export.zip"
        path.write_bytes(attendance_zip)
        assert len(process_attendance_data(path)) == 3
        assert len(process_attendance_data(str(path))) == 3
        assert len(process_attendance_data(io.BytesIO(attendance_zip))) == 3

    def test_byte_order_mark_in_report(self, make_zip, attendance_csv):
        data = make_zip({REPORT_NAME: "\ufeff" + attendance_csv})
        assert BARRE_KEY in process_attendance_data(data)

    def test_directory_named_like_report_is_skipped(self, make_zip, attendance_csv):
        data = make_zip(
            {"momence-teachers-payroll-report-aggregate-combined/report.csv": attendance_csv},
            directories=["momence-teachers-payroll-report-aggregate-combined/"],
        )
        assert len(process_attendance_data(data)) == 3

    def test_missing_report(self, make_zip):
        data = make_zip({"exports/other-report.csv": ATTENDANCE_HEADER})
        with pytest.raises(ReportNotFoundError, match="attendance report"):
            process_attendance_data(data)

    def test_not_a_zip(self):
        with pytest.raises(StructuralParseError, match="not a valid ZIP"):
            process_attendance_data(b"Class name,Class date\n")

    def test_explicit_report_pattern(self, make_zip, attendance_csv):
        data = make_zip({"weekly/attendance-2025.csv": attendance_csv})
        attendance = process_attendance_data(data, report_pattern="ATTENDANCE-2025")
        assert len(attendance) == 3

    def test_configured_report_pattern(self, make_zip, attendance_csv, monkeypatch):
        monkeypatch.setenv("ATTENDANCE_REPORT_PATTERN", "weekly-checkins")
        reset_config()
        data = make_zip({"weekly-checkins.csv": attendance_csv})
        assert len(process_attendance_data(data)) == 3


class TestAggregate:

    def test_finalize_requires_classes(self):
        with pytest.raises(ValueError):
            AttendanceAggregate().finalize()

    def test_finalize(self):
        stats = AttendanceAggregate(total_checked_in=7, total_classes=2).finalize()
        assert stats.avg_attendance == "3.50"
        assert stats.checked_in_count == 7
