"""
Tests for board filtering, summaries, groupings and attendance lookup.
"""

from datetime import time

import pytest

from src.schedule_analyzer.attendance import process_attendance_csv
from src.schedule_analyzer.extractor import extract_schedule_data
from src.schedule_analyzer.models import ScheduleFilters
from src.schedule_analyzer.views import (
    all_classes,
    filter_classes,
    filter_options,
    group_by_class_name,
    group_by_day,
    lookup_attendance,
    summarize,
    time_of_day,
)


@pytest.fixture
def schedule(schedule_csv):
    return extract_schedule_data(schedule_csv)


class TestTimeOfDay:

    @pytest.mark.parametrize(
        "value, expected",
        [
            (time(6, 0), "morning"),
            (time(11, 59), "morning"),
            (time(12, 0), "afternoon"),
            (time(16, 59), "afternoon"),
            (time(17, 0), "evening"),
            (time(21, 30), "evening"),
            (None, None),
        ],
    )
    def test_buckets(self, value, expected):
        assert time_of_day(value) == expected


class TestFilters:

    def test_all_classes_in_board_order(self, schedule):
        classes = all_classes(schedule)
        assert len(classes) == 7
        assert [c.day for c in classes] == ["Monday"] * 5 + ["Tuesday"] * 2

    def test_no_filters(self, schedule):
        assert filter_classes(schedule) == all_classes(schedule)
        assert filter_classes(schedule, ScheduleFilters()) == all_classes(schedule)

    def test_day_filter(self, schedule):
        classes = filter_classes(schedule, ScheduleFilters(day="Tuesday"))
        assert [c.class_name for c in classes] == ["Studio HIIT", "Private Class - (Priya)"]

    def test_filters_combine(self, schedule):
        filters = ScheduleFilters(
            location="Kwality House, Kemps Corner", difficulty="advanced"
        )
        classes = filter_classes(schedule, filters)
        assert [c.class_name for c in classes] == ["Studio Amped Up!"]

    def test_trainer_filter_uses_cover(self, schedule):
        classes = filter_classes(schedule, ScheduleFilters(trainer="Anisha Shah"))
        assert [c.class_name for c in classes] == ["Studio Cardio Barre", "Studio HIIT"]

    def test_class_name_filter(self, schedule):
        classes = filter_classes(schedule, ScheduleFilters(class_name="Studio Mat 57"))
        assert [c.location for c in classes] == ["Online"]

    def test_evening_filter_keeps_untimed_classes(self, schedule):
        classes = filter_classes(schedule, ScheduleFilters(time_of_day="evening"))
        assert [c.class_name for c in classes] == [
            "Studio Recovery",
            "Studio Mat 57",
            "Private Class - (Priya)",
        ]

    def test_filter_options(self, schedule):
        options = filter_options(all_classes(schedule))
        assert options["days"] == ["Monday", "Tuesday"]
        assert options["locations"] == [
            "Kwality House, Kemps Corner",
            "Online",
            "Supreme HQ, Bandra",
        ]
        assert "Priya" in options["trainers"]
        assert options["difficulties"] == ["advanced", "beginner", "intermediate"]


class TestSummary:

    def test_counts(self, schedule):
        summary = summarize(schedule)
        assert summary.by_location[0] == ("Kwality House, Kemps Corner", 4)
        assert summary.by_day == [("Monday", 5), ("Tuesday", 2)]
        assert sum(count for _, count in summary.by_class) == 7

    def test_ties_keep_board_order(self, schedule):
        summary = summarize(schedule)
        assert summary.by_location == [
            ("Kwality House, Kemps Corner", 4),
            ("Supreme HQ, Bandra", 2),
            ("Online", 1),
        ]
        assert [name for name, _ in summary.by_trainer] == [
            "Anisha Shah",
            "Pranjali Jain",
            "Karan Bhatia",
            "Atulan Purohit",
            "Rohan Dahima",
            "Priya",
        ]

    def test_empty_schedule(self):
        summary = summarize({})
        assert summary.by_location == []
        assert summary.by_day == []


class TestGrouping:

    def test_group_by_day(self, schedule):
        classes = filter_classes(schedule, ScheduleFilters(time_of_day="morning"))
        grouped = group_by_day(classes)
        assert list(grouped) == ["Monday", "Tuesday"]
        assert len(grouped["Monday"]) == 4
        assert len(grouped["Tuesday"]) == 1

    def test_group_by_class_name(self, schedule):
        grouped = group_by_class_name(all_classes(schedule))
        assert list(grouped) == sorted(grouped)
        assert [c.day for c in grouped["Studio HIIT"]] == ["Tuesday"]


class TestLookupAttendance:

    def test_scheduled_classes_find_their_history(self, schedule, attendance_csv):
        attendance = process_attendance_csv(attendance_csv)
        monday = schedule["Monday"]
        barre = monday[1]
        cardio = monday[3]
        hiit = schedule["Tuesday"][0]

        assert lookup_attendance(attendance, barre).avg_attendance == "6.00"
        assert lookup_attendance(attendance, cardio).avg_attendance == "0.00"
        assert lookup_attendance(attendance, hiit).avg_attendance == "10.00"

    def test_class_without_history(self, schedule, attendance_csv):
        attendance = process_attendance_csv(attendance_csv)
        assert lookup_attendance(attendance, schedule["Monday"][4]) is None
        assert lookup_attendance({}, schedule["Monday"][1]) is None
