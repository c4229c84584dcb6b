"""
Shared fixtures for schedule analyzer tests.

Usage:
    pytest tests/ -v
"""

import io
import zipfile

import pytest

from src.schedule_analyzer.config import reset_config


REPORT_NAME = "exports/momence-teachers-payroll-report-aggregate-combined-2025-08.csv"

ATTENDANCE_HEADER = (
    "Class name,Class date,Location,Checked in,Participants,"
    "Late cancellations,Non Paid Customers,Comps Checked In"
)


# --- Configuration ---

@pytest.fixture(autouse=True)
def fresh_config(monkeypatch):
    """Isolate every test from the developer's environment variables."""
    for name in (
        "GEMINI_API_KEY",
        "API_KEY",
        "ATTENDANCE_REPORT_PATTERN",
        "LOG_JSON",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    reset_config()
    yield
    reset_config()


# --- Schedule CSV fixtures ---

@pytest.fixture
def schedule_csv():
    """
    Two-day schedule sheet with a title row, repeating day blocks,
    a cover, a canceled slot, a private class and an unparseable time.

    Columns per block: Location, Class, Trainer 1, Trainer 2, Cover
    """
    return "\n".join([
        "Weekly Schedule - Mumbai,,,,,,,,,,",
        ",25 Aug 2025,,,,,26 Aug 2025,,,,",
        ",Monday,,,,,Tuesday,,,,",
        "Time,Location,Class,Trainer 1,Trainer 2,Cover,Location,Class,Trainer 1,Trainer 2,Cover",
        "7:15 AM,Kemps,Barre57,Karan,,,Bandra,HIIT,Anisha,,",
        "9.00 am,Kwality,Cardio Barre,Reshma,,Anisha,Bandra,Class canceled,,,",
        "6:00 PM,Online,Mat 57,Rohan,,,Supreme,Yoga Flow,Priya,,",
        "8:30,Kemps,Amped Up,Atulan,,,,,,,",
        "TBD,Kemps,Recovery,Pranjali,,,,,,,",
        ",,,,,,,,,,",
        "",
    ])


@pytest.fixture
def minimal_schedule_csv():
    """Six-row sheet with a single Monday class."""
    return "\n".join([
        "Studio Schedule,,,",
        ",25 Aug 2025,,",
        ",Monday,,",
        "Time,Location,Class,Trainer 1",
        "9:00 AM,Kemps Corner,Barre57,Karan",
        "Notes: arrive early,,,",
    ])


# --- Attendance fixtures ---

@pytest.fixture
def attendance_csv():
    """
    Aggregate report rows. Barre 57 on Monday 7:15 AM appears three times
    with different location spellings; the last four rows must be skipped.
    """
    return "\n".join([
        ATTENDANCE_HEADER,
        'Barre 57,"2025-08-18, 7:15 AM","Kwality House, Kemps Corner",5,6,1,0,0',
        "Barre 57,\"2025-08-11, 7:15 AM\",Kemps Corner,7,8,0,1,0",
        "barre57,\"2025-08-04, 7:15 am\",Kwality House,6,6,0,0,1",
        "HIIT,\"2025-08-19, 7:15 AM\",Bandra,10,12,2,0,0",
        "Cardio Barre,\"2025-08-18, 9:00 AM\",Kwality House,abc,,,,",
        "Mat 57,2025-08-18,Online,4,4,0,0,0",
        "Mat 57,\"2025-08-18, TBD\",Online,4,4,0,0,0",
        ",\"2025-08-18, 7:15 AM\",Kemps,3,3,0,0,0",
        "Mat 57,\"not a date, 6:00 PM\",Online,4,4,0,0,0",
    ])


@pytest.fixture
def make_zip():
    """
    Build an in-memory ZIP.

    Usage:
        def test_something(make_zip):
            data = make_zip({"report.csv": "a,b\\n1,2"})
    """
    def factory(files, directories=()):
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
            for directory in directories:
                archive.writestr(zipfile.ZipInfo(directory.rstrip("/") + "/"), "")
            for name, text in files.items():
                archive.writestr(name, text)
        return buffer.getvalue()

    return factory


@pytest.fixture
def attendance_zip(make_zip, attendance_csv):
    """Attendance export with the report next to unrelated files."""
    return make_zip(
        {
            "exports/readme.txt": "Momence export",
            REPORT_NAME: attendance_csv,
        },
        directories=["exports/"],
    )
