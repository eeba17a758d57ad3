"""Example: drive the service layer directly, without Flask.

Controllers stay thin; the resolver, override workflow and recorder live in services.
Run against a database prepared with scripts/init_db.py and scripts/seed_db.py.
"""

import importlib
from datetime import date, datetime

from dotenv import load_dotenv

from config import get_settings_module

from class_attendance.attendance.model import ScanRequest
from class_attendance.container import build_container
from class_attendance.core.exceptions import DomainError
from class_attendance.schedules.model import AcademicPeriod


def main():
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG, settings=settings)

    monday = date(2025, 6, 2)
    period = AcademicPeriod(academic_year_id=1, semester_id=1)

    print(container.schedule_service.session_for(schedule_id=1, on=monday).to_dict())

    try:
        result = container.attendance_recorder.record_scan(
            ScanRequest(
                student_id="2024-0001",
                schedule_id=1,
                period=period,
                scanned_at=datetime(2025, 6, 2, 9, 20),
            )
        )
        print(result.to_dict())
    except DomainError as e:
        print(f"{e.code}: {e}")


if __name__ == "__main__":
    main()
