"""Example: drive the service layer directly against a configured database.

Books two back-to-back sessions in classroom 1, prints the day's calendar and
the classroom utilization for that day.
"""

from datetime import date, datetime, time

from train_classroom.core.enums import ScheduleType
from train_classroom.main import create_container


def main():
    container = create_container()
    today = date.today()

    result = container.batch_scheduler.create_many(
        [
            {
                "classroom_id": 1,
                "teacher_id": "T1",
                "type": ScheduleType.LECTURE.value,
                "start_time": datetime.combine(today, time(9)).isoformat(),
                "end_time": datetime.combine(today, time(10)).isoformat(),
            },
            {
                "classroom_id": 1,
                "teacher_id": "T1",
                "type": ScheduleType.PRACTICE.value,
                "start_time": datetime.combine(today, time(10)).isoformat(),
                "end_time": datetime.combine(today, time(12)).isoformat(),
                "options": {"course_content": "Lab work", "expected_students": 20},
            },
        ],
        skip_conflicts=True,
    )
    print(f"created={result.succeeded} skipped={result.skipped} failed={result.failed}")

    print(container.schedule_service.calendar(today, today, classroom_ids=[1]))
    print(container.schedule_service.utilization(1, today, today))


if __name__ == "__main__":
    main()
