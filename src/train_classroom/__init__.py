"""Training classroom scheduling and attendance package.

Organized by feature modules (classrooms, schedules, enrollments, attendance,
devices) with service/repository layers and a MySQL persistence adapter.
"""
