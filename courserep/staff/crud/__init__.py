"""Staff CRUD Package"""
from .students import (
    get_student_by_id,
    get_students,
    create_student,
    update_student,
    delete_student,
)

from .lecturers import (
    get_lecturer_by_id,
    get_lecturers,
    create_lecturer,
    update_lecturer,
    delete_lecturer,
)

from .courses import (
    get_course_by_id,
    get_courses,
    count_course_students,
    create_course,
    update_course,
    delete_course,
    register_student_for_course,
    get_student_courses,
)

from .groups import (
    get_group_by_id,
    get_groups,
    create_group,
    update_group,
    delete_group,
    add_group_member,
    remove_group_member,
)

from .attendance import (
    get_attendance_records,
    mark_attendance_manually,
    delete_attendance_record,
)

__all__ = [
    # Students
    "get_student_by_id",
    "get_students",
    "create_student",
    "update_student",
    "delete_student",
    # Lecturers
    "get_lecturer_by_id",
    "get_lecturers",
    "create_lecturer",
    "update_lecturer",
    "delete_lecturer",
    # Courses
    "get_course_by_id",
    "get_courses",
    "count_course_students",
    "create_course",
    "update_course",
    "delete_course",
    "register_student_for_course",
    "get_student_courses",
    # Groups
    "get_group_by_id",
    "get_groups",
    "create_group",
    "update_group",
    "delete_group",
    "add_group_member",
    "remove_group_member",
    # Attendance records
    "get_attendance_records",
    "mark_attendance_manually",
    "delete_attendance_record",
]
