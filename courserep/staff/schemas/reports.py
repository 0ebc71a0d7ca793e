from datetime import datetime
from typing import List, Optional

from courserep.core.responses import CamelModel


class AttendanceReportRow(CamelModel):
    student_id: str
    name: str
    course_id: Optional[str] = None
    total_sessions: int
    present_sessions: int
    attendance_percentage: float


class AssignmentReportRow(CamelModel):
    assignment_id: str
    title: str
    course_id: str
    due_date: datetime
    total_submissions: int
    average_grade: Optional[float] = None
    min_grade: Optional[float] = None
    max_grade: Optional[float] = None


class CourseReportRow(CamelModel):
    course_id: str
    course_name: str
    course_code: str
    total_students: int
    total_assignments: int
    total_events: int
    avg_attendance: Optional[float] = None


class ActivityRead(CamelModel):
    type: str
    id: str
    title: str
    created_at: Optional[datetime] = None


class DashboardRead(CamelModel):
    total_students: int
    total_lecturers: int
    total_courses: int
    total_assignments: int
    total_events: int
    open_attendance_sessions: int
    recent_activities: List[ActivityRead] = []
