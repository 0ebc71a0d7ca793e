from datetime import date, datetime
from typing import List, Optional

from courserep.core.responses import CamelModel
from courserep.staff.schemas.events import EventRead


class DeadlineRead(CamelModel):
    assignment_id: str
    title: str
    course_id: str
    due_date: datetime
    points: int
    # "submitted" / "pending" when asked for a student, otherwise None
    status: Optional[str] = None


class WeeklySchedule(CamelModel):
    student_id: str
    course_id: Optional[str] = None
    week_start: date
    week_end: date
    events: List[EventRead] = []
    deadlines: List[DeadlineRead] = []
