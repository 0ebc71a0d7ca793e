from datetime import datetime
from typing import Optional

from pydantic import Field, model_validator

from courserep.core.responses import CamelModel, InputModel


class EventCreate(InputModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    start_date: datetime
    end_date: datetime
    location: str = Field(..., min_length=1, max_length=255)
    type: str = Field("general", min_length=1, max_length=30)
    course_id: Optional[str] = Field(None, max_length=30)

    @model_validator(mode="after")
    def validate_dates(self):
        if self.end_date < self.start_date:
            raise ValueError("End date must be after start date")
        return self


class EventUpdate(InputModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    location: Optional[str] = Field(None, min_length=1, max_length=255)
    type: Optional[str] = Field(None, min_length=1, max_length=30)
    course_id: Optional[str] = Field(None, max_length=30)


class EventRead(CamelModel):
    event_id: str
    title: str
    description: str
    start_date: datetime
    end_date: datetime
    location: str
    type: str
    course_id: Optional[str] = None
    created_at: Optional[datetime] = None
