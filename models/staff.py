"""
Staff schedule and log schemas for the demo staff endpoints.
"""
from pydantic import BaseModel, Field
from typing import Optional, Union, List
from datetime import datetime


class ScheduleCreate(BaseModel):
    """Schedule a staff member books for one of their users."""
    userId: Union[str, int] = Field(..., description="User the schedule is booked for")
    title: Optional[str] = Field(None, max_length=200)
    startsAt: Optional[datetime] = None


class ScheduleResponse(BaseModel):
    """Schedule creation model."""
    staffId: str
    userId: str
    title: Optional[str] = None
    startsAt: Optional[datetime] = None
    status: str = "created"


class StaffLogResponse(BaseModel):
    staffId: str
    id: str
    classIds: List[str] = []
