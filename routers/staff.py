"""
Staff endpoints guarded by object-level permission rules.
The handlers assume the permission check already passed; they only see owned objects.
"""
from fastapi import APIRouter, Query
from typing import List, Optional
import logging

from models.staff import ScheduleCreate, ScheduleResponse, StaffLogResponse

router = APIRouter(tags=["staff"])
logger = logging.getLogger(__name__)


@router.post("/api/staffs/{staffId}/schedules", response_model=ScheduleResponse)
async def create_schedule(staffId: str, schedule: ScheduleCreate):
    """Book a schedule for a user owned by the staff member."""
    logger.info(f"📅 [STAFF] Staff {staffId} scheduling user {schedule.userId}")
    return ScheduleResponse(
        staffId=staffId,
        userId=str(schedule.userId),
        title=schedule.title,
        startsAt=schedule.startsAt,
    )


@router.get("/staffs/{staffId}/logs/{id}", response_model=StaffLogResponse)
async def get_staff_log(staffId: str, id: str, classId: Optional[List[str]] = Query(None)):
    logger.info(f"📋 [STAFF] Staff {staffId} reading log {id}")
    return StaffLogResponse(staffId=staffId, id=id, classIds=classId or [])
