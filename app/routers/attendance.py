"""
Mentor attendance router: compute + upsert one mentor's summary, list all.
"""

from datetime import date, datetime

from fastapi import APIRouter, Depends

from app.core.clock import get_now, get_today
from app.schemas.attendance import ComputeAttendanceRequest
from app.services.attendance import compute_mentor_attendance, list_attendance
from app.services.stores import (
    AttendanceStore,
    CohortCatalog,
    MentorDirectory,
    SessionStore,
    get_attendance_store,
    get_cohort_catalog,
    get_mentor_directory,
    get_session_store,
)
from app.utils.response import success_response

router = APIRouter(prefix="/api/mentor-attendance", tags=["Mentor Attendance"])


@router.post("")
async def compute_attendance(
    body: ComputeAttendanceRequest,
    directory: MentorDirectory = Depends(get_mentor_directory),
    catalog: CohortCatalog = Depends(get_cohort_catalog),
    sessions: SessionStore = Depends(get_session_store),
    attendance_store: AttendanceStore = Depends(get_attendance_store),
    today: date = Depends(get_today),
    now: datetime = Depends(get_now),
):
    """Recalculate attendance for one mentor from every cohort schedule."""
    run = compute_mentor_attendance(
        body.mentorId,
        directory=directory,
        catalog=catalog,
        sessions=sessions,
        attendance_store=attendance_store,
        today=today,
        now=now,
    )
    return success_response(
        data=run.summary.public(),
        message=f"Attendance calculated for {run.summary.name}",
    )


@router.get("")
async def get_attendance(
    attendance_store: AttendanceStore = Depends(get_attendance_store),
):
    return success_response(data=list_attendance(attendance_store))
