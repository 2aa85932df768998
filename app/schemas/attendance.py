"""
Pydantic schemas for mentor attendance.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_serializer


class ComputeAttendanceRequest(BaseModel):
    mentorId: int = Field(gt=0)


class MentorProfile(BaseModel):
    mentor_id: int
    name: str = "Unknown"
    email: Optional[str] = None


class AttendanceSummary(BaseModel):
    mentor_id: int
    name: str
    email: Optional[str] = None
    total_classes: int = 0
    present: int = 0
    absent: int = 0
    special_attendance: int = 0
    attendance_percent: Decimal = Field(default=Decimal("0"), ge=0, le=100)
    updated_at: Optional[datetime] = None

    @field_serializer("attendance_percent")
    def _percent(self, value: Decimal) -> float:
        return float(value)

    def row(self) -> dict:
        """Shape persisted in the attendance table."""
        data = self.model_dump(mode="json")
        if self.updated_at is None:
            data.pop("updated_at")
        return data

    def public(self) -> dict:
        """Shape returned by the compute endpoint."""
        return self.model_dump(mode="json", exclude={"updated_at"})
