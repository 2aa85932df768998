"""
Pydantic schemas for postpone / prepone requests.
"""

import datetime as dt
from enum import Enum
from typing import Optional, List

from pydantic import BaseModel


class Direction(str, Enum):
    POSTPONE = "postpone"
    PREPONE = "prepone"


class RescheduleWindow(BaseModel):
    direction: Direction
    currentDate: Optional[dt.date] = None
    currentTime: Optional[str] = None
    dates: List[dt.date]
    timeConstraint: str = ""


class RescheduleCommit(BaseModel):
    direction: Direction
    date: Optional[dt.date] = None
    time: Optional[str] = None


class AppliedMove(BaseModel):
    date: dt.date
    day: str
    time: Optional[str] = None
    meetingLink: None = None
