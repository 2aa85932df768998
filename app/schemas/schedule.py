"""
Pydantic schemas for cohort schedule rows.

Raw rows from the schedule store are normalized once, in
``SessionRecord.from_row``. Columns that exist under several names across
cohort tables are resolved with these ordered fallbacks:

    time          time, start_time
    subject       subject, subject_name
    topic         topic, subject_topic
    meeting_link  teams_meeting_link, meeting_link, teams_link
"""

import datetime as dt
from typing import Any, Optional

from dateutil import parser
from pydantic import BaseModel

TIME_FIELDS = ("time", "start_time")
SUBJECT_FIELDS = ("subject", "subject_name")
TOPIC_FIELDS = ("topic", "subject_topic")
MEETING_LINK_FIELDS = ("teams_meeting_link", "meeting_link", "teams_link")

# Column the reschedule commit clears
MEETING_LINK_COLUMN = "teams_meeting_link"


def _first(row: dict, fields: tuple) -> Any:
    for f in fields:
        value = row.get(f)
        if value not in (None, ""):
            return value
    return None


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


def parse_date(value: Any) -> Optional[dt.date]:
    if value in (None, ""):
        return None
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    return parser.isoparse(str(value).strip()).date()


def parse_time(value: Any) -> Optional[str]:
    """'14:00:00' -> '14:00', '9:30' -> '09:30'; empty and 'TBD' -> None."""
    if value is None:
        return None
    text = str(value).strip()
    if not text or text.upper() == "TBD":
        return None
    parts = text.split(":")
    if len(parts) < 2:
        return text
    return f"{parts[0].zfill(2)}:{parts[1][:2].zfill(2)}"


class SessionRecord(BaseModel):
    id: int
    week_number: int = 0
    session_number: int = 0
    date: Optional[dt.date] = None
    time: Optional[str] = None
    day: Optional[str] = None
    mentor_id: Optional[int] = None
    swapped_mentor_id: Optional[int] = None
    session_recording: Optional[str] = None
    meeting_link: Optional[str] = None
    subject: Optional[str] = None
    topic: Optional[str] = None

    @classmethod
    def from_row(cls, row: dict) -> "SessionRecord":
        return cls(
            id=row["id"],
            week_number=row.get("week_number") or 0,
            session_number=row.get("session_number") or 0,
            date=parse_date(row.get("date")),
            time=parse_time(_first(row, TIME_FIELDS)),
            day=_blank_to_none(row.get("day")),
            mentor_id=_blank_to_none(row.get("mentor_id")),
            swapped_mentor_id=_blank_to_none(row.get("swapped_mentor_id")),
            session_recording=_blank_to_none(row.get("session_recording")),
            meeting_link=_first(row, MEETING_LINK_FIELDS),
            subject=_first(row, SUBJECT_FIELDS),
            topic=_first(row, TOPIC_FIELDS),
        )

    @property
    def has_recording(self) -> bool:
        return bool(self.session_recording and self.session_recording.strip())

    @property
    def was_swapped(self) -> bool:
        return self.swapped_mentor_id is not None


class MentorSession(BaseModel):
    """A session as shown on the mentor home page."""

    id: str
    session_id: int
    date: dt.date
    day: str
    time: str
    subject: str
    topic: str
    batchName: str
    tableName: str
    meetingLink: str
    mentorId: Optional[int] = None


class MentorBatch(BaseModel):
    tableName: str
    batchName: str
    sessionCount: int
