"""
External collaborators of the scheduling core.

The core only sees the Protocols below. The Supabase implementations map
store errors and timeouts to ``UpstreamFailure`` and normalize rows into
``SessionRecord`` on the way in. Writes are plain last-write-wins updates;
nothing here locks a row across requests.
"""

from contextlib import contextmanager
from datetime import date
from typing import Iterable, Optional, Protocol

import httpx
from postgrest.exceptions import APIError
from supabase import Client

from app.core.config import settings
from app.core.database import get_schedule_db, get_supabase
from app.core.errors import UpstreamFailure
from app.schemas.attendance import AttendanceSummary, MentorProfile
from app.schemas.schedule import SessionRecord


class CohortCatalog(Protocol):
    def list_timeline_ids(self) -> list[str]: ...


class SessionStore(Protocol):
    def list_sessions(self, timeline_id: str) -> list[SessionRecord]: ...

    def mentor_sessions(
        self,
        timeline_id: str,
        mentor_id: int,
        before: Optional[date] = None,
        dates: Optional[Iterable[date]] = None,
        include_swapped: bool = True,
    ) -> list[SessionRecord]: ...

    def update_session(self, timeline_id: str, session_id: int, fields: dict) -> list[dict]: ...


class AttendanceStore(Protocol):
    def upsert(self, summary: AttendanceSummary) -> None: ...

    def list_all(self) -> list[dict]: ...


class MentorDirectory(Protocol):
    def get_mentor(self, mentor_id: int) -> Optional[MentorProfile]: ...


@contextmanager
def upstream(action: str):
    """Translate store errors raised inside the block into UpstreamFailure."""
    try:
        yield
    except APIError as e:
        raise UpstreamFailure(f"Failed to {action}", details=e.message or str(e)) from e
    except httpx.TimeoutException as e:
        raise UpstreamFailure(f"Timed out trying to {action}", details=str(e)) from e
    except httpx.HTTPError as e:
        raise UpstreamFailure(f"Failed to {action}", details=str(e)) from e


def _merge_by_id(*groups: Iterable[dict]) -> list[dict]:
    merged: dict = {}
    for group in groups:
        for row in group or []:
            merged[row["id"]] = row
    return list(merged.values())


# ---------------------------------------------------------------------------
# Supabase implementations
# ---------------------------------------------------------------------------
class SupabaseCohortCatalog:
    def __init__(self, db: Optional[Client] = None):
        self.db = db or get_schedule_db()

    def list_timeline_ids(self) -> list[str]:
        with upstream("get schedule tables"):
            result = self.db.rpc(settings.SCHEDULE_TABLES_RPC).execute()
        if result.data is None:
            raise UpstreamFailure(
                "Failed to get schedule tables",
                details=f"{settings.SCHEDULE_TABLES_RPC} returned no data",
            )
        return [row["table_name"] for row in result.data]


class SupabaseSessionStore:
    def __init__(self, db: Optional[Client] = None):
        self.db = db or get_schedule_db()

    def list_sessions(self, timeline_id: str) -> list[SessionRecord]:
        with upstream(f"query {timeline_id}"):
            result = (
                self.db.table(timeline_id)
                .select("*")
                .order("week_number")
                .order("session_number")
                .execute()
            )
        return [SessionRecord.from_row(row) for row in result.data or []]

    def mentor_sessions(
        self,
        timeline_id: str,
        mentor_id: int,
        before: Optional[date] = None,
        dates: Optional[Iterable[date]] = None,
        include_swapped: bool = True,
    ) -> list[SessionRecord]:
        """Sessions where ``mentor_id`` is the primary or (optionally) the swapped mentor."""
        columns = ["mentor_id", "swapped_mentor_id"] if include_swapped else ["mentor_id"]
        groups = []
        for column in columns:
            query = self.db.table(timeline_id).select("*").eq(column, mentor_id)
            if before is not None:
                query = query.lt("date", before.isoformat())
            if dates is not None:
                query = query.in_("date", [d.isoformat() for d in dates])
            with upstream(f"query {timeline_id}"):
                groups.append(query.execute().data)
        return [SessionRecord.from_row(row) for row in _merge_by_id(*groups)]

    def update_session(self, timeline_id: str, session_id: int, fields: dict) -> list[dict]:
        with upstream(f"update session {session_id} in {timeline_id}"):
            result = self.db.table(timeline_id).update(fields).eq("id", session_id).execute()
        return result.data or []


class SupabaseAttendanceStore:
    def __init__(self, db: Optional[Client] = None):
        self.db = db or get_supabase()

    def upsert(self, summary: AttendanceSummary) -> None:
        with upstream("save attendance"):
            self.db.table(settings.ATTENDANCE_TABLE).upsert(
                summary.row(),
                on_conflict="mentor_id",
            ).execute()

    def list_all(self) -> list[dict]:
        with upstream("fetch attendance"):
            result = (
                self.db.table(settings.ATTENDANCE_TABLE)
                .select("*")
                .order("attendance_percent", desc=True)
                .execute()
            )
        return result.data or []


class SupabaseMentorDirectory:
    def __init__(self, db: Optional[Client] = None):
        self.db = db or get_schedule_db()

    def get_mentor(self, mentor_id: int) -> Optional[MentorProfile]:
        try:
            with upstream("fetch mentor"):
                result = (
                    self.db.table(settings.MENTOR_TABLE)
                    .select('mentor_id, Name, "Email address"')
                    .eq("mentor_id", mentor_id)
                    .maybe_single()
                    .execute()
                )
        except UpstreamFailure as e:
            # Older postgrest clients report "no row" from maybe_single as a 204 APIError
            if isinstance(e.__cause__, APIError) and str(e.__cause__.code) == "204":
                return None
            raise
        if not result or not result.data:
            return None
        row = result.data
        return MentorProfile(
            mentor_id=row.get("mentor_id", mentor_id),
            name=row.get("Name") or "Unknown",
            email=row.get("Email address") or None,
        )


# FastAPI dependencies (overridden in tests)
def get_cohort_catalog() -> CohortCatalog:
    return SupabaseCohortCatalog()


def get_session_store() -> SessionStore:
    return SupabaseSessionStore()


def get_attendance_store() -> AttendanceStore:
    return SupabaseAttendanceStore()


def get_mentor_directory() -> MentorDirectory:
    return SupabaseMentorDirectory()
