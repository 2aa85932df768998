from datetime import date, datetime, timezone
from typing import Iterable, Optional

import pytest
from fastapi.testclient import TestClient

from app.core.clock import get_now, get_today
from app.core.errors import UpstreamFailure
from app.main import app
from app.schemas.attendance import AttendanceSummary, MentorProfile
from app.schemas.schedule import SessionRecord
from app.services.stores import (
    get_attendance_store,
    get_cohort_catalog,
    get_mentor_directory,
    get_session_store,
)

TODAY = date(2024, 3, 5)
NOW = datetime(2024, 3, 5, 6, 30, tzinfo=timezone.utc)


def row(id, week, session, day_date, time="10:00", mentor_id=1, swapped=None, recording=None, **extra):
    data = {
        "id": id,
        "week_number": week,
        "session_number": session,
        "date": day_date,
        "time": time,
        "day": "",
        "mentor_id": mentor_id,
        "swapped_mentor_id": swapped,
        "session_recording": recording,
        "teams_meeting_link": "https://teams.example/meet",
    }
    data.update(extra)
    return data


class FakeCatalog:
    def __init__(self, ids, fail=False):
        self.ids = list(ids)
        self.fail = fail

    def list_timeline_ids(self):
        if self.fail:
            raise UpstreamFailure("Failed to get schedule tables", details="rpc missing")
        return list(self.ids)


class FakeSessionStore:
    def __init__(self, timelines: dict, failing: Iterable[str] = ()):
        self.timelines = timelines
        self.failing = set(failing)
        self.updates = []

    def _rows(self, timeline_id):
        if timeline_id in self.failing:
            raise UpstreamFailure(f"Failed to query {timeline_id}", details="relation does not exist")
        return self.timelines.get(timeline_id, [])

    def list_sessions(self, timeline_id):
        return [SessionRecord.from_row(r) for r in self._rows(timeline_id)]

    def mentor_sessions(self, timeline_id, mentor_id, before=None, dates=None, include_swapped=True):
        wanted = set(dates) if dates is not None else None
        result = []
        for s in self.list_sessions(timeline_id):
            if s.mentor_id != mentor_id and not (include_swapped and s.swapped_mentor_id == mentor_id):
                continue
            if before is not None and (s.date is None or s.date >= before):
                continue
            if wanted is not None and s.date not in wanted:
                continue
            result.append(s)
        return result

    def update_session(self, timeline_id, session_id, fields):
        self.updates.append((timeline_id, session_id, dict(fields)))
        updated = []
        for r in self._rows(timeline_id):
            if r["id"] == session_id:
                r.update(fields)
                updated.append(r)
        return updated


class FakeAttendanceStore:
    def __init__(self, fail=False):
        self.rows = {}
        self.fail = fail

    def upsert(self, summary: AttendanceSummary):
        if self.fail:
            raise UpstreamFailure("Failed to save attendance", details="permission denied")
        self.rows[summary.mentor_id] = summary.row()

    def list_all(self):
        return list(self.rows.values())


class FakeDirectory:
    def __init__(self, mentors: Optional[dict] = None):
        self.mentors = mentors if mentors is not None else {
            1: MentorProfile(mentor_id=1, name="Asha Rao", email="asha@example.com"),
            2: MentorProfile(mentor_id=2, name="Vikram Das", email=None),
        }

    def get_mentor(self, mentor_id):
        return self.mentors.get(mentor_id)


@pytest.fixture
def catalog():
    return FakeCatalog(["basic1_1_schedule", "basic2_1_schedule"])


@pytest.fixture
def session_store():
    return FakeSessionStore({"basic1_1_schedule": [], "basic2_1_schedule": []})


@pytest.fixture
def attendance_store():
    return FakeAttendanceStore()


@pytest.fixture
def directory():
    return FakeDirectory()


@pytest.fixture
def client(catalog, session_store, attendance_store, directory):
    app.dependency_overrides[get_cohort_catalog] = lambda: catalog
    app.dependency_overrides[get_session_store] = lambda: session_store
    app.dependency_overrides[get_attendance_store] = lambda: attendance_store
    app.dependency_overrides[get_mentor_directory] = lambda: directory
    app.dependency_overrides[get_today] = lambda: TODAY
    app.dependency_overrides[get_now] = lambda: NOW
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
