from conftest import row


def seed(session_store):
    session_store.timelines["basic1_1_schedule"] = [
        row(1, 1, 1, "2024-02-26", recording="https://rec/1"),
        row(2, 1, 2, "2024-02-28", swapped=2, recording="https://rec/2"),
        row(3, 2, 1, "2024-03-10", time="10:00"),
        row(4, 2, 2, "2024-03-17"),
    ]
    session_store.timelines["basic2_1_schedule"] = [
        row(1, 1, 1, "2024-02-27", mentor_id=2, swapped=1, recording="https://rec/3"),
        row(2, 1, 2, "2024-03-05", mentor_id=1, subject_name="SQL", subject_topic="Joins"),
        row(3, 1, 3, "2024-03-07", mentor_id=1, time="18:00"),
    ]


def test_health(client):
    assert client.get("/api/health").json() == {"status": "healthy"}


def test_compute_attendance(client, session_store, attendance_store):
    seed(session_store)
    res = client.post("/api/mentor-attendance", json={"mentorId": 1})
    assert res.status_code == 200
    body = res.json()
    assert body["success"] is True
    assert body["data"] == {
        "mentor_id": 1,
        "name": "Asha Rao",
        "email": "asha@example.com",
        "total_classes": 2,
        "present": 1,
        "absent": 1,
        "special_attendance": 1,
        "attendance_percent": 50.0,
    }
    assert attendance_store.rows[1]["present"] == 1


def test_compute_attendance_requires_mentor_id(client):
    res = client.post("/api/mentor-attendance", json={})
    assert res.status_code == 400
    assert res.json()["error"] == "mentorId is required"


def test_compute_attendance_rejects_non_integer(client):
    res = client.post("/api/mentor-attendance", json={"mentorId": "abc"})
    assert res.status_code == 400
    assert "mentorId" in res.json()["error"]


def test_compute_attendance_unknown_mentor(client):
    res = client.post("/api/mentor-attendance", json={"mentorId": 404})
    assert res.status_code == 404
    assert res.json()["error"] == "Mentor not found"


def test_compute_attendance_catalog_failure(client, catalog):
    catalog.fail = True
    res = client.post("/api/mentor-attendance", json={"mentorId": 1})
    assert res.status_code == 503
    assert res.json()["error"] == "Failed to get schedule tables"
    assert res.headers["retry-after"] == "5"


def test_compute_attendance_tolerates_broken_timeline(client, session_store):
    seed(session_store)
    session_store.failing.add("basic2_1_schedule")
    res = client.post("/api/mentor-attendance", json={"mentorId": 1})
    assert res.status_code == 200
    data = res.json()["data"]
    assert (data["present"], data["absent"], data["special_attendance"]) == (1, 1, 0)


def test_list_attendance(client, session_store):
    seed(session_store)
    client.post("/api/mentor-attendance", json={"mentorId": 1})
    client.post("/api/mentor-attendance", json={"mentorId": 2})
    res = client.get("/api/mentor-attendance")
    assert res.status_code == 200
    assert [r["mentor_id"] for r in res.json()["data"]] == [1, 2]


def test_schedule_is_ordered(client, session_store):
    seed(session_store)
    session_store.timelines["basic1_1_schedule"].reverse()
    res = client.get("/api/cohort/schedule", params={"tableName": "basic1_1_schedule"})
    assert res.status_code == 200
    assert [s["id"] for s in res.json()["data"]] == [1, 2, 3, 4]


def test_schedule_filtered_by_mentor_includes_swaps(client, session_store):
    seed(session_store)
    res = client.get("/api/cohort/schedule", params={"tableName": "basic2_1_schedule", "mentor_id": 2})
    assert [s["id"] for s in res.json()["data"]] == [1]


def test_schedule_unknown_table(client):
    res = client.get("/api/cohort/schedule", params={"tableName": "users"})
    assert res.status_code == 404


def test_schedule_requires_table_name(client):
    res = client.get("/api/cohort/schedule")
    assert res.status_code == 400
    assert res.json()["error"] == "tableName is required"


def test_reschedule_window(client, session_store):
    seed(session_store)
    res = client.get(
        "/api/cohort/schedule/basic1_1_schedule/sessions/3/reschedule",
        params={"direction": "postpone"},
    )
    assert res.status_code == 200
    data = res.json()["data"]
    assert data["dates"] == [f"2024-03-{i}" for i in range(11, 17)]
    assert data["timeConstraint"] == "Select time after 10:00"
    assert data["currentDate"] == "2024-03-10"


def test_reschedule_window_bad_direction(client, session_store):
    seed(session_store)
    res = client.get(
        "/api/cohort/schedule/basic1_1_schedule/sessions/3/reschedule",
        params={"direction": "sideways"},
    )
    assert res.status_code == 400


def test_reschedule_window_missing_session(client, session_store):
    seed(session_store)
    res = client.get(
        "/api/cohort/schedule/basic1_1_schedule/sessions/99/reschedule",
        params={"direction": "prepone"},
    )
    assert res.status_code == 404
    assert res.json()["error"] == "Session not found"


def test_commit_reschedule(client, session_store):
    seed(session_store)
    res = client.post(
        "/api/cohort/schedule/basic1_1_schedule/sessions/3/reschedule",
        json={"direction": "postpone", "date": "2024-03-12", "time": "16:00"},
    )
    assert res.status_code == 200
    body = res.json()
    assert body["message"] == "Session postponed"
    assert body["data"] == {"date": "2024-03-12", "day": "Tuesday", "time": "16:00", "meetingLink": None}
    stored = session_store.timelines["basic1_1_schedule"][2]
    assert stored["teams_meeting_link"] is None
    assert stored["time"] == "16:00"
    assert stored["date"] == "2024-03-12"
    assert stored["day"] == "Tuesday"

    res = client.get("/api/cohort/schedule", params={"tableName": "basic1_1_schedule"})
    moved = [s for s in res.json()["data"] if s["id"] == 3][0]
    assert moved["date"] == "2024-03-12"


def test_commit_reschedule_same_day_wrong_direction(client, session_store):
    seed(session_store)
    res = client.post(
        "/api/cohort/schedule/basic1_1_schedule/sessions/3/reschedule",
        json={"direction": "postpone", "time": "09:00"},
    )
    assert res.status_code == 422
    assert res.json()["error"] == "For postpone on same date, time must be after 10:00"
    assert session_store.updates == []


def test_commit_reschedule_nothing_changed(client, session_store):
    seed(session_store)
    res = client.post(
        "/api/cohort/schedule/basic1_1_schedule/sessions/3/reschedule",
        json={"direction": "prepone"},
    )
    assert res.status_code == 422
    assert res.json()["error"] == "Please change either date or time"


def test_commit_reschedule_store_failure(client, session_store):
    seed(session_store)

    def broken(*args, **kwargs):
        from app.core.errors import UpstreamFailure
        raise UpstreamFailure("Failed to update session 3 in basic1_1_schedule", details="timeout")

    session_store.update_session = broken
    res = client.post(
        "/api/cohort/schedule/basic1_1_schedule/sessions/3/reschedule",
        json={"direction": "postpone", "date": "2024-03-11"},
    )
    assert res.status_code == 503
    assert res.json() == {"error": "Failed to update session 3 in basic1_1_schedule", "details": "timeout"}


def test_upcoming_sessions(client, session_store):
    seed(session_store)
    res = client.get("/api/mentor/sessions", params={"mentor_id": 1, "days": 5})
    assert res.status_code == 200
    data = res.json()["data"]
    assert data["dates"] == ["2024-03-05", "2024-03-06", "2024-03-07", "2024-03-08", "2024-03-09"]
    assert [s["date"] for s in data["sessions"]] == ["2024-03-05", "2024-03-07"]
    today = data["todaySession"]
    assert today["subject"] == "SQL"
    assert today["topic"] == "Joins"
    assert today["batchName"] == "Basic 2.1"
    assert today["meetingLink"] == "https://teams.example/meet"
    assert list(data["sessionsByDate"]) == ["2024-03-05", "2024-03-07"]


def test_upcoming_sessions_without_today(client, session_store):
    seed(session_store)
    res = client.get("/api/mentor/sessions", params={"mentor_id": 2})
    data = res.json()["data"]
    assert data["todaySession"] is None
    assert data["sessions"] == []


def test_mentor_batches(client, session_store):
    seed(session_store)
    res = client.get("/api/mentor/batches", params={"mentor_id": 2})
    batches = res.json()["data"]
    assert batches == [
        {"tableName": "basic1_1_schedule", "batchName": "Basic 1.1", "sessionCount": 1},
        {"tableName": "basic2_1_schedule", "batchName": "Basic 2.1", "sessionCount": 1},
    ]
