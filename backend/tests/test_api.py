import pytest
from sqlalchemy.orm import sessionmaker

from gameprogress.database import build_engine, get_db
from gameprogress.main import app
from gameprogress.services.locks import active_lock_count


def _post_session(client, student_id="0440000001", game=1, score=30, misses=0, time_spent=1000):
    return client.post("/api/sessions", json={
        "studentId": student_id,
        "gameNum": game,
        "score": score,
        "misses": misses,
        "timeSpent": time_spent,
    })


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"


def test_request_id_header(client):
    resp = client.get("/health")
    assert len(resp.headers["X-Request-ID"]) == 36


def test_profile_lookup_creates_student(client):
    resp = client.get("/api/students/0440000001")
    assert resp.status_code == 200
    assert resp.json() == {
        "studentId": "0440000001",
        "name": "Student 0440000001",
        "class": "Fun Class",
        "sessions": 0,
        "badges": [],
        "highScore": 0,
        "overallScore": 0,
        "timeSpent": {},
    }


def test_session_example(client):
    client.get("/api/students/0440000001")
    resp = _post_session(client, game=1, score=30, misses=2, time_spent=12000)

    assert resp.status_code == 200
    body = resp.json()
    student = body["student"]
    assert student["sessions"] == 1
    assert student["highScore"] == 30
    assert len(student["badges"]) == 1
    assert student["overallScore"] == 30
    assert student["timeSpent"] == {"1": 12000}
    assert body["newBadge"]["game"] == 1
    assert body["newBadge"]["score"] == 30
    assert body["newBadge"]["type"] == "Master of Game 1"


def test_session_without_badge_returns_null(client):
    client.get("/api/students/s-1")
    resp = _post_session(client, "s-1", score=20)
    assert resp.status_code == 200
    assert resp.json()["newBadge"] is None


def test_replay_does_not_award_second_badge(client):
    client.get("/api/students/s-1")
    assert _post_session(client, "s-1", game=9, score=21).json()["newBadge"]["score"] == 21

    body = _post_session(client, "s-1", game=9, score=25).json()
    assert body["newBadge"] is None
    assert body["student"]["highScore"] == 25
    assert body["student"]["overallScore"] == 21
    assert [b["game"] for b in body["student"]["badges"]] == [9]


def test_session_for_unknown_student_is_404(client):
    resp = _post_session(client, "ghost")
    assert resp.status_code == 404
    assert resp.json()["error"] == "NotFound"
    assert client.get("/api/admin/students").json() == []


@pytest.mark.parametrize("payload", [
    {"gameNum": 1, "score": 30, "misses": 0, "timeSpent": 100},
    {"studentId": "s-1", "gameNum": 1, "score": "lots", "misses": 0, "timeSpent": 100},
    {"studentId": "s-1", "gameNum": 1, "score": -5, "misses": 0, "timeSpent": 100},
    {"studentId": "s-1", "gameNum": 1, "score": True, "misses": 0, "timeSpent": 100},
    {"studentId": "s-1", "gameNum": 1, "score": "30", "misses": 0, "timeSpent": 100},
    {"studentId": "s-1", "gameNum": 1.5, "score": 30, "misses": 0, "timeSpent": 100},
    {"studentId": "s-1", "gameNum": 1, "score": 30, "misses": False, "timeSpent": 100},
    {"studentId": "s-1", "gameNum": 1, "score": 30, "misses": 0, "timeSpent": "100"},
    {"studentId": "   ", "gameNum": 1, "score": 30, "misses": 0, "timeSpent": 100},
    {"studentId": "x" * 65, "gameNum": 1, "score": 30, "misses": 0, "timeSpent": 100},
    {"studentId": "s-1", "score": 30},
])
def test_malformed_session_is_400(client, payload):
    client.get("/api/students/s-1")
    resp = client.post("/api/sessions", json=payload)

    assert resp.status_code == 400
    assert resp.json()["error"] == "BadRequest"
    assert client.get("/api/students/s-1").json()["sessions"] == 0


def test_update_profile(client):
    client.get("/api/students/s-1")
    resp = client.put("/api/students/s-1", json={"name": "Ada", "class": "Blue Room"})

    assert resp.status_code == 200
    assert resp.json()["name"] == "Ada"
    assert resp.json()["class"] == "Blue Room"


def test_update_profile_ignores_stat_fields(client):
    client.get("/api/students/s-1")
    resp = client.put("/api/students/s-1", json={"name": "Ada", "highScore": 999, "sessions": 5})

    assert resp.status_code == 200
    assert resp.json()["highScore"] == 0
    assert resp.json()["sessions"] == 0


def test_update_unknown_profile_is_404(client):
    resp = client.put("/api/students/ghost", json={"name": "Nobody"})
    assert resp.status_code == 404
    assert resp.json() == {"error": "NotFound", "message": "Student ghost not found"}


def test_delete_then_lookup_recreates(client):
    client.get("/api/students/s-1")
    _post_session(client, "s-1", score=50)

    resp = client.delete("/api/students/s-1")
    assert resp.status_code == 200
    assert client.delete("/api/students/s-1").status_code == 404

    fresh = client.get("/api/students/s-1").json()
    assert fresh["sessions"] == 0
    assert fresh["badges"] == []
    assert fresh["highScore"] == 0


def test_admin_create_and_conflict(client):
    payload = {"studentId": "s-9", "name": "Grace", "class": "Red Room"}
    resp = client.post("/api/admin/students", json=payload)
    assert resp.status_code == 201
    assert resp.json()["name"] == "Grace"
    assert resp.json()["sessions"] == 0

    resp = client.post("/api/admin/students", json=payload)
    assert resp.status_code == 409
    assert resp.json()["error"] == "Conflict"


def test_admin_create_requires_all_fields(client):
    resp = client.post("/api/admin/students", json={"studentId": "s-9", "name": "Grace"})
    assert resp.status_code == 400


def test_admin_list_sorted_by_name(client):
    for student_id, name in [("a", "Zoe"), ("b", "Ann"), ("c", "Max")]:
        client.post("/api/admin/students", json={"studentId": student_id, "name": name, "class": "X"})

    names = [s["name"] for s in client.get("/api/admin/students").json()]
    assert names == ["Ann", "Max", "Zoe"]


def test_leaderboard_top_ten(client):
    for i in range(12):
        student_id = "s-{:02d}".format(i)
        client.get("/api/students/{}".format(student_id))
        _post_session(client, student_id, game=2, score=i * 3)

    board = client.get("/api/leaderboard").json()
    assert len(board) == 10
    assert [s["highScore"] for s in board] == [33, 30, 27, 24, 21, 18, 15, 12, 9, 6]

    assert len(client.get("/api/leaderboard", params={"limit": 3}).json()) == 3
    assert client.get("/api/leaderboard", params={"limit": 0}).status_code == 400


def test_games_catalog(client):
    body = client.get("/api/games").json()
    assert body["badge_threshold"] == 20
    first = body["games"][0]
    assert first["num"] == 1
    assert first["badge"] == "Master of Game 1"


def test_store_unavailable_is_503(tmp_path):
    broken = build_engine("sqlite:///{}".format(tmp_path / "missing-dir" / "progress.db"))
    factory = sessionmaker(autocommit=False, autoflush=False, bind=broken)

    def override_get_db():
        session = factory()
        try:
            yield session
        finally:
            session.close()

    from fastapi.testclient import TestClient
    app.dependency_overrides[get_db] = override_get_db
    try:
        with TestClient(app) as test_client:
            resp = test_client.get("/api/students/s-1")
    finally:
        app.dependency_overrides.clear()
        broken.dispose()

    assert resp.status_code == 503
    assert resp.json()["error"] == "Unavailable"


def test_overlong_student_id_is_400(client):
    long_id = "x" * 65
    for resp in (client.get("/api/students/{}".format(long_id)),
                 client.put("/api/students/{}".format(long_id), json={"name": "Ada"}),
                 client.delete("/api/students/{}".format(long_id))):
        assert resp.status_code == 400
        assert resp.json()["error"] == "BadRequest"
    assert client.get("/api/admin/students").json() == []


def test_blank_profile_fields_are_400(client):
    resp = client.post("/api/admin/students", json={"studentId": "s-9", "name": "   ", "class": "  "})
    assert resp.status_code == 400
    assert client.get("/api/admin/students").json() == []

    client.get("/api/students/s-1")
    assert client.put("/api/students/s-1", json={"name": "  "}).status_code == 400
    assert client.get("/api/students/s-1").json()["name"] == "Student s-1"


def test_admin_create_trims_whitespace(client):
    resp = client.post("/api/admin/students", json={"studentId": " s-9 ", "name": " Grace ", "class": "Red "})
    assert resp.status_code == 201
    assert resp.json()["studentId"] == "s-9"
    assert resp.json()["name"] == "Grace"
    assert resp.json()["class"] == "Red"


def test_unknown_ids_leave_no_write_locks(client):
    for i in range(50):
        assert _post_session(client, "ghost-{}".format(i)).status_code == 404
        assert client.put("/api/students/ghost-{}".format(i), json={"name": "x"}).status_code == 404
        assert client.delete("/api/students/ghost-{}".format(i)).status_code == 404
    assert active_lock_count() == 0
