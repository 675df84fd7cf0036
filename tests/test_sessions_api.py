from fastapi.testclient import TestClient

import config
from db import database
from main import app


def _setup(tmp_path, monkeypatch) -> TestClient:
    config_dir = tmp_path / ".spacedeck"
    config_dir.mkdir()
    config_path = config_dir / "config.toml"
    config_path.write_text(
        "\n".join(
            [
                "[scheduler]",
                "preset = \"flat\"",
                "",
                "[session]",
                "study_persists = true",
                "practice_persists = false",
            ]
        ),
        encoding="utf-8",
    )
    monkeypatch.setattr(config, "CONFIG_DIR", config_dir)
    monkeypatch.setattr(config, "CONFIG_PATH", config_path)
    monkeypatch.setattr(database, "CONFIG_DIR", config_dir)
    monkeypatch.setattr(database, "DB_PATH", config_dir / "spacedeck.db")
    for name in ("SPACEDECK_SCHEDULE", "PRACTICE_PERSISTS", "STUDY_PERSISTS", "SHUFFLE_PRACTICE"):
        monkeypatch.delenv(name, raising=False)
    database.init_db()
    return TestClient(app)


def test_card_crud_and_preview(tmp_path, monkeypatch):
    client = _setup(tmp_path, monkeypatch)

    response = client.post("/cards", json={"front": "kot", "back": "cat"})
    assert response.status_code == 201
    card = response.json()
    assert card["repetitions"] == 0
    assert card["ease_factor"] == 2.5
    assert card["phase"] == "graduated"
    assert card["mastery_status"] == "new"

    assert client.post("/cards", json={"front": " ", "back": "cat"}).status_code == 422

    hints = client.get(f"/cards/{card['id']}/preview").json()
    assert hints == {"fail": "<1min", "good": "1 day", "easy": "1 day"}

    assert [c["id"] for c in client.get("/cards").json()] == [card["id"]]
    assert client.delete(f"/cards/{card['id']}").status_code == 204
    assert client.get(f"/cards/{card['id']}").status_code == 404


def test_study_session_flow(tmp_path, monkeypatch):
    client = _setup(tmp_path, monkeypatch)
    first = client.post("/cards", json={"front": "kot", "back": "cat"}).json()
    second = client.post("/cards", json={"front": "pies", "back": "dog"}).json()

    response = client.post("/sessions", json={"mode": "study"})
    assert response.status_code == 201
    session = response.json()
    session_id = session["id"]
    assert session["total"] == 2
    assert session["persist"] is True
    assert session["current"]["id"] == first["id"]
    assert session["hints"]["good"] == "1 day"

    session = client.post(f"/sessions/{session_id}/review", json={"quality": "again"}).json()
    assert session["cursor"] == 0
    assert session["total"] == 2
    assert session["current"]["id"] == second["id"]
    assert session["can_undo"] is True

    bad = client.post(f"/sessions/{session_id}/review", json={"quality": 4})
    assert bad.status_code == 422

    session = client.post(f"/sessions/{session_id}/undo").json()
    assert session["current"]["id"] == first["id"]
    assert session["can_undo"] is False
    assert client.get(f"/cards/{first['id']}").json()["last_reviewed_at"] is None

    client.post(f"/sessions/{session_id}/review", json={"quality": 3})
    session = client.post(f"/sessions/{session_id}/review", json={"quality": "good"}).json()
    assert session["state"] == "complete"
    assert session["reviewed_count"] == 2
    assert session["current"] is None

    stats = client.get("/stats").json()
    assert stats["total"] == 2
    assert stats["due"] == 0
    assert stats["today_reviewed"] == 3
    assert stats["streak"] == 1

    empty = client.post("/sessions", json={"mode": "study"})
    assert empty.status_code == 409


def test_practice_session_does_not_persist_by_default(tmp_path, monkeypatch):
    client = _setup(tmp_path, monkeypatch)
    card = client.post("/cards", json={"front": "kot", "back": "cat"}).json()

    session = client.post("/sessions", json={"mode": "practice"}).json()
    assert session["persist"] is False
    session = client.post(f"/sessions/{session['id']}/review", json={"quality": "easy"}).json()
    assert session["state"] == "complete"
    assert client.get(f"/cards/{card['id']}").json()["repetitions"] == 0

    assert client.delete(f"/sessions/{session['id']}").status_code == 204
    assert client.get(f"/sessions/{session['id']}").status_code == 404


def test_practice_session_can_opt_into_persistence(tmp_path, monkeypatch):
    client = _setup(tmp_path, monkeypatch)
    card = client.post("/cards", json={"front": "kot", "back": "cat"}).json()

    session = client.post("/sessions", json={"mode": "practice", "persist": True}).json()
    client.post(f"/sessions/{session['id']}/review", json={"quality": "good"})
    assert client.get(f"/cards/{card['id']}").json()["repetitions"] == 1


def test_edit_card_text(tmp_path, monkeypatch):
    client = _setup(tmp_path, monkeypatch)
    card = client.post("/cards", json={"front": "kot", "back": "cat"}).json()

    response = client.patch(f"/cards/{card['id']}", json={"front": " kotek ", "back": "kitten"})
    assert response.status_code == 200
    edited = response.json()
    assert (edited["front"], edited["back"]) == ("kotek", "kitten")
    assert edited["due_at"] == card["due_at"]

    assert client.patch(f"/cards/{card['id']}", json={"front": "", "back": "kitten"}).status_code == 422
    assert client.patch("/cards/missing", json={"front": "a", "back": "b"}).status_code == 404


def test_review_in_open_session_keeps_edited_text(tmp_path, monkeypatch):
    client = _setup(tmp_path, monkeypatch)
    card = client.post("/cards", json={"front": "kot", "back": "cat"}).json()
    session = client.post("/sessions", json={"mode": "study"}).json()

    client.patch(f"/cards/{card['id']}", json={"front": "kotek", "back": "kitten"})
    client.post(f"/sessions/{session['id']}/review", json={"quality": "good"})
    saved = client.get(f"/cards/{card['id']}").json()
    assert (saved["front"], saved["back"]) == ("kotek", "kitten")
    assert saved["repetitions"] == 1

    client.post(f"/sessions/{session['id']}/undo")
    saved = client.get(f"/cards/{card['id']}").json()
    assert (saved["front"], saved["back"]) == ("kotek", "kitten")
    assert saved["repetitions"] == 0


def test_starting_a_session_evicts_previous_ones(tmp_path, monkeypatch):
    client = _setup(tmp_path, monkeypatch)
    client.post("/cards", json={"front": "kot", "back": "cat"})

    session_ids = []
    for _ in range(5):
        session = client.post("/sessions", json={"mode": "practice"}).json()
        session = client.post(f"/sessions/{session['id']}/review", json={"quality": "good"}).json()
        assert session["state"] == "complete"
        session_ids.append(session["id"])
    assert len(app.state.sessions) == 1

    # the completed session stays open for undo until the next start
    assert client.post(f"/sessions/{session_ids[-1]}/undo").json()["state"] == "active"
    assert client.get(f"/sessions/{session_ids[0]}").status_code == 404
