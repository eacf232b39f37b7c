import pytest
from fastapi.testclient import TestClient
from colormatch import main

@pytest.fixture
def client(monkeypatch, engine):
    monkeypatch.setattr(main, "engine", engine)
    return TestClient(main.app)

def test_initial_snapshot(client):
    res = client.get("/api/game")
    assert res.status_code == 200
    body = res.json()
    assert body["state"] == "NotStarted"
    assert body["difficulty"] == "Normal"
    assert body["high_score"] == 0

def test_start_and_select_correct(client, engine):
    body = client.post("/api/game/start").json()
    assert body["state"] == "Playing"
    assert body["time_remaining"] == 30.0
    assert len(body["color_options"]) == 4
    target = body["target_color"]["hex"]
    body = client.post("/api/game/select", json={"color": target.upper()}).json()
    assert body["score"] == 12
    assert body["streak"] == 1

def test_select_unknown_color_ends_game(client):
    client.post("/api/game/start")
    body = client.post("/api/game/select", json={"color": "#010203"}).json()
    assert body["state"] == "GameOver"
    assert client.post("/api/game/menu").json()["state"] == "NotStarted"

def test_pause_and_resume(client, engine):
    client.post("/api/game/start")
    engine._countdown.tick(4)
    paused = client.post("/api/game/pause").json()
    assert paused["state"] == "Paused"
    resumed = client.post("/api/game/resume").json()
    assert resumed["state"] == "Playing"
    assert resumed["time_remaining"] == paused["time_remaining"] == pytest.approx(29.6)

def test_invalid_transition_returns_unchanged_snapshot(client):
    before = client.get("/api/game").json()
    after = client.post("/api/game/pause").json()
    assert after == before

def test_settings_round_trip(client, store):
    res = client.put("/api/settings", json={"sound_enabled": True, "difficulty": "Hard"})
    assert res.status_code == 200
    assert res.json() == {"sound_enabled": True, "difficulty": "Hard"}
    assert client.get("/api/settings").json() == {"sound_enabled": True, "difficulty": "Hard"}
    assert store.get_string("difficulty") == "Hard"
    assert len(client.post("/api/game/start").json()["color_options"]) == 6

def test_settings_rejects_unknown_difficulty(client):
    res = client.put("/api/settings", json={"sound_enabled": True, "difficulty": "Extreme"})
    assert res.status_code == 422

def test_stats_and_difficulties(client):
    client.post("/api/game/start")
    stats = client.get("/api/stats").json()
    assert stats == {"high_score": 0, "games_played": 1, "difficulty": "Normal"}
    table = {d["name"]: d for d in client.get("/api/difficulties").json()}
    assert table["Easy"]["time_limit"] == 45.0
    assert table["Hard"]["option_count"] == 6
    assert table["Normal"]["description"] == "Standard time, 4 color options"

def test_palette(client):
    colors = client.get("/api/palette").json()
    assert len(colors) == 8
    assert {"hex": "#fbd600", "name": "Yellow"} in colors
