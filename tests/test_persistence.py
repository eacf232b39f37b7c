import json
import pytest
from colormatch.models import Difficulty
from colormatch.services.persistence import InMemoryStore, JsonFileStore, PersistenceError, PersistenceGateway
from colormatch.state import GameEngine

def test_defaults_for_missing_keys():
    store = InMemoryStore()
    assert store.get_int("highScore") == 0
    assert store.get_bool("soundEnabled") is False
    assert store.get_string("difficulty") is None

def test_typed_getters_ignore_wrong_types():
    store = InMemoryStore({"highScore": "lots", "soundEnabled": 1, "difficulty": 3})
    assert store.get_int("highScore") == 0
    assert store.get_bool("soundEnabled") is False
    assert store.get_string("difficulty") is None

def test_json_store_round_trips_through_disk(tmp_path):
    path = tmp_path / "nested" / "store.json"
    store = JsonFileStore(str(path))
    store.set_int("highScore", 120)
    store.set_bool("soundEnabled", True)
    store.set_string("difficulty", "Hard")
    reopened = JsonFileStore(str(path))
    assert reopened.get_int("highScore") == 120
    assert reopened.get_bool("soundEnabled") is True
    assert reopened.get_string("difficulty") == "Hard"
    assert json.loads(path.read_text(encoding="utf-8"))["highScore"] == 120

def test_json_store_treats_corrupt_file_as_empty(tmp_path):
    path = tmp_path / "store.json"
    path.write_text("{not json", encoding="utf-8")
    store = JsonFileStore(str(path))
    assert store.get_int("highScore") == 0
    store.set_int("highScore", 5)
    assert store.get_int("highScore") == 5

def test_json_store_write_failure_raises(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    store = JsonFileStore(str(blocker / "store.json"))
    with pytest.raises(PersistenceError):
        store.set_int("highScore", 1)

class BrokenStore(PersistenceGateway):
    def _read(self, key):
        raise PersistenceError("unavailable")

    def _write(self, key, value):
        raise PersistenceError("unavailable")

def test_engine_falls_back_to_defaults_when_storage_fails(make_engine):
    engine = make_engine(store=BrokenStore())
    snap = engine.snapshot()
    assert snap.high_score == 0
    assert snap.sound_enabled is False
    assert snap.difficulty == Difficulty.NORMAL

def test_engine_keeps_playing_when_writes_fail(make_engine):
    engine = make_engine(store=BrokenStore())
    engine.start_game()
    engine.select_color(engine.session.target_color)
    engine.end_game()
    engine.update_settings(True, Difficulty.HARD)
    snap = engine.snapshot()
    assert snap.high_score == snap.score > 0
    assert snap.difficulty == Difficulty.HARD

def test_engine_loads_saved_values(make_engine):
    store = InMemoryStore({"highScore": 77, "soundEnabled": True, "difficulty": "Easy", "gamesPlayed": 3})
    engine = make_engine(store=store)
    snap = engine.snapshot()
    assert (snap.high_score, snap.sound_enabled, snap.difficulty, snap.games_played) == (77, True, Difficulty.EASY, 3)

def test_unknown_difficulty_label_falls_back_to_normal(make_engine):
    engine = make_engine(store=InMemoryStore({"difficulty": "Nightmare"}))
    assert engine.snapshot().difficulty == Difficulty.NORMAL

def test_json_store_treats_undecodable_file_as_empty(tmp_path):
    path = tmp_path / "store.json"
    path.write_bytes(b'{"highScore": 5, "x": "\xff\xfe"}')
    store = JsonFileStore(str(path))
    assert store.get_int("highScore") == 0
    store.set_int("highScore", 9)
    assert store.get_int("highScore") == 9
    assert json.loads(path.read_text(encoding="utf-8")) == {"highScore": 9}

def test_json_store_removes_temp_file_when_replace_fails(tmp_path, monkeypatch):
    path = tmp_path / "store.json"
    store = JsonFileStore(str(path))

    def failing_replace(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr("colormatch.services.persistence.os.replace", failing_replace)
    for _ in range(3):
        with pytest.raises(PersistenceError):
            store.set_int("highScore", 1)
    assert list(tmp_path.iterdir()) == []
