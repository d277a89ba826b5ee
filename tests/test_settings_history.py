"""
Tests for core.settings and core.history persistence.
"""

import json

import pytest

from rft_architect.core.history import HistoryStore, SessionRecord
from rft_architect.core.settings import GameSettings, SettingsStore
from rft_architect.puzzle.common import RftMode, SymbolMode, ConfigurationError


def _session(score, timestamp, depth=3):
    return SessionRecord(date="2026-01-01 10:00:00", timestamp=timestamp, total_score=score,
                         accuracy=80, questions_answered=10, highest_depth=depth,
                         avg_reaction_time=1500, active_modes=("LINEAR",), active_modifiers=("CIPHER",))


def test_settings_round_trip(tmp_path):
    store = SettingsStore(str(tmp_path / "settings.json"))
    settings = GameSettings(num_premises=5, symbol_mode=SymbolMode.VORONOI, enable_cipher=True)
    settings.active_modes[RftMode.SPATIAL_3D] = True
    store.save(settings)
    assert store.load() == settings


def test_settings_record_is_flat(tmp_path):
    record = GameSettings().to_record()
    assert record["active_modes.LINEAR"] is True
    assert record["active_modes.SPATIAL_3D"] is False
    assert record["symbol_mode"] == "EMOJI"
    assert all(not isinstance(v, dict) for v in record.values())


def test_missing_or_corrupt_settings_fall_back(tmp_path):
    path = tmp_path / "settings.json"
    store = SettingsStore(str(path))
    assert store.load() == GameSettings()
    path.write_text("{not json", encoding="utf-8")
    assert store.load() == GameSettings()
    path.write_text(json.dumps({"num_premises": 1}), encoding="utf-8")
    assert store.load() == GameSettings()


def test_from_record_skips_unknown_and_malformed_keys():
    settings = GameSettings.from_record({
        "num_premises": 4,
        "blind_mode": "yes",
        "active_modes.TEMPORAL": True,
        "symbol_mode": "GLYPHS",
        "colour_scheme": "dark",
    })
    assert settings.num_premises == 4
    assert settings.blind_mode is False
    assert settings.symbol_mode is SymbolMode.EMOJI


def test_validate():
    with pytest.raises(ConfigurationError):
        GameSettings(num_premises=1).validate()
    with pytest.raises(ConfigurationError):
        GameSettings(question_time_limit=0).validate()
    GameSettings().validate()


def test_copy_is_independent():
    settings = GameSettings()
    clone = settings.copy()
    clone.active_modes[RftMode.LINEAR] = False
    assert settings.active_modes[RftMode.LINEAR] is True


def test_history_append_and_summary(tmp_path):
    store = HistoryStore(str(tmp_path / "history.json"))
    assert store.summary()["sessions"] == 0
    store.append(_session(120, 2, depth=4))
    store.append(_session(300, 1))
    records = store.load_all()
    assert len(records) == 2
    assert records[0].active_modifiers == ("CIPHER",)
    assert [r.timestamp for r in store.recent()] == [1, 2]
    summary = store.summary()
    assert summary["best_score"] == 300
    assert summary["highest_depth"] == 4
    assert summary["total_questions"] == 20


def test_history_skips_malformed_entries(tmp_path):
    path = tmp_path / "history.json"
    path.write_text(json.dumps([_session(50, 1).to_dict(), {"date": "x"}]), encoding="utf-8")
    assert len(HistoryStore(str(path)).load_all()) == 1
    path.write_text(json.dumps({"not": "a list"}), encoding="utf-8")
    assert HistoryStore(str(path)).load_all() == []


def test_append_keeps_malformed_entries(tmp_path):
    path = tmp_path / "history.json"
    path.write_text(json.dumps([{"date": "x"}, _session(50, 1).to_dict()]), encoding="utf-8")
    store = HistoryStore(str(path))
    store.append(_session(70, 2))
    raw = json.loads(path.read_text(encoding="utf-8"))
    assert raw[0] == {"date": "x"}
    assert len(raw) == 3
    assert [r.total_score for r in store.load_all()] == [50, 70]
    assert not (tmp_path / "history.json.tmp").exists()


def test_append_refuses_unreadable_history(tmp_path):
    path = tmp_path / "history.json"
    path.write_text("[{broken", encoding="utf-8")
    store = HistoryStore(str(path))
    with pytest.raises(IOError):
        store.append(_session(10, 1))
    assert path.read_text(encoding="utf-8") == "[{broken"

    path.write_text(json.dumps({"not": "a list"}), encoding="utf-8")
    with pytest.raises(IOError):
        store.append(_session(10, 1))
