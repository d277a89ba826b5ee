"""
Tests for core.game_state: adaptive depth, scoring and the session controller.
"""

import pytest

from rft_architect.core.game_state import GamePhase, SessionState
from rft_architect.core.settings import SettingsStore
from rft_architect.puzzle.common import RftMode, ConfigurationError, INTERFERENCE_COLORS


def _answer_correctly(controller):
    return controller.answer(controller.current_round.expected_answer)


def _answer_wrongly(controller):
    return controller.answer(not controller.current_round.expected_answer)


# --- SessionState ---

def test_three_correct_answers_raise_depth():
    state = SessionState(2)
    assert state.apply_adaptive(True, True) == 0
    assert state.apply_adaptive(True, True) == 0
    assert state.apply_adaptive(True, True) == 1
    assert state.depth == 3
    assert state.progress_streak == 0
    assert state.max_depth_reached == 3


def test_two_mistakes_lower_depth():
    state = SessionState(4)
    assert state.apply_adaptive(False, True) == 0
    assert state.apply_adaptive(False, True) == -1
    assert state.depth == 3
    assert state.mistake_streak == 0


def test_depth_floor_is_two():
    state = SessionState(2)
    for _ in range(10):
        assert state.apply_adaptive(False, True) == 0
    assert state.depth == 2
    assert SessionState(0).depth == 2


def test_streaks_reset_on_opposite_answer():
    state = SessionState(3)
    state.apply_adaptive(True, True)
    state.apply_adaptive(True, True)
    state.apply_adaptive(False, True)
    assert state.progress_streak == 0
    state.apply_adaptive(True, True)
    assert state.mistake_streak == 0
    assert state.depth == 3


def test_auto_progress_off_keeps_depth():
    state = SessionState(3)
    for correct in [True] * 6 + [False] * 4:
        assert state.apply_adaptive(correct, False) == 0
    assert state.depth == 3


def test_scoring():
    state = SessionState(3)
    state.apply_score(True, 3)
    assert state.score == 30
    state.apply_score(False, 3)
    assert state.score == 10
    state.apply_score(False, 3)
    assert state.score == 0


# --- SessionController ---

def test_start_without_frames_raises(make_controller):
    controller = make_controller(active_modes={mode: False for mode in RftMode})
    with pytest.raises(ConfigurationError):
        controller.start_session()
    assert controller.phase is GamePhase.SETUP
    assert controller.current_round is None
    assert not controller.session_timer.active


def test_start_goes_straight_to_question(make_controller):
    controller = make_controller()
    controller.start_session()
    assert controller.phase is GamePhase.QUESTION
    assert controller.current_round is not None
    assert controller.session_timer.active
    assert controller.question_timer.active


def test_blind_mode_memorise_first(make_controller):
    controller = make_controller(blind_mode=True)
    controller.start_session()
    assert controller.phase is GamePhase.PREMISE_MEMORIZE
    controller.answer(True)
    assert controller.phase is GamePhase.PREMISE_MEMORIZE
    controller.ready()
    assert controller.phase is GamePhase.QUESTION


def test_key_change_forces_memorise(make_controller, monkeypatch):
    monkeypatch.setattr("rft_architect.core.game_state.should_regenerate",
                        lambda enabled, current, attempted, rng: (True, True))
    controller = make_controller(enable_cipher=True)
    controller.start_session()
    assert controller.key_changed
    assert controller.phase is GamePhase.PREMISE_MEMORIZE
    assert "KEY_CHANGE" in controller.current_round.modifiers


def test_cipher_legend_lists_round_keys(make_controller):
    controller = make_controller(enable_cipher=True, active_modes={RftMode.HIERARCHY: True})
    controller.start_session()
    legend = dict(controller.cipher_legend())
    assert set(legend) == set(controller.current_round.used_cipher_keys)
    for keyword, code in legend.items():
        assert controller.session.cipher_map.get(keyword) == code


def test_correct_answer_scores_and_logs(make_controller, fake_clock):
    controller = make_controller()
    controller.start_session()
    fake_clock.advance(1.25)
    record = _answer_correctly(controller)
    assert controller.phase is GamePhase.RESULT
    assert record.is_correct
    assert record.reaction_time_ms == 1250
    assert controller.session.score == 20
    assert controller.session_log[0] is record
    assert not controller.question_timer.active
    assert controller.feedback in ("VERIFIED", "INVERSION SUCCESSFUL")


def test_adaptive_depth_through_controller(make_controller):
    controller = make_controller(num_premises=2)
    controller.start_session()
    for _ in range(3):
        _answer_correctly(controller)
        controller.next_round()
    assert controller.session.depth == 3
    assert controller.current_round.depth == 3
    assert controller.settings.num_premises == 3

    _answer_wrongly(controller)
    controller.next_round()
    record = _answer_wrongly(controller)
    assert not record.is_correct
    assert controller.session.depth == 2
    assert controller.feedback.endswith("DEPTH DECREASED")


def test_question_timeout(make_controller):
    controller = make_controller(question_time_limit=2)
    controller.start_session()
    controller.on_question_tick()
    assert controller.session.question_seconds_remaining == 1
    assert controller.phase is GamePhase.QUESTION
    controller.on_question_tick()
    assert controller.phase is GamePhase.RESULT
    record = controller.session_log[0]
    assert record.user_answer == "TIMEOUT"
    assert not record.is_correct
    assert controller.feedback.startswith("TIMEOUT")


def test_stale_question_tick_is_ignored(make_controller):
    controller = make_controller(question_time_limit=1)
    controller.start_session()
    _answer_correctly(controller)
    # A tick queued before the answer arrives afterwards
    controller.question_timer._backend.fire()
    assert controller.phase is GamePhase.RESULT
    assert len(controller.session_log) == 1


def test_interference_hit_and_miss(make_controller):
    controller = make_controller(enable_interference=True)
    controller.start_session()
    assert controller.phase is GamePhase.INTERFERENCE
    assert controller.interference_target in INTERFERENCE_COLORS
    assert "INTERFERENCE" in controller.current_round.modifiers

    controller.interference_current = next(c for c in INTERFERENCE_COLORS
                                           if c != controller.interference_target)
    controller.signal_interference()
    assert controller.interference_status == "MISS"
    assert controller.phase is GamePhase.INTERFERENCE

    for _ in range(500):
        controller.on_interference_tick()
        if controller.interference_current == controller.interference_target:
            break
    controller.signal_interference()
    assert controller.interference_status == "HIT"
    assert controller.phase is GamePhase.QUESTION
    assert not controller.interference_timer.active


def test_settings_change_applies_next_round(make_controller):
    controller = make_controller()
    controller.start_session()
    new_settings = controller.settings.copy()
    new_settings.active_modes = {RftMode.HIERARCHY: True}
    new_settings.blind_mode = True
    controller.update_settings(new_settings)
    assert not controller.settings.blind_mode
    assert controller.phase is GamePhase.QUESTION

    _answer_correctly(controller)
    controller.next_round()
    assert controller.settings.blind_mode
    assert controller.phase is GamePhase.PREMISE_MEMORIZE
    assert controller.current_round.mode is RftMode.HIERARCHY


def test_session_timer_expiry_records_history(make_controller, history_store):
    controller = make_controller(session_length_minutes=1)
    controller.start_session()
    _answer_correctly(controller)
    for _ in range(60):
        controller.on_session_tick()
    assert controller.phase is GamePhase.SESSION_END
    assert not controller.session_timer.active
    records = history_store.load_all()
    assert len(records) == 1
    assert records[0].questions_answered == 1
    assert records[0].total_score == 20
    assert controller.last_session_record == records[0]


def test_untimed_session_counts_up(make_controller):
    controller = make_controller(session_length_minutes=1, disable_session_timer=True)
    controller.start_session()
    for _ in range(90):
        controller.on_session_tick()
    assert controller.phase is GamePhase.QUESTION
    assert controller.session.session_seconds_elapsed == 90


def test_abort_without_answers_records_nothing(make_controller, history_store):
    controller = make_controller()
    controller.start_session()
    controller.abort()
    assert controller.phase is GamePhase.SESSION_END
    assert history_store.load_all() == []
    controller.reset()
    assert controller.phase is GamePhase.SETUP


def test_abort_after_answers_records_session(make_controller, history_store):
    controller = make_controller()
    controller.start_session()
    _answer_wrongly(controller)
    controller.abort()
    records = history_store.load_all()
    assert len(records) == 1
    assert records[0].accuracy == 0


def test_listeners_are_notified(make_controller):
    controller = make_controller()
    phases = []
    controller.add_listener(lambda c: phases.append(c.phase))
    controller.start_session()
    _answer_correctly(controller)
    assert phases[0] is GamePhase.QUESTION
    assert phases[-1] is GamePhase.RESULT


def test_depth_change_keeps_pending_settings_on_disk(make_controller, tmp_path):
    """A mid-session settings change survives an adaptive save in the same round."""
    store = SettingsStore(str(tmp_path / "settings.json"))
    controller = make_controller(settings_store=store, num_premises=2)
    controller.start_session()
    for _ in range(2):
        _answer_correctly(controller)
        controller.next_round()

    changed = controller.settings.copy()
    changed.blind_mode = True
    controller.update_settings(changed)
    assert store.load().blind_mode

    _answer_correctly(controller)
    assert controller.session.depth == 3
    saved = store.load()
    assert saved.blind_mode
    assert saved.num_premises == 3

    controller.next_round()
    assert controller.settings.blind_mode
    assert controller.session.depth == 3


def test_night_round_tagged_once(make_controller):
    controller = make_controller(enable_transformation=True)
    controller.start_session()
    night_records = []
    for _ in range(30):
        is_night = controller.current_round.is_night
        record = _answer_correctly(controller)
        if is_night:
            night_records.append(record)
        controller.next_round()
        if controller.phase is not GamePhase.QUESTION:
            break
    assert night_records
    for record in night_records:
        assert record.modifiers.count("TRANSFORM") == 1
        assert "NIGHT" not in record.modifiers
