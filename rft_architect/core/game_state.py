from enum import Enum, auto
from typing import Callable, List, Optional, Tuple
import logging
import random
import time

from ..puzzle.common import ConfigurationError, RelationKeyword, INTERFERENCE_COLORS
from ..puzzle.cipher import CipherMap, generate_cipher_map, should_regenerate
from ..puzzle.generator import PuzzleGenerator
from ..puzzle.phrasing import render_premises, render_query, feedback_message
from ..puzzle.puzzle_types import RoundState
from ..puzzle.transform import draw_night
from .history import HistoryStore, RoundRecord, SessionRecord
from .settings import GameSettings, SettingsStore
from .timers import (PhaseTimer, QtTimerBackend, SESSION_TICK_MS, QUESTION_TICK_MS,
                     INTERFERENCE_TICK_MS)

logger = logging.getLogger(__name__)


class GamePhase(Enum):
    SETUP = auto()
    PREMISE_MEMORIZE = auto()
    INTERFERENCE = auto()
    QUESTION = auto()
    RESULT = auto()
    SESSION_END = auto()


class SessionState:
    """Score, streaks and clocks for one session. Mutated only by SessionController."""
    MIN_DEPTH = 2
    PROGRESS_THRESHOLD = 3  # Consecutive correct answers to add a premise
    MISTAKE_THRESHOLD = 2  # Consecutive mistakes to remove one
    POINTS_PER_PREMISE = 10
    MISTAKE_PENALTY = 20

    def __init__(self, depth: int = MIN_DEPTH):
        self.score = 0
        self.questions_attempted = 0
        self.correct_count = 0
        self.depth = max(self.MIN_DEPTH, depth)
        self.max_depth_reached = self.depth
        self.progress_streak = 0
        self.mistake_streak = 0
        self.cipher_map: Optional[CipherMap] = None
        self.session_seconds_remaining = 0
        self.session_seconds_elapsed = 0
        self.question_seconds_remaining = 0
        self.total_reaction_ms = 0
        self.modifiers_seen: List[str] = []

    def apply_score(self, correct: bool, depth: int) -> None:
        if correct:
            self.score += depth * self.POINTS_PER_PREMISE
        else:
            self.score = max(0, self.score - self.MISTAKE_PENALTY)

    def apply_adaptive(self, correct: bool, auto_progress: bool) -> int:
        """
        Updates the two hysteresis counters. Returns the depth change: +1, -1 or 0.
        """
        if correct:
            self.mistake_streak = 0
            if not auto_progress:
                return 0
            self.progress_streak += 1
            if self.progress_streak >= self.PROGRESS_THRESHOLD:
                self.depth += 1
                self.max_depth_reached = max(self.max_depth_reached, self.depth)
                self.progress_streak = 0
                return 1
            return 0

        self.progress_streak = 0
        if auto_progress and self.depth > self.MIN_DEPTH:
            self.mistake_streak += 1
            if self.mistake_streak >= self.MISTAKE_THRESHOLD:
                self.depth -= 1
                self.mistake_streak = 0
                return -1
        return 0

    @property
    def accuracy(self) -> int:
        if self.questions_attempted == 0:
            return 0
        return round(self.correct_count / self.questions_attempted * 100)

    @property
    def avg_reaction_ms(self) -> int:
        if self.questions_attempted == 0:
            return 0
        return round(self.total_reaction_ms / self.questions_attempted)


class SessionController:
    """
    Drives SETUP -> PREMISE_MEMORIZE -> [INTERFERENCE] -> QUESTION -> RESULT
    -> next round or SESSION_END.

    Input events arrive as method calls and clock ticks as timer callbacks.
    Events that do not belong to the current phase are ignored.
    """

    def __init__(self, settings: Optional[GameSettings] = None,
                 generator: Optional[PuzzleGenerator] = None,
                 rng: Optional[random.Random] = None,
                 settings_store: Optional[SettingsStore] = None,
                 history_store: Optional[HistoryStore] = None,
                 clock: Callable[[], float] = time.monotonic,
                 timer_backend=QtTimerBackend):
        self.rng = rng if rng is not None else random.Random()
        self.generator = generator if generator is not None else PuzzleGenerator(rng=self.rng)
        self.settings = (settings if settings is not None else GameSettings()).copy()
        self.settings_store = settings_store
        self.history_store = history_store
        self.clock = clock
        self._pending_settings: Optional[GameSettings] = None

        self.phase = GamePhase.SETUP
        self.session = SessionState(self.settings.num_premises)
        self.current_round: Optional[RoundState] = None
        self.key_changed = False
        self.yes_on_right = True
        self.feedback = ""
        self.session_log: List[RoundRecord] = []
        self.last_session_record: Optional[SessionRecord] = None

        self.interference_target: Optional[str] = None
        self.interference_current: Optional[str] = None
        self.interference_status = "WAIT"

        self._question_started_at = 0.0
        self._listeners: List[Callable[["SessionController"], None]] = []

        self.session_timer = PhaseTimer("session", SESSION_TICK_MS, self.on_session_tick, timer_backend)
        self.question_timer = PhaseTimer("question", QUESTION_TICK_MS, self.on_question_tick, timer_backend)
        self.interference_timer = PhaseTimer("interference", INTERFERENCE_TICK_MS,
                                             self.on_interference_tick, timer_backend)

    # --- Observers ---

    def add_listener(self, listener: Callable[["SessionController"], None]) -> None:
        self._listeners.append(listener)

    def _notify(self) -> None:
        for listener in self._listeners:
            listener(self)

    def cipher_legend(self) -> List[Tuple[RelationKeyword, str]]:
        """Codes shown this round, and only those."""
        if not self.settings.enable_cipher or self.current_round is None or not self.session.cipher_map:
            return []
        return self.session.cipher_map.legend(self.current_round.used_cipher_keys)

    # --- Settings ---

    def update_settings(self, new_settings: GameSettings) -> None:
        """Validates and stores new settings. Mid-session they take effect from the next round."""
        new_settings.validate()
        new_settings = new_settings.copy()
        if self.phase in (GamePhase.SETUP, GamePhase.SESSION_END):
            self.settings = new_settings
            self._pending_settings = None
        else:
            self._pending_settings = new_settings
            logger.info("Settings changed mid-session; applying from the next round.")
        self._save_settings(new_settings)
        self._notify()

    def _apply_pending_settings(self) -> None:
        if self._pending_settings is None:
            return
        previous_depth_setting = self.settings.num_premises
        self.settings = self._pending_settings
        self._pending_settings = None
        if self.settings.num_premises != previous_depth_setting:
            self.session.depth = self.settings.num_premises
            self.session.max_depth_reached = max(self.session.max_depth_reached, self.session.depth)
            self.session.progress_streak = 0
            self.session.mistake_streak = 0
            logger.info(f"Depth set to {self.session.depth} from settings.")

    def _sync_depth_to_settings(self, previous_depth: int) -> None:
        """Adaptive depth is remembered as the starting depth of the next session."""
        self.settings.num_premises = self.session.depth
        if self._pending_settings is not None and self._pending_settings.num_premises == previous_depth:
            self._pending_settings.num_premises = self.session.depth
        # Pending settings are what the player last saved; keep them on disk
        to_save = self._pending_settings if self._pending_settings is not None else self.settings
        try:
            self._save_settings(to_save)
        except IOError as e:
            logger.error(f"Depth change not persisted: {e}")

    def _save_settings(self, settings: GameSettings) -> None:
        if self.settings_store is not None:
            self.settings_store.save(settings)

    # --- Session lifecycle ---

    def start_session(self) -> None:
        if self.phase not in (GamePhase.SETUP, GamePhase.SESSION_END):
            logger.debug(f"start_session ignored in phase {self.phase.name}")
            return
        self._apply_pending_settings()
        self.settings.validate()
        if not self.settings.enabled_modes():
            logger.error("Cannot start session: no relational frame enabled.")
            raise ConfigurationError("Enable at least one relational frame before starting a session.")

        self.session = SessionState(self.settings.num_premises)
        self.session.session_seconds_remaining = self.settings.session_length_minutes * 60
        self.session.cipher_map = generate_cipher_map(self.rng)
        self.session_log = []
        self.last_session_record = None
        self.current_round = None
        self.session_timer.arm()
        logger.info(f"Session started: depth {self.session.depth}, frames "
                    f"{[m.name for m in self.settings.enabled_modes()]}, "
                    f"modifiers {self.settings.active_modifier_names()}")
        self._start_round()

    def next_round(self) -> None:
        if self.phase is not GamePhase.RESULT:
            logger.debug(f"next_round ignored in phase {self.phase.name}")
            return
        self._start_round()

    def _start_round(self) -> None:
        self._apply_pending_settings()
        settings = self.settings
        if not settings.disable_session_timer and self.session.session_seconds_remaining <= 0:
            self._end_session()
            return

        try:
            mode = self.generator.choose_mode(settings.active_modes)
        except ConfigurationError:
            logger.error(f"Round not started; staying in {self.phase.name}.")
            raise

        regenerate, key_changed = should_regenerate(settings.enable_cipher, self.session.cipher_map,
                                                    self.session.questions_attempted, self.rng)
        if regenerate:
            self.session.cipher_map = generate_cipher_map(self.rng)
            if key_changed:
                logger.info("Cipher key changed for this round.")
        is_night = draw_night(settings.enable_transformation, self.rng)

        self.current_round = self.generator.generate_round(
            mode, self.session.depth, settings.symbol_mode,
            cipher_map=self.session.cipher_map, cipher_enabled=settings.enable_cipher,
            is_night=is_night, key_changed=key_changed,
            enable_deictic=settings.enable_deictic, enable_movement=settings.enable_movement,
        )
        self.key_changed = key_changed
        self.yes_on_right = self.rng.random() < 0.5
        self.feedback = ""
        self.session.question_seconds_remaining = settings.question_time_limit

        if settings.blind_mode or key_changed:
            self._enter_phase(GamePhase.PREMISE_MEMORIZE)
        elif settings.enable_interference:
            self._start_interference()
        else:
            self._start_question_phase()
        self._notify()

    def _enter_phase(self, phase: GamePhase) -> None:
        # Phase-owned timers never outlive their phase
        self.question_timer.cancel()
        self.interference_timer.cancel()
        logger.debug(f"Phase {self.phase.name} -> {phase.name}")
        self.phase = phase

    def ready(self) -> None:
        """Leave the memorisation phase."""
        if self.phase is not GamePhase.PREMISE_MEMORIZE:
            logger.debug(f"ready ignored in phase {self.phase.name}")
            return
        if self.settings.enable_interference:
            self._start_interference()
        else:
            self._start_question_phase()
        self._notify()

    def _start_interference(self) -> None:
        self._enter_phase(GamePhase.INTERFERENCE)
        if "INTERFERENCE" not in self.current_round.modifiers:
            self.current_round.modifiers.append("INTERFERENCE")
        self.interference_status = "WAIT"
        self.interference_target = self.rng.choice(INTERFERENCE_COLORS)
        self.interference_current = None
        self.interference_timer.arm()

    def on_interference_tick(self) -> None:
        if self.phase is not GamePhase.INTERFERENCE:
            return
        self.interference_current = self.rng.choice(INTERFERENCE_COLORS)
        self.interference_status = "WAIT"
        self._notify()

    def signal_interference(self) -> None:
        if self.phase is not GamePhase.INTERFERENCE:
            logger.debug(f"Interference signal ignored in phase {self.phase.name}")
            return
        if self.interference_current == self.interference_target:
            self.interference_status = "HIT"
            self._start_question_phase()
        else:
            self.interference_status = "MISS"
        self._notify()

    def _start_question_phase(self) -> None:
        self._enter_phase(GamePhase.QUESTION)
        self._question_started_at = self.clock()
        self.session.question_seconds_remaining = self.settings.question_time_limit
        if self.settings.use_question_timer:
            self.question_timer.arm()

    def on_question_tick(self) -> None:
        if self.phase is not GamePhase.QUESTION:
            return
        if self.session.question_seconds_remaining <= 1:
            self.session.question_seconds_remaining = 0
            logger.info("Question timed out.")
            self.answer(None)
            return
        self.session.question_seconds_remaining -= 1
        self._notify()

    def answer(self, user_answer: Optional[bool]) -> Optional[RoundRecord]:
        """Scores an answer; None records a timeout."""
        if self.phase is not GamePhase.QUESTION:
            logger.debug(f"Answer ignored in phase {self.phase.name}")
            return None
        self.question_timer.cancel()
        reaction_ms = int(round((self.clock() - self._question_started_at) * 1000))
        round_state = self.current_round
        correct = round_state.check_answer(user_answer)

        session = self.session
        depth_used = session.depth
        session.questions_attempted += 1
        if correct:
            session.correct_count += 1
        session.apply_score(correct, depth_used)
        depth_change = session.apply_adaptive(correct, self.settings.auto_progress)
        session.total_reaction_ms += reaction_ms

        self.feedback = feedback_message(user_answer, correct, round_state.is_night)
        if depth_change > 0:
            self.feedback += " | DEPTH INCREASED"
        elif depth_change < 0:
            self.feedback += " | DEPTH DECREASED"
        if depth_change:
            logger.info(f"Depth {depth_used} -> {session.depth}")
            self._sync_depth_to_settings(depth_used)

        modifiers = list(round_state.modifiers)
        if self.settings.enable_cipher:
            modifiers.append("CIPHER")
        for modifier in modifiers:
            if modifier not in session.modifiers_seen:
                session.modifiers_seen.append(modifier)

        record = RoundRecord(
            id=session.questions_attempted,
            mode=round_state.mode.name,
            premises=tuple(render_premises(round_state)),
            question=render_query(round_state),
            user_answer="TIMEOUT" if user_answer is None else ("YES" if user_answer else "NO"),
            correct_answer="YES" if round_state.expected_answer else "NO",
            is_correct=correct,
            reaction_time_ms=reaction_ms,
            modifiers=tuple(modifiers),
        )
        self.session_log.insert(0, record)
        logger.info(f"Answer {record.user_answer} ({'correct' if correct else 'wrong'}) in {reaction_ms} ms; "
                    f"score {session.score}, depth {session.depth}")
        self._enter_phase(GamePhase.RESULT)
        self._notify()
        return record

    def on_session_tick(self) -> None:
        if self.phase in (GamePhase.SETUP, GamePhase.SESSION_END):
            return
        self.session.session_seconds_elapsed += 1
        if not self.settings.disable_session_timer:
            self.session.session_seconds_remaining -= 1
            if self.session.session_seconds_remaining <= 0:
                logger.info("Session time expired.")
                self._end_session()
                return
        self._notify()

    def abort(self) -> None:
        if self.phase in (GamePhase.SETUP, GamePhase.SESSION_END):
            logger.debug(f"abort ignored in phase {self.phase.name}")
            return
        logger.info("Session aborted.")
        self._end_session(aborted=True)

    def _end_session(self, aborted: bool = False) -> None:
        self.session_timer.cancel()
        self.question_timer.cancel()
        self.interference_timer.cancel()
        self.phase = GamePhase.SESSION_END

        session = self.session
        if aborted and session.questions_attempted == 0:
            logger.info("Aborted session had no answers; nothing recorded.")
            self._notify()
            return

        record = SessionRecord(
            date=time.strftime("%Y-%m-%d %H:%M:%S"),
            timestamp=int(time.time() * 1000),
            total_score=session.score,
            accuracy=session.accuracy,
            questions_answered=session.questions_attempted,
            highest_depth=session.max_depth_reached,
            avg_reaction_time=session.avg_reaction_ms,
            active_modes=tuple(m.name for m in self.settings.enabled_modes()),
            active_modifiers=tuple(session.modifiers_seen),
        )
        self.last_session_record = record
        logger.info(f"Session ended: score {record.total_score}, accuracy {record.accuracy}%, "
                    f"{record.questions_answered} questions, highest depth {record.highest_depth}")
        if self.history_store is not None:
            try:
                self.history_store.append(record)
            except IOError as e:
                logger.error(f"Session record kept in memory only: {e}")
        self._notify()

    def reset(self) -> None:
        """SESSION_END -> SETUP."""
        if self.phase is not GamePhase.SESSION_END:
            logger.debug(f"reset ignored in phase {self.phase.name}")
            return
        self._enter_phase(GamePhase.SETUP)
        self._notify()
