"""
Pytest configuration for RFT Architect.

Controller tests run without a Qt event loop: timers use a manual backend
that only fires when a test tells it to, and reaction times come from a
fake clock.
"""

import random

import pytest

from rft_architect.core.game_state import SessionController
from rft_architect.core.history import HistoryStore
from rft_architect.core.settings import GameSettings
from rft_architect.puzzle.generator import PuzzleGenerator


class ManualTimerBackend:
    """Timer backend that records start/stop calls and fires on demand."""
    def __init__(self, on_timeout):
        self.on_timeout = on_timeout
        self.running = False
        self.started_with = []

    def start(self, interval_ms):
        self.running = True
        self.started_with.append(interval_ms)

    def stop(self):
        self.running = False

    def fire(self):
        # Delivered even when stopped, like a tick already queued in the event loop
        self.on_timeout()


class FakeClock:
    def __init__(self, now=100.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def history_store(tmp_path):
    return HistoryStore(str(tmp_path / "history.json"))


@pytest.fixture
def make_controller(fake_clock, history_store):
    """Builds a seeded controller; keyword arguments override GameSettings fields."""
    def _make(seed=7, settings_store=None, **overrides):
        settings = GameSettings()
        for key, value in overrides.items():
            setattr(settings, key, value)
        controller_rng = random.Random(seed)
        return SessionController(
            settings=settings,
            generator=PuzzleGenerator(rng=controller_rng),
            rng=controller_rng,
            settings_store=settings_store,
            history_store=history_store,
            clock=fake_clock,
            timer_backend=ManualTimerBackend,
        )
    return _make
