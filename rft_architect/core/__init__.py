from .game_state import GamePhase, SessionState, SessionController
from .settings import GameSettings, SettingsStore
from .history import HistoryStore, RoundRecord, SessionRecord
from .timers import PhaseTimer
