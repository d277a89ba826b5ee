from dataclasses import dataclass, field, fields, replace
from typing import Dict, Any, List, Optional
import json
import logging
import os
import sys

from ..puzzle.common import RftMode, SymbolMode, ConfigurationError

logger = logging.getLogger(__name__)

SETTINGS_FILE_NAME = "rft_architect_settings.json"
try:
    # Running frozen (PyInstaller)
    base_path = sys._MEIPASS
except AttributeError:
    # Running not frozen (dev environment)
    base_path = os.path.abspath(".")
SETTINGS_FILE_PATH = os.path.join(base_path, SETTINGS_FILE_NAME)

MODE_KEY_PREFIX = "active_modes."


def _default_modes() -> Dict[RftMode, bool]:
    return {
        RftMode.LINEAR: True,
        RftMode.DISTINCTION: True,
        RftMode.SPATIAL_2D: True,
        RftMode.SPATIAL_3D: False,
        RftMode.HIERARCHY: True,
    }


@dataclass
class GameSettings:
    """
    Player-facing configuration. Changes made during a session apply from
    the next round.

    Attributes:
        active_modes: Relational frames that may be drawn for a round
        num_premises: Starting depth (premise count), at least 2
        auto_progress: Adapt depth from answer streaks
        use_question_timer: Time out unanswered questions
        question_time_limit: Seconds per question
        session_length_minutes: Session countdown length
        disable_session_timer: Run sessions until aborted
        blind_mode: Hide premises behind a memorisation phase
        symbol_mode: Token style for puzzle items
        enable_*: Optional modifiers
    """
    active_modes: Dict[RftMode, bool] = field(default_factory=_default_modes)
    num_premises: int = 2
    auto_progress: bool = True
    use_question_timer: bool = True
    question_time_limit: int = 15
    session_length_minutes: int = 5
    disable_session_timer: bool = False
    blind_mode: bool = False
    symbol_mode: SymbolMode = SymbolMode.EMOJI
    enable_deictic: bool = False
    enable_movement: bool = False
    enable_transformation: bool = False
    enable_cipher: bool = False
    enable_interference: bool = False

    def enabled_modes(self) -> List[RftMode]:
        return [mode for mode in RftMode if self.active_modes.get(mode)]

    def active_modifier_names(self) -> List[str]:
        names = []
        for name in ("deictic", "movement", "transformation", "cipher", "interference"):
            if getattr(self, f"enable_{name}"):
                names.append(name.upper())
        return names

    def validate(self) -> None:
        """Raises ConfigurationError for values no round could be built from."""
        if not isinstance(self.num_premises, int) or self.num_premises < 2:
            raise ConfigurationError(f"num_premises must be an integer >= 2, got {self.num_premises!r}")
        if self.question_time_limit <= 0:
            raise ConfigurationError(f"question_time_limit must be positive, got {self.question_time_limit!r}")
        if self.session_length_minutes <= 0:
            raise ConfigurationError(f"session_length_minutes must be positive, got {self.session_length_minutes!r}")
        if not isinstance(self.symbol_mode, SymbolMode):
            raise ConfigurationError(f"Unknown symbol mode {self.symbol_mode!r}")

    def copy(self) -> "GameSettings":
        return replace(self, active_modes=dict(self.active_modes))

    def to_record(self) -> Dict[str, Any]:
        """Flat keyed record: one key per scalar, one `active_modes.<MODE>` key per frame."""
        record: Dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name == "active_modes":
                for mode in RftMode:
                    record[MODE_KEY_PREFIX + mode.name] = bool(value.get(mode, False))
            elif isinstance(value, SymbolMode):
                record[f.name] = value.name
            else:
                record[f.name] = value
        return record

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "GameSettings":
        """Merges a stored record over the defaults; unknown or malformed keys are skipped."""
        settings = cls()
        scalar_fields = {f.name: type(getattr(settings, f.name)) for f in fields(cls) if f.name != "active_modes"}
        for key, value in record.items():
            if key.startswith(MODE_KEY_PREFIX):
                mode_name = key[len(MODE_KEY_PREFIX):]
                try:
                    settings.active_modes[RftMode[mode_name]] = bool(value)
                except KeyError:
                    logger.warning(f"Ignoring unknown relational frame '{mode_name}' in settings.")
            elif key == "symbol_mode":
                try:
                    settings.symbol_mode = SymbolMode[value]
                except (KeyError, TypeError):
                    logger.warning(f"Ignoring unknown symbol mode {value!r} in settings.")
            elif key in scalar_fields:
                expected_type = scalar_fields[key]
                # bool is a subclass of int; keep the two apart
                if type(value) is expected_type or (expected_type is int and type(value) is float and value.is_integer()):
                    setattr(settings, key, expected_type(value))
                else:
                    logger.warning(f"Ignoring settings value {key}={value!r}: expected {expected_type.__name__}.")
            else:
                logger.warning(f"Ignoring unknown settings key '{key}'.")
        return settings


class SettingsStore:
    """Loads and saves GameSettings as a flat JSON record."""
    def __init__(self, path: Optional[str] = None):
        self.path = path if path is not None else SETTINGS_FILE_PATH

    def load(self) -> GameSettings:
        if not os.path.exists(self.path):
            logger.info(f"Settings file '{self.path}' not found. Using defaults.")
            return GameSettings()
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                record = json.load(f)
            if not isinstance(record, dict):
                raise ValueError(f"expected a JSON object, found {type(record).__name__}")
            settings = GameSettings.from_record(record)
            settings.validate()
            logger.info(f"Loaded settings from {self.path}")
            return settings
        except (IOError, json.JSONDecodeError, ValueError) as e:
            # ConfigurationError is a ValueError: an invalid stored value also resets
            logger.error(f"Error reading settings file '{self.path}': {e}. Using defaults.")
            return GameSettings()

    def save(self, settings: GameSettings) -> None:
        try:
            with open(self.path, 'w', encoding='utf-8') as f:
                json.dump(settings.to_record(), f, indent=4)
            logger.info(f"Settings saved to {self.path}")
        except IOError as e:
            logger.error(f"Could not save settings to {self.path}: {e}")
            raise IOError(f"Could not save settings: {e}")
