from dataclasses import dataclass, asdict
from typing import Dict, List, Any, Optional, Tuple
import json
import logging
import os
import sys

logger = logging.getLogger(__name__)

HISTORY_FILE_NAME = "rft_architect_history.json"
try:
    base_path = sys._MEIPASS
except AttributeError:
    base_path = os.path.abspath(".")
HISTORY_FILE_PATH = os.path.join(base_path, HISTORY_FILE_NAME)


@dataclass(frozen=True)
class RoundRecord:
    """One answered round, kept in the in-session review log."""
    id: int
    mode: str
    premises: Tuple[str, ...]
    question: str
    user_answer: str  # YES / NO / TIMEOUT
    correct_answer: str
    is_correct: bool
    reaction_time_ms: int
    modifiers: Tuple[str, ...]


@dataclass(frozen=True)
class SessionRecord:
    """Archival snapshot of one finished session."""
    date: str
    timestamp: int
    total_score: int
    accuracy: int
    questions_answered: int
    highest_depth: int
    avg_reaction_time: int
    active_modes: Tuple[str, ...] = ()
    active_modifiers: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["active_modes"] = list(self.active_modes)
        data["active_modifiers"] = list(self.active_modifiers)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SessionRecord":
        return cls(
            date=str(data["date"]),
            timestamp=int(data.get("timestamp", 0)),
            total_score=int(data["total_score"]),
            accuracy=int(data["accuracy"]),
            questions_answered=int(data["questions_answered"]),
            highest_depth=int(data["highest_depth"]),
            avg_reaction_time=int(data.get("avg_reaction_time", 0)),
            active_modes=tuple(data.get("active_modes", [])),
            active_modifiers=tuple(data.get("active_modifiers", [])),
        )


class HistoryStore:
    """Append-only JSON list of SessionRecords."""
    def __init__(self, path: Optional[str] = None):
        self.path = path if path is not None else HISTORY_FILE_PATH

    def load_all(self) -> List[SessionRecord]:
        if not os.path.exists(self.path):
            return []
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                raw = json.load(f)
        except (IOError, json.JSONDecodeError) as e:
            logger.error(f"Error reading history file '{self.path}': {e}")
            return []
        if not isinstance(raw, list):
            logger.error(f"History file '{self.path}' does not hold a list; ignoring it.")
            return []

        records = []
        for entry in raw:
            try:
                records.append(SessionRecord.from_dict(entry))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed history entry {entry!r}: {e}")
        return records

    def append(self, record: SessionRecord) -> None:
        """
        Adds `record` after the stored entries, which are kept as they are on
        disk (malformed ones included). An unreadable history file is left
        untouched and the append fails with IOError.
        """
        raw: List[Any] = []
        if os.path.exists(self.path):
            try:
                with open(self.path, 'r', encoding='utf-8') as f:
                    raw = json.load(f)
            except (IOError, json.JSONDecodeError) as e:
                logger.error(f"Refusing to append: history file '{self.path}' is unreadable: {e}")
                raise IOError(f"Could not read session history: {e}")
            if not isinstance(raw, list):
                logger.error(f"Refusing to append: history file '{self.path}' does not hold a list.")
                raise IOError("Session history file does not hold a list.")
        raw.append(record.to_dict())

        tmp_path = self.path + ".tmp"
        try:
            with open(tmp_path, 'w', encoding='utf-8') as f:
                json.dump(raw, f, indent=4, ensure_ascii=False)
            os.replace(tmp_path, self.path)
            logger.info(f"Session record appended to {self.path} ({len(raw)} total)")
        except IOError as e:
            logger.error(f"Could not write history to {self.path}: {e}")
            raise IOError(f"Could not save session history: {e}")

    def recent(self, count: int = 20) -> List[SessionRecord]:
        """Latest `count` sessions in chronological order, for charting."""
        ordered = sorted(self.load_all(), key=lambda r: r.timestamp)
        return ordered[-count:]

    def summary(self) -> Dict[str, Any]:
        records = self.load_all()
        if not records:
            return {"sessions": 0, "best_score": 0, "mean_accuracy": 0.0,
                    "total_questions": 0, "highest_depth": 0}
        return {
            "sessions": len(records),
            "best_score": max(r.total_score for r in records),
            "mean_accuracy": round(sum(r.accuracy for r in records) / len(records), 1),
            "total_questions": sum(r.questions_answered for r in records),
            "highest_depth": max(r.highest_depth for r in records),
        }
