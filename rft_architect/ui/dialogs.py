from PyQt6.QtWidgets import (QDialog, QVBoxLayout, QHBoxLayout, QLabel, QPushButton, QCheckBox,
                             QSpinBox, QComboBox, QFormLayout, QGroupBox, QTextEdit, QMessageBox)
from typing import Optional
import logging

from ..core.history import HistoryStore, RoundRecord
from ..core.settings import GameSettings
from ..puzzle.common import RftMode, SymbolMode, ConfigurationError

logger = logging.getLogger(__name__)

_MODIFIER_LABELS = [
    ("enable_deictic", "Deictic perspective"),
    ("enable_movement", "Movement (path integration)"),
    ("enable_transformation", "Context inversion (night)"),
    ("enable_cipher", "Relation cipher"),
    ("enable_interference", "Interference task"),
]


class SettingsDialog(QDialog):
    """Edits a copy of GameSettings; `result_settings` holds the accepted value."""
    def __init__(self, settings: GameSettings, parent=None):
        super().__init__(parent)
        self.setWindowTitle("Configuration")
        self.setMinimumWidth(420)
        self.result_settings: Optional[GameSettings] = None
        self._settings = settings.copy()

        layout = QVBoxLayout(self)

        modes_box = QGroupBox("Relational frames")
        modes_layout = QVBoxLayout(modes_box)
        self.mode_checks = {}
        for mode in RftMode:
            check = QCheckBox(mode.name.replace("_", " ").title())
            check.setChecked(bool(self._settings.active_modes.get(mode)))
            self.mode_checks[mode] = check
            modes_layout.addWidget(check)
        layout.addWidget(modes_box)

        form = QFormLayout()
        self.premises_spin = QSpinBox()
        self.premises_spin.setRange(2, 50)
        self.premises_spin.setValue(self._settings.num_premises)
        form.addRow("Premises (depth):", self.premises_spin)

        self.question_time_spin = QSpinBox()
        self.question_time_spin.setRange(1, 300)
        self.question_time_spin.setValue(self._settings.question_time_limit)
        form.addRow("Question time (s):", self.question_time_spin)

        self.session_length_spin = QSpinBox()
        self.session_length_spin.setRange(1, 120)
        self.session_length_spin.setValue(self._settings.session_length_minutes)
        form.addRow("Session length (min):", self.session_length_spin)

        self.symbol_combo = QComboBox()
        for symbol_mode in SymbolMode:
            self.symbol_combo.addItem(symbol_mode.name.title(), symbol_mode)
        self.symbol_combo.setCurrentIndex(list(SymbolMode).index(self._settings.symbol_mode))
        form.addRow("Symbols:", self.symbol_combo)
        layout.addLayout(form)

        self.flag_checks = {}
        for attr, label in [("auto_progress", "Adaptive depth"),
                            ("use_question_timer", "Question timer"),
                            ("disable_session_timer", "Untimed session"),
                            ("blind_mode", "Blind mode")] + _MODIFIER_LABELS:
            check = QCheckBox(label)
            check.setChecked(bool(getattr(self._settings, attr)))
            self.flag_checks[attr] = check
            layout.addWidget(check)

        buttons = QHBoxLayout()
        ok_button = QPushButton("Save")
        ok_button.clicked.connect(self._accept)
        cancel_button = QPushButton("Cancel")
        cancel_button.clicked.connect(self.reject)
        buttons.addStretch(1)
        buttons.addWidget(cancel_button)
        buttons.addWidget(ok_button)
        layout.addLayout(buttons)

    def _accept(self):
        settings = self._settings
        settings.active_modes = {mode: check.isChecked() for mode, check in self.mode_checks.items()}
        settings.num_premises = self.premises_spin.value()
        settings.question_time_limit = self.question_time_spin.value()
        settings.session_length_minutes = self.session_length_spin.value()
        settings.symbol_mode = self.symbol_combo.currentData()
        for attr, check in self.flag_checks.items():
            setattr(settings, attr, check.isChecked())
        try:
            settings.validate()
        except ConfigurationError as e:
            QMessageBox.warning(self, "Invalid settings", str(e))
            return
        if not settings.enabled_modes():
            QMessageBox.warning(self, "Invalid settings", "Enable at least one relational frame.")
            return
        logger.info(f"Settings accepted: frames {[m.name for m in settings.enabled_modes()]}")
        self.result_settings = settings
        self.accept()


class HistoryDialog(QDialog):
    """Aggregate stats plus the last sessions and, optionally, this session's round log."""
    def __init__(self, history_store: HistoryStore, session_log=None, parent=None):
        super().__init__(parent)
        self.setWindowTitle("Statistics")
        self.setMinimumSize(520, 420)
        layout = QVBoxLayout(self)

        summary = history_store.summary()
        layout.addWidget(QLabel(
            f"Sessions: {summary['sessions']}   Best score: {summary['best_score']}   "
            f"Mean accuracy: {summary['mean_accuracy']}%   Highest depth: {summary['highest_depth']}"))

        text = QTextEdit()
        text.setReadOnly(True)
        lines = []
        for record in history_store.recent(20):
            lines.append(f"{record.date}  score {record.total_score:>5}  acc {record.accuracy:>3}%  "
                         f"depth {record.highest_depth}  rt {record.avg_reaction_time} ms")
        if session_log:
            lines.append("")
            lines.append("This session:")
            lines.extend(_format_round(r) for r in session_log)
        text.setPlainText("\n".join(lines) if lines else "No sessions recorded yet.")
        layout.addWidget(text)

        close_button = QPushButton("Close")
        close_button.clicked.connect(self.accept)
        layout.addWidget(close_button)


def _format_round(record: RoundRecord) -> str:
    mark = "✔" if record.is_correct else "✘"
    return (f"{mark} #{record.id} {record.mode}: {record.question} -> {record.user_answer} "
            f"(expected {record.correct_answer}, {record.reaction_time_ms} ms)")
