from PyQt6.QtWidgets import QHBoxLayout, QLabel
from PyQt6.QtGui import QFont
import logging

from ..core.game_state import GamePhase

logger = logging.getLogger(__name__)


def format_time(seconds: int) -> str:
    seconds = max(0, seconds)
    return f"{seconds // 60:02d}:{seconds % 60:02d}"


def populate_info_bar_layout(parent_layout, main_window):
    """Creates the timer/score/depth labels and stores references on main_window."""
    logger.debug("Populating info bar layout...")
    info_bar_layout = QHBoxLayout()

    main_window.session_time_label = QLabel("READY")
    main_window.session_time_label.setFont(QFont("Consolas", 12))
    info_bar_layout.addWidget(main_window.session_time_label)

    main_window.question_time_label = QLabel("")
    main_window.question_time_label.setFont(QFont("Consolas", 12, QFont.Weight.Bold))
    info_bar_layout.addWidget(main_window.question_time_label)

    info_bar_layout.addStretch(1)

    main_window.score_label = QLabel("SCORE: 0")
    main_window.score_label.setFont(QFont("Consolas", 12))
    info_bar_layout.addWidget(main_window.score_label)

    main_window.depth_label = QLabel("DEPTH: 2")
    main_window.depth_label.setFont(QFont("Consolas", 12))
    info_bar_layout.addWidget(main_window.depth_label)

    parent_layout.addLayout(info_bar_layout)


def update_info_bar(main_window, controller) -> None:
    session = controller.session
    settings = controller.settings
    phase = controller.phase

    if phase is GamePhase.SETUP:
        main_window.session_time_label.setText("READY")
    elif phase is GamePhase.SESSION_END:
        main_window.session_time_label.setText("DONE")
    elif settings.disable_session_timer:
        main_window.session_time_label.setText(format_time(session.session_seconds_elapsed))
    else:
        main_window.session_time_label.setText(format_time(session.session_seconds_remaining))

    if phase is GamePhase.QUESTION and settings.use_question_timer:
        remaining = session.question_seconds_remaining
        color = "#ef4444" if remaining < 5 else "#06b6d4"
        main_window.question_time_label.setText(f"{remaining}s")
        main_window.question_time_label.setStyleSheet(f"color: {color};")
    else:
        main_window.question_time_label.setText("")

    main_window.score_label.setText(f"SCORE: {session.score}")
    # Filled pips show progress towards the next depth increase
    pips = ""
    if settings.auto_progress:
        pips = " " + "".join("●" if i < session.progress_streak else "○"
                             for i in range(session.PROGRESS_THRESHOLD))
    main_window.depth_label.setText(f"DEPTH: {session.depth}{pips}")
