from PyQt6.QtWidgets import QVBoxLayout, QHBoxLayout, QLabel, QFrame, QPushButton
from PyQt6.QtGui import QFont
from PyQt6.QtCore import Qt
import logging

from ..core.game_state import GamePhase
from ..puzzle.phrasing import render_premises, render_query

logger = logging.getLogger(__name__)

SWATCH_COLORS = {"red": "#ef4444", "blue": "#3b82f6", "green": "#22c55e", "yellow": "#eab308"}


def create_round_area_layout(parent_layout, main_window):
    """Premises, question, cipher legend, interference swatch and answer buttons."""
    logger.debug("Creating round area layout...")
    frame = QFrame()
    frame.setFrameShape(QFrame.Shape.StyledPanel)
    layout = QVBoxLayout(frame)

    main_window.phase_label = QLabel("Press Enter to start a session.")
    main_window.phase_label.setFont(QFont("Arial", 11))
    layout.addWidget(main_window.phase_label)

    main_window.premises_label = QLabel("")
    main_window.premises_label.setFont(QFont("Arial", 14))
    main_window.premises_label.setWordWrap(True)
    layout.addWidget(main_window.premises_label)

    main_window.legend_label = QLabel("")
    main_window.legend_label.setFont(QFont("Consolas", 11))
    layout.addWidget(main_window.legend_label)

    main_window.swatch_label = QLabel("")
    main_window.swatch_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
    main_window.swatch_label.setMinimumHeight(60)
    layout.addWidget(main_window.swatch_label)

    main_window.question_label = QLabel("")
    main_window.question_label.setFont(QFont("Arial", 15, QFont.Weight.Bold))
    main_window.question_label.setWordWrap(True)
    layout.addWidget(main_window.question_label)

    main_window.feedback_label = QLabel("")
    main_window.feedback_label.setFont(QFont("Consolas", 13, QFont.Weight.Bold))
    main_window.feedback_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
    layout.addWidget(main_window.feedback_label)

    buttons = QHBoxLayout()
    main_window.left_button = QPushButton("NO")
    main_window.right_button = QPushButton("YES")
    main_window.left_button.setToolTip("Left arrow / D")
    main_window.right_button.setToolTip("Right arrow / J")
    main_window.left_button.clicked.connect(lambda: main_window._answer_side(right=False))
    main_window.right_button.clicked.connect(lambda: main_window._answer_side(right=True))
    buttons.addWidget(main_window.left_button)
    buttons.addWidget(main_window.right_button)
    layout.addLayout(buttons)

    parent_layout.addWidget(frame, 1)


def update_round_area(main_window, controller) -> None:
    phase = controller.phase
    round_state = controller.current_round
    show_premises = round_state is not None and phase in (
        GamePhase.PREMISE_MEMORIZE, GamePhase.QUESTION, GamePhase.RESULT)
    # Blind rounds hide premises once the question is up
    if phase is GamePhase.QUESTION and (controller.settings.blind_mode or controller.key_changed):
        show_premises = False

    phase_text = {
        GamePhase.SETUP: "Press Enter to start a session.",
        GamePhase.PREMISE_MEMORIZE: "Memorise the premises, then press Space.",
        GamePhase.INTERFERENCE: f"Press Space when the swatch turns {controller.interference_target}.",
        GamePhase.QUESTION: "Answer with Left/Right (D/J).",
        GamePhase.RESULT: "Press Space for the next round.",
        GamePhase.SESSION_END: "Session over. Press Enter.",
    }[phase]
    if round_state is not None and round_state.modifiers and phase is not GamePhase.SETUP:
        phase_text += "  [" + ", ".join(round_state.modifiers) + "]"
    main_window.phase_label.setText(phase_text)

    main_window.premises_label.setText("\n".join(render_premises(round_state)) if show_premises else "")
    legend = controller.cipher_legend() if show_premises or phase is GamePhase.QUESTION else []
    main_window.legend_label.setText("   ".join(f"{code} = {k.value}" for k, code in legend))

    if phase is GamePhase.INTERFERENCE:
        color = SWATCH_COLORS.get(controller.interference_current, "#334155")
        main_window.swatch_label.setStyleSheet(f"background-color: {color}; border-radius: 8px;")
        main_window.swatch_label.setText(controller.interference_status)
    else:
        main_window.swatch_label.setStyleSheet("")
        main_window.swatch_label.setText("")

    if round_state is not None and phase in (GamePhase.QUESTION, GamePhase.RESULT):
        main_window.question_label.setText(render_query(round_state))
    else:
        main_window.question_label.setText("")

    main_window.feedback_label.setText(controller.feedback if phase is GamePhase.RESULT else "")

    answering = phase is GamePhase.QUESTION
    main_window.left_button.setEnabled(answering)
    main_window.right_button.setEnabled(answering)
    main_window.left_button.setText("NO" if controller.yes_on_right else "YES")
    main_window.right_button.setText("YES" if controller.yes_on_right else "NO")
