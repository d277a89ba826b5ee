import sys
import logging
from PyQt6.QtWidgets import QApplication, QMainWindow, QWidget, QVBoxLayout, QMessageBox
from PyQt6.QtGui import QAction, QIcon
from PyQt6.QtCore import Qt

from ..core.game_state import GamePhase, SessionController
from ..core.history import HistoryStore
from ..core.settings import SettingsStore
from ..puzzle.common import ConfigurationError
from .dialogs import SettingsDialog, HistoryDialog
from .info_bar import populate_info_bar_layout, update_info_bar
from .round_display import create_round_area_layout, update_round_area

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

_LEFT_KEYS = (Qt.Key.Key_Left, Qt.Key.Key_D)
_RIGHT_KEYS = (Qt.Key.Key_Right, Qt.Key.Key_J)
_ENTER_KEYS = (Qt.Key.Key_Return, Qt.Key.Key_Enter)


class RftMainWindow(QMainWindow):
    def __init__(self, settings_store: SettingsStore = None, history_store: HistoryStore = None):
        super().__init__()
        self.setWindowTitle("RFT Architect")
        self.setMinimumSize(760, 520)

        self.settings_store = settings_store if settings_store is not None else SettingsStore()
        self.history_store = history_store if history_store is not None else HistoryStore()
        settings = self.settings_store.load()
        self.controller = SessionController(settings=settings,
                                            settings_store=self.settings_store,
                                            history_store=self.history_store)
        self.controller.add_listener(self._refresh)

        central = QWidget()
        main_layout = QVBoxLayout(central)
        populate_info_bar_layout(main_layout, self)
        create_round_area_layout(main_layout, self)
        self.setCentralWidget(central)
        self._create_menu_bar()
        self._refresh(self.controller)

    def _create_menu_bar(self):
        menubar = self.menuBar()

        session_menu = menubar.addMenu("Session")
        start_action = QAction("Start Session", self)
        start_action.triggered.connect(self._start_session)
        session_menu.addAction(start_action)

        self.abort_action = QAction("Abort Session", self)
        self.abort_action.triggered.connect(self.controller.abort)
        session_menu.addAction(self.abort_action)
        session_menu.addSeparator()

        exit_action = QAction("Exit", self)
        exit_action.triggered.connect(self.close)
        session_menu.addAction(exit_action)

        options_menu = menubar.addMenu("Options")
        settings_action = QAction("Configuration...", self)
        settings_action.triggered.connect(self._show_settings)
        options_menu.addAction(settings_action)

        history_action = QAction("Statistics...", self)
        history_action.triggered.connect(self._show_history)
        options_menu.addAction(history_action)

    def _refresh(self, controller):
        update_info_bar(self, controller)
        update_round_area(self, controller)
        self.abort_action.setEnabled(controller.phase not in (GamePhase.SETUP, GamePhase.SESSION_END))

    def _start_session(self):
        if self.controller.phase is GamePhase.SESSION_END:
            self.controller.reset()
        try:
            self.controller.start_session()
        except ConfigurationError as e:
            QMessageBox.warning(self, "Cannot start", str(e))

    def _show_settings(self):
        dialog = SettingsDialog(self.controller.settings, self)
        if dialog.exec() and dialog.result_settings is not None:
            try:
                self.controller.update_settings(dialog.result_settings)
            except ConfigurationError as e:
                QMessageBox.warning(self, "Invalid settings", str(e))
            except IOError as e:
                QMessageBox.warning(self, "Save Error", f"Settings could not be saved: {e}")

    def _show_history(self):
        HistoryDialog(self.history_store, self.controller.session_log, self).exec()

    def _answer_side(self, right: bool):
        """Maps a screen side to YES/NO using this round's button layout."""
        yes = self.controller.yes_on_right if right else not self.controller.yes_on_right
        self.controller.answer(yes)

    def keyPressEvent(self, event):
        key = event.key()
        phase = self.controller.phase

        if phase is GamePhase.SETUP and key in _ENTER_KEYS:
            self._start_session()
        elif phase is GamePhase.SESSION_END and key in _ENTER_KEYS:
            self.controller.reset()
        elif phase is GamePhase.PREMISE_MEMORIZE and (key == Qt.Key.Key_Space or key in _ENTER_KEYS):
            self.controller.ready()
        elif phase is GamePhase.INTERFERENCE and key == Qt.Key.Key_Space:
            self.controller.signal_interference()
        elif phase is GamePhase.QUESTION and key in _LEFT_KEYS:
            self._answer_side(right=False)
        elif phase is GamePhase.QUESTION and key in _RIGHT_KEYS:
            self._answer_side(right=True)
        elif phase is GamePhase.RESULT and (key == Qt.Key.Key_Space or key in _ENTER_KEYS):
            self.controller.next_round()
        elif key == Qt.Key.Key_Escape and phase not in (GamePhase.SETUP, GamePhase.SESSION_END):
            self.controller.abort()
        else:
            super().keyPressEvent(event)

    def closeEvent(self, event):
        if self.controller.phase not in (GamePhase.SETUP, GamePhase.SESSION_END):
            self.controller.abort()
        event.accept()


def main():
    """Main entry point for the application."""
    app = QApplication(sys.argv)
    app.setApplicationName("RFT Architect")
    app.setWindowIcon(QIcon.fromTheme("applications-education"))

    window = RftMainWindow()
    window.show()
    sys.exit(app.exec())


if __name__ == '__main__':
    main()
