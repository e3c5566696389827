import logging

from ..game_logic import GameEngine, OutcomeKind, RejectReason
from ..ui.board_widget import BoardWidget

from PySide6.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QHBoxLayout,
    QPushButton, QLabel, QMenuBar, QMenu, QSizePolicy
)
from PySide6.QtGui import QAction, QFont
from PySide6.QtCore import Qt, Slot

logger = logging.getLogger(__name__)

WINDOW_TITLE = "Tic-Tac-Toe"
STATUS_STYLE = "color: #eee;"
TURN_STYLE = "color: #8acaff; font-weight: bold;"
ERROR_STYLE = "color: #ff8a8a; font-weight: bold;"
BANNER_STYLES = {
    "win": "color: lime; font-weight: bold; font-size: 20px;",
    "draw": "color: #ffd36a; font-weight: bold; font-size: 20px;",
}


class TicTacToeWindow(QMainWindow):
    """
    main window: scoreboard, result banner, status, board and reset
    """
    def __init__(self, engine=None):
        """
        init engine, ui widgets, signals
        """
        super().__init__()
        self.engine = engine if engine is not None else GameEngine()
        self.board_widget = BoardWidget(parent=self)
        self._setup_ui()
        self._render()

    def _setup_ui(self):
        '''window look + layout'''
        self.setWindowTitle(WINDOW_TITLE)
        self.setStyleSheet("""
            QMainWindow { background-color: #222; }
            QLabel { color: #eee; }
            QPushButton { padding: 6px 14px; }
        """)
        self.central_widget = QWidget()
        self.setCentralWidget(self.central_widget)
        self.main_layout = QVBoxLayout(self.central_widget)

        self._create_menu_bar()            # top menu
        self._create_scoreboard()          # X / draws / O
        self.main_layout.addWidget(self.scoreboard_widget)

        self.result_banner = QLabel("")
        self.result_banner.setAlignment(Qt.AlignCenter)
        self.result_banner.setVisible(False)
        self.main_layout.addWidget(self.result_banner)

        self.status_label = QLabel("")
        f = QFont(); f.setPointSize(12); self.status_label.setFont(f)
        self.status_label.setAlignment(Qt.AlignCenter)
        self.status_label.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Preferred)
        self.main_layout.addWidget(self.status_label)

        self.main_layout.addWidget(self.board_widget, 1)
        self.board_widget.cell_clicked.connect(self._on_cell_clicked)

        self.reset_button = QPushButton("Reset")
        self.reset_button.clicked.connect(self.reset_game)
        self.main_layout.addWidget(self.reset_button, alignment=Qt.AlignCenter)

    def _create_menu_bar(self):
        '''game menu actions'''
        menu_bar = QMenuBar()
        game_menu = QMenu("Game", self)
        new_action = QAction("New Game", self)
        new_action.triggered.connect(self.reset_game)
        quit_action = QAction("Quit", self)
        quit_action.triggered.connect(self.close)
        game_menu.addAction(new_action)
        game_menu.addSeparator(); game_menu.addAction(quit_action)
        menu_bar.addMenu(game_menu)
        self.setMenuBar(menu_bar)

    def _create_scoreboard(self):
        # three label/value columns
        self.scoreboard_widget = QWidget()
        hl = QHBoxLayout(self.scoreboard_widget)
        self.score_labels = {}
        for key, title in (("x", "Player X"), ("draws", "Draws"), ("o", "Player O")):
            col = QVBoxLayout()
            name = QLabel(title); name.setAlignment(Qt.AlignCenter)
            value = QLabel("0"); value.setAlignment(Qt.AlignCenter)
            vf = QFont(); vf.setPointSize(16); vf.setBold(True); value.setFont(vf)
            col.addWidget(name); col.addWidget(value)
            hl.addLayout(col)
            self.score_labels[key] = value

    def _update_status(self, text, is_error=False, is_turn=False):
        # set status text + style
        style = STATUS_STYLE
        if is_error:  style = ERROR_STYLE
        elif is_turn: style = TURN_STYLE
        self.status_label.setStyleSheet(style)
        self.status_label.setText(text)

    def _show_result(self, text, kind):
        # banner replaces the status line while the game is over
        self.result_banner.setStyleSheet(BANNER_STYLES[kind])
        self.result_banner.setText(text)
        self.result_banner.setVisible(True)
        self.status_label.setVisible(False)

    def _hide_result(self):
        self.result_banner.setVisible(False)
        self.result_banner.setText("")
        self.status_label.setVisible(True)

    def _update_score(self, score):
        self.score_labels["x"].setText(str(score.x_wins))
        self.score_labels["o"].setText(str(score.o_wins))
        self.score_labels["draws"].setText(str(score.draws))

    def _render(self):
        '''push current engine state into every widget'''
        snap = self.engine.snapshot()
        self.board_widget.render_snapshot(snap)
        self._update_score(snap.score)
        if snap.is_over:
            result = snap.result
            if result.winner:
                self._show_result(f"Player {result.winner} wins!", "win")
            else:
                self._show_result("It's a draw!", "draw")
            self.board_widget.set_accept_clicks(False)
        else:
            self._hide_result()
            self._update_status(f"Player {snap.current_player} to move", is_turn=True)
            self.board_widget.set_accept_clicks(True)

    def _show_rejection(self, outcome):
        # transient cue, state stays as it was
        self.board_widget.flash_invalid(outcome.index)
        if outcome.reason is RejectReason.CELL_OCCUPIED:
            self._update_status(f"Cell taken by {outcome.occupant}. "
                                f"Player {outcome.player} to move", is_error=True)
        elif outcome.reason is RejectReason.GAME_OVER:
            logger.info("game finished, click Reset to play again")
        else:
            self._update_status("Move already in progress", is_error=True)

    @Slot(int)
    def _on_cell_clicked(self, index):
        # one request in flight: block input until rendered
        self.board_widget.set_accept_clicks(False)
        outcome = self.engine.apply_move(index)
        if outcome.kind is OutcomeKind.REJECTED:
            self._show_rejection(outcome)
            self.board_widget.set_accept_clicks(not self.engine.snapshot().is_over)
            return
        self._render()

    @Slot()
    def reset_game(self):
        # new game, session score kept
        self.engine.reset()
        self._render()
