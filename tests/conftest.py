import os

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")


@pytest.fixture(scope="session")
def qapp():
    from PySide6.QtWidgets import QApplication
    app = QApplication.instance() or QApplication([])
    yield app


@pytest.fixture
def window(qapp):
    from ttt_session.ui.main_window import TicTacToeWindow
    win = TicTacToeWindow()
    win.resize(300, 400)
    yield win
    win.close()
    win.deleteLater()
