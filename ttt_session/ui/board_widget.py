from PySide6.QtWidgets import QWidget, QSizePolicy
from PySide6.QtCore import QSize, Signal, QPointF, QRectF, QTimer
from PySide6.QtGui import QPainter, QColor, QPen

from ..game_logic import PLAYER_X, BOARD_CELLS

GRID_SIZE = 3
BACKGROUND_COLOR = "#333"
GRID_COLOR = "#555"
X_COLOR = "#8acaff"
O_COLOR = "#ff8a8a"
WIN_FILL_COLOR = "#3f5f3f"
INVALID_FILL_COLOR = "#6a2f2f"
INVALID_FLASH_MS = 300


class BoardWidget(QWidget):
    """
    custom widget to draw and click on tic-tac-toe board
    """
    cell_clicked = Signal(int)  # emits row-major cell index on click

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setSizePolicy(QSizePolicy.Ignored, QSizePolicy.Ignored)
        self.setMinimumSize(QSize(150, 150))
        self._accept_clicks = True      # toggle click handling
        self._snapshot = None           # last engine state drawn
        self._invalid_cells = set()     # cells currently flashing
        self._flash_timers = {}         # cell index -> child QTimer

    def set_accept_clicks(self, accept):
        # enable/disable user input
        self._accept_clicks = accept

    def accepts_clicks(self):
        return self._accept_clicks

    def render_snapshot(self, snapshot):
        """
        remember engine state and schedule a repaint
        """
        self._snapshot = snapshot
        if not snapshot.is_over and snapshot.board.count('') == BOARD_CELLS:
            # fresh board
            for timer in self._flash_timers.values(): timer.stop()
            self._invalid_cells.clear()
        self.update()

    def flash_invalid(self, index):
        """
        tint a cell briefly after a rejected move; a repeat flash on the
        same cell restarts its timer
        """
        self._invalid_cells.add(index)
        self.update()
        timer = self._flash_timers.get(index)
        if timer is None:
            # child of the widget, so it dies with it
            timer = QTimer(self)
            timer.setSingleShot(True)
            timer.setInterval(INVALID_FLASH_MS)
            timer.timeout.connect(lambda: self._clear_invalid(index))
            self._flash_timers[index] = timer
        timer.start()

    def _clear_invalid(self, index):
        self._invalid_cells.discard(index)
        self.update()

    def is_flashing(self, index):
        return index in self._invalid_cells

    def heightForWidth(self, width):
        # keep square shape
        return width

    def hasHeightForWidth(self):
        return True

    def _geometry(self):
        # square board centred in the widget
        w, h = self.width(), self.height()
        side = min(w, h)
        return (w - side) / 2, (h - side) / 2, side

    def paintEvent(self, event):
        """
        draw grid, X/O marks, winning line and invalid-move flashes
        """
        painter = QPainter(self)
        try:
            painter.setRenderHint(QPainter.Antialiasing, True)
            offset_x, offset_y, side = self._geometry()
            cell_size = side / GRID_SIZE
            painter.fillRect(self.rect(), QColor(BACKGROUND_COLOR))

            snap = self._snapshot
            board = snap.board if snap else ('',) * BOARD_CELLS
            win_line = snap.winning_line if snap else None

            # cell highlights
            for idx in range(BOARD_CELLS):
                fill = None
                if win_line and idx in win_line: fill = WIN_FILL_COLOR
                elif idx in self._invalid_cells: fill = INVALID_FILL_COLOR
                if fill:
                    r, c = divmod(idx, GRID_SIZE)
                    painter.fillRect(QRectF(offset_x + c*cell_size, offset_y + r*cell_size,
                                            cell_size, cell_size), QColor(fill))

            # grid lines
            painter.setPen(QPen(QColor(GRID_COLOR), 2))
            for i in range(1, GRID_SIZE):
                x = offset_x + i*cell_size
                painter.drawLine(int(x), int(offset_y), int(x), int(offset_y+side))
                y = offset_y + i*cell_size
                painter.drawLine(int(offset_x), int(y), int(offset_x+side), int(y))

            # marks
            for idx, sym in enumerate(board):
                if not sym: continue
                r, c = divmod(idx, GRID_SIZE)
                cx = offset_x + c*cell_size + cell_size/2
                cy = offset_y + r*cell_size + cell_size/2
                rad = cell_size/2 * 0.7
                if sym == PLAYER_X:
                    painter.setPen(QPen(QColor(X_COLOR), 4))
                    # two crossing lines
                    painter.drawLine(QPointF(cx-rad, cy-rad), QPointF(cx+rad, cy+rad))
                    painter.drawLine(QPointF(cx+rad, cy-rad), QPointF(cx-rad, cy+rad))
                else:
                    painter.setPen(QPen(QColor(O_COLOR), 4))
                    painter.drawEllipse(QPointF(cx, cy), rad, rad)
        finally:
            painter.end()

    def cell_at(self, x, y):
        """
        map widget coords to a cell index, None outside the grid
        """
        ox, oy, side = self._geometry()
        if side <= 0 or not (ox <= x < ox+side and oy <= y < oy+side):
            return None
        cell = side / GRID_SIZE
        col = min(int((x-ox) // cell), GRID_SIZE-1)
        row = min(int((y-oy) // cell), GRID_SIZE-1)
        return row*GRID_SIZE + col

    def mouseReleaseEvent(self, event):
        """
        handle clicks: map coords to board cell and emit
        """
        if not self._accept_clicks:
            return
        pos = event.position()
        idx = self.cell_at(pos.x(), pos.y())
        if idx is not None:
            self.cell_clicked.emit(idx)  # notify main window
