import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)

EMPTY = ''
PLAYER_X = 'X'
PLAYER_O = 'O'
BOARD_CELLS = 9

# rows top-to-bottom, cols left-to-right, then both diagonals
WIN_LINES = (
    (0, 1, 2), (3, 4, 5), (6, 7, 8),
    (0, 3, 6), (1, 4, 7), (2, 5, 8),
    (0, 4, 8), (2, 4, 6),
)


class GameStatus(Enum):
    IN_PROGRESS = "in_progress"
    WON = "won"
    DRAW = "draw"


class OutcomeKind(Enum):
    CONTINUED = "continued"
    GAME_ENDED = "game_ended"
    REJECTED = "rejected"


class RejectReason(Enum):
    BUSY = "move already processing"
    GAME_OVER = "game finished"
    CELL_OCCUPIED = "cell already occupied"


@dataclass(frozen=True)
class GameResult:
    """
    how a finished game ended; winner/line are None on a draw
    """
    status: GameStatus
    winner: Optional[str] = None
    line: Optional[tuple] = None


@dataclass(frozen=True)
class Score:
    """
    session totals, never reset by a new game
    """
    x_wins: int = 0
    o_wins: int = 0
    draws: int = 0

    def __post_init__(self):
        if min(self.x_wins, self.o_wins, self.draws) < 0:
            raise ValueError(f"score counters must be non-negative: {self}")

    def record(self, result):
        """
        return a new score with the finished game counted
        """
        if result.status is GameStatus.DRAW:
            return Score(self.x_wins, self.o_wins, self.draws + 1)
        if result.winner == PLAYER_X:
            return Score(self.x_wins + 1, self.o_wins, self.draws)
        return Score(self.x_wins, self.o_wins + 1, self.draws)


@dataclass(frozen=True)
class MoveOutcome:
    """
    what a call to apply_move did

    CONTINUED carries next_player, GAME_ENDED carries result,
    REJECTED carries reason (and occupant for CELL_OCCUPIED).
    """
    kind: OutcomeKind
    index: int
    player: str
    next_player: Optional[str] = None
    result: Optional[GameResult] = None
    reason: Optional[RejectReason] = None
    occupant: Optional[str] = None

    @property
    def accepted(self):
        return self.kind is not OutcomeKind.REJECTED


@dataclass(frozen=True)
class GameSnapshot:
    """
    read-only view of the engine for rendering
    """
    board: tuple
    current_player: Optional[str]
    status: GameStatus
    result: Optional[GameResult]
    score: Score

    @property
    def is_over(self):
        return self.status is not GameStatus.IN_PROGRESS

    @property
    def winning_line(self):
        return self.result.line if self.result else None


def other_player(player):
    return PLAYER_O if player == PLAYER_X else PLAYER_X


def evaluate_board(board):
    """
    scan the fixed lines in order and report the first full one.
    returns (status, result) where result is None while in progress
    """
    if len(board) != BOARD_CELLS or any(c not in (EMPTY, PLAYER_X, PLAYER_O) for c in board):
        raise ValueError(f"board must be {BOARD_CELLS} cells of '', 'X' or 'O': {board!r}")
    for line in WIN_LINES:
        a, b, c = line
        if board[a] != EMPTY and board[a] == board[b] == board[c]:
            return GameStatus.WON, GameResult(GameStatus.WON, board[a], line)
    if all(c != EMPTY for c in board):
        return GameStatus.DRAW, GameResult(GameStatus.DRAW)
    return GameStatus.IN_PROGRESS, None


class GameEngine:
    """
    tic-tac-toe rules, turn order and session score
    """
    def __init__(self, score=None):
        """
        fresh board, X to move; score carries over for the whole session
        """
        self.score = score if score is not None else Score()
        self._listeners = []
        self._init_board()

    def _init_board(self):
        self.board = [EMPTY] * BOARD_CELLS   # row-major cells
        self.current_player = PLAYER_X       # X always starts
        self.status = GameStatus.IN_PROGRESS
        self.result = None                   # set once the game ends
        self._processing = False             # re-entrancy guard

    @property
    def is_processing(self):
        return self._processing

    def add_listener(self, callback):
        """
        callback(outcome, snapshot) runs after every accepted move and
        after reset (outcome is None for a reset)
        """
        self._listeners.append(callback)

    def remove_listener(self, callback):
        self._listeners.remove(callback)

    def snapshot(self):
        in_progress = self.status is GameStatus.IN_PROGRESS
        return GameSnapshot(
            board=tuple(self.board),
            current_player=self.current_player if in_progress else None,
            status=self.status,
            result=self.result,
            score=self.score,
        )

    def _notify(self, outcome):
        snap = self.snapshot()
        for callback in list(self._listeners):
            callback(outcome, snap)

    def _reject(self, index, reason, occupant=None):
        detail = f"{reason.value} by {occupant}" if occupant else reason.value
        logger.warning("invalid move: %s - cell %d (attempted by %s)",
                       detail, index, self.current_player)
        return MoveOutcome(OutcomeKind.REJECTED, index, self.current_player,
                           reason=reason, occupant=occupant)

    def apply_move(self, index):
        """
        place the current player's mark at index (0-8, row-major)
        returns a MoveOutcome; rejected moves leave all state untouched
        """
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < BOARD_CELLS:
            raise ValueError(f"cell index must be an int in 0..{BOARD_CELLS - 1}, got {index!r}")

        # first failing check wins
        if self._processing:
            return self._reject(index, RejectReason.BUSY)
        if self.status is not GameStatus.IN_PROGRESS:
            return self._reject(index, RejectReason.GAME_OVER)
        if self.board[index] != EMPTY:
            return self._reject(index, RejectReason.CELL_OCCUPIED, self.board[index])

        self._processing = True
        try:
            player = self.current_player
            self.board[index] = player
            logger.info("cell %d played by %s", index, player)

            status, result = evaluate_board(self.board)
            if result:
                self.status = status; self.result = result
                self.score = self.score.record(result)
                if result.winner:
                    logger.info("player %s wins, winning cells: %s",
                                result.winner, ", ".join(map(str, result.line)))
                else:
                    logger.info("game is a draw")
                logger.info("score: X=%d O=%d draws=%d", self.score.x_wins,
                            self.score.o_wins, self.score.draws)
                outcome = MoveOutcome(OutcomeKind.GAME_ENDED, index, player, result=result)
            else:
                self.current_player = other_player(player)
                logger.debug("next player: %s", self.current_player)
                outcome = MoveOutcome(OutcomeKind.CONTINUED, index, player,
                                      next_player=self.current_player)

            self._notify(outcome)
            return outcome
        finally:
            self._processing = False

    def reset(self):
        """
        clear board and flags, keep the session score
        """
        self._init_board()
        logger.info("game reset, player X starts")
        self._notify(None)
