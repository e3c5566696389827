import logging

import pytest

from ttt_session.game_logic import (
    EMPTY,
    PLAYER_O,
    PLAYER_X,
    WIN_LINES,
    GameEngine,
    GameStatus,
    OutcomeKind,
    RejectReason,
    Score,
    evaluate_board,
)


def play(engine, *indices):
    return [engine.apply_move(i) for i in indices]


def board_from(text):
    # rows of three separated by spaces, '.' is empty
    cells = [c for c in text if c in "XO."]
    return [EMPTY if c == "." else c for c in cells]


@pytest.fixture
def engine():
    return GameEngine()


class TestEvaluateBoard:
    def test_empty_board_in_progress(self):
        assert evaluate_board([EMPTY] * 9) == (GameStatus.IN_PROGRESS, None)

    @pytest.mark.parametrize("line", WIN_LINES)
    def test_every_line_wins(self, line):
        board = [EMPTY] * 9
        for i in line:
            board[i] = PLAYER_O
        status, result = evaluate_board(board)
        assert status is GameStatus.WON
        assert result.winner == PLAYER_O
        assert result.line == line

    def test_full_board_without_line_is_draw(self):
        status, result = evaluate_board(board_from("XOX XOO OXX"))
        assert status is GameStatus.DRAW
        assert result.winner is None and result.line is None

    def test_win_on_full_board_beats_draw(self):
        status, result = evaluate_board(board_from("XXX OOX OXO"))
        assert status is GameStatus.WON
        assert result.line == (0, 1, 2)

    def test_first_line_in_scan_order_reported(self):
        # row 0 and column 0 both complete; rows are scanned first
        _, result = evaluate_board(board_from("XXX X.. X.."))
        assert result.line == (0, 1, 2)

    def test_rejects_malformed_board(self):
        with pytest.raises(ValueError):
            evaluate_board([EMPTY] * 8)
        with pytest.raises(ValueError):
            evaluate_board(["Z"] + [EMPTY] * 8)


class TestApplyMove:
    def test_starts_with_x(self, engine):
        snap = engine.snapshot()
        assert snap.current_player == PLAYER_X
        assert snap.board == (EMPTY,) * 9
        assert snap.status is GameStatus.IN_PROGRESS
        assert snap.score == Score()

    def test_turn_alternates(self, engine):
        movers = [o.player for o in play(engine, 4, 0, 8, 2)]
        assert movers == [PLAYER_X, PLAYER_O, PLAYER_X, PLAYER_O]
        assert engine.snapshot().current_player == PLAYER_X

    def test_each_move_sets_exactly_one_cell(self, engine):
        before = engine.snapshot().board
        outcome = engine.apply_move(4)
        after = engine.snapshot().board
        changed = [i for i in range(9) if before[i] != after[i]]
        assert changed == [4]
        assert after[4] == PLAYER_X
        assert outcome.kind is OutcomeKind.CONTINUED
        assert outcome.next_player == PLAYER_O

    def test_top_row_win(self, engine):
        outcomes = play(engine, 0, 3, 1, 4, 2)
        last = outcomes[-1]
        assert last.kind is OutcomeKind.GAME_ENDED
        assert last.result.winner == PLAYER_X
        assert last.result.line == (0, 1, 2)
        snap = engine.snapshot()
        assert snap.status is GameStatus.WON
        assert snap.current_player is None
        assert snap.score == Score(x_wins=1)

    def test_o_can_win_diagonal(self, engine):
        last = play(engine, 0, 2, 1, 4, 8, 6)[-1]
        assert last.result.winner == PLAYER_O
        assert last.result.line == (2, 4, 6)
        assert engine.snapshot().score == Score(o_wins=1)

    def test_draw_on_ninth_move(self, engine):
        outcomes = play(engine, 0, 1, 2, 4, 3, 5, 7, 6, 8)
        assert all(o.kind is OutcomeKind.CONTINUED for o in outcomes[:-1])
        last = outcomes[-1]
        assert last.kind is OutcomeKind.GAME_ENDED
        assert last.result.status is GameStatus.DRAW
        assert last.result.winner is None
        assert engine.snapshot().score == Score(draws=1)

    def test_occupied_cell_rejected(self, engine):
        engine.apply_move(0)
        before = engine.snapshot()
        outcome = engine.apply_move(0)
        assert outcome.kind is OutcomeKind.REJECTED
        assert outcome.reason is RejectReason.CELL_OCCUPIED
        assert outcome.occupant == PLAYER_X
        assert not outcome.accepted
        assert engine.snapshot() == before

    def test_moves_after_game_over_rejected(self, engine):
        play(engine, 0, 3, 1, 4, 2)
        before = engine.snapshot()
        outcome = engine.apply_move(8)
        assert outcome.reason is RejectReason.GAME_OVER
        assert engine.snapshot() == before

    def test_game_over_checked_before_occupied(self, engine):
        play(engine, 0, 3, 1, 4, 2)
        assert engine.apply_move(0).reason is RejectReason.GAME_OVER

    @pytest.mark.parametrize("bad", [-1, 9, 1.0, "3", None, True])
    def test_bad_index_raises(self, engine, bad):
        with pytest.raises(ValueError):
            engine.apply_move(bad)
        assert engine.snapshot().board == (EMPTY,) * 9

    def test_rejection_is_logged(self, engine, caplog):
        engine.apply_move(4)
        with caplog.at_level(logging.WARNING, logger="ttt_session.game_logic"):
            engine.apply_move(4)
        assert "cell already occupied by X" in caplog.text
        assert "cell 4" in caplog.text


class TestProcessingLock:
    def test_reentrant_move_is_busy(self, engine):
        nested = []

        def listener(outcome, snap):
            if outcome and outcome.index == 4:
                nested.append(engine.apply_move(5))

        engine.add_listener(listener)
        outcome = engine.apply_move(4)

        assert outcome.kind is OutcomeKind.CONTINUED
        assert nested[0].reason is RejectReason.BUSY
        assert engine.snapshot().board[5] == EMPTY
        assert not engine.is_processing

    def test_busy_checked_before_occupied(self, engine):
        nested = []
        engine.add_listener(lambda o, s: nested.append(engine.apply_move(0)) if o else None)
        engine.apply_move(0)
        assert nested[0].reason is RejectReason.BUSY

    def test_busy_checked_before_game_over(self, engine):
        nested = []

        def listener(outcome, snap):
            if outcome and outcome.kind is OutcomeKind.GAME_ENDED:
                nested.append(engine.apply_move(8))

        engine.add_listener(listener)
        last = play(engine, 0, 3, 1, 4, 2)[-1]

        assert last.kind is OutcomeKind.GAME_ENDED
        assert nested[0].reason is RejectReason.BUSY
        snap = engine.snapshot()
        assert snap.board[8] == EMPTY
        assert snap.score == Score(x_wins=1)

    def test_lock_released_when_listener_raises(self, engine):
        def boom(outcome, snap):
            raise RuntimeError("view failed")

        engine.add_listener(boom)
        with pytest.raises(RuntimeError):
            engine.apply_move(0)
        assert not engine.is_processing

        engine.remove_listener(boom)
        assert engine.apply_move(1).kind is OutcomeKind.CONTINUED


class TestReset:
    def test_reset_clears_game_keeps_score(self, engine):
        play(engine, 0, 3, 1, 4, 2)
        engine.reset()
        snap = engine.snapshot()
        assert snap.board == (EMPTY,) * 9
        assert snap.current_player == PLAYER_X
        assert snap.status is GameStatus.IN_PROGRESS
        assert snap.result is None
        assert snap.score == Score(x_wins=1)

    def test_reset_mid_game(self, engine):
        play(engine, 0, 1)
        engine.reset()
        assert engine.snapshot().current_player == PLAYER_X
        assert engine.apply_move(1).player == PLAYER_X

    def test_score_accumulates_over_games(self, engine):
        totals = []
        for moves in ((0, 3, 1, 4, 2), (0, 1, 2, 4, 3, 5, 7, 6, 8), (0, 2, 1, 4, 8, 6)):
            play(engine, *moves)
            totals.append(engine.snapshot().score)
            engine.reset()
        assert totals == [Score(1, 0, 0), Score(1, 0, 1), Score(1, 1, 1)]
        assert engine.snapshot().score == Score(1, 1, 1)

    def test_reset_notifies_listeners(self, engine):
        seen = []
        engine.add_listener(lambda o, s: seen.append((o, s.status)))
        engine.reset()
        assert seen == [(None, GameStatus.IN_PROGRESS)]

    def test_initial_score_carried(self):
        engine = GameEngine(score=Score(2, 1, 3))
        play(engine, 0, 1, 2, 4, 3, 5, 7, 6, 8)
        assert engine.snapshot().score == Score(2, 1, 4)


def test_negative_score_rejected():
    with pytest.raises(ValueError):
        Score(x_wins=-1)
