"""
棋盘测试: 走子、悔棋、摆棋、重置
"""

import random

import numpy as np
import pytest

from pozhen.board import STARTING_LAYOUT, Board
from pozhen.pieces import Piece, PieceKind, Side
from pozhen.rules import GameStatus, legal_destinations

RED, BLACK = Side.RED, Side.BLACK


def test_starting_layout():
    board = Board()

    assert [(p.kind, p.side, *p.position) for p in board.pieces()] == STARTING_LAYOUT
    assert board.side_to_move is RED
    assert board.status is GameStatus.PLAYING
    assert board.history == []


def test_get_piece_at_out_of_range_returns_none():
    board = Board()

    assert board.get_piece_at(-1, 0) is None
    assert board.get_piece_at(9, 0) is None
    assert board.get_piece_at(0, 8) is None


def test_snapshot_encoding():
    snapshot = Board().snapshot()

    assert snapshot.shape == (9, 8)
    assert snapshot.dtype == np.int8
    assert snapshot[6, 3] == 5
    assert snapshot[2, 3] == snapshot[2, 5] == snapshot[2, 7] == -7
    assert np.count_nonzero(snapshot) == 4


def test_failed_moves_leave_board_untouched():
    board = Board()
    before = board.snapshot()

    assert not board.attempt_move((0, 0), (0, 1))      # 空位
    assert not board.attempt_move((6, 3), (5, 4))      # 车不能斜走
    assert not board.attempt_move((6, 3), (9, 3))      # 越界
    assert not board.attempt_move((6, 3), (1, 3))      # 不能越子

    assert np.array_equal(board.snapshot(), before)
    assert board.side_to_move is RED
    assert board.history == []


def test_is_legal_move_rejects_own_piece(empty_board, place):
    rook = place(PieceKind.ROOK, RED, 6, 3)
    place(PieceKind.PAWN, RED, 6, 5)

    assert empty_board.is_legal_move(rook, 6, 4)
    assert not empty_board.is_legal_move(rook, 6, 5)
    assert not empty_board.is_legal_move(None, 6, 4)


def test_get_valid_moves():
    board = Board()
    rook = board.get_piece_at(6, 3)

    moves = board.get_valid_moves(rook)

    assert moves == legal_destinations(rook, board.grid)
    assert (2, 3) in moves
    assert (1, 3) not in moves
    assert board.get_valid_moves(None) == []


def test_move_updates_piece_history_and_turn():
    board = Board()
    rook = board.get_piece_at(6, 3)

    assert board.attempt_move((6, 3), (6, 0))

    assert board.get_piece_at(6, 0) is rook
    assert board.get_piece_at(6, 3) is None
    assert rook.position == (6, 0)
    assert rook.has_moved
    assert board.side_to_move is BLACK
    record = board.history[-1]
    assert record.from_pos == (6, 3) and record.to_pos == (6, 0)
    assert record.captured is None
    assert record.side is RED


def test_capture_then_undo_restores_everything():
    board = Board()
    before = board.snapshot()
    status = board.status

    assert board.attempt_move((6, 3), (2, 3))
    assert board.history[-1].captured.kind is PieceKind.PAWN
    assert np.count_nonzero(board.snapshot()) == 3

    assert board.undo_last_move()

    assert np.array_equal(board.snapshot(), before)
    assert board.side_to_move is RED
    assert board.status is status
    rook = board.get_piece_at(6, 3)
    assert rook.position == (6, 3)
    assert not rook.has_moved
    assert board.get_piece_at(2, 3).position == (2, 3)


def test_undo_is_lifo():
    board = Board()
    board.attempt_move((6, 3), (6, 0))
    board.attempt_move((2, 3), (3, 3))
    board.attempt_move((6, 0), (2, 0))

    assert board.undo_last_move()
    assert board.get_piece_at(6, 0).kind is PieceKind.ROOK
    assert board.undo_last_move()
    assert board.get_piece_at(2, 3).kind is PieceKind.PAWN
    assert board.undo_last_move()
    assert board.get_piece_at(6, 3).kind is PieceKind.ROOK
    assert not board.undo_last_move()


def test_undo_restores_mover_when_destination_was_replaced():
    board = Board()
    assert board.attempt_move((6, 3), (5, 3))
    board.set_piece_at(5, 3, Piece(PieceKind.PAWN, BLACK, (5, 3)))

    assert board.undo_last_move()

    rook = board.get_piece_at(6, 3)
    assert rook.kind is PieceKind.ROOK and rook.side is RED
    assert not rook.has_moved
    assert board.get_piece_at(5, 3) is None
    assert board.find_rook() is rook


def test_move_then_undo_round_trip_on_busy_board():
    rng = random.Random(11)
    board = Board(layout=[])
    squares = [(r, c) for r in range(9) for c in range(8)]
    for row, col in rng.sample(squares, 24):
        kind = rng.choice([k for k in PieceKind if k is not PieceKind.KING])
        side = rng.choice([RED, BLACK])
        board.set_piece_at(row, col, Piece(kind, side, (row, col)))

    for piece in list(board.pieces()):
        origin = piece.position
        for move in board.get_valid_moves(piece):
            before = board.snapshot()
            side, status = board.side_to_move, board.status

            assert board.attempt_move(origin, move)
            assert board.undo_last_move()

            assert np.array_equal(board.snapshot(), before)
            assert board.side_to_move is side
            assert board.status is status
            assert piece.position == origin


def test_status_after_move_gives_check(empty_board, place):
    place(PieceKind.ROOK, RED, 5, 0)
    place(PieceKind.KING, BLACK, 0, 4)

    assert empty_board.attempt_move((5, 0), (0, 0))

    assert empty_board.side_to_move is BLACK
    assert empty_board.status is GameStatus.CHECK


def test_set_piece_at_bypasses_move_rules():
    board = Board()
    rook = board.get_piece_at(6, 3)

    assert board.set_piece_at(0, 7, rook)

    assert board.get_piece_at(0, 7) is rook
    assert board.get_piece_at(6, 3) is None
    assert rook.position == (0, 7)
    assert board.history == []


def test_set_piece_at_rejects_out_of_range_and_second_king(empty_board, place):
    king = place(PieceKind.KING, BLACK, 0, 0)

    assert not empty_board.set_piece_at(9, 0, Piece(PieceKind.PAWN, BLACK, (9, 0)))
    assert not empty_board.set_piece_at(4, 4, Piece(PieceKind.KING, BLACK, (4, 4)))
    assert empty_board.get_piece_at(4, 4) is None

    # 替换原位置的将，或者移动同一个将都可以
    assert empty_board.set_piece_at(0, 0, Piece(PieceKind.KING, BLACK, (0, 0)))
    assert empty_board.find_king(BLACK) is not king
    assert empty_board.set_piece_at(3, 3, empty_board.find_king(BLACK))
    assert empty_board.get_piece_at(0, 0) is None


def test_remove_piece():
    board = Board()

    assert board.remove_piece(2, 3)
    assert board.get_piece_at(2, 3) is None
    assert board.remove_piece(0, 0)
    assert not board.remove_piece(-1, 0)


def test_reset_restores_starting_layout():
    board = Board()
    before = board.snapshot()
    board.attempt_move((6, 3), (2, 3))
    board.set_piece_at(0, 0, Piece(PieceKind.KING, BLACK, (0, 0)))

    board.reset()

    assert np.array_equal(board.snapshot(), before)
    assert board.history == []
    assert board.side_to_move is RED
    assert board.status is GameStatus.PLAYING


def test_find_rook_and_king():
    board = Board()

    assert board.find_rook().position == (6, 3)
    assert board.find_king(BLACK) is None


def test_invariant_check_catches_position_mismatch():
    board = Board()
    board.get_piece_at(2, 3).position = (4, 4)

    with pytest.raises(AssertionError):
        board._check_invariants()


def test_invariant_check_catches_aliased_piece():
    board = Board()
    board.grid[0, 0] = board.grid[2, 3]

    with pytest.raises(AssertionError):
        board._check_invariants()
