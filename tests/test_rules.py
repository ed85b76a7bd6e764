"""
走法生成与将军检测测试
"""

import random

import pytest

from pozhen.board import Board
from pozhen.pieces import Piece, PieceKind, Side, in_bounds
from pozhen.rules import (
    GameStatus,
    can_piece_attack,
    compute_status,
    count_pieces_in_path,
    find_attackers,
    find_king,
    find_protectors,
    has_legal_moves,
    is_in_check,
    is_position_under_attack,
    legal_destinations,
)

RED, BLACK = Side.RED, Side.BLACK


# ============================================================================
# 走法生成
# ============================================================================

def test_rook_slides_in_fixed_direction_order(empty_board, place):
    rook = place(PieceKind.ROOK, RED, 4, 3)

    assert legal_destinations(rook, empty_board.grid) == [
        (4, 4), (4, 5), (4, 6), (4, 7),
        (4, 2), (4, 1), (4, 0),
        (5, 3), (6, 3), (7, 3), (8, 3),
        (3, 3), (2, 3), (1, 3), (0, 3),
    ]


def test_rook_stops_at_first_piece(empty_board, place):
    rook = place(PieceKind.ROOK, RED, 4, 3)
    place(PieceKind.PAWN, BLACK, 4, 5)
    place(PieceKind.PAWN, BLACK, 4, 7)
    place(PieceKind.PAWN, RED, 2, 3)

    moves = legal_destinations(rook, empty_board.grid)

    assert (4, 4) in moves and (4, 5) in moves
    assert (4, 6) not in moves and (4, 7) not in moves
    assert (3, 3) in moves
    assert (2, 3) not in moves and (1, 3) not in moves


def test_cannon_needs_exactly_one_screen(empty_board, place):
    cannon = place(PieceKind.CANNON, BLACK, 4, 0)
    place(PieceKind.PAWN, BLACK, 4, 2)
    place(PieceKind.ROOK, RED, 4, 5)
    place(PieceKind.PAWN, RED, 4, 7)

    moves = legal_destinations(cannon, empty_board.grid)

    assert (4, 1) in moves
    assert (4, 2) not in moves  # 炮架
    assert (4, 3) not in moves and (4, 4) not in moves
    assert (4, 5) in moves
    assert (4, 7) not in moves


def test_cannon_cannot_capture_own_piece_beyond_screen(empty_board, place):
    cannon = place(PieceKind.CANNON, BLACK, 0, 0)
    place(PieceKind.PAWN, RED, 0, 2)
    place(PieceKind.PAWN, BLACK, 0, 4)

    moves = legal_destinations(cannon, empty_board.grid)

    assert (0, 1) in moves
    assert all(col != 4 for row, col in moves if row == 0)


def test_knight_leg_blocks_only_dependent_destinations(empty_board, place):
    knight = place(PieceKind.KNIGHT, BLACK, 4, 4)
    open_moves = legal_destinations(knight, empty_board.grid)
    assert open_moves == [(2, 3), (2, 5), (6, 3), (6, 5), (3, 2), (5, 2), (3, 6), (5, 6)]

    place(PieceKind.PAWN, RED, 3, 4)
    blocked_moves = legal_destinations(knight, empty_board.grid)

    assert set(open_moves) - set(blocked_moves) == {(2, 3), (2, 5)}
    assert set(blocked_moves) <= set(open_moves)


def test_bishop_eye_blocks_only_one_destination(empty_board, place):
    bishop = place(PieceKind.BISHOP, BLACK, 4, 4)
    assert legal_destinations(bishop, empty_board.grid) == [(6, 6), (6, 2), (2, 6), (2, 2)]

    place(PieceKind.PAWN, BLACK, 5, 5)

    assert legal_destinations(bishop, empty_board.grid) == [(6, 2), (2, 6), (2, 2)]


def test_single_step_pieces(empty_board, place):
    advisor = place(PieceKind.ADVISOR, BLACK, 0, 0)
    king = place(PieceKind.KING, BLACK, 8, 7)
    pawn = place(PieceKind.PAWN, BLACK, 4, 4)
    place(PieceKind.PAWN, BLACK, 3, 4)
    place(PieceKind.ROOK, RED, 5, 4)

    assert legal_destinations(advisor, empty_board.grid) == [(1, 1)]
    assert legal_destinations(king, empty_board.grid) == [(7, 7), (8, 6)]
    # 卒可以横走、后退，也可以吃子
    assert legal_destinations(pawn, empty_board.grid) == [(5, 4), (4, 3), (4, 5)]


def test_destinations_in_bounds_and_never_own_piece():
    rng = random.Random(7)
    board = Board(layout=[])
    squares = [(r, c) for r in range(9) for c in range(8)]
    for row, col in rng.sample(squares, 30):
        kind = rng.choice([k for k in PieceKind if k is not PieceKind.KING])
        side = rng.choice([RED, BLACK])
        board.set_piece_at(row, col, Piece(kind, side, (row, col)))

    for piece in board.pieces():
        for row, col in legal_destinations(piece, board.grid):
            assert in_bounds(row, col)
            target = board.grid[row, col]
            assert target is None or target.side is not piece.side


# ============================================================================
# 攻击判定
# ============================================================================

def test_count_pieces_in_path(empty_board, place):
    place(PieceKind.PAWN, BLACK, 0, 2)
    place(PieceKind.PAWN, BLACK, 0, 4)

    assert count_pieces_in_path(empty_board.grid, (0, 0), (0, 6)) == 2
    assert count_pieces_in_path(empty_board.grid, (0, 0), (0, 6), ignore={(0, 2)}) == 1
    assert count_pieces_in_path(empty_board.grid, (0, 0), (3, 3)) == -1


def test_attack_check_treats_vacated_origin_as_empty(empty_board, place):
    place(PieceKind.ROOK, BLACK, 0, 3)
    place(PieceKind.ROOK, RED, 4, 3)

    assert not is_position_under_attack(empty_board.grid, (6, 3), RED)
    assert is_position_under_attack(empty_board.grid, (6, 3), RED, ignore={(4, 3)})


def test_attack_predicate_matches_move_generation(empty_board, place):
    knight = place(PieceKind.KNIGHT, BLACK, 4, 4)
    cannon = place(PieceKind.CANNON, BLACK, 8, 0)
    place(PieceKind.PAWN, RED, 3, 4)
    place(PieceKind.PAWN, RED, 8, 3)

    grid = empty_board.grid
    for piece in (knight, cannon):
        for row in range(9):
            for col in range(8):
                target = grid[row, col]
                if target is not None:
                    continue
                reachable = (row, col) in legal_destinations(piece, grid)
                attack = can_piece_attack(grid, piece, piece.position, (row, col))
                if piece.kind is PieceKind.KNIGHT:
                    assert reachable == attack
                elif attack:
                    # 炮对空格的攻击判定 = 隔一子
                    assert count_pieces_in_path(grid, piece.position, (row, col)) == 1


def test_find_attackers_skips_target_occupant(empty_board, place):
    place(PieceKind.PAWN, BLACK, 2, 3)
    place(PieceKind.PAWN, BLACK, 2, 4)

    assert find_attackers(empty_board.grid, (2, 3), RED) == [(2, 4)]


def test_find_protectors(empty_board, place):
    place(PieceKind.CANNON, BLACK, 4, 6)
    place(PieceKind.ROOK, BLACK, 0, 6)
    place(PieceKind.ROOK, RED, 4, 3)

    assert find_protectors(empty_board.grid, (4, 6), BLACK) == [(0, 6)]


# ============================================================================
# 将军与局面状态
# ============================================================================

def test_is_in_check_matches_opposing_destinations(empty_board, place):
    king = place(PieceKind.KING, BLACK, 0, 3)
    rook = place(PieceKind.ROOK, RED, 5, 3)

    assert is_in_check(empty_board.grid, BLACK)
    assert king.position in legal_destinations(rook, empty_board.grid)

    place(PieceKind.PAWN, BLACK, 2, 3)

    assert not is_in_check(empty_board.grid, BLACK)


def test_side_without_king_is_never_in_check(empty_board, place):
    place(PieceKind.ROOK, RED, 4, 3)
    place(PieceKind.ROOK, BLACK, 4, 0)

    assert not is_in_check(empty_board.grid, RED)


def test_find_king_asserts_on_duplicate(empty_board, place):
    place(PieceKind.KING, BLACK, 0, 0)
    empty_board.grid[8, 7] = Piece(PieceKind.KING, BLACK, (8, 7))

    with pytest.raises(AssertionError):
        find_king(empty_board.grid, BLACK)


def _boxed_king(place):
    """黑将在角落，两侧是塞住象眼的黑象"""
    place(PieceKind.KING, BLACK, 0, 0)
    place(PieceKind.BISHOP, BLACK, 0, 1)
    place(PieceKind.BISHOP, BLACK, 1, 0)
    place(PieceKind.PAWN, RED, 1, 2)
    place(PieceKind.PAWN, RED, 2, 1)


def test_checkmate_when_in_check_without_moves(empty_board, place):
    _boxed_king(place)
    place(PieceKind.CANNON, RED, 0, 5)

    assert is_in_check(empty_board.grid, BLACK)
    assert compute_status(empty_board.grid, BLACK) is GameStatus.CHECKMATE


def test_stalemate_when_not_in_check_without_moves(empty_board, place):
    _boxed_king(place)

    assert compute_status(empty_board.grid, BLACK) is GameStatus.STALEMATE


def test_has_legal_moves(empty_board, place):
    _boxed_king(place)

    assert not has_legal_moves(empty_board.grid, BLACK)
    assert not empty_board.has_valid_moves(BLACK)
    assert has_legal_moves(empty_board.grid, RED)
    assert empty_board.has_valid_moves(RED)


def test_check_when_king_can_still_move(empty_board, place):
    place(PieceKind.KING, BLACK, 0, 0)
    place(PieceKind.ROOK, RED, 0, 5)

    assert compute_status(empty_board.grid, BLACK) is GameStatus.CHECK


def test_playing_status(empty_board, place):
    place(PieceKind.PAWN, BLACK, 2, 3)
    place(PieceKind.ROOK, RED, 6, 3)

    assert compute_status(empty_board.grid, RED) is GameStatus.PLAYING
    assert compute_status(empty_board.grid, BLACK) is GameStatus.PLAYING
