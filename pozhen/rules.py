"""
仙奕破阵 规则模块
走法生成、攻击判定、将军与局面状态检测

与标准象棋的区别:
- 没有九宫、河界限制
- 卒可上下左右走一格
- 象走田字 (需象眼为空)，马走日字 (需马腿为空)
"""

from __future__ import annotations
from enum import Enum
from typing import Callable, Collection, Dict, Iterator, List, Optional

import numpy as np

from pozhen.pieces import (
    BOARD_HEIGHT, BOARD_WIDTH,
    Piece, PieceKind, Position, Side,
    in_bounds,
)

# ============================================================================
# 方向定义
# ============================================================================

# 车/炮: 右、左、下、上
STRAIGHT_DIRECTIONS = [(0, 1), (0, -1), (1, 0), (-1, 0)]

# 将/卒: 上、下、左、右
STEP_DIRECTIONS = [(-1, 0), (1, 0), (0, -1), (0, 1)]

# 士: 四个斜向
ADVISOR_DIRECTIONS = [(-1, -1), (-1, 1), (1, -1), (1, 1)]

# 象: (象眼偏移, 目标偏移)
BISHOP_MOVES = [
    ((1, 1), (2, 2)),
    ((1, -1), (2, -2)),
    ((-1, 1), (-2, 2)),
    ((-1, -1), (-2, -2)),
]

# 马: (马腿偏移, 目标偏移)，先直走一格再斜走一格
KNIGHT_MOVES = [
    ((-1, 0), (-2, -1)), ((-1, 0), (-2, 1)),   # 先向上
    ((1, 0), (2, -1)), ((1, 0), (2, 1)),       # 先向下
    ((0, -1), (-1, -2)), ((0, -1), (1, -2)),   # 先向左
    ((0, 1), (-1, 2)), ((0, 1), (1, 2)),       # 先向右
]


class GameStatus(Enum):
    """局面状态"""
    PLAYING = "playing"
    CHECK = "check"
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"


# ============================================================================
# 辅助函数
# ============================================================================

def _occupant(grid: np.ndarray, row: int, col: int,
              ignore: Collection[Position] = ()) -> Optional[Piece]:
    """读取格子上的棋子，ignore 中的格子视为空"""
    if (row, col) in ignore:
        return None
    return grid[row, col]


def iter_pieces(grid: np.ndarray, side: Optional[Side] = None) -> Iterator[Piece]:
    """按行优先顺序遍历棋盘上的棋子"""
    for row in range(BOARD_HEIGHT):
        for col in range(BOARD_WIDTH):
            piece = grid[row, col]
            if piece is not None and (side is None or piece.side is side):
                yield piece


def count_pieces_in_path(grid: np.ndarray, from_pos: Position, to_pos: Position,
                         ignore: Collection[Position] = ()) -> int:
    """
    计算两点之间 (不含两端) 的棋子数量

    Args:
        grid: 棋盘
        from_pos, to_pos: 同一行或同一列上的两个位置
        ignore: 视为空位的格子

    Returns:
        棋子数量；两点不在同一直线上时返回 -1
    """
    (from_row, from_col), (to_row, to_col) = from_pos, to_pos
    if from_row != to_row and from_col != to_col:
        return -1

    count = 0
    if from_row == to_row:
        for col in range(min(from_col, to_col) + 1, max(from_col, to_col)):
            if _occupant(grid, from_row, col, ignore) is not None:
                count += 1
    else:
        for row in range(min(from_row, to_row) + 1, max(from_row, to_row)):
            if _occupant(grid, row, from_col, ignore) is not None:
                count += 1
    return count


# ============================================================================
# 单个棋子走法生成
# ============================================================================

def _rook_destinations(piece: Piece, grid: np.ndarray) -> List[Position]:
    """车: 直线滑动，遇子停止，可吃敌子"""
    moves = []
    row, col = piece.position
    for dr, dc in STRAIGHT_DIRECTIONS:
        r, c = row + dr, col + dc
        while in_bounds(r, c):
            target = grid[r, c]
            if target is None:
                moves.append((r, c))
            else:
                if target.side is not piece.side:
                    moves.append((r, c))
                break
            r, c = r + dr, c + dc
    return moves


def _cannon_destinations(piece: Piece, grid: np.ndarray) -> List[Position]:
    """炮: 不吃子时同车；吃子需隔一个炮架"""
    moves = []
    row, col = piece.position
    for dr, dc in STRAIGHT_DIRECTIONS:
        jumped = False
        r, c = row + dr, col + dc
        while in_bounds(r, c):
            target = grid[r, c]
            if not jumped:
                if target is None:
                    moves.append((r, c))
                else:
                    jumped = True
            elif target is not None:
                if target.side is not piece.side:
                    moves.append((r, c))
                break
            r, c = r + dr, c + dc
    return moves


def _knight_destinations(piece: Piece, grid: np.ndarray) -> List[Position]:
    """马: 日字，马腿被占则不能走"""
    moves = []
    row, col = piece.position
    for (lr, lc), (dr, dc) in KNIGHT_MOVES:
        leg_row, leg_col = row + lr, col + lc
        if not in_bounds(leg_row, leg_col) or grid[leg_row, leg_col] is not None:
            continue
        r, c = row + dr, col + dc
        if in_bounds(r, c) and (grid[r, c] is None or grid[r, c].side is not piece.side):
            moves.append((r, c))
    return moves


def _bishop_destinations(piece: Piece, grid: np.ndarray) -> List[Position]:
    """象: 田字，象眼被占则不能走"""
    moves = []
    row, col = piece.position
    for (er, ec), (dr, dc) in BISHOP_MOVES:
        r, c = row + dr, col + dc
        if not in_bounds(r, c) or grid[row + er, col + ec] is not None:
            continue
        if grid[r, c] is None or grid[r, c].side is not piece.side:
            moves.append((r, c))
    return moves


def _single_step_destinations(piece: Piece, grid: np.ndarray, directions) -> List[Position]:
    moves = []
    row, col = piece.position
    for dr, dc in directions:
        r, c = row + dr, col + dc
        if in_bounds(r, c) and (grid[r, c] is None or grid[r, c].side is not piece.side):
            moves.append((r, c))
    return moves


def _advisor_destinations(piece: Piece, grid: np.ndarray) -> List[Position]:
    """士: 斜走一格"""
    return _single_step_destinations(piece, grid, ADVISOR_DIRECTIONS)


def _king_destinations(piece: Piece, grid: np.ndarray) -> List[Position]:
    """将: 上下左右一格"""
    return _single_step_destinations(piece, grid, STEP_DIRECTIONS)


def _pawn_destinations(piece: Piece, grid: np.ndarray) -> List[Position]:
    """卒: 上下左右一格 (本变体不区分前进方向)"""
    return _single_step_destinations(piece, grid, STEP_DIRECTIONS)


_DESTINATION_GENERATORS: Dict[PieceKind, Callable[[Piece, np.ndarray], List[Position]]] = {
    PieceKind.KING: _king_destinations,
    PieceKind.ROOK: _rook_destinations,
    PieceKind.BISHOP: _bishop_destinations,
    PieceKind.KNIGHT: _knight_destinations,
    PieceKind.PAWN: _pawn_destinations,
    PieceKind.ADVISOR: _advisor_destinations,
    PieceKind.CANNON: _cannon_destinations,
}

assert set(_DESTINATION_GENERATORS) == set(PieceKind), "走法生成缺少棋子类型"


def legal_destinations(piece: Piece, grid: np.ndarray) -> List[Position]:
    """
    生成棋子的可走位置 (不考虑送将)

    Args:
        piece: 棋子
        grid: 棋盘 (9, 8)

    Returns:
        按方向、距离排序的目标位置列表
    """
    return _DESTINATION_GENERATORS[piece.kind](piece, grid)


# ============================================================================
# 攻击判定
# ============================================================================

def can_piece_attack(grid: np.ndarray, piece: Piece, origin: Position, target: Position,
                     ignore: Collection[Position] = ()) -> bool:
    """
    检测棋子能否从 origin 走到 target (仅检查走法)

    直接按走法规则反向判定，不调用 legal_destinations；
    ignore 中的格子视为空 (例如已离开原位的走子方)。

    Args:
        grid: 棋盘
        piece: 攻击方棋子
        origin: 攻击方所在位置
        target: 目标位置
        ignore: 视为空位的格子

    Returns:
        是否能攻击
    """
    (row, col), (target_row, target_col) = origin, target
    dr = target_row - row
    dc = target_col - col
    adr, adc = abs(dr), abs(dc)
    if adr == 0 and adc == 0:
        return False

    kind = piece.kind
    if kind is PieceKind.PAWN or kind is PieceKind.KING:
        return adr + adc == 1
    if kind is PieceKind.ADVISOR:
        return adr == 1 and adc == 1
    if kind is PieceKind.BISHOP:
        if adr != 2 or adc != 2:
            return False
        return _occupant(grid, row + dr // 2, col + dc // 2, ignore) is None
    if kind is PieceKind.KNIGHT:
        if (adr, adc) not in ((2, 1), (1, 2)):
            return False
        # 马腿在长边方向的第一格
        if adr == 2:
            leg = (row + (1 if dr > 0 else -1), col)
        else:
            leg = (row, col + (1 if dc > 0 else -1))
        return _occupant(grid, leg[0], leg[1], ignore) is None
    if kind is PieceKind.ROOK:
        return count_pieces_in_path(grid, origin, target, ignore) == 0
    if kind is PieceKind.CANNON:
        return count_pieces_in_path(grid, origin, target, ignore) == 1
    raise AssertionError(f"未知棋子类型: {kind}")


def find_attackers(grid: np.ndarray, target: Position, side: Side,
                   ignore: Collection[Position] = ()) -> List[Position]:
    """
    找出能攻击 target 的所有敌方棋子位置

    target 上的棋子本身不计入 (它将被吃掉)。

    Args:
        grid: 棋盘
        target: 被攻击的位置
        side: 防守方
        ignore: 视为空位的格子

    Returns:
        攻击者位置列表 (行优先顺序)
    """
    attackers = []
    for piece in iter_pieces(grid, side.opponent):
        position = piece.position
        if position == target or position in ignore:
            continue
        if can_piece_attack(grid, piece, position, target, ignore):
            attackers.append(position)
    return attackers


def is_position_under_attack(grid: np.ndarray, target: Position, side: Side,
                             ignore: Collection[Position] = ()) -> bool:
    """检查位置是否被敌方攻击"""
    return len(find_attackers(grid, target, side, ignore)) > 0


def find_protectors(grid: np.ndarray, target: Position, side: Side,
                    ignore: Collection[Position] = ()) -> List[Position]:
    """
    找出能保护 target 上棋子的同方棋子 (即能反吃 target 的棋子)

    Args:
        grid: 棋盘
        target: 被保护棋子的位置
        side: 被保护棋子所属方
        ignore: 视为空位的格子

    Returns:
        保护者位置列表
    """
    return find_attackers(grid, target, side.opponent, ignore)


# ============================================================================
# 将军检测
# ============================================================================

def find_king(grid: np.ndarray, side: Side) -> Optional[Piece]:
    """找到指定方的将，不存在时返回 None"""
    kings = [p for p in iter_pieces(grid, side) if p.kind is PieceKind.KING]
    assert len(kings) <= 1, f"{side.value} 方存在多个将: {[k.position for k in kings]}"
    return kings[0] if kings else None


def is_in_check(grid: np.ndarray, side: Side) -> bool:
    """
    检查指定方是否被将军

    任一敌方棋子的可走位置包含己方将的位置即为将军；没有将的一方永远不会被将军。
    """
    king = find_king(grid, side)
    if king is None:
        return False
    for piece in iter_pieces(grid, side.opponent):
        if king.position in legal_destinations(piece, grid):
            return True
    return False


def has_legal_moves(grid: np.ndarray, side: Side) -> bool:
    """检查指定方是否还有可走的棋"""
    for piece in iter_pieces(grid, side):
        if legal_destinations(piece, grid):
            return True
    return False


def compute_status(grid: np.ndarray, side: Side) -> GameStatus:
    """
    计算局面状态

    Args:
        grid: 棋盘
        side: 行棋方

    Returns:
        将死 / 将军 / 困毙 / 进行中
    """
    in_check = is_in_check(grid, side)
    can_move = has_legal_moves(grid, side)

    if in_check:
        return GameStatus.CHECK if can_move else GameStatus.CHECKMATE
    if not can_move:
        return GameStatus.STALEMATE
    return GameStatus.PLAYING
