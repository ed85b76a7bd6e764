"""
仙奕破阵 棋盘模块
管理棋子摆放、走子、悔棋与局面状态
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Tuple
import logging

import numpy as np

from pozhen.pieces import (
    BOARD_HEIGHT, BOARD_WIDTH,
    CONTROLLED_SIDE, OPPOSING_SIDE,
    Piece, PieceKind, Position, Side,
    create_empty_grid, encode_grid, in_bounds,
)
from pozhen.rules import (
    GameStatus,
    compute_status, find_king, has_legal_moves, iter_pieces, legal_destinations,
)

logger = logging.getLogger(__name__)

# 布局条目: (棋子类型, 阵营, 行, 列)
LayoutEntry = Tuple[PieceKind, Side, int, int]

# 初始布局: 第三行放三个黑卒，第七行放红车
STARTING_LAYOUT: List[LayoutEntry] = [
    (PieceKind.PAWN, OPPOSING_SIDE, 2, 3),
    (PieceKind.PAWN, OPPOSING_SIDE, 2, 5),
    (PieceKind.PAWN, OPPOSING_SIDE, 2, 7),
    (PieceKind.ROOK, CONTROLLED_SIDE, 6, 3),
]


@dataclass(frozen=True)
class MoveRecord:
    """走子记录 (仅用于悔棋)"""

    from_pos: Position
    to_pos: Position
    piece: Piece                 # 走子前的棋子快照
    captured: Optional[Piece]    # 被吃棋子的快照
    side: Side                   # 走子前的行棋方


class Board:
    """
    棋盘

    - grid: (9, 8) object 数组，每格为 Piece 或 None
    - side_to_move: 当前行棋方
    - history: 走子记录
    - status: 由棋盘和行棋方计算得出，每次变更后刷新
    """

    def __init__(self, layout: Optional[Iterable[LayoutEntry]] = None):
        self.layout = list(layout) if layout is not None else list(STARTING_LAYOUT)
        self.grid = create_empty_grid()
        self.side_to_move = CONTROLLED_SIDE
        self.history: List[MoveRecord] = []
        self.status = GameStatus.PLAYING
        self.reset()

    # ------------------------------------------------------------------
    # 初始化
    # ------------------------------------------------------------------

    def reset(self):
        """清空历史并恢复初始布局"""
        self.grid = create_empty_grid()
        for kind, side, row, col in self.layout:
            self.grid[row, col] = Piece(kind, side, (row, col))
        self.side_to_move = CONTROLLED_SIDE
        self.history = []
        self._refresh_status()
        logger.debug("棋盘已重置")

    # ------------------------------------------------------------------
    # 查询
    # ------------------------------------------------------------------

    def get_piece_at(self, row: int, col: int) -> Optional[Piece]:
        """获取指定位置的棋子，越界返回 None"""
        if not in_bounds(row, col):
            return None
        return self.grid[row, col]

    def pieces(self, side: Optional[Side] = None) -> Iterator[Piece]:
        """按行优先顺序遍历棋子"""
        return iter_pieces(self.grid, side)

    def find_king(self, side: Side = OPPOSING_SIDE) -> Optional[Piece]:
        return find_king(self.grid, side)

    def find_rook(self) -> Optional[Piece]:
        """找到受控方的车"""
        for piece in self.pieces(CONTROLLED_SIDE):
            if piece.kind is PieceKind.ROOK:
                return piece
        return None

    def has_valid_moves(self, side: Side) -> bool:
        return has_legal_moves(self.grid, side)

    def snapshot(self) -> np.ndarray:
        """棋盘的 int8 编码 (9, 8)"""
        return encode_grid(self.grid)

    # ------------------------------------------------------------------
    # 摆放 (不经过走法检查)
    # ------------------------------------------------------------------

    def set_piece_at(self, row: int, col: int, piece: Optional[Piece]) -> bool:
        """
        直接放置或移除棋子 (摆棋用)

        Args:
            row, col: 位置
            piece: 棋子，None 表示清空

        Returns:
            是否成功 (越界或会产生第二个黑将时失败)
        """
        if not in_bounds(row, col):
            return False

        if piece is not None:
            if piece.kind is PieceKind.KING and piece.side is OPPOSING_SIDE:
                king = self.find_king(OPPOSING_SIDE)
                if king is not None and king is not piece and king.position != (row, col):
                    logger.debug(f"拒绝放置第二个将: ({row}, {col})")
                    return False
            # 同一棋子不能同时占两个格子
            old_row, old_col = piece.position
            if in_bounds(old_row, old_col) and self.grid[old_row, old_col] is piece:
                self.grid[old_row, old_col] = None
            piece.position = (row, col)

        self.grid[row, col] = piece
        self._refresh_status()
        return True

    def remove_piece(self, row: int, col: int) -> bool:
        """删除指定位置的棋子"""
        return self.set_piece_at(row, col, None)

    # ------------------------------------------------------------------
    # 走子
    # ------------------------------------------------------------------

    def is_legal_move(self, piece: Optional[Piece], to_row: int, to_col: int) -> bool:
        """检查走法是否合法 (不检查送将)"""
        if piece is None or not in_bounds(to_row, to_col):
            return False

        target = self.grid[to_row, to_col]
        if target is not None and target.side is piece.side:
            return False

        return (to_row, to_col) in legal_destinations(piece, self.grid)

    def get_valid_moves(self, piece: Optional[Piece]) -> List[Position]:
        """获取可走位置 (用于高亮显示)"""
        if piece is None:
            return []
        return [
            move for move in legal_destinations(piece, self.grid)
            if self.is_legal_move(piece, move[0], move[1])
        ]

    def attempt_move(self, from_pos: Position, to_pos: Position) -> bool:
        """
        尝试走子

        Args:
            from_pos: 起始位置
            to_pos: 目标位置

        Returns:
            是否成功；失败时棋盘不变
        """
        from_pos, to_pos = tuple(from_pos), tuple(to_pos)
        piece = self.get_piece_at(*from_pos)
        if piece is None:
            logger.debug(f"走子失败: {from_pos} 没有棋子")
            return False
        if not self.is_legal_move(piece, *to_pos):
            logger.debug(f"走子失败: {piece.kind.value} {from_pos} -> {to_pos} 不合法")
            return False

        captured = self.grid[to_pos]
        record = MoveRecord(
            from_pos=from_pos,
            to_pos=to_pos,
            piece=piece.clone(),
            captured=captured.clone() if captured is not None else None,
            side=self.side_to_move,
        )

        self.grid[to_pos] = piece
        self.grid[from_pos] = None
        piece.move_to(to_pos)

        self.history.append(record)
        self.side_to_move = self.side_to_move.opponent
        self._refresh_status()

        if captured is not None:
            logger.debug(f"{piece.kind.value} {from_pos} -> {to_pos} 吃 {captured.kind.value}")
        else:
            logger.debug(f"{piece.kind.value} {from_pos} -> {to_pos}")
        return True

    def undo_last_move(self) -> bool:
        """撤销上一步，历史为空时返回 False"""
        if not self.history:
            return False

        record = self.history.pop()
        piece = self.grid[record.to_pos]
        if piece is None or piece.kind is not record.piece.kind or piece.side is not record.piece.side:
            # 走到的格子已被手动清空或换了棋子，按快照恢复
            piece = record.piece.clone()
        piece.position = record.from_pos
        piece.has_moved = record.piece.has_moved

        self.grid[record.from_pos] = piece
        self.grid[record.to_pos] = record.captured.clone() if record.captured is not None else None

        self.side_to_move = record.side
        self._refresh_status()
        logger.debug(f"悔棋: {record.to_pos} -> {record.from_pos}")
        return True

    # ------------------------------------------------------------------
    # 内部
    # ------------------------------------------------------------------

    def _refresh_status(self):
        if __debug__:
            self._check_invariants()
        self.status = compute_status(self.grid, self.side_to_move)

    def _check_invariants(self):
        seen = set()
        kings = 0
        for row in range(BOARD_HEIGHT):
            for col in range(BOARD_WIDTH):
                piece = self.grid[row, col]
                if piece is None:
                    continue
                assert piece.position == (row, col), \
                    f"棋子位置 {piece.position} 与格子 ({row}, {col}) 不一致"
                assert id(piece) not in seen, f"棋子同时占据多个格子: ({row}, {col})"
                seen.add(id(piece))
                if piece.kind is PieceKind.KING and piece.side is OPPOSING_SIDE:
                    kings += 1
        assert kings <= 1, f"黑方存在 {kings} 个将"
