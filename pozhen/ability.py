"""
十字消除技能模块

状态:
- Idle: 未充能
- Charged: 红车吃掉黑将后充能
- Armed: 充能状态下红车再次走子，待执行消除

消除: 以红车为中心，上下左右四条直线上的所有敌子全部移除 (不受阻挡)。
消除中若移除了将，则重新充能 (连锁)。
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional
import logging

import numpy as np

from pozhen.board import Board
from pozhen.pieces import CONTROLLED_SIDE, OPPOSING_SIDE, Piece, PieceKind, Position, Side, in_bounds
from pozhen.rules import STRAIGHT_DIRECTIONS

logger = logging.getLogger(__name__)


class AbilityPhase(Enum):
    IDLE = "idle"
    CHARGED = "charged"
    ARMED = "armed"


@dataclass
class AbilityState:
    """十字消除技能状态"""

    # 是否持有充能
    charged: bool = False

    # 下一次结算时是否执行消除
    pending_trigger: bool = False

    # 就绪的那一步又吃了将: 消除之后仍要重新充能
    recharge_after: bool = False

    @property
    def phase(self) -> AbilityPhase:
        if not self.charged:
            return AbilityPhase.IDLE
        return AbilityPhase.ARMED if self.pending_trigger else AbilityPhase.CHARGED

    def reset(self):
        self.charged = False
        self.pending_trigger = False
        self.recharge_after = False

    def on_rook_move(self, captured: Optional[Piece]) -> bool:
        """
        红车走子后更新状态

        充能前的走子不会触发消除；吃将的那一步只负责充能。

        Args:
            captured: 本步被吃的棋子

        Returns:
            是否需要执行消除
        """
        if self.charged:
            self.pending_trigger = True
            logger.debug("十字消除已就绪")

        if captured is not None and captured.kind is PieceKind.KING and captured.side is OPPOSING_SIDE:
            if self.pending_trigger:
                self.recharge_after = True
            self.charged = True
            logger.info("吃掉黑将，十字消除已充能")

        return self.pending_trigger

    def finish_elimination(self, chained: bool):
        """消除执行完毕: 连锁时回到充能状态，否则回到空闲"""
        self.pending_trigger = False
        self.recharge_after = False
        self.charged = chained

    def charge(self):
        """连锁充能 (消除之后单独结算)"""
        self.charged = True


# ============================================================================
# 消除执行
# ============================================================================

@dataclass(frozen=True)
class EliminationResult:
    """一次十字消除的结果"""

    origin: Position
    removed: List[Piece] = field(default_factory=list)
    kings_removed: int = 0

    @property
    def chained(self) -> bool:
        """是否连锁充能"""
        return self.kings_removed > 0


def cross_targets(grid: np.ndarray, origin: Position, side: Side = CONTROLLED_SIDE) -> List[Piece]:
    """
    列出十字消除会移除的敌子

    Args:
        grid: 棋盘
        origin: 消除中心
        side: 发动方

    Returns:
        敌子列表 (按方向、距离排序)
    """
    row, col = origin
    targets = []
    for dr, dc in STRAIGHT_DIRECTIONS:
        r, c = row + dr, col + dc
        while in_bounds(r, c):
            piece = grid[r, c]
            if piece is not None and piece.side is not side:
                targets.append(piece)
            r, c = r + dr, c + dc
    return targets


def execute_elimination(board: Board, origin: Position,
                        side: Side = CONTROLLED_SIDE) -> EliminationResult:
    """
    在棋盘上执行十字消除

    Args:
        board: 棋盘
        origin: 消除中心 (红车位置)
        side: 发动方

    Returns:
        消除结果
    """
    removed = cross_targets(board.grid, origin, side)
    for piece in removed:
        board.remove_piece(*piece.position)

    kings = sum(1 for p in removed if p.kind is PieceKind.KING)
    logger.info(f"十字消除 {origin}: 移除 {len(removed)} 子 (将 {kings} 个)")
    return EliminationResult(origin=tuple(origin), removed=removed, kings_removed=kings)
