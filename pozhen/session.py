"""
对局会话
持有一个棋盘和一个技能状态，是界面层调用的唯一入口

十字消除分两个阶段结算，便于界面在中间状态刷新:
1. attempt_move 之后 elimination_due 为 True，调用 resolve_elimination 执行消除
2. 若消除中移除了将 (或就绪的那一步吃了将)，recharge_due 为 True，调用 apply_recharge 重新充能
下一次走子前会自动结算所有未完成的阶段。
"""

from __future__ import annotations
from typing import List, Optional, Sequence
import logging
import time

import numpy as np

from pozhen.ability import AbilityPhase, AbilityState, EliminationResult, execute_elimination
from pozhen.advisor import Recommendation, recommend
from pozhen.board import Board
from pozhen.config import GameConfig
from pozhen.pieces import CONTROLLED_SIDE, OPPOSING_SIDE, Piece, PieceKind, Position, Side
from pozhen.rules import GameStatus

logger = logging.getLogger(__name__)


class GameSession:
    """
    一局游戏

    用法:
        session = GameSession()
        rook = session.board.find_rook()
        moves = session.get_valid_moves(rook)
        hint = session.recommend(rook, moves)
        session.attempt_move(rook.position, hint.best)
        session.run_pending()
    """

    def __init__(self, config: Optional[GameConfig] = None):
        self.config = config or GameConfig()
        self.board = Board(self.config.starting_layout)
        self.ability = AbilityState()
        self._recharge_pending = False

    # ------------------------------------------------------------------
    # 对局控制
    # ------------------------------------------------------------------

    def new_game(self):
        """重新开始 (恢复初始布局并清空技能状态)"""
        self.board.reset()
        self.ability.reset()
        self._recharge_pending = False
        logger.info("新游戏开始")

    reset = new_game

    # ------------------------------------------------------------------
    # 查询
    # ------------------------------------------------------------------

    @property
    def status(self) -> GameStatus:
        return self.board.status

    @property
    def side_to_move(self) -> Side:
        return self.board.side_to_move

    @property
    def phase(self) -> AbilityPhase:
        return self.ability.phase

    @property
    def elimination_due(self) -> bool:
        return self.ability.pending_trigger

    @property
    def recharge_due(self) -> bool:
        return self._recharge_pending

    def get_piece_at(self, row: int, col: int) -> Optional[Piece]:
        return self.board.get_piece_at(row, col)

    def get_valid_moves(self, piece: Optional[Piece]) -> List[Position]:
        return self.board.get_valid_moves(piece)

    def snapshot(self) -> np.ndarray:
        return self.board.snapshot()

    def status_text(self) -> str:
        """局面状态的文字描述"""
        status = self.board.status
        if status is GameStatus.CHECK:
            return "将军！"
        if status is GameStatus.CHECKMATE:
            winner = "黑方" if self.board.side_to_move is CONTROLLED_SIDE else "红方"
            return f"将死！{winner}获胜"
        if status is GameStatus.STALEMATE:
            return "和棋（无子可动）"
        return "游戏进行中"

    # ------------------------------------------------------------------
    # 摆棋
    # ------------------------------------------------------------------

    def set_piece_at(self, row: int, col: int, piece: Optional[Piece]) -> bool:
        return self.board.set_piece_at(row, col, piece)

    def place_piece(self, row: int, col: int, kind: PieceKind, side: Side) -> bool:
        """在指定位置放置一个新棋子"""
        return self.board.set_piece_at(row, col, Piece(kind, side, (row, col)))

    def remove_piece(self, row: int, col: int) -> bool:
        return self.board.remove_piece(row, col)

    # ------------------------------------------------------------------
    # 走子
    # ------------------------------------------------------------------

    def attempt_move(self, from_pos: Position, to_pos: Position) -> bool:
        """
        走子并更新技能状态

        Returns:
            是否成功；失败时棋盘和技能状态不变
        """
        self.run_pending(delay=False)

        piece = self.board.get_piece_at(*from_pos)
        if not self.board.attempt_move(from_pos, to_pos):
            return False

        if piece.is_controlled_rook():
            captured = self.board.history[-1].captured
            self.ability.on_rook_move(captured)
        return True

    def undo_last_move(self) -> bool:
        """
        悔棋

        撤销的是红车吃将的那一步，且这次充能尚未使用时，一并撤销充能。
        """
        record = self.board.history[-1] if self.board.history else None
        if not self.board.undo_last_move():
            return False

        captured = record.captured
        if (record.piece.is_controlled_rook() and captured is not None
                and captured.kind is PieceKind.KING and captured.side is OPPOSING_SIDE
                and self.ability.phase is AbilityPhase.CHARGED and not self._recharge_pending):
            self.ability.reset()
            logger.debug("悔棋撤销了吃将，充能取消")
        return True

    # ------------------------------------------------------------------
    # 十字消除结算
    # ------------------------------------------------------------------

    def resolve_elimination(self) -> Optional[EliminationResult]:
        """
        执行待结算的十字消除 (第一阶段)

        连锁充能不在此处生效，而是留给 apply_recharge。

        Returns:
            消除结果；没有待结算的消除时返回 None
        """
        if not self.ability.pending_trigger:
            return None

        # 就绪的那一步吃掉的将同样换来一次充能
        recharge = self.ability.recharge_after
        rook = self.board.find_rook()
        if rook is None:
            logger.debug("红车不在棋盘上，取消十字消除")
            self.ability.finish_elimination(chained=False)
            self._recharge_pending = recharge
            return None

        result = execute_elimination(self.board, rook.position, rook.side)
        self.ability.finish_elimination(chained=False)
        self._recharge_pending = result.chained or recharge
        return result

    def apply_recharge(self) -> bool:
        """连锁充能 (第二阶段)，没有待充能时返回 False"""
        if not self._recharge_pending:
            return False
        self._recharge_pending = False
        self.ability.charge()
        logger.info("十字消除移除了将，重新充能")
        return True

    def run_pending(self, delay: bool = True) -> Optional[EliminationResult]:
        """
        依次结算消除和连锁充能

        Args:
            delay: 是否在阶段之间等待配置的演出延迟
        """
        result = None
        if self.elimination_due:
            if delay:
                time.sleep(self.config.elimination_delay)
            result = self.resolve_elimination()
        if self.recharge_due:
            if delay:
                time.sleep(self.config.recharge_delay)
            self.apply_recharge()
        return result

    # ------------------------------------------------------------------
    # 推荐
    # ------------------------------------------------------------------

    def recommend(self, piece: Optional[Piece], valid_moves: Sequence[Position]) -> Recommendation:
        """推荐红车的最佳落点 (不修改棋盘)"""
        return recommend(
            self.board.grid, piece, valid_moves,
            charged=self.ability.charged,
            config=self.config.advisor,
        )
