"""
仙奕破阵 棋子定义模块

棋盘: 9行 x 8列
- 红方 (受控方) 只有一个车
- 黑方 (对手) 手动摆放，最多一个将

棋盘编码 (与 snapshot() 一致):
- 正数表示红方，负数表示黑方，0 = 空位
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

import numpy as np

# ============================================================================
# 常量定义
# ============================================================================

# 棋盘尺寸
BOARD_HEIGHT = 9
BOARD_WIDTH = 8

EMPTY = 0

Position = Tuple[int, int]


class PieceKind(Enum):
    """棋子类型"""
    KING = "king"
    ROOK = "rook"
    BISHOP = "bishop"
    KNIGHT = "knight"
    PAWN = "pawn"
    ADVISOR = "advisor"
    CANNON = "cannon"


class Side(Enum):
    """阵营: 红方为受控方，黑方为对手"""
    RED = "red"
    BLACK = "black"

    @property
    def opponent(self) -> "Side":
        return Side.BLACK if self is Side.RED else Side.RED


CONTROLLED_SIDE = Side.RED
OPPOSING_SIDE = Side.BLACK

# 棋子编码 (绝对值)
PIECE_CODES = {
    PieceKind.KING: 1,      # 将
    PieceKind.ADVISOR: 2,   # 士
    PieceKind.BISHOP: 3,    # 象
    PieceKind.KNIGHT: 4,    # 马
    PieceKind.ROOK: 5,      # 车
    PieceKind.CANNON: 6,    # 炮
    PieceKind.PAWN: 7,      # 卒
}

# 棋子符号映射 (用于显示)
PIECE_SYMBOLS = {
    (Side.RED, PieceKind.KING): '帥', (Side.RED, PieceKind.ADVISOR): '仕',
    (Side.RED, PieceKind.BISHOP): '相', (Side.RED, PieceKind.KNIGHT): '傌',
    (Side.RED, PieceKind.ROOK): '车', (Side.RED, PieceKind.CANNON): '炮',
    (Side.RED, PieceKind.PAWN): '兵',
    (Side.BLACK, PieceKind.KING): '将', (Side.BLACK, PieceKind.ADVISOR): '士',
    (Side.BLACK, PieceKind.BISHOP): '象', (Side.BLACK, PieceKind.KNIGHT): '马',
    (Side.BLACK, PieceKind.ROOK): '車', (Side.BLACK, PieceKind.CANNON): '砲',
    (Side.BLACK, PieceKind.PAWN): '卒',
}

assert set(PIECE_CODES) == set(PieceKind), "PIECE_CODES 缺少棋子类型"
assert len(PIECE_SYMBOLS) == len(PieceKind) * len(Side), "PIECE_SYMBOLS 不完整"


# ============================================================================
# 棋子
# ============================================================================

@dataclass
class Piece:
    """棋子实体，只属于它所在的棋盘格"""

    kind: PieceKind
    side: Side
    position: Position
    has_moved: bool = False

    @property
    def symbol(self) -> str:
        return PIECE_SYMBOLS[(self.side, self.kind)]

    @property
    def code(self) -> int:
        """带符号的棋子编码"""
        code = PIECE_CODES[self.kind]
        return code if self.side is Side.RED else -code

    def is_controlled_rook(self) -> bool:
        return self.kind is PieceKind.ROOK and self.side is CONTROLLED_SIDE

    def move_to(self, position: Position):
        self.position = position
        self.has_moved = True

    def clone(self) -> "Piece":
        """复制棋子 (用于走子记录)"""
        return Piece(self.kind, self.side, tuple(self.position), self.has_moved)


# ============================================================================
# 辅助函数
# ============================================================================

def in_bounds(row: int, col: int) -> bool:
    """检查位置是否在棋盘内 (9行8列)"""
    return 0 <= row < BOARD_HEIGHT and 0 <= col < BOARD_WIDTH


def create_empty_grid() -> np.ndarray:
    """创建空棋盘 (9, 8)，每格为 Piece 或 None"""
    return np.full((BOARD_HEIGHT, BOARD_WIDTH), None, dtype=object)


def encode_grid(grid: np.ndarray) -> np.ndarray:
    """
    将棋盘编码为整数数组

    Args:
        grid: 棋盘 (9, 8) object 数组

    Returns:
        (9, 8) int8 数组
    """
    encoded = np.full((BOARD_HEIGHT, BOARD_WIDTH), EMPTY, dtype=np.int8)
    for row in range(BOARD_HEIGHT):
        for col in range(BOARD_WIDTH):
            piece = grid[row, col]
            if piece is not None:
                encoded[row, col] = piece.code
    return encoded


def parse_kind(name: str) -> Optional[PieceKind]:
    """按名称解析棋子类型，无法识别时返回 None"""
    try:
        return PieceKind(name.strip().lower())
    except ValueError:
        return None


def parse_side(name: str) -> Optional[Side]:
    """按名称解析阵营，无法识别时返回 None"""
    try:
        return Side(name.strip().lower())
    except ValueError:
        return None
