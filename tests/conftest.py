"""
测试共享 fixture
"""

import pytest

from pozhen.board import Board
from pozhen.pieces import Piece
from pozhen.session import GameSession


@pytest.fixture
def empty_board():
    """空棋盘 (红方先走)"""
    return Board(layout=[])


@pytest.fixture
def place(empty_board):
    """在 empty_board 上放置棋子"""
    def _place(kind, side, row, col):
        piece = Piece(kind, side, (row, col))
        assert empty_board.set_piece_at(row, col, piece)
        return piece
    return _place


@pytest.fixture
def session():
    """默认布局的对局"""
    return GameSession()
