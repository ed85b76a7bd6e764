"""
CLI 模块
命令行破阵界面
"""

from cli.play import PuzzleCLI, play_game

__all__ = [
    "PuzzleCLI",
    "play_game",
]
