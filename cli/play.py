"""
CLI 摆棋与破阵模块
提供命令行界面操作红车、摆放黑子并查看推荐落点
"""

from __future__ import annotations
from typing import List, Optional, Sequence
import logging
import time

from pozhen.board import Board
from pozhen.config import GameConfig
from pozhen.pieces import (
    BOARD_HEIGHT, BOARD_WIDTH,
    CONTROLLED_SIDE, OPPOSING_SIDE,
    Piece, Position, Side,
    parse_kind, parse_side,
)
from pozhen.ability import AbilityPhase
from pozhen.advisor import Recommendation
from pozhen.session import GameSession

logger = logging.getLogger(__name__)


# ============================================================================
# 棋盘显示
# ============================================================================

EMPTY_SYMBOL = '．'

# ANSI 颜色代码
RED = '\033[91m'
BLACK = '\033[94m'
RESET = '\033[0m'
BOLD = '\033[1m'
GREEN = '\033[92m'
YELLOW = '\033[93m'

PHASE_TEXT = {
    AbilityPhase.IDLE: "未充能",
    AbilityPhase.CHARGED: f"{YELLOW}已充能{RESET}",
    AbilityPhase.ARMED: f"{RED}{BOLD}消除就绪{RESET}",
}


def colorize_piece(piece: Optional[Piece]) -> str:
    """为棋子添加颜色"""
    if piece is None:
        return EMPTY_SYMBOL
    color = RED if piece.side is Side.RED else BLACK
    return f"{color}{piece.symbol}{RESET}"


def render_board(
    board: Board,
    highlight_squares: Optional[Sequence[Position]] = None,
    best: Optional[Position] = None,
    danger_squares: Optional[Sequence[Position]] = None,
) -> str:
    """
    绘制棋盘

    Args:
        board: 棋盘
        highlight_squares: 可走位置
        best: 推荐落点 (标记 *)
        danger_squares: 危险落点 (标记 !)

    Returns:
        多行字符串
    """
    highlight_squares = set(highlight_squares or ())
    danger_squares = set(danger_squares or ())

    lines = ["   " + "".join(f" {col}  " for col in range(BOARD_WIDTH))]
    for row in range(BOARD_HEIGHT):
        line = f"{row} │"
        for col in range(BOARD_WIDTH):
            square = (row, col)
            symbol = colorize_piece(board.get_piece_at(row, col))
            if square == best:
                line += f"{GREEN}*{RESET}{symbol}{GREEN}*{RESET}"
            elif square in danger_squares:
                line += f"{RED}!{RESET}{symbol}{RED}!{RESET}"
            elif square in highlight_squares:
                line += f"{YELLOW}[{RESET}{symbol}{YELLOW}]{RESET}"
            else:
                line += f" {symbol} "
        line += f"│{row}"
        lines.append(line)
    return "\n".join(lines)


def print_board(session: GameSession, **kwargs):
    """打印棋盘和状态"""
    print()
    print(render_board(session.board, **kwargs))
    print()
    player = "红方" if session.side_to_move is CONTROLLED_SIDE else "黑方"
    print(f"当前: {BOLD}{player}{RESET} | {session.status_text()} | 十字消除: {PHASE_TEXT[session.phase]}")


def parse_ints(parts: Sequence[str], count: int) -> Optional[List[int]]:
    """解析固定个数的整数参数"""
    if len(parts) != count:
        return None
    try:
        return [int(p) for p in parts]
    except ValueError:
        return None


# ============================================================================
# CLI 类
# ============================================================================

class PuzzleCLI:
    """
    命令行破阵界面

    支持:
    - 走子 (红车或黑子)
    - 摆放/删除黑子
    - 悔棋
    - 推荐落点
    """

    def __init__(self, config: Optional[GameConfig] = None, use_delay: bool = True):
        """
        Args:
            config: 对局配置
            use_delay: 十字消除是否按配置延迟演出
        """
        self.session = GameSession(config)
        self.use_delay = use_delay

    def new_game(self):
        self.session.new_game()
        print(f"\n{BOLD}=== 新游戏开始 ==={RESET}")
        print("输入 'help' 查看命令帮助\n")

    def make_move(self, from_pos: Position, to_pos: Position) -> bool:
        """走子，并按阶段演出十字消除"""
        if not self.session.attempt_move(from_pos, to_pos):
            print(f"{YELLOW}非法移动{RESET}")
            return False

        if self.session.elimination_due:
            print_board(self.session)
            print(f"{RED}{BOLD}十字消除!{RESET}")
            if self.use_delay:
                time.sleep(self.session.config.elimination_delay)
            result = self.session.resolve_elimination()
            if result is not None:
                names = "、".join(p.symbol for p in result.removed) or "无"
                print(f"消除了 {len(result.removed)} 个敌子: {names}")

        if self.session.recharge_due:
            print_board(self.session)
            if self.use_delay:
                time.sleep(self.session.config.recharge_delay)
            self.session.apply_recharge()
            print(f"{YELLOW}消除了将，再次充能!{RESET}")
        return True

    def undo(self):
        """悔棋"""
        if self.session.undo_last_move():
            print(f"{GREEN}已悔棋{RESET}")
        else:
            print(f"{YELLOW}没有可以撤销的移动！{RESET}")

    def hint(self) -> Optional[Recommendation]:
        """显示红车的可走位置和推荐落点"""
        rook = self.session.board.find_rook()
        if rook is None:
            print(f"{YELLOW}棋盘上没有红车{RESET}")
            return None

        moves = self.session.get_valid_moves(rook)
        recommendation = self.session.recommend(rook, moves)
        danger = [e.position for e in recommendation.evaluations if not e.safe]
        print_board(self.session, highlight_squares=moves, best=recommendation.best,
                    danger_squares=danger)

        if recommendation.best is None:
            print(f"{YELLOW}红车无路可走{RESET}")
        else:
            row, col = recommendation.best
            note = " (没有安全落点，被迫冒险)" if recommendation.fallback else ""
            print(f"{GREEN}推荐落点: {row} {col}{RESET}{note}")
        return recommendation

    def place(self, parts: Sequence[str]):
        """place <kind> <row> <col> [red|black]"""
        if len(parts) not in (3, 4):
            print(f"{YELLOW}用法: place <kind> <row> <col> [red|black]{RESET}")
            return
        kind = parse_kind(parts[0])
        coords = parse_ints(parts[1:3], 2)
        side = parse_side(parts[3]) if len(parts) == 4 else OPPOSING_SIDE
        if kind is None or coords is None or side is None:
            print(f"{YELLOW}无法解析: {' '.join(parts)}{RESET}")
            return
        if not self.session.place_piece(coords[0], coords[1], kind, side):
            print(f"{YELLOW}无法放置{RESET}")

    def remove(self, parts: Sequence[str]):
        """remove <row> <col>"""
        coords = parse_ints(parts, 2)
        if coords is None or self.session.get_piece_at(*coords) is None:
            print(f"{YELLOW}该位置没有棋子{RESET}")
            return
        self.session.remove_piece(*coords)

    def print_help(self):
        """打印帮助"""
        print(f"""
{BOLD}命令帮助:{RESET}
  {GREEN}r c r c{RESET}  - 走子 (起始行 起始列 目标行 目标列)
  {GREEN}hint{RESET}     - 显示红车的推荐落点 (* 推荐, ! 危险)
  {GREEN}place{RESET}    - 摆子: place <king|rook|bishop|knight|pawn|advisor|cannon> <行> <列> [red|black]
  {GREEN}remove{RESET}   - 删除棋子: remove <行> <列>
  {GREEN}undo{RESET}     - 悔棋
  {GREEN}new{RESET}      - 开始新游戏
  {GREEN}quit{RESET}     - 退出

棋盘 {BOARD_HEIGHT} 行 x {BOARD_WIDTH} 列，行 0-{BOARD_HEIGHT - 1} 自上而下，列 0-{BOARD_WIDTH - 1} 自左向右
""")

    def handle_command(self, user_input: str) -> bool:
        """
        处理一条命令

        Returns:
            是否继续游戏循环
        """
        parts = user_input.strip().lower().split()
        logger.debug(f"命令: {parts}")
        if not parts:
            return True

        command = parts[0]
        if command in ('quit', 'exit'):
            print("再见!")
            return False
        elif command == 'help':
            self.print_help()
        elif command == 'undo':
            self.undo()
        elif command == 'hint':
            self.hint()
        elif command == 'new':
            self.new_game()
        elif command == 'place':
            self.place(parts[1:])
        elif command == 'remove':
            self.remove(parts[1:])
        else:
            coords = parse_ints(parts, 4)
            if coords is None:
                print(f"{YELLOW}无法解析输入，请使用坐标格式 (如 6 3 2 3){RESET}")
            else:
                self.make_move((coords[0], coords[1]), (coords[2], coords[3]))
        return True

    def play(self):
        """主循环"""
        self.new_game()

        while True:
            print_board(self.session)
            try:
                user_input = input(f"{RED}命令: {RESET}")
            except EOFError:
                break
            if not self.handle_command(user_input):
                break


# ============================================================================
# 便捷函数
# ============================================================================

def play_game(config: Optional[GameConfig] = None, use_delay: bool = True):
    """快速开始一局游戏"""
    cli = PuzzleCLI(config=config, use_delay=use_delay)
    cli.play()
