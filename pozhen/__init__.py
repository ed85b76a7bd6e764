"""
仙奕破阵 规则引擎与落点推荐

玩法:
- 红方只有一个车，黑方棋子由玩家手动摆放
- 红车吃掉黑将后获得十字消除充能，下一次走子后清除十字线上的所有敌子
- 推荐模块为红车给出单步启发式最佳落点
"""

from pozhen.pieces import (
    BOARD_HEIGHT,
    BOARD_WIDTH,
    CONTROLLED_SIDE,
    OPPOSING_SIDE,
    Piece,
    PieceKind,
    Side,
)
from pozhen.rules import (
    GameStatus,
    legal_destinations,
    can_piece_attack,
    is_position_under_attack,
    is_in_check,
    compute_status,
)
from pozhen.board import Board, MoveRecord, STARTING_LAYOUT
from pozhen.ability import (
    AbilityPhase,
    AbilityState,
    EliminationResult,
    execute_elimination,
)
from pozhen.advisor import (
    PIECE_VALUES,
    MoveEvaluation,
    Recommendation,
    evaluate_threat_value,
    recommend,
)
from pozhen.config import AdvisorConfig, GameConfig, load_config, build_game_config
from pozhen.session import GameSession

__all__ = [
    "BOARD_HEIGHT",
    "BOARD_WIDTH",
    "CONTROLLED_SIDE",
    "OPPOSING_SIDE",
    "Piece",
    "PieceKind",
    "Side",
    "GameStatus",
    "legal_destinations",
    "can_piece_attack",
    "is_position_under_attack",
    "is_in_check",
    "compute_status",
    "Board",
    "MoveRecord",
    "STARTING_LAYOUT",
    # 十字消除
    "AbilityPhase",
    "AbilityState",
    "EliminationResult",
    "execute_elimination",
    # 推荐
    "PIECE_VALUES",
    "MoveEvaluation",
    "Recommendation",
    "evaluate_threat_value",
    "recommend",
    # 配置
    "AdvisorConfig",
    "GameConfig",
    "load_config",
    "build_game_config",
    "GameSession",
]
