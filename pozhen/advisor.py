"""
红车最佳落点推荐模块

单步启发式评分 (非搜索):
1. 安全筛选: 走子方离开原位后，目标格不被任何敌子攻击即为安全
2. 充能时，若落点十字线上的敌子被消除后不再有攻击者，也视为安全
3. 没有安全落点时，在全部落点中按得分选择 (不能停着)
4. 评分: 吃子按棋子价值计分；不吃子按位置战术价值计分

术语:
- 真捉: 被捉子无根，可以放心吃掉
- 假捉: 被捉子有根，吃掉会被反吃，分值大幅折扣
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Collection, List, Optional, Sequence
import logging

import numpy as np

from pozhen.ability import cross_targets
from pozhen.config import AdvisorConfig
from pozhen.pieces import (
    BOARD_HEIGHT, BOARD_WIDTH,
    Piece, PieceKind, Position, Side,
    in_bounds,
)
from pozhen.rules import STRAIGHT_DIRECTIONS, find_attackers, find_protectors

logger = logging.getLogger(__name__)

# ============================================================================
# 棋子价值
# ============================================================================

PIECE_VALUES = {
    PieceKind.PAWN: 8,      # 卒
    PieceKind.ADVISOR: 8,   # 士
    PieceKind.BISHOP: 15,   # 象
    PieceKind.CANNON: 20,   # 炮
    PieceKind.KNIGHT: 20,   # 马
    PieceKind.ROOK: 30,     # 车
    PieceKind.KING: 100,    # 将
}

assert set(PIECE_VALUES) == set(PieceKind), "PIECE_VALUES 缺少棋子类型"

# 优先吃掉的棋子
HIGH_VALUE_KINDS = frozenset({PieceKind.CANNON, PieceKind.ROOK, PieceKind.KING})


def piece_value(kind: PieceKind) -> int:
    return PIECE_VALUES[kind]


def capture_value(kind: PieceKind, config: AdvisorConfig) -> float:
    """吃子得分"""
    value = piece_value(kind) * config.capture_multiplier
    if kind in HIGH_VALUE_KINDS:
        value *= config.high_value_capture_bonus
    return value


# ============================================================================
# 评估结果
# ============================================================================

@dataclass
class MoveEvaluation:
    """单个候选落点的评估 (供界面提示)"""

    position: Position
    safe: bool
    safe_by_elimination: bool = False
    attackers: List[Position] = field(default_factory=list)
    capture: Optional[PieceKind] = None
    score: Optional[float] = None  # 未参与排序时为 None


@dataclass
class Recommendation:
    """推荐结果"""

    index: Optional[int]
    evaluations: List[MoveEvaluation] = field(default_factory=list)

    # 没有安全落点，被迫冒险
    fallback: bool = False

    @property
    def best(self) -> Optional[Position]:
        if self.index is None:
            return None
        return self.evaluations[self.index].position


# ============================================================================
# 位置特征
# ============================================================================

def clear_steps(grid: np.ndarray, position: Position, direction: Position,
                ignore: Collection[Position] = ()) -> int:
    """沿某方向连续空位的数量"""
    (row, col), (dr, dc) = position, direction
    steps = 0
    r, c = row + dr, col + dc
    while in_bounds(r, c) and (grid[r, c] is None or (r, c) in ignore):
        steps += 1
        r, c = r + dr, c + dc
    return steps


def count_escape_routes(grid: np.ndarray, position: Position, config: AdvisorConfig,
                        ignore: Collection[Position] = ()) -> int:
    """计算逃生路线数量 (某方向空位数超过阈值才算)"""
    return sum(
        1 for direction in STRAIGHT_DIRECTIONS
        if clear_steps(grid, position, direction, ignore) > config.escape_route_min_steps
    )


def is_corner(position: Position) -> bool:
    row, col = position
    return row in (0, BOARD_HEIGHT - 1) and col in (0, BOARD_WIDTH - 1)


def threatened_pieces(grid: np.ndarray, position: Position, side: Side,
                      ignore: Collection[Position] = ()) -> List[Piece]:
    """
    车在 position 时下一步能吃到的敌子 (每个方向遇到的第一个棋子)

    Args:
        grid: 棋盘
        position: 车的位置
        side: 车所属方
        ignore: 视为空位的格子

    Returns:
        敌子列表
    """
    row, col = position
    targets = []
    for dr, dc in STRAIGHT_DIRECTIONS:
        r, c = row + dr, col + dc
        while in_bounds(r, c):
            piece = grid[r, c]
            if piece is not None and (r, c) not in ignore:
                if piece.side is not side:
                    targets.append(piece)
                break
            r, c = r + dr, c + dc
    return targets


def count_attackable_enemies(grid: np.ndarray, position: Position, side: Side,
                             ignore: Collection[Position] = ()) -> int:
    return len(threatened_pieces(grid, position, side, ignore))


def evaluate_threat_value(grid: np.ndarray, rook_pos: Position, target_pos: Position,
                          config: Optional[AdvisorConfig] = None,
                          ignore: Collection[Position] = ()) -> float:
    """
    评估车对某个敌子的威胁价值

    车吃掉目标后会离开 rook_pos，因此判断保护时 rook_pos 视为空。
    被保护 (有根) 的目标为假捉，价值折扣到接近 0。

    Args:
        grid: 棋盘
        rook_pos: 车发起威胁的位置
        target_pos: 被威胁的敌子位置
        config: 评分权重
        ignore: 额外视为空位的格子 (例如车的原位)

    Returns:
        威胁价值
    """
    config = config or AdvisorConfig()
    target = grid[target_pos]
    if target is None:
        return 0.0

    value = piece_value(target.kind) * config.threat_weight
    protectors = find_protectors(grid, target_pos, target.side, set(ignore) | {tuple(rook_pos)})
    if protectors:
        value *= config.fake_threat_discount
    return value


def positional_value(grid: np.ndarray, piece: Piece, position: Position, charged: bool,
                     config: AdvisorConfig, ignore: Collection[Position] = ()) -> float:
    """
    位置战术价值 (不吃子时的评分)

    - 逃生路线: 每条路线少量加分
    - 威胁: 真捉计全值，假捉大幅折扣
    - 多重威胁: 同时真捉两个以上敌子额外加分
    - 角落: 扣分
    - 充能时: 十字线上敌子价值 × 比例，四向开阔的中心位置加分

    Returns:
        非负得分
    """
    if not piece.is_controlled_rook():
        return 0.0

    value = count_escape_routes(grid, position, config, ignore) * config.escape_route_weight

    targets = threatened_pieces(grid, position, piece.side, ignore)
    threats = [
        evaluate_threat_value(grid, position, target.position, config, ignore)
        for target in targets
    ]
    value += sum(threats)

    # 未被折扣的即为真捉
    true_threats = sum(
        1 for target, threat in zip(targets, threats)
        if threat == piece_value(target.kind) * config.threat_weight
    )
    if true_threats >= 2:
        value += true_threats * config.multi_target_weight

    if is_corner(position):
        value -= config.corner_penalty

    if charged:
        swept = sum(piece_value(p.kind) for p in cross_targets(grid, position, piece.side))
        value += swept * config.elimination_value_ratio
        shortest_ray = min(clear_steps(grid, position, d, ignore) for d in STRAIGHT_DIRECTIONS)
        value += shortest_ray * config.central_weight

    return max(0.0, value)


# ============================================================================
# 安全筛选
# ============================================================================

def is_safe_destination(grid: np.ndarray, piece: Piece, destination: Position,
                        charged: bool = False) -> MoveEvaluation:
    """
    判断落点是否安全

    走子方视为已离开原位 (不修改棋盘)。充能时再模拟十字消除后重新判断。

    Args:
        grid: 棋盘
        piece: 走子方棋子
        destination: 落点
        charged: 是否持有十字消除充能

    Returns:
        评估结果 (score 尚未计算)
    """
    destination = tuple(destination)
    vacated = {tuple(piece.position)}
    attackers = find_attackers(grid, destination, piece.side, vacated)

    target = grid[destination]
    capture = target.kind if target is not None and target.side is not piece.side else None

    safe = not attackers
    safe_by_elimination = False
    if not safe and charged:
        swept = {p.position for p in cross_targets(grid, destination, piece.side)}
        if not find_attackers(grid, destination, piece.side, vacated | swept):
            safe = safe_by_elimination = True

    return MoveEvaluation(
        position=destination,
        safe=safe,
        safe_by_elimination=safe_by_elimination,
        attackers=attackers,
        capture=capture,
    )


def score_destination(grid: np.ndarray, piece: Piece, destination: Position,
                      charged: bool, config: AdvisorConfig) -> float:
    """落点得分: 吃子价值 (加少量位置分决胜) 或位置战术价值"""
    destination = tuple(destination)
    vacated = {tuple(piece.position)}
    positional = positional_value(grid, piece, destination, charged, config, vacated)

    target = grid[destination]
    if target is not None and target.side is not piece.side:
        return capture_value(target.kind, config) + positional * config.capture_positional_weight
    return positional


# ============================================================================
# 推荐
# ============================================================================

def recommend(grid: np.ndarray, piece: Optional[Piece], candidates: Sequence[Position],
              charged: bool = False, config: Optional[AdvisorConfig] = None) -> Recommendation:
    """
    为红车推荐最佳落点

    Args:
        grid: 棋盘
        piece: 选中的棋子 (只对红车有效)
        candidates: 候选落点 (走法生成顺序)
        charged: 是否持有十字消除充能
        config: 评分权重

    Returns:
        推荐结果；非红车或无候选时 index 为 None
    """
    if piece is None or not piece.is_controlled_rook() or len(candidates) == 0:
        return Recommendation(index=None)

    config = config or AdvisorConfig()
    evaluations = [is_safe_destination(grid, piece, move, charged) for move in candidates]

    pool = [i for i, evaluation in enumerate(evaluations) if evaluation.safe]
    fallback = not pool
    if fallback:
        pool = list(range(len(candidates)))

    scores = np.full(len(candidates), -np.inf)
    for i in pool:
        score = score_destination(grid, piece, evaluations[i].position, charged, config)
        evaluations[i].score = score
        scores[i] = score

    # argmax 返回第一个最大值，同分时保持走法生成顺序
    index = int(np.argmax(scores))
    logger.debug(
        f"推荐落点: {evaluations[index].position} 得分 {scores[index]:.2f}"
        f" (安全 {len(pool) if not fallback else 0}/{len(candidates)})"
    )
    return Recommendation(index=index, evaluations=evaluations, fallback=fallback)
