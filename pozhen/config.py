"""
配置模块
从 YAML 文件加载推荐权重、初始布局和演出延迟
"""

from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import List
import logging

import yaml

from pozhen.board import STARTING_LAYOUT, LayoutEntry
from pozhen.pieces import OPPOSING_SIDE, PieceKind, in_bounds, parse_kind, parse_side

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "configs/default.yaml"


@dataclass
class AdvisorConfig:
    """推荐落点评分权重"""

    # 吃子得分 = 棋子价值 × capture_multiplier
    capture_multiplier: float = 1000.0

    # 吃炮/车/将的额外倍率
    high_value_capture_bonus: float = 1.3

    # 吃子时位置分的折算比例 (仅用于同分决胜)
    capture_positional_weight: float = 0.1

    # 逃生路线: 某方向空位数大于该值才算一条
    escape_route_min_steps: int = 2
    escape_route_weight: float = 2.0

    # 威胁评估
    threat_weight: float = 1.0
    fake_threat_discount: float = 0.05
    multi_target_weight: float = 15.0

    # 角落惩罚
    corner_penalty: float = 10.0

    # 充能时: 十字线上敌子价值的折算比例
    elimination_value_ratio: float = 0.7

    # 充能时: 中心位置奖励 (四个方向最短空位数 × 权重)
    central_weight: float = 3.0


@dataclass
class GameConfig:
    """对局配置"""

    starting_layout: List[LayoutEntry] = field(default_factory=lambda: list(STARTING_LAYOUT))

    # 消除前、连锁充能前的演出延迟 (秒)
    elimination_delay: float = 0.6
    recharge_delay: float = 0.4

    advisor: AdvisorConfig = field(default_factory=AdvisorConfig)


# ============================================================================
# 配置加载
# ============================================================================

def load_config(config_path: str = DEFAULT_CONFIG_PATH) -> dict:
    """加载配置文件"""
    config_path = Path(config_path)
    if not config_path.exists():
        logger.warning(f"配置文件不存在: {config_path}, 使用默认配置")
        return {}

    with open(config_path, "r", encoding="utf-8") as f:
        config = yaml.safe_load(f)

    return config or {}


def parse_layout(entries: list) -> List[LayoutEntry]:
    """
    解析布局配置

    每项格式: {kind: pawn, side: black, row: 2, col: 3}

    Raises:
        ValueError: 棋子类型/阵营无法识别、位置越界、重复或多个黑将
    """
    layout = []
    occupied = set()
    kings = 0
    for entry in entries:
        kind = parse_kind(str(entry.get("kind", "")))
        side = parse_side(str(entry.get("side", "")))
        if kind is None or side is None:
            raise ValueError(f"无法识别的棋子: {entry}")

        row, col = int(entry.get("row", -1)), int(entry.get("col", -1))
        if not in_bounds(row, col):
            raise ValueError(f"棋子位置越界: {entry}")
        if (row, col) in occupied:
            raise ValueError(f"位置重复: ({row}, {col})")
        occupied.add((row, col))

        if kind is PieceKind.KING and side is OPPOSING_SIDE:
            kings += 1
            if kings > 1:
                raise ValueError("布局中只能有一个黑将")

        layout.append((kind, side, row, col))
    return layout


def build_game_config(config: dict) -> GameConfig:
    """将配置字典转换为 GameConfig"""
    advisor_config = config.get("advisor", {}) or {}
    defaults = AdvisorConfig()
    advisor = AdvisorConfig(
        capture_multiplier=advisor_config.get("capture_multiplier", defaults.capture_multiplier),
        high_value_capture_bonus=advisor_config.get(
            "high_value_capture_bonus", defaults.high_value_capture_bonus),
        capture_positional_weight=advisor_config.get(
            "capture_positional_weight", defaults.capture_positional_weight),
        escape_route_min_steps=advisor_config.get(
            "escape_route_min_steps", defaults.escape_route_min_steps),
        escape_route_weight=advisor_config.get("escape_route_weight", defaults.escape_route_weight),
        threat_weight=advisor_config.get("threat_weight", defaults.threat_weight),
        fake_threat_discount=advisor_config.get("fake_threat_discount", defaults.fake_threat_discount),
        multi_target_weight=advisor_config.get("multi_target_weight", defaults.multi_target_weight),
        corner_penalty=advisor_config.get("corner_penalty", defaults.corner_penalty),
        elimination_value_ratio=advisor_config.get(
            "elimination_value_ratio", defaults.elimination_value_ratio),
        central_weight=advisor_config.get("central_weight", defaults.central_weight),
    )

    game_config = config.get("game", {}) or {}
    layout_entries = game_config.get("starting_layout")
    layout = parse_layout(layout_entries) if layout_entries else list(STARTING_LAYOUT)

    return GameConfig(
        starting_layout=layout,
        elimination_delay=game_config.get("elimination_delay", 0.6),
        recharge_delay=game_config.get("recharge_delay", 0.4),
        advisor=advisor,
    )
