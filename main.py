#!/usr/bin/env python3
"""
仙奕破阵 - 单车破阵规则引擎与落点推荐
主入口点

用法:
    python main.py play                         # 命令行破阵
    python main.py play --config my.yaml        # 使用自定义配置
    python main.py hint                         # 打印初始局面的推荐落点
"""

from __future__ import annotations
import argparse
import logging
import sys

from pozhen.config import DEFAULT_CONFIG_PATH, build_game_config, load_config

logger = logging.getLogger(__name__)


def setup_logging(log_level: str = "WARNING"):
    """设置日志"""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="[%(asctime)s] %(levelname)s - %(name)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _load_game_config(config_path: str):
    try:
        return build_game_config(load_config(config_path))
    except ValueError as e:
        logger.error(f"配置错误: {e}")
        sys.exit(1)


# ============================================================================
# 命令
# ============================================================================

def cmd_play(args):
    """命令行破阵"""
    from cli.play import play_game

    config = _load_game_config(args.config)
    play_game(config=config, use_delay=not args.no_delay)


def cmd_hint(args):
    """打印初始局面的推荐落点"""
    from cli.play import PuzzleCLI

    config = _load_game_config(args.config)
    cli = PuzzleCLI(config=config, use_delay=False)
    recommendation = cli.hint()
    if recommendation is None or recommendation.best is None:
        sys.exit(1)


# ============================================================================
# 主入口
# ============================================================================

def main(argv=None):
    parser = argparse.ArgumentParser(
        description="仙奕破阵 - 单车破阵规则引擎与落点推荐",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
示例:
    python main.py play                          # 命令行破阵
    python main.py play --no-delay               # 十字消除不等待演出
    python main.py hint --config my_config.yaml  # 查看推荐落点
""",
    )
    parser.add_argument(
        "--log-level", type=str, default="WARNING",
        help="日志级别 (DEBUG/INFO/WARNING)"
    )

    subparsers = parser.add_subparsers(dest="command", help="可用命令")

    play_parser = subparsers.add_parser("play", help="命令行破阵")
    play_parser.add_argument(
        "--config", type=str, default=DEFAULT_CONFIG_PATH,
        help="配置文件路径"
    )
    play_parser.add_argument(
        "--no-delay", action="store_true",
        help="十字消除不等待演出延迟"
    )

    hint_parser = subparsers.add_parser("hint", help="打印推荐落点")
    hint_parser.add_argument(
        "--config", type=str, default=DEFAULT_CONFIG_PATH,
        help="配置文件路径"
    )

    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    if args.command == "play":
        cmd_play(args)
    elif args.command == "hint":
        cmd_hint(args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
