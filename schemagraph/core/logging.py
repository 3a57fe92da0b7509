"""
日志配置

各模块统一使用 logging.getLogger(__name__)，入口脚本调用一次 setup_logging。
"""
import logging
import sys

LOG_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(debug: bool = False) -> None:
    """配置根 logger；debug 为 True 时输出布局迭代、分析各步骤的 DEBUG 日志"""
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=DATE_FORMAT, stream=sys.stdout, force=True)
    logging.getLogger(__name__).debug(f"[setup_logging] level={logging.getLevelName(level)}")
