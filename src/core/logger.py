"""
自定义日志格式配置
"""
import logging
import os
import sys


class NoiseFilter(logging.Filter):
    """过滤掉长轮询产生的噪音日志"""

    noise_patterns = (
        "/getUpdates",
    )

    def filter(self, record):
        message = record.getMessage()
        for pattern in self.noise_patterns:
            if pattern in message:
                return False
        return True


def setup_logger(name: str, level=logging.INFO) -> logging.Logger:
    """
    设置日志记录器

    Args:
        name: 日志记录器名称
        level: 日志级别，默认为 INFO

    Returns:
        配置好的 Logger 对象
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # 避免重复添加处理器
    if logger.handlers:
        return logger

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)

    formatter = logging.Formatter(
        fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    return logger


def resolve_level(value: str = None) -> int:
    """把 LOG_LEVEL 之类的字符串转换为 logging 级别，无法识别时回落到 INFO"""
    value = (value or os.getenv("LOG_LEVEL") or "INFO").strip().upper()
    level = logging.getLevelName(value)
    return level if isinstance(level, int) else logging.INFO


# 创建全局日志记录器
logger = setup_logger("lyric_bot", resolve_level())
