"""
配置管理器 - 负责加载 TOML 配置文件并合并环境变量
"""
import os
from pathlib import Path
from typing import Dict, List, Optional
import toml
from pydantic import ValidationError
from src.models.config_schema import FullConfig
from src.core.logger import logger

# 默认配置文件路径
DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "configs" / "bot_config.toml"

# 环境变量 -> (配置段, 字段)
ENV_OVERRIDES = {
    "BOT_TOKEN": ("telegram", "token"),
    "API_KEY": ("summarizer", "api_key"),
    "OPENAI_API_BASE": ("summarizer", "api_base"),
    "GENIUS_ACCESS_TOKEN": ("lyrics", "access_token"),
}


def parse_admin_ids(raw: Optional[str]) -> List[int]:
    """
    解析 BOT_ADMIN 环境变量

    Args:
        raw: 逗号分隔的 chat id，例如 "123,456"

    Returns:
        chat id 列表，空白项被忽略

    Raises:
        ValueError: 存在无法解析为整数的项
    """
    if not raw:
        return []
    ids = []
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        try:
            ids.append(int(part))
        except ValueError:
            raise ValueError(f"BOT_ADMIN 中包含无效的 chat id: {part!r}")
    return ids


class ConfigManager:
    """
    配置管理单例

    用法:
        config = ConfigManager.load()     # 在启动时调用一次
        ConfigManager.get_full_config()   # 获取已加载的配置

    加载得到的 FullConfig 会在构造时显式传入各个组件，
    组件内部不再读取这里的缓存。
    """

    _instance: Optional['ConfigManager'] = None
    _config: Optional[FullConfig] = None
    _path: Optional[Path] = None

    def __new__(cls):
        """单例模式"""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    @classmethod
    def load(cls, path: Optional[Path] = None, environ: Optional[Dict[str, str]] = None) -> FullConfig:
        """
        加载 TOML 配置文件并应用环境变量覆盖

        Args:
            path: 配置文件路径，默认 configs/bot_config.toml（不存在时使用默认值）
            environ: 环境变量字典，默认 os.environ

        Raises:
            ValueError: 配置格式错误
        """
        manager = cls()
        config_path = Path(path) if path else DEFAULT_CONFIG_PATH
        environ = os.environ if environ is None else environ

        try:
            if config_path.exists():
                data = toml.load(str(config_path))
            else:
                logger.warning(f"⚠️ 配置文件不存在，使用默认配置: {config_path}")
                data = {}

            cls._apply_env(data, environ)
            config = FullConfig(**data)

        except ValidationError as e:
            logger.error(f"❌ 配置格式错误: {e}")
            raise
        except ValueError as e:
            logger.error(f"❌ 配置格式错误: {e}")
            raise
        except Exception as e:
            logger.error(f"❌ 加载配置时出错: {e}")
            raise

        manager._config = config
        manager._path = config_path

        logger.info("✅ 配置加载成功")
        logger.info(f"   管理员数量: {len(config.admin.admin_ids)}")
        logger.info(f"   总结模型: {config.summarizer.model_name} ({config.summarizer.api_base})")
        logger.info(f"   总结超时: {config.pipeline.summary_timeout_ms} ms")
        return config

    @staticmethod
    def _apply_env(data: dict, environ) -> None:
        """把环境变量合并进原始配置字典（环境变量优先）"""
        for env_name, (section, key) in ENV_OVERRIDES.items():
            value = environ.get(env_name)
            if value:
                data.setdefault(section, {})[key] = value

        if environ.get("BOT_ADMIN"):
            data.setdefault("admin", {})["admin_ids"] = parse_admin_ids(environ.get("BOT_ADMIN"))

    @classmethod
    def get_full_config(cls) -> FullConfig:
        """获取完整配置对象"""
        manager = cls()
        if manager._config is None:
            raise RuntimeError("配置未加载，请先调用 ConfigManager.load()")
        return manager._config

    @classmethod
    def reload(cls) -> FullConfig:
        """重新加载配置（使用上次的配置文件路径）"""
        manager = cls()
        path = manager._path
        manager._config = None
        config = cls.load(path)
        logger.info("✅ 配置已重新加载")
        return config
