"""
配置文件的 Pydantic 数据模型定义
"""
from typing import List, Optional
from typing import Literal as TypingLiteral
from pydantic import BaseModel, Field


# ============ Telegram 配置 ============
class TelegramConfig(BaseModel):
    """Telegram Bot 配置"""
    token: str = Field(default="", description="Bot Token（通常来自环境变量 BOT_TOKEN）")
    parse_mode: str = Field(default="Markdown", description="命令回复使用的解析模式")
    drop_pending_updates: bool = Field(default=True, description="启动时是否丢弃积压的更新")
    max_concurrent_updates: int = Field(default=256, description="同时处理的更新数量上限")

    class Config:
        extra = "allow"


# ============ 管理员配置 ============
class AdminConfig(BaseModel):
    """管理员配置"""
    admin_ids: List[int] = Field(default=[], description="管理员 chat id 列表")
    inbox_chat_id: Optional[int] = Field(default=None, description="转发消息的管理员收件箱（留空用第一个管理员）")
    mirror_messages: bool = Field(default=True, description="是否把非管理员消息转发给管理员")

    class Config:
        extra = "allow"

    def inbox(self) -> Optional[int]:
        """获取管理员收件箱 chat id"""
        if self.inbox_chat_id is not None:
            return self.inbox_chat_id
        if self.admin_ids:
            return self.admin_ids[0]
        return None


# ============ 歌词接口配置 ============
class LyricsConfig(BaseModel):
    """歌词搜索配置"""
    provider: TypingLiteral["genius"] = Field(default="genius", description="歌词供应商")
    search_url: str = Field(default="https://genius.com/api/search/song", description="公开搜索接口")
    api_search_url: str = Field(default="https://api.genius.com/search", description="官方 API 搜索接口（需要 Token）")
    access_token: str = Field(default="", description="Genius API Token（可为空）")
    per_page: int = Field(default=5, description="每次搜索返回的结果数")
    timeout: float = Field(default=15.0, description="请求超时时间（秒）")
    user_agent: str = Field(
        default="Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0 Safari/537.36",
        description="请求歌词页面时使用的 User-Agent"
    )

    class Config:
        extra = "allow"


# ============ 总结模型配置 ============
class SummarizerConfig(BaseModel):
    """总结模型配置（OpenAI 兼容接口）"""
    api_base: str = Field(default="https://api.openai.com/v1", description="API 基础 URL")
    api_key: str = Field(default="", description="API 密钥（通常来自环境变量 API_KEY）")
    model_name: str = Field(default="gpt-3.5-turbo", description="模型标识符")
    temperature: float = Field(default=0.7, description="温度参数")
    max_tokens: int = Field(default=500, description="最大 token 数")
    request_timeout: int = Field(default=120, description="HTTP 层超时时间（秒），应大于流水线超时")
    prompt_suffix: str = Field(default=" Tl;dr", description="追加在歌词后的提示")

    class Config:
        extra = "allow"


# ============ 流水线配置 ============
class PipelineConfig(BaseModel):
    """请求流水线配置"""
    summary_timeout_ms: int = Field(default=60000, description="总结调用的软超时（毫秒）")
    status_text: str = Field(default="Summarising", description="处理中的提示消息")

    class Config:
        extra = "allow"


# ============ 统一配置对象 ============
class FullConfig(BaseModel):
    """完整配置对象，包含所有配置部分"""
    telegram: TelegramConfig = Field(default_factory=TelegramConfig)
    admin: AdminConfig = Field(default_factory=AdminConfig)
    lyrics: LyricsConfig = Field(default_factory=LyricsConfig)
    summarizer: SummarizerConfig = Field(default_factory=SummarizerConfig)
    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)

    class Config:
        extra = "allow"
