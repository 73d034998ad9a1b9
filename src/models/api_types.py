"""
AI 接口的输入输出类型定义
"""
from typing import List
from pydantic import BaseModel, Field


# ============ OpenAI 格式的请求/响应类型 ============
class ChatMessage(BaseModel):
    """聊天消息"""
    role: str = Field(..., description="消息角色: system/user/assistant")
    content: str = Field(..., description="消息内容")


class ChatRequest(BaseModel):
    """OpenAI 格式的聊天请求"""
    model: str = Field(..., description="模型名称")
    messages: List[ChatMessage] = Field(..., description="消息列表")
    temperature: float = Field(default=0.7, description="温度参数")
    max_tokens: int = Field(default=500, description="最大 token 数")


class ChatUsage(BaseModel):
    """token 使用统计"""
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

