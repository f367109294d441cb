"""
问答消息数据模型
"""

import enum
from datetime import datetime

from pydantic import Field

from recap.models.base import EntityModel, utcnow


class ChatRole(str, enum.Enum):
    """消息角色"""
    USER = "user"
    ASSISTANT = "assistant"


class ChatMessage(EntityModel):
    """问答消息模型"""

    recording_id: int = Field(..., description="录音ID")
    role: ChatRole = Field(..., description="消息角色")
    content: str = Field(..., description="消息内容")
    timestamp: datetime = Field(default_factory=utcnow, description="创建时间")
