"""
录音数据模型
"""

from datetime import datetime

from pydantic import Field

from recap.models.base import EntityModel, utcnow


class Recording(EntityModel):
    """录音模型"""

    title: str = Field(..., description="录音标题")
    filename: str = Field(..., description="存储的音频文件名")
    duration: int = Field(default=0, description="时长(秒)，0表示未知")
    processed: bool = Field(default=False, description="音频已分析")
    transcribed: bool = Field(default=False, description="转录已完成")
    created_at: datetime = Field(default_factory=utcnow, description="创建时间")
