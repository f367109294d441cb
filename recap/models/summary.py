"""
摘要数据模型
"""

import enum

from pydantic import Field

from recap.models.base import EntityModel


class SummaryType(str, enum.Enum):
    """内置摘要类型"""
    GENERAL = "general"
    MENTAL_MODELS = "mental-models"
    ONE_ON_ONE = "1-on-1"
    SALES = "sales"
    TIMELINE = "timeline"


class Summary(EntityModel):
    """摘要模型"""

    recording_id: int = Field(..., description="录音ID")
    type: str = Field(..., description="摘要类型")
    content: str = Field(..., description="生成的摘要内容")
