"""
转录分段数据模型
"""

from pydantic import Field

from recap.models.base import EntityModel

# 未做说话人分离时使用的固定标签
DEFAULT_SPEAKER = "Speaker"


class TranscriptSegment(EntityModel):
    """转录分段模型"""

    recording_id: int = Field(..., description="录音ID")
    speaker: str = Field(default=DEFAULT_SPEAKER, description="说话人")
    timestamp: int = Field(..., description="相对录音开始的偏移(秒)")
    text: str = Field(..., description="分段文本")
