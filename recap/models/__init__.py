"""
数据模型包
"""

from .base import EntityModel
from .recording import Recording
from .transcript import TranscriptSegment, DEFAULT_SPEAKER
from .summary import Summary, SummaryType
from .chat import ChatMessage, ChatRole

__all__ = [
    "EntityModel",
    "Recording",
    "TranscriptSegment",
    "DEFAULT_SPEAKER",
    "Summary",
    "SummaryType",
    "ChatMessage",
    "ChatRole",
]
