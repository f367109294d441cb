"""
请求/响应模式包
"""

from .recording import (
    ProcessingStatus,
    ChatRequest,
    ChatResponse,
    MessageResponse,
    HealthResponse
)

__all__ = [
    "ProcessingStatus",
    "ChatRequest",
    "ChatResponse",
    "MessageResponse",
    "HealthResponse",
]
