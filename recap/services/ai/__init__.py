"""
AI服务模块初始化
"""

from .base import (
    AIProvider,
    AIConfig,
    AIServiceFactory,
    STTProvider,
    LLMProvider,
    TranscriptionResult,
    LLMResponse
)
from .ai_service import AIService
from .openai_provider import register_openai_providers

__all__ = [
    'AIProvider',
    'AIConfig',
    'AIServiceFactory',
    'STTProvider',
    'LLMProvider',
    'TranscriptionResult',
    'LLMResponse',
    'AIService',
    'register_openai_providers'
]
