"""
AI服务管理器
统一管理STT和LLM服务
"""

from typing import Dict

from .base import (
    AIServiceFactory, STTProvider, LLMProvider,
    TranscriptionResult, AIConfig
)
from .openai_provider import register_openai_providers


class AIService:
    """AI服务管理器"""

    def __init__(self, config: AIConfig):
        self.config = config

        # 注册所有提供商
        register_openai_providers()

        # 初始化服务提供商
        self.stt_provider: STTProvider = AIServiceFactory.create_stt_provider(
            config.stt_provider,
            config.stt_config
        )
        self.llm_provider: LLMProvider = AIServiceFactory.create_llm_provider(
            config.llm_provider,
            config.llm_config
        )

    # STT相关方法
    async def transcribe_audio(
        self,
        audio: bytes,
        filename: str,
        media_type: str,
        language: str = "auto",
        **kwargs
    ) -> TranscriptionResult:
        """转录音频文件"""
        return await self.stt_provider.transcribe_audio(
            audio, filename, media_type, language, **kwargs
        )

    # LLM相关方法
    async def summarize(
        self,
        transcription: str,
        template_prompt: str,
        **kwargs
    ) -> str:
        """按模板生成摘要"""
        return await self.llm_provider.summarize(
            transcription,
            template_prompt,
            **kwargs
        )

    async def answer_question(
        self,
        question: str,
        context: str,
        **kwargs
    ) -> str:
        """基于转录内容回答问题"""
        return await self.llm_provider.answer_question(
            question,
            context,
            **kwargs
        )

    def get_provider_info(self) -> Dict[str, str]:
        """获取当前使用的提供商信息"""
        return {
            "stt_provider": self.stt_provider.provider.value,
            "llm_provider": self.llm_provider.provider.value
        }

    async def close(self):
        """关闭提供商连接"""
        await self.stt_provider.close()
        await self.llm_provider.close()
