"""
AI服务抽象基类
支持语音转录(STT)和大语言模型(LLM)的通用接口
"""

from abc import ABC, abstractmethod
from typing import Dict, Any, List, Optional
from dataclasses import dataclass, field
from enum import Enum

from recap.core.exceptions import ConfigurationException


class AIProvider(Enum):
    """AI服务提供商枚举"""
    OPENAI = "openai"


@dataclass
class TranscriptionResult:
    """语音转录结果"""
    text: str
    language: Optional[str] = None
    duration: Optional[float] = None  # 音频时长(秒)
    segments: List[Dict[str, Any]] = field(default_factory=list)  # [{"start", "end", "text"}]


@dataclass
class LLMResponse:
    """大语言模型响应结果"""
    content: str
    model: str
    usage: Dict[str, int]  # tokens使用情况
    finish_reason: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)


class STTProvider(ABC):
    """语音转录服务抽象基类"""

    def __init__(self, config: Dict[str, Any]):
        self.config = config
        self.provider = self._get_provider_name()

    @abstractmethod
    def _get_provider_name(self) -> AIProvider:
        """获取提供商名称"""
        pass

    @abstractmethod
    async def transcribe_audio(
        self,
        audio: bytes,
        filename: str,
        media_type: str,
        language: str = "auto",
        **kwargs
    ) -> TranscriptionResult:
        """
        转录音频文件

        Args:
            audio: 音频字节
            filename: 文件名(供服务端识别格式)
            media_type: 媒体类型，如 'audio/wav'
            language: 语言代码，如 'zh', 'en', 'auto'
            **kwargs: 其他参数

        Returns:
            TranscriptionResult: 转录结果
        """
        pass

    async def close(self):
        """释放底层连接"""
        pass


class LLMProvider(ABC):
    """大语言模型服务抽象基类"""

    def __init__(self, config: Dict[str, Any]):
        self.config = config
        self.provider = self._get_provider_name()

    @abstractmethod
    def _get_provider_name(self) -> AIProvider:
        """获取提供商名称"""
        pass

    @abstractmethod
    async def chat_completion(
        self,
        messages: List[Dict[str, str]],
        model: str = None,
        temperature: float = 0.7,
        max_tokens: int = None,
        **kwargs
    ) -> LLMResponse:
        """
        聊天完成接口

        Args:
            messages: 消息列表，格式 [{"role": "user", "content": "..."}]
            model: 模型名称
            temperature: 温度参数
            max_tokens: 最大token数
            **kwargs: 其他参数

        Returns:
            LLMResponse: 模型响应
        """
        pass

    @abstractmethod
    async def summarize(
        self,
        transcription: str,
        template_prompt: str,
        **kwargs
    ) -> str:
        """
        按模板提示生成转录摘要

        Args:
            transcription: 转录全文
            template_prompt: 作为系统提示的模板

        Returns:
            str: 摘要内容
        """
        pass

    @abstractmethod
    async def answer_question(
        self,
        question: str,
        context: str,
        **kwargs
    ) -> str:
        """
        基于转录内容回答问题

        Args:
            question: 问题
            context: 转录全文

        Returns:
            str: 答案
        """
        pass

    async def close(self):
        """释放底层连接"""
        pass


@dataclass
class AIConfig:
    """AI服务配置"""
    stt_provider: AIProvider
    llm_provider: AIProvider
    stt_config: Dict[str, Any]
    llm_config: Dict[str, Any]
    default_stt_model: str = None
    default_llm_model: str = None


class AIServiceFactory:
    """AI服务工厂类"""

    _stt_providers = {}
    _llm_providers = {}

    @classmethod
    def register_stt_provider(cls, provider: AIProvider, provider_class):
        """注册STT提供商"""
        cls._stt_providers[provider] = provider_class

    @classmethod
    def register_llm_provider(cls, provider: AIProvider, provider_class):
        """注册LLM提供商"""
        cls._llm_providers[provider] = provider_class

    @classmethod
    def create_stt_provider(cls, provider: AIProvider, config: Dict[str, Any]) -> STTProvider:
        """创建STT服务实例"""
        if provider not in cls._stt_providers:
            raise ConfigurationException(f"Unknown STT provider: {provider}")
        return cls._stt_providers[provider](config)

    @classmethod
    def create_llm_provider(cls, provider: AIProvider, config: Dict[str, Any]) -> LLMProvider:
        """创建LLM服务实例"""
        if provider not in cls._llm_providers:
            raise ConfigurationException(f"Unknown LLM provider: {provider}")
        return cls._llm_providers[provider](config)
