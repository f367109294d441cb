"""
OpenAI API集成实现
包含Whisper STT和GPT LLM服务
"""

import httpx
from typing import Dict, Any, List, Optional
from openai import AsyncOpenAI

from recap.core.exceptions import UpstreamServiceException
from recap.core.logging import ai_logger
from .base import (
    STTProvider, LLMProvider, AIProvider,
    TranscriptionResult, LLMResponse
)


# 所有分析类提示共用的前言
ANALYST_PREAMBLE = "You are an AI assistant that helps analyze conversation transcripts."

QA_SYSTEM_PROMPT = f"""{ANALYST_PREAMBLE}
Answer questions about the following conversation transcript, providing specific details and insights.
Use a professional, helpful tone. Keep answers concise but thorough.
Only answer based on information in the transcript, don't make up details.
Format your response with appropriate paragraphs, lists, and spacing for readability."""


def build_http_client(config: Dict[str, Any]) -> Optional[httpx.AsyncClient]:
    """按代理配置构建HTTP客户端，未配置代理时返回None"""
    if not (config.get("http_proxy") or config.get("https_proxy")):
        return None

    # 添加代理认证
    auth = None
    if config.get("proxy_auth"):
        username, password = config["proxy_auth"].split(":", 1)
        auth = (username, password)

    mounts = {}
    if config.get("http_proxy"):
        mounts["http://"] = httpx.AsyncHTTPTransport(
            proxy=httpx.Proxy(config["http_proxy"], auth=auth)
        )
    if config.get("https_proxy"):
        mounts["https://"] = httpx.AsyncHTTPTransport(
            proxy=httpx.Proxy(config["https_proxy"], auth=auth)
        )

    return httpx.AsyncClient(
        mounts=mounts,
        timeout=config.get("timeout", 60)
    )


def build_openai_client(config: Dict[str, Any]) -> AsyncOpenAI:
    return AsyncOpenAI(
        api_key=config.get("api_key"),
        base_url=config.get("base_url"),  # 支持自定义endpoint
        timeout=config.get("timeout", 60),
        http_client=build_http_client(config)
    )


class OpenAISTTProvider(STTProvider):
    """OpenAI Whisper语音转录服务"""

    def __init__(self, config: Dict[str, Any]):
        super().__init__(config)
        self.client = build_openai_client(config)
        self.default_model = config.get("model", "whisper-1")

    def _get_provider_name(self) -> AIProvider:
        return AIProvider.OPENAI

    async def transcribe_audio(
        self,
        audio: bytes,
        filename: str,
        media_type: str,
        language: str = "auto",
        **kwargs
    ) -> TranscriptionResult:
        """使用Whisper API转录音频"""
        try:
            transcription_params = {
                "model": kwargs.get("model", self.default_model),
                "response_format": "verbose_json",  # 获取分段和时长
                "timestamp_granularities": ["segment"]
            }

            if language != "auto":
                transcription_params["language"] = language
            if "prompt" in kwargs:
                transcription_params["prompt"] = kwargs["prompt"]

            ai_logger.info(f"Whisper request: {filename} ({len(audio)} bytes, {media_type})")
            response = await self.client.audio.transcriptions.create(
                file=(filename, audio, media_type),
                **transcription_params
            )

            segments = [
                {"start": seg.start, "end": seg.end, "text": seg.text}
                for seg in (getattr(response, "segments", None) or [])
            ]

            return TranscriptionResult(
                text=response.text or "",
                language=getattr(response, "language", None),
                duration=getattr(response, "duration", None),
                segments=segments
            )

        except Exception as e:
            raise UpstreamServiceException(f"OpenAI STT error: {e}") from e

    async def close(self):
        await self.client.close()


class OpenAILLMProvider(LLMProvider):
    """OpenAI GPT大语言模型服务"""

    def __init__(self, config: Dict[str, Any]):
        super().__init__(config)
        self.client = build_openai_client(config)
        self.default_model = config.get("model", "gpt-4o")

    def _get_provider_name(self) -> AIProvider:
        return AIProvider.OPENAI

    async def chat_completion(
        self,
        messages: List[Dict[str, str]],
        model: str = None,
        temperature: float = 0.7,
        max_tokens: int = None,
        **kwargs
    ) -> LLMResponse:
        """GPT聊天完成"""
        try:
            params = {
                "model": model or self.default_model,
                "messages": messages,
                "temperature": temperature,
                **kwargs
            }
            if max_tokens:
                params["max_tokens"] = max_tokens

            response = await self.client.chat.completions.create(**params)

            usage = {}
            if response.usage:
                usage = {
                    "prompt_tokens": response.usage.prompt_tokens,
                    "completion_tokens": response.usage.completion_tokens,
                    "total_tokens": response.usage.total_tokens
                }
            ai_logger.info(f"Chat completion done: model={response.model} usage={usage}")

            return LLMResponse(
                content=response.choices[0].message.content or "",
                model=response.model,
                usage=usage,
                finish_reason=response.choices[0].finish_reason,
                metadata={"id": response.id}
            )

        except Exception as e:
            raise UpstreamServiceException(f"OpenAI LLM error: {e}") from e

    async def summarize(
        self,
        transcription: str,
        template_prompt: str,
        **kwargs
    ) -> str:
        """使用GPT按模板生成摘要"""
        messages = [
            {"role": "system", "content": template_prompt},
            {"role": "user", "content": transcription}
        ]

        response = await self.chat_completion(
            messages=messages,
            temperature=kwargs.pop("temperature", 0.3),
            **kwargs
        )

        return response.content

    async def answer_question(
        self,
        question: str,
        context: str,
        **kwargs
    ) -> str:
        """基于转录内容回答问题"""
        messages = [
            {"role": "system", "content": QA_SYSTEM_PROMPT},
            {"role": "user", "content": f"Transcript:\n\n{context}"},
            {"role": "user", "content": question}
        ]

        response = await self.chat_completion(
            messages=messages,
            temperature=kwargs.pop("temperature", 0.1),
            **kwargs
        )

        return response.content

    async def close(self):
        await self.client.close()


# 注册OpenAI提供商到工厂
def register_openai_providers():
    """注册OpenAI服务提供商"""
    from .base import AIServiceFactory

    AIServiceFactory.register_stt_provider(
        AIProvider.OPENAI,
        OpenAISTTProvider
    )
    AIServiceFactory.register_llm_provider(
        AIProvider.OPENAI,
        OpenAILLMProvider
    )
