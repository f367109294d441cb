"""
测试配置和fixtures
"""

import asyncio
import io
import wave
from typing import AsyncGenerator, List, Optional, Set

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from recap.config import Settings
from recap.db.store import InMemoryStore
from recap.main import create_app
from recap.services.ai.base import TranscriptionResult
from recap.services.container import ServiceContainer


class FakeAIService:
    """进程内的STT/LLM替身，接口与 AIService 一致"""

    def __init__(self):
        self.transcription = TranscriptionResult(text="Hello there, this is a test conversation.")
        self.transcribe_error: Optional[Exception] = None
        self.transcribe_gate: Optional[asyncio.Event] = None
        self.transcribe_calls: List[tuple] = []

        # 系统提示包含这些片段时摘要调用失败
        self.failing_prompts: Set[str] = set()
        self.summarize_gate: Optional[asyncio.Event] = None
        self.summarize_calls: List[str] = []

        self.answer = "The team agreed to ship on Friday."
        self.answer_error: Optional[Exception] = None
        self.questions: List[tuple] = []

        self.closed = False

    async def transcribe_audio(self, audio, filename, media_type, language="auto", **kwargs):
        self.transcribe_calls.append((filename, media_type, len(audio)))
        if self.transcribe_gate is not None:
            await self.transcribe_gate.wait()
        if self.transcribe_error is not None:
            raise self.transcribe_error
        return self.transcription

    async def summarize(self, transcription, template_prompt, **kwargs):
        self.summarize_calls.append(template_prompt)
        if self.summarize_gate is not None:
            await self.summarize_gate.wait()
        for marker in self.failing_prompts:
            if marker in template_prompt:
                raise RuntimeError("model overloaded")
        return f"summary #{len(self.summarize_calls)}"

    async def answer_question(self, question, context, **kwargs):
        self.questions.append((question, context))
        if self.answer_error is not None:
            raise self.answer_error
        return self.answer

    def get_provider_info(self):
        return {"stt_provider": "fake", "llm_provider": "fake"}

    async def close(self):
        self.closed = True


def make_wav(seconds: int = 10, rate: int = 8000) -> bytes:
    """生成静音WAV音频"""
    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as wav:
        wav.setnchannels(1)
        wav.setsampwidth(2)
        wav.setframerate(rate)
        wav.writeframes(b"\x00\x00" * rate * seconds)
    return buffer.getvalue()


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """隔离的测试配置"""
    return Settings(
        upload_dir=str(tmp_path / "uploads"),
        log_dir=str(tmp_path / "logs"),
        log_to_file=False,
        openai_api_key="test-key",
        http_proxy=None,
        https_proxy=None,
        proxy_auth=None
    )


@pytest.fixture
def fake_ai() -> FakeAIService:
    return FakeAIService()


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def wav_bytes() -> bytes:
    return make_wav()


@pytest.fixture
async def container(test_settings, fake_ai) -> AsyncGenerator[ServiceContainer, None]:
    """独立于HTTP层的服务容器"""
    container = ServiceContainer(test_settings, fake_ai)
    test_settings.ensure_directories()
    yield container
    await container.task_manager.stop()


@pytest.fixture
async def app(test_settings, fake_ai) -> AsyncGenerator[FastAPI, None]:
    app = create_app(settings=test_settings, ai_service=fake_ai)
    yield app
    await app.state.container.task_manager.stop()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """提供测试客户端"""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
