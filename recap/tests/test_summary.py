"""
摘要生成服务测试
"""

import asyncio

import pytest

from recap.core.exceptions import NotFoundException, SummaryGenerationFailed
from recap.models import SummaryType
from recap.services.ai.openai_provider import ANALYST_PREAMBLE
from recap.services.summary import (
    DEFAULT_SUMMARY_PROMPT,
    SUMMARY_PROMPTS,
    SummaryService,
    build_system_prompt,
)


@pytest.fixture
def service(store, fake_ai) -> SummaryService:
    return SummaryService(store, fake_ai)


@pytest.fixture
async def recording(store):
    recording = await store.create_recording(title="Weekly sync", filename="w.wav")
    await store.update_recording(recording.id, processed=True, transcribed=True)
    await store.create_segment(recording.id, timestamp=0, text="We ship Friday.")
    return recording


def test_every_type_has_prompt():
    assert set(SUMMARY_PROMPTS) == {t.value for t in SummaryType}


def test_build_system_prompt():
    prompt = build_system_prompt("sales")
    assert prompt.startswith(ANALYST_PREAMBLE)
    assert SUMMARY_PROMPTS["sales"] in prompt
    assert prompt.endswith("appropriate paragraphs, lists, and spacing.")


def test_unknown_type_uses_default_prompt():
    assert DEFAULT_SUMMARY_PROMPT in build_system_prompt("haiku")


async def test_generate_summary_stores_content(service, store, fake_ai, recording):
    summary = await service.generate_summary(recording.id, "general", "Speaker (0:00): hi")

    assert summary.content == "summary #1"
    assert summary.type == "general"
    assert await store.get_summary_by_type(recording.id, "general") == summary


async def test_generate_summary_failure(service, store, fake_ai, recording):
    fake_ai.failing_prompts.add(SUMMARY_PROMPTS["timeline"])

    with pytest.raises(SummaryGenerationFailed) as exc_info:
        await service.generate_summary(recording.id, "timeline", "text")

    assert exc_info.value.summary_type == "timeline"
    assert await store.list_summaries(recording.id) == []


async def test_concurrent_requests_share_generation(service, store, fake_ai, recording):
    fake_ai.summarize_gate = asyncio.Event()

    first = asyncio.create_task(service.generate_summary(recording.id, "general", "text"))
    second = asyncio.create_task(service.generate_summary(recording.id, "general", "text"))
    await asyncio.sleep(0)
    fake_ai.summarize_gate.set()
    results = await asyncio.gather(first, second)

    assert len(fake_ai.summarize_calls) == 1
    assert results[0] == results[1]
    assert len(await store.list_summaries(recording.id)) == 1


async def test_get_or_generate_returns_stored(service, store, fake_ai, recording):
    await store.save_summary(recording.id, "general", "already there")

    summary = await service.get_or_generate(recording.id, "general")

    assert summary.content == "already there"
    assert fake_ai.summarize_calls == []


async def test_get_or_generate_generates_once(service, fake_ai, recording):
    first = await service.get_or_generate(recording.id, "mental-models")
    second = await service.get_or_generate(recording.id, "mental-models")

    assert first.content == second.content
    assert len(fake_ai.summarize_calls) == 1


async def test_get_or_generate_missing_recording(service):
    with pytest.raises(NotFoundException) as exc_info:
        await service.get_or_generate(99, "general")
    assert exc_info.value.message == "Recording not found"


async def test_get_or_generate_without_transcript(service, store, fake_ai):
    recording = await store.create_recording(title="Empty", filename="e.wav")

    with pytest.raises(NotFoundException) as exc_info:
        await service.get_or_generate(recording.id, "general")

    assert exc_info.value.message == "Transcript not found"
    assert fake_ai.summarize_calls == []


async def test_generate_all_isolates_failures(service, store, fake_ai, recording):
    fake_ai.failing_prompts.add(SUMMARY_PROMPTS["sales"])

    succeeded = await service.generate_all(recording.id, "text")

    assert succeeded == 4
    stored = {s.type for s in await store.list_summaries(recording.id)}
    assert stored == {"general", "mental-models", "1-on-1", "timeline"}
