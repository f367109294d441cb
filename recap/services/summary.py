"""
摘要生成服务

按摘要类型选择提示模板，调用大语言模型生成摘要并保存。
"""

import asyncio
from typing import Dict, Tuple

from recap.core.exceptions import NotFoundException, SummaryGenerationFailed
from recap.core.logging import service_logger
from recap.db.store import InMemoryStore
from recap.models import Summary, SummaryType
from recap.services.ai.ai_service import AIService
from recap.services.ai.openai_provider import ANALYST_PREAMBLE
from recap.services.transcription import format_transcript


SUMMARY_PROMPTS: Dict[str, str] = {
    SummaryType.GENERAL.value: (
        "Provide a concise summary of the following conversation transcript.\n"
        "Highlight the key topics discussed, decisions made, and action items.\n"
        "Format with clear paragraphs and bullet points where appropriate."
    ),
    SummaryType.MENTAL_MODELS.value: (
        "Analyze the following conversation transcript using mental models.\n"
        "Identify the thinking patterns, cognitive biases, decision-making frameworks, and\n"
        "problem-solving approaches demonstrated. Provide insights on how these mental models\n"
        "affected the conversation and outcomes."
    ),
    SummaryType.ONE_ON_ONE.value: (
        "Summarize this 1-on-1 meeting transcript with a focus on:\n"
        "1. Main discussion points\n"
        "2. Feedback exchanged\n"
        "3. Goals and expectations discussed\n"
        "4. Growth opportunities identified\n"
        "5. Action items and next steps\n"
        "Format this as a structured meeting summary."
    ),
    SummaryType.SALES.value: (
        "Analyze this sales conversation transcript. Focus on:\n"
        "1. Customer pain points and needs identified\n"
        "2. Objections raised and how they were addressed\n"
        "3. Value propositions presented\n"
        "4. Next steps agreed upon\n"
        "5. Areas for improvement in the sales approach\n"
        "Provide actionable insights for sales follow-up."
    ),
    SummaryType.TIMELINE.value: (
        "Create a chronological timeline breakdown of this conversation.\n"
        "Structure it by time segments, highlighting when key topics shifted, important decisions\n"
        "were made, or new information was introduced. Make it easy to see the conversation flow\n"
        "and progression of ideas."
    ),
}

DEFAULT_SUMMARY_PROMPT = "Provide a general summary of the following conversation transcript."


def build_system_prompt(summary_type: str) -> str:
    """构建摘要类型对应的系统提示，未知类型使用通用模板"""
    template = SUMMARY_PROMPTS.get(summary_type, DEFAULT_SUMMARY_PROMPT)
    return (
        f"{ANALYST_PREAMBLE}\n{template}\n"
        "Be concise but thorough. Format your response for readability with "
        "appropriate paragraphs, lists, and spacing."
    )


class SummaryService:
    """摘要生成服务"""

    def __init__(self, store: InMemoryStore, ai_service: AIService):
        self.store = store
        self.ai_service = ai_service
        # 进行中的生成任务，同一(录音, 类型)只调用一次外部服务
        self._in_flight: Dict[Tuple[int, str], asyncio.Future] = {}

    async def generate_summary(
        self,
        recording_id: int,
        summary_type: str,
        transcript_text: str
    ) -> Summary:
        """
        生成并保存摘要

        Raises:
            SummaryGenerationFailed: 外部服务调用失败
            NotFoundException: 生成期间录音已被删除
        """
        key = (recording_id, summary_type)
        in_flight = self._in_flight.get(key)
        if in_flight is not None:
            service_logger.debug(f"Joining in-flight {summary_type} summary for recording {recording_id}")
            return await asyncio.shield(in_flight)

        future = asyncio.get_running_loop().create_future()
        self._in_flight[key] = future
        try:
            summary = await self._generate(recording_id, summary_type, transcript_text)
        except asyncio.CancelledError:
            future.cancel()
            raise
        except Exception as e:
            future.set_exception(e)
            # 没有其他等待者时避免 "exception was never retrieved"
            future.exception()
            raise
        else:
            future.set_result(summary)
            return summary
        finally:
            self._in_flight.pop(key, None)

    async def _generate(self, recording_id: int, summary_type: str, transcript_text: str) -> Summary:
        service_logger.info(f"Generating {summary_type} summary for recording {recording_id}")
        try:
            content = await self.ai_service.summarize(
                transcript_text,
                build_system_prompt(summary_type)
            )
        except Exception as e:
            raise SummaryGenerationFailed(summary_type, str(e)) from e

        summary = await self.store.save_summary(recording_id, summary_type, content)
        service_logger.info(f"Stored {summary_type} summary {summary.id} for recording {recording_id}")
        return summary

    async def get_or_generate(self, recording_id: int, summary_type: str) -> Summary:
        """
        读取摘要，不存在时生成一次

        Raises:
            NotFoundException: 录音或转录不存在
            SummaryGenerationFailed: 生成失败
        """
        summary = await self.store.get_summary_by_type(recording_id, summary_type)
        if summary is not None:
            return summary

        recording = await self.store.get_recording(recording_id)
        if recording is None:
            raise NotFoundException("Recording")

        segments = await self.store.list_segments(recording_id)
        if not segments:
            raise NotFoundException("Transcript")

        return await self.generate_summary(recording_id, summary_type, format_transcript(segments))

    async def generate_all(self, recording_id: int, transcript_text: str) -> int:
        """
        并发生成所有内置类型的摘要

        各类型相互独立：单个失败只记录日志，不影响其他类型。

        Returns:
            int: 成功生成的数量
        """
        types = [t.value for t in SummaryType]
        results = await asyncio.gather(
            *(self.generate_summary(recording_id, t, transcript_text) for t in types),
            return_exceptions=True
        )

        succeeded = 0
        for summary_type, result in zip(types, results):
            if isinstance(result, BaseException):
                service_logger.error(
                    f"Error generating {summary_type} summary for recording {recording_id}: {result}"
                )
            else:
                succeeded += 1

        service_logger.info(f"Summaries for recording {recording_id}: {succeeded}/{len(types)} generated")
        return succeeded
