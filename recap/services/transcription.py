"""
转录服务

把外部语音转录结果(分段或整段文本)规范化为统一的分段列表。
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Protocol

from recap.core.exceptions import TranscriptionFailed
from recap.core.logging import service_logger
from recap.models import DEFAULT_SPEAKER
from recap.services.ai.ai_service import AIService
from recap.utils.audio_utils import format_timestamp

# 无法获得任何转录文本时的占位内容
EMPTY_TRANSCRIPT_TEXT = "Unable to transcribe audio content"


@dataclass
class NormalizedSegment:
    """规范化的转录分段"""
    timestamp: int
    text: str
    speaker: str = DEFAULT_SPEAKER


@dataclass
class TranscriptionOutcome:
    """规范化的转录结果"""
    segments: List[NormalizedSegment] = field(default_factory=list)
    duration: float = 0.0
    text: str = ""
    language: Optional[str] = None


class SegmentLike(Protocol):
    speaker: str
    timestamp: int
    text: str


def format_transcript(segments: Iterable[SegmentLike]) -> str:
    """
    拼接转录全文

    每个分段渲染为 ``Speaker (m:ss): text``，分段之间以空行分隔。
    """
    return "\n\n".join(
        f"{seg.speaker} ({format_timestamp(seg.timestamp)}): {seg.text}"
        for seg in segments
    )


class TranscriptionService:
    """转录服务"""

    def __init__(self, ai_service: AIService):
        self.ai_service = ai_service

    async def transcribe(
        self,
        audio: bytes,
        filename: str,
        media_type: str,
        language: str = "auto"
    ) -> TranscriptionOutcome:
        """
        转录音频并规范化结果

        Args:
            audio: 音频字节
            filename: 文件名
            media_type: 媒体类型
            language: 语言代码

        Returns:
            TranscriptionOutcome: 规范化结果，至少包含一个分段

        Raises:
            TranscriptionFailed: 外部服务调用失败(不会自动重试)
        """
        try:
            result = await self.ai_service.transcribe_audio(
                audio, filename, media_type, language=language
            )
        except Exception as e:
            service_logger.error(f"Transcription of {filename} failed: {e}")
            raise TranscriptionFailed(str(e)) from e

        text = (result.text or "").strip()

        if result.segments:
            segments = [
                NormalizedSegment(
                    timestamp=max(0, int(seg["start"])),
                    text=str(seg.get("text", "")).strip()
                )
                for seg in result.segments
            ]
        else:
            # 没有分段信息时整段文本作为一个分段
            segments = [NormalizedSegment(timestamp=0, text=text or EMPTY_TRANSCRIPT_TEXT)]

        duration = result.duration
        if not duration and result.segments:
            duration = max(float(seg.get("end") or seg["start"]) for seg in result.segments)

        service_logger.info(
            f"Transcribed {filename}: {len(segments)} segments, "
            f"duration={duration or 0:.1f}s, language={result.language}"
        )

        return TranscriptionOutcome(
            segments=segments,
            duration=float(duration or 0.0),
            text=text,
            language=result.language
        )
