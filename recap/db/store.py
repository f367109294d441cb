"""
内存实体存储

每种实体一个字典和一个独立的自增ID计数器(从1开始，删除后不复用)。
所有方法都是协程，便于以后替换为网络存储而不改调用方；
方法内部不会挂起，因此在单事件循环下无需加锁。
"""

import itertools
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from recap.core.exceptions import NotFoundException, ValidationException
from recap.core.logging import get_logger
from recap.models import (
    ChatMessage,
    ChatRole,
    DEFAULT_SPEAKER,
    Recording,
    Summary,
    TranscriptSegment,
)

db_logger = get_logger("database")

# 创建后不允许修改的字段
IMMUTABLE_RECORDING_FIELDS = {"id", "created_at"}


class InMemoryStore:
    """内存实体存储"""

    def __init__(self):
        self.recordings: Dict[int, Recording] = {}
        self.segments: Dict[int, TranscriptSegment] = {}
        self.summaries: Dict[int, Summary] = {}
        self.chat_messages: Dict[int, ChatMessage] = {}

        self._recording_ids = itertools.count(1)
        self._segment_ids = itertools.count(1)
        self._summary_ids = itertools.count(1)
        self._chat_message_ids = itertools.count(1)

    # 录音

    async def get_recording(self, recording_id: int) -> Optional[Recording]:
        return self.recordings.get(recording_id)

    async def list_recordings(self) -> List[Recording]:
        """按创建时间倒序返回所有录音"""
        return sorted(
            self.recordings.values(),
            key=lambda r: (r.created_at, r.id),
            reverse=True
        )

    async def create_recording(self, title: str, filename: str, duration: int = 0) -> Recording:
        recording = Recording(
            id=next(self._recording_ids),
            title=title,
            filename=filename,
            duration=duration,
            processed=False,
            transcribed=False
        )
        self.recordings[recording.id] = recording
        db_logger.debug(f"Recording {recording.id} created ({filename})")
        return recording

    async def update_recording(self, recording_id: int, **fields: Any) -> Recording:
        """
        合并更新录音字段

        Raises:
            NotFoundException: 录音不存在
            ValidationException: 字段非法，或更新后 transcribed=True 而 processed=False
        """
        recording = self.recordings.get(recording_id)
        if recording is None:
            raise NotFoundException("Recording")

        unknown = set(fields) - set(Recording.model_fields)
        if unknown:
            raise ValidationException(f"Unknown recording fields: {', '.join(sorted(unknown))}")
        immutable = set(fields) & IMMUTABLE_RECORDING_FIELDS
        if immutable:
            raise ValidationException(f"Immutable recording fields: {', '.join(sorted(immutable))}")

        try:
            updated = Recording.model_validate({**recording.model_dump(), **fields})
        except ValidationError as e:
            raise ValidationException(f"Invalid recording update: {e}") from e

        if updated.transcribed and not updated.processed:
            raise ValidationException("A recording cannot be transcribed before it is processed")

        self.recordings[recording_id] = updated
        return updated

    async def delete_recording(self, recording_id: int) -> bool:
        """删除录音并级联删除所有关联数据；录音不存在时静默返回False"""
        removed = self.recordings.pop(recording_id, None) is not None

        for table in (self.segments, self.summaries, self.chat_messages):
            for row_id in [row_id for row_id, row in table.items() if row.recording_id == recording_id]:
                del table[row_id]

        if removed:
            db_logger.debug(f"Recording {recording_id} deleted with dependent rows")
        return removed

    # 转录分段

    async def get_segment(self, segment_id: int) -> Optional[TranscriptSegment]:
        return self.segments.get(segment_id)

    async def list_segments(self, recording_id: int) -> List[TranscriptSegment]:
        """按时间戳升序返回录音的转录分段"""
        return sorted(
            (s for s in self.segments.values() if s.recording_id == recording_id),
            key=lambda s: (s.timestamp, s.id)
        )

    async def create_segment(
        self,
        recording_id: int,
        timestamp: int,
        text: str,
        speaker: str = DEFAULT_SPEAKER
    ) -> TranscriptSegment:
        self._require_recording(recording_id)
        segment = TranscriptSegment(
            id=next(self._segment_ids),
            recording_id=recording_id,
            speaker=speaker,
            timestamp=timestamp,
            text=text
        )
        self.segments[segment.id] = segment
        return segment

    # 摘要

    async def get_summary(self, summary_id: int) -> Optional[Summary]:
        return self.summaries.get(summary_id)

    async def get_summary_by_type(self, recording_id: int, summary_type: str) -> Optional[Summary]:
        """按(录音, 类型)返回第一条匹配的摘要"""
        return next(
            (
                s for s in self.summaries.values()
                if s.recording_id == recording_id and s.type == summary_type
            ),
            None
        )

    async def list_summaries(self, recording_id: int) -> List[Summary]:
        return sorted(
            (s for s in self.summaries.values() if s.recording_id == recording_id),
            key=lambda s: s.id
        )

    async def save_summary(self, recording_id: int, summary_type: str, content: str) -> Summary:
        """保存摘要；同一(录音, 类型)已存在时覆盖内容并保留原ID"""
        self._require_recording(recording_id)
        existing = await self.get_summary_by_type(recording_id, summary_type)
        summary = Summary(
            id=existing.id if existing else next(self._summary_ids),
            recording_id=recording_id,
            type=summary_type,
            content=content
        )
        self.summaries[summary.id] = summary
        return summary

    # 问答消息

    async def get_chat_message(self, message_id: int) -> Optional[ChatMessage]:
        return self.chat_messages.get(message_id)

    async def list_chat_messages(self, recording_id: int) -> List[ChatMessage]:
        return sorted(
            (m for m in self.chat_messages.values() if m.recording_id == recording_id),
            key=lambda m: (m.timestamp, m.id)
        )

    async def create_chat_message(self, recording_id: int, role: ChatRole, content: str) -> ChatMessage:
        self._require_recording(recording_id)
        message = ChatMessage(
            id=next(self._chat_message_ids),
            recording_id=recording_id,
            role=role,
            content=content
        )
        self.chat_messages[message.id] = message
        return message

    # 统计

    async def count_rows(self, recording_id: int) -> Dict[str, int]:
        """统计录音的关联数据行数"""
        return {
            "segments": sum(1 for s in self.segments.values() if s.recording_id == recording_id),
            "summaries": sum(1 for s in self.summaries.values() if s.recording_id == recording_id),
            "chat_messages": sum(1 for m in self.chat_messages.values() if m.recording_id == recording_id),
        }

    def _require_recording(self, recording_id: int):
        if recording_id not in self.recordings:
            raise NotFoundException("Recording")
