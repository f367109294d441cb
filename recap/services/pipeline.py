"""
录音处理流水线

上传后以分离任务执行：读取音频 -> 转录 -> 保存分段 -> 扇出摘要生成。
进度只通过录音的 processed / transcribed 两个标志对外可见，
内部另外记录每个录音的处理结果(包括失败原因)。
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from recap.core.exceptions import NotFoundException
from recap.core.logging import pipeline_logger
from recap.core.tasks import BackgroundTaskManager
from recap.db.store import InMemoryStore
from recap.services.summary import SummaryService
from recap.services.transcription import TranscriptionService, format_transcript
from recap.utils.audio_utils import media_type_for
from recap.utils.file_utils import AudioStorage


class PipelineState(str, Enum):
    """流水线状态"""
    UPLOADED = "uploaded"
    TRANSCRIBING = "transcribing"
    AUDIO_ANALYZED = "audio_analyzed"
    READY = "ready"
    FAILED = "failed"


@dataclass
class PipelineOutcome:
    state: PipelineState
    reason: Optional[str] = None


class ProcessingPipeline:
    """录音处理流水线"""

    def __init__(
        self,
        store: InMemoryStore,
        audio_storage: AudioStorage,
        transcription_service: TranscriptionService,
        summary_service: SummaryService,
        task_manager: BackgroundTaskManager
    ):
        self.store = store
        self.audio_storage = audio_storage
        self.transcription_service = transcription_service
        self.summary_service = summary_service
        self.task_manager = task_manager
        self.outcomes: Dict[int, PipelineOutcome] = {}

    def get_outcome(self, recording_id: int) -> Optional[PipelineOutcome]:
        return self.outcomes.get(recording_id)

    def discard(self, recording_id: int):
        """录音删除后清理内部处理结果"""
        self.outcomes.pop(recording_id, None)

    def dispatch(self, recording_id: int):
        """以分离任务启动处理，立即返回"""
        self.outcomes[recording_id] = PipelineOutcome(PipelineState.UPLOADED)
        self.task_manager.spawn(
            f"process-recording-{recording_id}",
            self.process_recording(recording_id)
        )
        pipeline_logger.info(f"Processing dispatched for recording {recording_id}")

    async def process_recording(self, recording_id: int):
        """
        处理单个录音

        任何错误都在这里结束：记录日志并把两个标志都置为True，
        保证客户端轮询能够终止。
        """
        try:
            await self._run(recording_id)
        except Exception as e:
            await self._mark_failed(recording_id, e)

    async def _run(self, recording_id: int):
        recording = await self.store.get_recording(recording_id)
        if recording is None:
            raise NotFoundException("Recording")

        self.outcomes[recording_id] = PipelineOutcome(PipelineState.TRANSCRIBING)
        pipeline_logger.info(f"Transcribing recording {recording_id} ({recording.filename})")

        audio = await self.audio_storage.read(recording.filename)
        result = await self.transcription_service.transcribe(
            audio,
            recording.filename,
            media_type_for(recording.filename)
        )

        # processed 必须先于任何分段写入
        fields = {"processed": True}
        if not recording.duration:
            fields["duration"] = round(result.duration)
        await self.store.update_recording(recording_id, **fields)
        self.outcomes[recording_id] = PipelineOutcome(PipelineState.AUDIO_ANALYZED)

        for segment in result.segments:
            await self.store.create_segment(
                recording_id,
                timestamp=segment.timestamp,
                text=segment.text,
                speaker=segment.speaker
            )

        await self.store.update_recording(recording_id, transcribed=True)
        self.outcomes[recording_id] = PipelineOutcome(PipelineState.READY)
        pipeline_logger.info(
            f"Recording {recording_id} transcribed with {len(result.segments)} segments"
        )

        self.task_manager.spawn(
            f"summaries-{recording_id}",
            self.summary_service.generate_all(recording_id, format_transcript(result.segments))
        )

    async def _mark_failed(self, recording_id: int, error: Exception):
        reason = str(error) or error.__class__.__name__
        pipeline_logger.opt(exception=error).error(
            f"Error processing recording {recording_id}: {reason}"
        )
        try:
            await self.store.update_recording(recording_id, processed=True, transcribed=True)
        except NotFoundException:
            pipeline_logger.warning(f"Recording {recording_id} was deleted during processing")
            self.discard(recording_id)
            return
        self.outcomes[recording_id] = PipelineOutcome(PipelineState.FAILED, reason)
