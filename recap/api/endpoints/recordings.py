"""
录音相关API端点
"""

from pathlib import Path as FilePath
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, File, Form, Path, UploadFile, status

from recap.api.deps import (
    get_audio_storage,
    get_chat_service,
    get_pipeline,
    get_settings,
    get_store,
    get_summary_service,
)
from recap.config import Settings
from recap.core.exceptions import NotFoundException, ValidationException
from recap.core.logging import api_logger
from recap.db.store import InMemoryStore
from recap.models import ChatMessage, Recording, TranscriptSegment
from recap.schemas import ChatRequest, ChatResponse, MessageResponse, ProcessingStatus
from recap.services.chat import ChatService
from recap.services.pipeline import ProcessingPipeline
from recap.services.status import project_status
from recap.services.summary import SummaryService
from recap.utils.audio_utils import validate_audio_upload
from recap.utils.file_utils import AudioStorage

DEFAULT_TITLE = "Untitled Recording"

router = APIRouter()


def parse_duration(value: Optional[str]) -> int:
    """解析客户端上报的时长，无法解析时为0"""
    try:
        return max(0, int(value))
    except (TypeError, ValueError):
        return 0


async def _create_from_upload(
    audio: Optional[UploadFile],
    title: str,
    duration: int,
    settings: Settings,
    store: InMemoryStore,
    audio_storage: AudioStorage,
    pipeline: ProcessingPipeline
) -> Recording:
    """保存上传的音频，创建录音并派发处理"""
    if audio is None or not audio.filename:
        raise ValidationException("No audio file provided")
    validate_audio_upload(audio.filename, audio.content_type, settings.allowed_audio_types)

    filename = await audio_storage.save_upload(audio)
    recording = await store.create_recording(title=title, filename=filename, duration=duration)
    api_logger.info(f"Recording {recording.id} created from {audio.filename}")

    pipeline.dispatch(recording.id)
    return recording


@router.get("", response_model=List[Recording], summary="获取录音列表")
async def list_recordings(store: InMemoryStore = Depends(get_store)) -> List[Recording]:
    """按创建时间倒序返回所有录音"""
    return await store.list_recordings()


@router.post(
    "",
    response_model=Recording,
    status_code=status.HTTP_201_CREATED,
    summary="上传录制的音频"
)
async def create_recording(
    audio: Optional[UploadFile] = File(None, description="音频文件"),
    title: Optional[str] = Form(None, description="录音标题"),
    duration: Optional[str] = Form(None, description="时长(秒)"),
    settings: Settings = Depends(get_settings),
    store: InMemoryStore = Depends(get_store),
    audio_storage: AudioStorage = Depends(get_audio_storage),
    pipeline: ProcessingPipeline = Depends(get_pipeline)
) -> Recording:
    """
    创建录音并在后台开始处理

    - **audio**: 音频文件(wav, mp3, m4a, mpeg, webm)
    - **title**: 标题，默认 "Untitled Recording"
    - **duration**: 客户端记录的时长，无法解析时为0
    """
    return await _create_from_upload(
        audio,
        title or DEFAULT_TITLE,
        parse_duration(duration),
        settings, store, audio_storage, pipeline
    )


@router.post(
    "/upload",
    response_model=Recording,
    status_code=status.HTTP_201_CREATED,
    summary="上传音频文件"
)
async def upload_recording(
    audio: Optional[UploadFile] = File(None, description="音频文件"),
    settings: Settings = Depends(get_settings),
    store: InMemoryStore = Depends(get_store),
    audio_storage: AudioStorage = Depends(get_audio_storage),
    pipeline: ProcessingPipeline = Depends(get_pipeline)
) -> Recording:
    """以文件名(不含扩展名)作为标题创建录音，时长由转录结果估算"""
    title = FilePath(audio.filename).stem if audio is not None and audio.filename else DEFAULT_TITLE
    return await _create_from_upload(
        audio, title, 0, settings, store, audio_storage, pipeline
    )


@router.get("/{recording_id}", response_model=Recording, summary="获取录音")
async def get_recording(
    recording_id: int = Path(..., description="录音ID"),
    store: InMemoryStore = Depends(get_store)
) -> Recording:
    recording = await store.get_recording(recording_id)
    if recording is None:
        raise NotFoundException("Recording")
    return recording


@router.delete("/{recording_id}", response_model=MessageResponse, summary="删除录音")
async def delete_recording(
    recording_id: int = Path(..., description="录音ID"),
    store: InMemoryStore = Depends(get_store),
    audio_storage: AudioStorage = Depends(get_audio_storage),
    pipeline: ProcessingPipeline = Depends(get_pipeline)
) -> MessageResponse:
    """删除录音及其转录、摘要、问答记录和音频文件"""
    recording = await store.get_recording(recording_id)
    if recording is None:
        raise NotFoundException("Recording")

    # 先删除音频文件，失败时录音数据保持不变
    if not await audio_storage.delete(recording.filename):
        api_logger.warning(f"Audio file {recording.filename} of recording {recording_id} was already gone")
    await store.delete_recording(recording_id)
    pipeline.discard(recording_id)

    return MessageResponse(message="Recording deleted successfully")


@router.get("/{recording_id}/status", response_model=ProcessingStatus, summary="获取处理进度")
async def get_processing_status(
    recording_id: int = Path(..., description="录音ID"),
    store: InMemoryStore = Depends(get_store)
) -> ProcessingStatus:
    recording = await store.get_recording(recording_id)
    if recording is None:
        raise NotFoundException("Recording")
    return project_status(recording.processed, recording.transcribed)


@router.get(
    "/{recording_id}/transcript",
    response_model=List[TranscriptSegment],
    summary="获取转录分段"
)
async def get_transcript(
    recording_id: int = Path(..., description="录音ID"),
    store: InMemoryStore = Depends(get_store)
) -> List[TranscriptSegment]:
    """按时间戳升序返回分段；没有转录时返回空列表"""
    return await store.list_segments(recording_id)


@router.get("/{recording_id}/summary/{summary_type}", response_model=str, summary="获取摘要")
async def get_summary(
    recording_id: int = Path(..., description="录音ID"),
    summary_type: str = Path(..., description="摘要类型"),
    summary_service: SummaryService = Depends(get_summary_service)
) -> str:
    """
    读取摘要内容

    尚未生成时按需生成一次；未知类型使用通用摘要模板。
    """
    summary = await summary_service.get_or_generate(recording_id, summary_type)
    return summary.content


@router.post("/{recording_id}/chat", response_model=ChatResponse, summary="询问转录内容")
async def chat(
    recording_id: int = Path(..., description="录音ID"),
    request: Optional[ChatRequest] = Body(None),
    chat_service: ChatService = Depends(get_chat_service)
) -> ChatResponse:
    if request is None or not request.message or not request.message.strip():
        raise ValidationException("Message is required")

    answer = await chat_service.ask(recording_id, request.message)
    return ChatResponse(response=answer)


@router.get("/{recording_id}/chat", response_model=List[ChatMessage], summary="获取问答记录")
async def get_chat_history(
    recording_id: int = Path(..., description="录音ID"),
    chat_service: ChatService = Depends(get_chat_service)
) -> List[ChatMessage]:
    return await chat_service.history(recording_id)
