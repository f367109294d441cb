"""
转录问答服务
"""

from typing import List

from recap.core.exceptions import NotFoundException, UpstreamServiceException
from recap.core.logging import service_logger
from recap.db.store import InMemoryStore
from recap.models import ChatMessage, ChatRole
from recap.services.ai.ai_service import AIService
from recap.services.transcription import format_transcript


class ChatService:
    """基于录音转录内容的问答"""

    def __init__(self, store: InMemoryStore, ai_service: AIService):
        self.store = store
        self.ai_service = ai_service

    async def ask(self, recording_id: int, message: str) -> str:
        """
        回答关于录音的问题

        用户消息先保存；模型调用失败时不会保存回答。

        Raises:
            NotFoundException: 录音或转录不存在(此时不保存任何消息)
            UpstreamServiceException: 模型调用失败
        """
        recording = await self.store.get_recording(recording_id)
        if recording is None:
            raise NotFoundException("Recording")

        segments = await self.store.list_segments(recording_id)
        if not segments:
            raise NotFoundException("Transcript")

        await self.store.create_chat_message(recording_id, ChatRole.USER, message)

        try:
            answer = await self.ai_service.answer_question(message, format_transcript(segments))
        except UpstreamServiceException:
            raise
        except Exception as e:
            service_logger.error(f"Chat completion for recording {recording_id} failed: {e}")
            raise UpstreamServiceException(f"Failed to process chat message: {e}") from e

        await self.store.create_chat_message(recording_id, ChatRole.ASSISTANT, answer)
        return answer

    async def history(self, recording_id: int) -> List[ChatMessage]:
        return await self.store.list_chat_messages(recording_id)
