"""
服务容器

应用启动时构建一次，挂在 app.state 上，由路由依赖取用。
"""

from typing import Optional

from recap.config import Settings
from recap.core.exceptions import ConfigurationException
from recap.core.logging import service_logger
from recap.core.tasks import BackgroundTaskManager
from recap.db.store import InMemoryStore
from recap.services.ai.ai_service import AIService
from recap.services.chat import ChatService
from recap.services.pipeline import ProcessingPipeline
from recap.services.summary import SummaryService
from recap.services.transcription import TranscriptionService
from recap.utils.file_utils import AudioStorage


class ServiceContainer:
    """持有所有共享服务实例"""

    def __init__(self, settings: Settings, ai_service: AIService):
        self.settings = settings
        self.ai_service = ai_service
        self.store = InMemoryStore()
        self.audio_storage = AudioStorage(settings.upload_dir, settings.max_file_size)
        self.task_manager = BackgroundTaskManager()

        self.transcription_service = TranscriptionService(ai_service)
        self.summary_service = SummaryService(self.store, ai_service)
        self.chat_service = ChatService(self.store, ai_service)
        self.pipeline = ProcessingPipeline(
            store=self.store,
            audio_storage=self.audio_storage,
            transcription_service=self.transcription_service,
            summary_service=self.summary_service,
            task_manager=self.task_manager
        )

    @classmethod
    def from_settings(cls, settings: Settings, ai_service: Optional[AIService] = None) -> "ServiceContainer":
        """未注入AI服务时按配置创建OpenAI客户端"""
        if ai_service is None:
            if not settings.openai_api_key:
                raise ConfigurationException("OPENAI_API_KEY is not configured")
            ai_service = AIService(settings.ai_config)
        return cls(settings, ai_service)

    async def start(self):
        await self.task_manager.start()
        service_logger.info(f"Services ready: {self.ai_service.get_provider_info()}")

    async def shutdown(self):
        """停止后台任务并关闭AI客户端"""
        await self.task_manager.stop()
        await self.ai_service.close()
