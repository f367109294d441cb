"""
路由依赖

从 app.state 取出服务容器中的共享实例。
"""

from fastapi import Depends, Request

from recap.config import Settings
from recap.core.exceptions import ConfigurationException
from recap.db.store import InMemoryStore
from recap.services.chat import ChatService
from recap.services.container import ServiceContainer
from recap.services.pipeline import ProcessingPipeline
from recap.services.summary import SummaryService
from recap.utils.file_utils import AudioStorage


def get_container(request: Request) -> ServiceContainer:
    container = getattr(request.app.state, "container", None)
    if container is None:
        raise ConfigurationException("Services are not initialized")
    return container


def get_settings(container: ServiceContainer = Depends(get_container)) -> Settings:
    return container.settings


def get_store(container: ServiceContainer = Depends(get_container)) -> InMemoryStore:
    return container.store


def get_audio_storage(container: ServiceContainer = Depends(get_container)) -> AudioStorage:
    return container.audio_storage


def get_pipeline(container: ServiceContainer = Depends(get_container)) -> ProcessingPipeline:
    return container.pipeline


def get_summary_service(container: ServiceContainer = Depends(get_container)) -> SummaryService:
    return container.summary_service


def get_chat_service(container: ServiceContainer = Depends(get_container)) -> ChatService:
    return container.chat_service
