"""
FastAPI应用入口点
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from recap.api.api import api_router
from recap.config import Settings, settings as default_settings
from recap.core.exceptions import format_validation_errors, recap_exception_to_http_exception
from recap.core import (
    ExceptionHandlingMiddleware,
    RequestLoggingMiddleware,
    ValidationException,
    api_logger,
    setup_logging
)
from recap.services.ai.ai_service import AIService
from recap.services.container import ServiceContainer


def create_app(settings: Optional[Settings] = None, ai_service: Optional[AIService] = None) -> FastAPI:
    """
    创建FastAPI应用

    Args:
        settings: 应用配置，默认使用全局配置
        ai_service: 注入的AI服务；为空时在启动阶段按配置创建OpenAI客户端
    """
    settings = settings or default_settings
    settings.ensure_directories()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """应用生命周期管理"""
        api_logger.info(f"Starting {settings.app_name}...")

        if getattr(app.state, "container", None) is None:
            try:
                app.state.container = ServiceContainer.from_settings(settings)
            except Exception as e:
                api_logger.error(f"Failed to initialize application: {e}")
                raise
        container: ServiceContainer = app.state.container
        await container.start()

        api_logger.info(f"{settings.app_name} started successfully")

        yield

        api_logger.info(f"Shutting down {settings.app_name}...")
        try:
            await container.shutdown()
        except Exception as e:
            api_logger.error(f"Error shutting down services: {e}")
        api_logger.info(f"{settings.app_name} shutdown completed")

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Conversation recording, transcription and summary API",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan
    )

    # 注入AI服务时立即构建容器，不依赖生命周期事件
    if ai_service is not None:
        app.state.container = ServiceContainer.from_settings(settings, ai_service)

    # 添加中间件(后添加的先执行)
    app.add_middleware(ExceptionHandlingMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        """请求参数校验失败统一返回400和标准错误结构"""
        http_exc = recap_exception_to_http_exception(
            ValidationException(format_validation_errors(exc.errors()))
        )
        api_logger.bind(path=request.url.path).warning(f"Request validation failed: {http_exc.detail['message']}")
        return JSONResponse(status_code=http_exc.status_code, content=http_exc.detail)

    app.include_router(api_router, prefix="/api")
    return app


def build_default_app() -> FastAPI:
    """uvicorn 工厂入口"""
    setup_logging()
    return create_app()
