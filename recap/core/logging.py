"""
日志配置
"""

import sys
import logging
from pathlib import Path
from typing import Optional
from loguru import logger


class InterceptHandler(logging.Handler):
    """拦截标准库日志并转发给loguru"""

    def emit(self, record):
        # 获取对应的loguru等级
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # 查找调用者
        frame, depth = logging.currentframe(), 2
        while frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<magenta>{extra[name]}</magenta> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)


def setup_logging(level: Optional[str] = None, settings=None):
    """设置应用日志"""
    if settings is None:
        from recap.config import settings

    console_level = level or ("DEBUG" if settings.debug else "INFO")

    # 移除默认的loguru处理器
    logger.remove()
    logger.configure(extra={"name": "recap"})

    # 控制台日志
    logger.add(
        sys.stdout,
        format=LOG_FORMAT,
        level=console_level,
        colorize=True,
        backtrace=True,
        diagnose=settings.debug
    )

    if settings.log_to_file:
        log_dir = Path(settings.log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)

        # 应用日志
        logger.add(
            log_dir / "recap.log",
            format=LOG_FORMAT,
            level="INFO",
            rotation="1 day",
            retention="30 days",
            compression="zip",
            backtrace=True,
            diagnose=False
        )

        # 错误日志
        logger.add(
            log_dir / "recap_error.log",
            format=LOG_FORMAT,
            level="ERROR",
            rotation="1 week",
            retention="90 days",
            compression="zip",
            backtrace=True,
            diagnose=False
        )

        # AI服务日志
        logger.add(
            log_dir / "ai_service.log",
            format=LOG_FORMAT,
            level="INFO",
            rotation="1 day",
            retention="7 days",
            filter=lambda record: record["extra"].get("name") == "ai_service",
            backtrace=True,
            diagnose=False
        )

    # 拦截标准库日志
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

    for logger_name in ["uvicorn", "uvicorn.error", "uvicorn.access", "httpx", "openai"]:
        logging_logger = logging.getLogger(logger_name)
        logging_logger.handlers = [InterceptHandler()]
        logging_logger.propagate = False

    # 第三方HTTP客户端只记录警告以上
    if not settings.debug:
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("openai").setLevel(logging.WARNING)


def get_logger(name: str):
    """获取特定名称的日志器"""
    return logger.bind(name=name)


# 创建模块专用日志器
api_logger = get_logger("api")
service_logger = get_logger("service")
ai_logger = get_logger("ai_service")
pipeline_logger = get_logger("pipeline")
storage_logger = get_logger("storage")
