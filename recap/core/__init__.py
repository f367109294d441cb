"""
核心功能包
"""

from .exceptions import (
    RecapException,
    NotFoundException,
    ValidationException,
    FileTooLargeException,
    UpstreamServiceException,
    TranscriptionFailed,
    SummaryGenerationFailed,
    StorageException,
    ConfigurationException
)

from .logging import (
    setup_logging,
    get_logger,
    api_logger,
    service_logger,
    ai_logger,
    pipeline_logger,
    storage_logger
)

from .middleware import (
    RequestLoggingMiddleware,
    ExceptionHandlingMiddleware
)

from .tasks import BackgroundTaskManager

__all__ = [
    # Exceptions
    "RecapException",
    "NotFoundException",
    "ValidationException",
    "FileTooLargeException",
    "UpstreamServiceException",
    "TranscriptionFailed",
    "SummaryGenerationFailed",
    "StorageException",
    "ConfigurationException",

    # Logging
    "setup_logging",
    "get_logger",
    "api_logger",
    "service_logger",
    "ai_logger",
    "pipeline_logger",
    "storage_logger",

    # Middleware
    "RequestLoggingMiddleware",
    "ExceptionHandlingMiddleware",

    # Tasks
    "BackgroundTaskManager",
]
