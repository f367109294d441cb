"""
自定义异常类
"""

from fastapi import HTTPException, status


class RecapException(Exception):
    """Recap应用基础异常"""

    def __init__(self, message: str, code: str = "GENERAL_ERROR"):
        self.message = message
        self.code = code
        super().__init__(self.message)


class NotFoundException(RecapException):
    """资源未找到异常"""

    def __init__(self, resource: str = "Resource"):
        self.resource = resource
        super().__init__(f"{resource} not found", "RESOURCE_NOT_FOUND")


class ValidationException(RecapException):
    """数据验证异常"""

    def __init__(self, message: str = "Validation failed"):
        super().__init__(message, "VALIDATION_ERROR")


class FileTooLargeException(RecapException):
    """上传文件过大"""

    def __init__(self, max_size: int):
        self.max_size = max_size
        super().__init__(
            f"File too large, maximum allowed is {max_size // 1024 // 1024}MB",
            "FILE_TOO_LARGE"
        )


class UpstreamServiceException(RecapException):
    """外部AI服务异常"""

    def __init__(self, message: str = "AI service call failed"):
        super().__init__(message, "AI_SERVICE_ERROR")


class TranscriptionFailed(UpstreamServiceException):
    """语音转录失败"""

    def __init__(self, message: str = "Transcription failed"):
        super().__init__(message)


class SummaryGenerationFailed(UpstreamServiceException):
    """摘要生成失败"""

    def __init__(self, summary_type: str, message: str = "Summary generation failed"):
        self.summary_type = summary_type
        super().__init__(f"{message} ({summary_type})")


class StorageException(RecapException):
    """音频文件存储异常"""

    def __init__(self, message: str = "Storage operation failed"):
        super().__init__(message, "STORAGE_ERROR")


class ConfigurationException(RecapException):
    """配置错误异常"""

    def __init__(self, message: str = "Configuration error"):
        super().__init__(message, "CONFIGURATION_ERROR")


# HTTP异常映射
STATUS_CODE_MAPPING = {
    "RESOURCE_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "VALIDATION_ERROR": status.HTTP_400_BAD_REQUEST,
    "FILE_TOO_LARGE": status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
    "AI_SERVICE_ERROR": status.HTTP_500_INTERNAL_SERVER_ERROR,
    "STORAGE_ERROR": status.HTTP_500_INTERNAL_SERVER_ERROR,
    "CONFIGURATION_ERROR": status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def recap_exception_to_http_exception(exc: RecapException) -> HTTPException:
    """将Recap异常转换为HTTP异常"""
    status_code = STATUS_CODE_MAPPING.get(exc.code, status.HTTP_500_INTERNAL_SERVER_ERROR)

    return HTTPException(
        status_code=status_code,
        detail={
            "error": True,
            "code": exc.code,
            "message": exc.message,
            "type": type(exc).__name__
        }
    )


def format_validation_errors(errors) -> str:
    """把请求校验错误拼成一条消息，如 ``path.recording_id: Input should be a valid integer``"""
    parts = []
    for error in errors:
        location = ".".join(str(part) for part in error.get("loc", ()))
        parts.append(f"{location}: {error.get('msg', 'invalid value')}" if location else error.get("msg", ""))
    return "; ".join(parts) or "Invalid request"
