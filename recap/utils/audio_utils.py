"""
音频处理工具函数
"""

from pathlib import Path
from typing import Iterable, Optional

from recap.core.exceptions import ValidationException

# 扩展名到媒体类型的映射(转录请求使用)
MEDIA_TYPES = {
    ".wav": "audio/wav",
    ".mp3": "audio/mpeg",
    ".mpeg": "audio/mpeg",
    ".m4a": "audio/mp4",
    ".webm": "audio/webm",
}

DEFAULT_MEDIA_TYPE = "audio/mpeg"


def validate_audio_upload(
    filename: Optional[str],
    content_type: Optional[str],
    allowed_types: Iterable[str]
) -> None:
    """
    验证上传的音频文件

    媒体类型和扩展名都必须包含一个允许的类型关键字
    (例如 audio/x-m4a + .m4a)。

    Args:
        filename: 原始文件名
        content_type: 上传时声明的媒体类型
        allowed_types: 允许的类型关键字，如 ["wav", "mp3"]

    Raises:
        ValidationException: 不是允许的音频文件
    """
    if not filename:
        raise ValidationException("No audio file provided")

    allowed = [t.lower() for t in allowed_types]
    media_type = (content_type or "").lower()
    extension = Path(filename).suffix.lower()

    media_ok = any(t in media_type for t in allowed)
    extension_ok = any(t in extension for t in allowed)

    if not (media_ok and extension_ok):
        raise ValidationException("Only audio files are allowed")


def media_type_for(filename: str) -> str:
    """根据文件扩展名推断媒体类型"""
    return MEDIA_TYPES.get(Path(filename).suffix.lower(), DEFAULT_MEDIA_TYPE)


def format_timestamp(seconds: int) -> str:
    """把秒数格式化为 m:ss"""
    seconds = max(0, int(seconds))
    return f"{seconds // 60}:{seconds % 60:02d}"
