"""
工具函数包
"""

from .audio_utils import (
    validate_audio_upload,
    media_type_for,
    format_timestamp
)

from .file_utils import (
    generate_unique_filename,
    AudioStorage
)

__all__ = [
    "validate_audio_upload",
    "media_type_for",
    "format_timestamp",
    "generate_unique_filename",
    "AudioStorage"
]
