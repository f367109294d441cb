"""
文件处理工具函数
"""

import os
import uuid
import aiofiles
from pathlib import Path
from datetime import datetime

from fastapi import UploadFile

from recap.core.exceptions import FileTooLargeException, StorageException
from recap.core.logging import storage_logger

# 上传时每次读取的块大小
CHUNK_SIZE = 1024 * 1024


def generate_unique_filename(original_filename: str) -> str:
    """
    生成唯一文件名

    Args:
        original_filename: 原始文件名

    Returns:
        str: 唯一文件名(时间戳 + 随机后缀 + 原始扩展名)
    """
    file_extension = Path(original_filename).suffix.lower()
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    unique_id = uuid.uuid4().hex[:8]

    return f"{timestamp}_{unique_id}{file_extension}"


class AudioStorage:
    """
    音频文件存储

    录音只通过文件名关联音频文件，所有路径都相对于 base_dir 解析。
    """

    def __init__(self, base_dir: str, max_file_size: int):
        self.base_dir = Path(base_dir)
        self.max_file_size = max_file_size

    def path_for(self, filename: str) -> Path:
        """解析文件名对应的存储路径，拒绝越出存储目录的文件名"""
        path = self.base_dir / filename
        if Path(filename).name != filename:
            raise StorageException(f"Invalid stored filename: {filename}")
        return path

    async def save_upload(self, upload: UploadFile) -> str:
        """
        分块保存上传文件

        Args:
            upload: 上传的文件

        Returns:
            str: 生成的唯一文件名

        Raises:
            FileTooLargeException: 超过最大文件大小(已写入的部分会被删除)
        """
        self.base_dir.mkdir(parents=True, exist_ok=True)
        filename = generate_unique_filename(upload.filename or "audio")
        file_path = self.path_for(filename)

        size = 0
        try:
            async with aiofiles.open(file_path, "wb") as f:
                while True:
                    chunk = await upload.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    size += len(chunk)
                    if size > self.max_file_size:
                        raise FileTooLargeException(self.max_file_size)
                    await f.write(chunk)
        except FileTooLargeException:
            self._remove_quietly(file_path)
            storage_logger.warning(f"Rejected upload {upload.filename}: exceeds {self.max_file_size} bytes")
            raise
        except OSError as e:
            self._remove_quietly(file_path)
            raise StorageException(f"Failed to store audio file: {e}") from e

        storage_logger.info(f"Stored upload {upload.filename} as {filename} ({size} bytes)")
        return filename

    async def read(self, filename: str) -> bytes:
        """读取音频文件内容"""
        file_path = self.path_for(filename)
        try:
            async with aiofiles.open(file_path, "rb") as f:
                return await f.read()
        except FileNotFoundError as e:
            raise StorageException(f"Audio file not found: {filename}") from e

    async def delete(self, filename: str) -> bool:
        """删除音频文件，文件不存在时返回False"""
        file_path = self.path_for(filename)
        if not file_path.exists():
            return False
        try:
            os.remove(file_path)
        except OSError as e:
            raise StorageException(f"Failed to delete audio file {filename}: {e}") from e
        storage_logger.info(f"Deleted audio file {filename}")
        return True

    @staticmethod
    def _remove_quietly(file_path: Path) -> bool:
        try:
            file_path.unlink(missing_ok=True)
            return True
        except OSError as e:
            storage_logger.error(f"Failed to remove partial file {file_path}: {e}")
            return False
