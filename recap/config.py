"""
应用配置管理
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import Optional, List
from pathlib import Path


class Settings(BaseSettings):
    """应用配置"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # 基本配置
    app_name: str = "Recap API"
    app_version: str = "1.0.0"
    debug: bool = Field(default=False, description="调试模式")

    # 服务器配置
    host: str = Field(default="0.0.0.0", description="服务器地址")
    port: int = Field(default=5000, description="服务器端口")

    # AI服务配置
    openai_api_key: Optional[str] = Field(default=None, description="OpenAI API密钥")
    openai_base_url: Optional[str] = Field(default=None, description="OpenAI API基础URL")
    openai_model: str = Field(default="gpt-4o", description="默认对话模型")
    whisper_model: str = Field(default="whisper-1", description="默认Whisper模型")
    ai_timeout: int = Field(default=120, description="AI请求超时(秒)")

    # 代理配置
    http_proxy: Optional[str] = Field(default=None, description="HTTP代理地址")
    https_proxy: Optional[str] = Field(default=None, description="HTTPS代理地址")
    proxy_auth: Optional[str] = Field(default=None, description="代理认证信息 (username:password)")

    # 文件存储配置
    upload_dir: str = Field(default="uploads", description="上传文件目录")
    max_file_size: int = Field(default=500 * 1024 * 1024, description="最大文件大小(500MB)")
    allowed_audio_types: List[str] = Field(
        default=["wav", "mp3", "m4a", "mpeg", "webm"],
        description="允许的音频类型关键字"
    )

    # CORS配置
    allowed_origins: List[str] = Field(
        default=["http://localhost:5000", "http://127.0.0.1:5000"],
        description="允许的跨域源"
    )

    # 日志配置
    log_dir: str = Field(default="logs", description="日志目录")
    log_to_file: bool = Field(default=True, description="是否写入日志文件")

    @property
    def ai_config(self):
        """获取AI服务配置"""
        # 动态导入以避免循环依赖
        from recap.services.ai.base import AIProvider, AIConfig

        shared = {
            "api_key": self.openai_api_key,
            "base_url": self.openai_base_url,
            "timeout": self.ai_timeout,
            "http_proxy": self.http_proxy,
            "https_proxy": self.https_proxy,
            "proxy_auth": self.proxy_auth
        }
        return AIConfig(
            stt_provider=AIProvider.OPENAI,
            llm_provider=AIProvider.OPENAI,
            stt_config={**shared, "model": self.whisper_model},
            llm_config={**shared, "model": self.openai_model},
            default_stt_model=self.whisper_model,
            default_llm_model=self.openai_model
        )

    def ensure_directories(self):
        """确保必要的目录存在"""
        Path(self.upload_dir).mkdir(parents=True, exist_ok=True)
        if self.log_to_file:
            Path(self.log_dir).mkdir(parents=True, exist_ok=True)


# 创建全局配置实例
settings = Settings()
