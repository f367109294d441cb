"""
命令行接口
"""

from typing import Optional

import click
import uvicorn

from recap import __version__
from recap.config import settings
from recap.core.logging import setup_logging, api_logger


@click.group()
@click.version_option(version=__version__)
def main():
    """Recap - 会话录音转录与摘要服务"""
    pass


@main.command()
@click.option('--host', default=None, help='服务器地址')
@click.option('--port', default=None, type=int, help='服务器端口')
@click.option('--reload', is_flag=True, help='开启自动重载')
@click.option('--log-level', default='info',
              type=click.Choice(['debug', 'info', 'warning', 'error', 'critical']),
              help='日志级别')
def serve(host: Optional[str], port: Optional[int], reload: bool, log_level: str):
    """启动API服务器"""
    host = host or settings.host
    port = port or settings.port

    setup_logging(level=log_level.upper())
    api_logger.info(f"Starting server on {host}:{port}")

    # 存储在进程内存中，只能单进程运行
    uvicorn.run(
        "recap.main:build_default_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level=log_level,
        access_log=True
    )


@main.command()
def config():
    """显示当前配置"""
    click.echo(f"App: {settings.app_name} {settings.app_version}")
    click.echo(f"Listen: {settings.host}:{settings.port}")
    click.echo(f"Upload dir: {settings.upload_dir}")
    click.echo(f"Max file size: {settings.max_file_size // (1024 * 1024)} MB")
    click.echo(f"LLM model: {settings.openai_model}")
    click.echo(f"STT model: {settings.whisper_model}")
    click.echo(f"OpenAI API key: {'configured' if settings.openai_api_key else 'missing'}")
    click.echo(f"Proxy: {settings.https_proxy or settings.http_proxy or 'none'}")


if __name__ == "__main__":
    main()
