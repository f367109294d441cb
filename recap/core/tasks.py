"""
后台任务管理器

负责持有所有分离执行的协程任务(录音处理流水线、摘要扇出)，
并把任务异常统一写入日志。
"""

import asyncio
from datetime import datetime
from typing import Any, Coroutine, Dict, Set

from recap.core.logging import get_logger

task_logger = get_logger("tasks")


class BackgroundTaskManager:
    """后台任务管理器"""

    def __init__(self):
        self.tasks: Set[asyncio.Task] = set()
        self.started_at: Dict[asyncio.Task, datetime] = {}
        self.running = False
        self.stats: Dict[str, int] = {
            "spawned": 0,
            "completed": 0,
            "failed": 0,
            "cancelled": 0
        }

    async def start(self):
        """启动任务管理器"""
        self.running = True
        task_logger.info("Background task manager started")

    async def stop(self):
        """停止任务管理器，取消仍在运行的任务"""
        self.running = False
        pending = [task for task in self.tasks if not task.done()]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
            task_logger.info(f"Cancelled {len(pending)} pending background tasks")
        task_logger.info("Background task manager stopped")

    def spawn(self, name: str, coro: Coroutine[Any, Any, Any]) -> asyncio.Task:
        """
        启动一个分离任务

        Args:
            name: 任务名称，用于日志
            coro: 要执行的协程

        Returns:
            asyncio.Task: 任务对象(调用方无需等待)
        """
        task = asyncio.create_task(coro, name=name)
        self.started_at[task] = datetime.now()
        self.tasks.add(task)
        self.stats["spawned"] += 1
        task.add_done_callback(self._on_task_done)
        task_logger.debug(f"Task '{name}' spawned")
        return task

    def _on_task_done(self, task: asyncio.Task):
        """任务结束回调 - 任务错误的唯一出口"""
        self.tasks.discard(task)
        started_at = self.started_at.pop(task, None)
        name = task.get_name()

        if task.cancelled():
            self.stats["cancelled"] += 1
            task_logger.warning(f"Task '{name}' cancelled")
            return

        exc = task.exception()
        if exc is not None:
            self.stats["failed"] += 1
            task_logger.opt(exception=exc).error(f"Task '{name}' failed: {exc}")
            return

        self.stats["completed"] += 1
        elapsed = (datetime.now() - started_at).total_seconds() if started_at else 0.0
        task_logger.debug(f"Task '{name}' completed in {elapsed:.2f}s")

    @property
    def pending_count(self) -> int:
        return sum(1 for task in self.tasks if not task.done())

    async def wait_idle(self):
        """等待所有任务(包括运行中新派生的任务)结束"""
        while True:
            pending = [task for task in self.tasks if not task.done()]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)
