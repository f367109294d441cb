"""
存储层
"""

from .store import InMemoryStore

__all__ = ["InMemoryStore"]
