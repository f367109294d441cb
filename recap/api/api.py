"""
API路由汇总
"""

from fastapi import APIRouter

from recap.api.endpoints import health, recordings

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(recordings.router, prefix="/recordings", tags=["recordings"])
