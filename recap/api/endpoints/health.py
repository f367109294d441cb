"""
健康检查端点
"""

from fastapi import APIRouter

from recap.schemas import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse, summary="健康检查")
async def health_check() -> HealthResponse:
    return HealthResponse(status="ok")
