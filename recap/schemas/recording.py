"""
录音相关的Pydantic模式
"""

from pydantic import BaseModel, Field
from typing import Optional


class ProcessingStatus(BaseModel):
    """处理进度响应模式"""
    progress: int = Field(..., description="进度百分比", ge=0, le=100)
    status: str = Field(..., description="进度说明")


class ChatRequest(BaseModel):
    """问答请求模式"""
    message: Optional[str] = Field(None, description="关于转录内容的问题")

    model_config = {
        "json_schema_extra": {
            "example": {"message": "What action items were agreed on?"}
        }
    }


class ChatResponse(BaseModel):
    """问答响应模式"""
    response: str = Field(..., description="AI回答")


class MessageResponse(BaseModel):
    """通用消息响应模式"""
    message: str = Field(..., description="提示信息")


class HealthResponse(BaseModel):
    """健康检查响应模式"""
    status: str = Field(default="ok", description="服务状态")
