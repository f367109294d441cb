"""
实体模型基类
"""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def utcnow() -> datetime:
    """当前UTC时间"""
    return datetime.now(timezone.utc)


class EntityModel(BaseModel):
    """实体基础模型 - 对外输出使用camelCase字段名"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    id: int
