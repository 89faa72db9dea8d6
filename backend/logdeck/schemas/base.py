"""
Pydantic 模型公共配置
对外 JSON 字段使用 camelCase，请求同时接受 camelCase 与 snake_case
"""

from datetime import datetime, timezone
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def _as_utc(value: datetime) -> datetime:
    # 数据库保存 naive UTC，输出时补上时区
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# 序列化为带时区的 UTC 时间（如 2024-01-01T08:00:00Z）
UtcDatetime = Annotated[datetime, AfterValidator(_as_utc)]


class CamelModel(BaseModel):
    """camelCase 序列化基类"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )
