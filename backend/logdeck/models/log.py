"""
日志模型
挂在页面下、带严重级别的日志消息
"""

import enum
from datetime import datetime
from typing import Optional
from sqlalchemy import Integer, String, Text, DateTime, JSON, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from logdeck.models.base import Base, utcnow


class Severity(str, enum.Enum):
    """日志级别（封闭枚举，仅做成员判断，没有大小顺序）"""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    DEBUG = "debug"
    CRITICAL = "critical"


SEVERITIES = [s.value for s in Severity]


class Log(Base):
    """日志表"""
    __tablename__ = "logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow, index=True
    )
    # 日志级别：info / warning / error / debug / critical
    severity: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    # 日志消息（开启加密时保存密文）
    message: Mapped[str] = mapped_column(Text, nullable=False)
    # 额外详情 JSON
    additional_data: Mapped[Optional[dict]] = mapped_column(
        JSON, nullable=True, default=None
    )
    # 删除页面时级联删除其日志
    page_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("pages.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow, onupdate=utcnow
    )

    page = relationship("Page", lazy="selectin")
