"""
用户模型
页面和日志的归属用户
"""

from datetime import datetime
from sqlalchemy import Integer, String, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from logdeck.models.base import Base, utcnow


class User(Base):
    """用户表"""
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    # 邮箱作为自然键，默认归属用户按邮箱查找
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    # passlib 哈希，不保存明文
    password: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="user")
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )
