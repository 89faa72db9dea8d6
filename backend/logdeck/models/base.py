"""
SQLAlchemy ORM 基类
所有模型都继承自此 Base
"""

from datetime import datetime, timezone

from sqlalchemy.orm import DeclarativeBase


def utcnow() -> datetime:
    """返回当前 UTC 时间（naive，SQLite 不保存时区）"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Base(DeclarativeBase):
    """声明式基类"""
    pass
