"""
数据库连接管理
使用 aiosqlite + SQLAlchemy async 引擎
"""

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from logdeck.config import settings

# 创建异步引擎（关闭 SQL echo，避免日志刷屏）
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=False,
    # SQLite 特有参数
    connect_args={"check_same_thread": False},
)


@event.listens_for(engine.sync_engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """SQLite 默认不校验外键，每个连接都需要显式开启"""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


# 创建异步会话工厂
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db() -> AsyncSession:
    """
    FastAPI 依赖注入：获取数据库会话
    使用 async with 确保会话正确关闭
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def init_db():
    """
    初始化数据库：创建所有表
    在应用启动时调用
    """
    import logdeck.models  # noqa: F401
    from logdeck.models.base import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_db():
    """删除所有表（测试与重建数据库时使用）"""
    import logdeck.models  # noqa: F401
    from logdeck.models.base import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def close_db():
    """
    关闭数据库连接
    在应用关闭时调用
    """
    await engine.dispose()
