"""
FastAPI 应用主入口
负责应用初始化、CORS 配置、异常处理、启动/关闭生命周期管理
"""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from logdeck.config import settings
from logdeck.database.connection import init_db, close_db
from logdeck.api.router import api_router
from logdeck.core.crypto import get_cipher
from logdeck.core.errors import register_exception_handlers
from logdeck.core.retention import retention_scheduler

# ========== 日志配置 ==========
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)

# 静默高频噪音日志
logging.getLogger("aiosqlite").setLevel(logging.WARNING)
logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
logging.getLogger("apscheduler.scheduler").setLevel(logging.WARNING)
logging.getLogger("apscheduler.executors.default").setLevel(logging.WARNING)


# ========== 生命周期管理 ==========
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    应用生命周期管理
    启动时：初始化数据库 -> 检查加密配置 -> 启动日志清理调度器（容错降级）
    关闭时：关闭调度器 -> 关闭数据库连接（每步独立 try/except）
    """
    # ---- 启动 ----
    logger.info(f"正在启动 {settings.APP_NAME} v{settings.APP_VERSION}...")

    # 确保数据目录存在
    os.makedirs(os.path.dirname(settings.DATABASE_PATH), exist_ok=True)

    # 1. 初始化数据库（必须成功）
    await init_db()
    logger.info("数据库初始化完成")

    # 2. 加密配置检查（默认密钥会在此处告警）
    if get_cipher().enabled:
        logger.info("日志消息加密已开启")

    # 3. 启动日志清理调度器（失败不影响应用启动）
    try:
        retention_scheduler.start()
    except Exception as e:
        logger.error(f"日志清理调度器启动失败（过期日志不会自动清理）: {e}")

    logger.info(f"应用启动完成，监听 http://{settings.HOST}:{settings.PORT}")
    logger.info(f"API 文档: http://127.0.0.1:{settings.PORT}/docs")

    yield

    # ---- 关闭（每步独立容错） ----
    logger.info("正在关闭应用...")

    try:
        retention_scheduler.shutdown()
    except Exception as e:
        logger.error(f"关闭日志清理调度器失败: {e}")

    try:
        await close_db()
        logger.info("数据库连接已关闭")
    except Exception as e:
        logger.error(f"关闭数据库连接失败: {e}")

    logger.info("应用已关闭")


# ========== 创建 FastAPI 应用 ==========
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="个人仪表盘后端 - 自定义页面、日志查看与日志分析",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# ========== CORS 中间件 ==========
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ========== 异常处理 ==========
register_exception_handlers(app)

# ========== 注册路由 ==========
app.include_router(api_router)


# ========== 根路径 ==========
@app.get("/", tags=["系统"])
async def root():
    """系统信息"""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running",
        "docs": "/docs",
    }


@app.get("/health", tags=["系统"])
async def health_check():
    """健康检查"""
    return {"status": "ok"}


# ========== 直接运行入口 ==========
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "logdeck.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )
