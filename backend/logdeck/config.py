"""
应用配置管理
使用 pydantic-settings 从环境变量和 .env 文件加载配置
"""

import os
from typing import Literal, Optional
from pydantic_settings import BaseSettings

# 认证策略：none 不校验 / api_key 校验 X-API-Key / basic 校验 Basic 密码
AuthStrategy = Literal["none", "api_key", "basic"]

# 未配置 AES_SECRET 时使用的默认密钥（不安全，仅用于本地开发）
DEFAULT_AES_SECRET = "logdeck-insecure-default-aes-secret"

_BACKEND_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


class Settings(BaseSettings):
    """全局配置"""

    # ========== 基础配置 ==========
    APP_NAME: str = "LogDeck"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = True
    HOST: str = "0.0.0.0"
    PORT: int = 18900

    # ========== 数据库配置 ==========
    # SQLite 数据库文件路径
    DATABASE_PATH: str = os.path.join(_BACKEND_DIR, "data", "logdeck.db")

    @property
    def DATABASE_URL(self) -> str:
        """异步 SQLite 连接字符串"""
        return f"sqlite+aiosqlite:///{self.DATABASE_PATH}"

    # ========== 认证配置 ==========
    # 日志写入共享密钥（未配置时拒绝所有请求）
    API_KEY: Optional[str] = None
    # 页面列表 Basic 认证密码哈希（passlib 格式）
    WEB_PASSWORD: Optional[str] = None
    # 各受保护接口使用的认证策略
    LOG_INGEST_AUTH: AuthStrategy = "api_key"
    PAGE_LIST_AUTH: AuthStrategy = "none"

    # ========== 日志加密配置 ==========
    LOG_ENCRYPTION_ENABLED: bool = False
    AES_SECRET: str = DEFAULT_AES_SECRET

    # ========== 默认归属用户 ==========
    DEFAULT_OWNER_EMAIL: str = "test@example.com"
    DEFAULT_OWNER_NAME: str = "Test User"

    # ========== 日志保留策略 ==========
    LOG_RETENTION_DAYS: int = 0  # 0 表示永久保留
    LOG_RETENTION_INTERVAL_MINUTES: int = 60
    SCHEDULER_TIMEZONE: str = "UTC"

    # ========== CORS 配置 ==========
    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    model_config = {
        "env_file": os.path.join(_BACKEND_DIR, ".env"),
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


# 全局配置单例
settings = Settings()
