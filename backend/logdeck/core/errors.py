"""
错误分类与统一错误响应
所有错误以 {"error": "..."} 形式返回，不泄露堆栈
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, OperationalError, ProgrammingError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

TABLES_NOT_INITIALIZED = "数据库表未初始化，请先运行 init_db"


def is_missing_table(exc: BaseException) -> bool:
    """判断是否为数据表不存在（SQLite: no such table / 其他库: does not exist）"""
    if not isinstance(exc, (OperationalError, ProgrammingError)):
        return False
    message = str(exc.orig if exc.orig is not None else exc).lower()
    return "no such table" in message or (
        "relation" in message and "does not exist" in message
    )


def is_foreign_key_violation(exc: BaseException) -> bool:
    """判断是否为外键约束冲突"""
    if not isinstance(exc, IntegrityError):
        return False
    return "foreign key" in str(exc.orig if exc.orig is not None else exc).lower()


def _format_validation_errors(exc: RequestValidationError) -> str:
    """把 pydantic 校验错误压成一行可读消息"""
    parts = []
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
        msg = err.get("msg", "参数无效")
        # field_validator 抛出的 ValueError 会带 "Value error, " 前缀
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        parts.append(f"{'.'.join(loc)}: {msg}" if loc else msg)
    return "; ".join(parts) or "请求参数无效"


def register_exception_handlers(app: FastAPI) -> None:
    """注册统一异常处理器"""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        message = _format_validation_errors(exc)
        logger.info(f"请求校验失败: {request.method} {request.url.path} - {message}")
        return JSONResponse(status_code=400, content={"error": message})

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"未处理的异常: {request.method} {request.url.path}")
        return JSONResponse(status_code=500, content={"error": "服务器内部错误"})
