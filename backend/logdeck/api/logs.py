"""
日志相关 API 路由
包含日志的创建、查询、删除和导出
"""

import json
import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from logdeck.core.auth import require_auth
from logdeck.core.crypto import LogCipher, get_cipher
from logdeck.core.errors import (
    TABLES_NOT_INITIALIZED,
    is_foreign_key_violation,
    is_missing_table,
)
from logdeck.core.owner import get_default_owner_id
from logdeck.database.connection import get_db
from logdeck.models.base import utcnow
from logdeck.models.log import Log
from logdeck.models.page import Page
from logdeck.schemas.log import LogCreateRequest, LogResponse, LogWithPageResponse
from logdeck.schemas.page import SuccessResponse

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/logs", tags=["日志管理"])


def to_log_response(log: Log, cipher: LogCipher) -> LogWithPageResponse:
    """ORM 日志转响应模型，并还原明文消息"""
    data = LogWithPageResponse.model_validate(log)
    data.message = cipher.decrypt(log.message)
    return data


def _naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """带时区的时间转为 naive UTC，与数据库存储一致"""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None or not value.strip():
        return None
    return value.strip()


def _parse_date(value: Optional[str]) -> Optional[datetime]:
    """解析 ISO 时间；无法解析时忽略该条件"""
    value = _blank_to_none(value)
    if value is None:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        logger.warning(f"忽略无法解析的时间参数: {value}")
        return None


def log_filters(
    page_id: Optional[str] = Query(None, alias="pageId", description="按页面筛选"),
    severity: Optional[str] = Query(None, description="按级别筛选"),
    search: Optional[str] = Query(None, description="搜索消息或额外详情"),
    start_date: Optional[str] = Query(None, alias="startDate", description="起始时间"),
    end_date: Optional[str] = Query(None, alias="endDate", description="截止时间"),
) -> Optional[dict]:
    """
    列表与导出共用的筛选参数
    空字符串视为未传；pageId 不是整数时返回 None，表示没有日志可以匹配
    """
    page_id = _blank_to_none(page_id)
    if page_id is not None:
        try:
            page_id = int(page_id)
        except ValueError:
            return None
    return {
        "page_id": page_id,
        "severity": _blank_to_none(severity),
        "search": _blank_to_none(search),
        "start_date": _parse_date(start_date),
        "end_date": _parse_date(end_date),
    }


def _matches_search(item: LogWithPageResponse, term: str) -> bool:
    """消息或额外详情中包含搜索词（不区分大小写）"""
    term = term.lower()
    if term in item.message.lower():
        return True
    if item.additional_data:
        return term in json.dumps(item.additional_data, ensure_ascii=False).lower()
    return False


async def _query_logs(
    db: AsyncSession,
    page_id: Optional[int],
    severity: Optional[str],
    search: Optional[str],
    start_date: Optional[datetime],
    end_date: Optional[datetime],
) -> list[LogWithPageResponse]:
    """
    按条件查询日志，按 timestamp 倒序
    搜索在解密之后进行，加密开启时同样可用
    """
    stmt = select(Log).order_by(Log.timestamp.desc(), Log.id.desc())
    if page_id is not None:
        stmt = stmt.where(Log.page_id == page_id)
    if severity:
        stmt = stmt.where(Log.severity == severity)
    if start_date is not None:
        stmt = stmt.where(Log.timestamp >= _naive_utc(start_date))
    if end_date is not None:
        stmt = stmt.where(Log.timestamp <= _naive_utc(end_date))

    result = await db.execute(stmt)
    cipher = get_cipher()
    items = [to_log_response(log, cipher) for log in result.scalars().all()]
    if search:
        items = [item for item in items if _matches_search(item, search)]
    return items


async def _list_or_empty(db: AsyncSession, **filters) -> list[LogWithPageResponse]:
    """查询日志；日志表不存在时返回空列表"""
    try:
        return await _query_logs(db, **filters)
    except SQLAlchemyError as e:
        await db.rollback()
        if is_missing_table(e):
            logger.warning("日志表不存在，返回空列表")
            return []
        logger.error(f"获取日志列表失败: {e}")
        raise HTTPException(status_code=500, detail="获取日志列表失败")


@router.get("", response_model=list[LogWithPageResponse], summary="获取日志列表")
async def list_logs(
    filters: Optional[dict] = Depends(log_filters),
    db: AsyncSession = Depends(get_db),
):
    """获取日志列表，每条日志附带所属页面"""
    if filters is None:
        return []
    return await _list_or_empty(db, **filters)


@router.get("/export", summary="导出日志")
async def export_logs(
    filters: Optional[dict] = Depends(log_filters),
    db: AsyncSession = Depends(get_db),
):
    """按与列表相同的筛选条件导出日志为 JSON 文件"""
    items = await _list_or_empty(db, **filters) if filters is not None else []
    filename = f"logs-export-{utcnow().strftime('%Y-%m-%d')}.json"
    logger.info(f"导出日志: count={len(items)}")
    return JSONResponse(
        content=jsonable_encoder(items, by_alias=True),
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post(
    "",
    response_model=LogResponse,
    status_code=201,
    summary="创建日志",
    dependencies=[Depends(require_auth("LOG_INGEST_AUTH"))],
)
async def create_log(
    request: LogCreateRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    写入一条日志
    先确认页面存在（外键约束兜底），开启加密时消息以密文保存，响应中返回明文
    """
    try:
        user_id = await get_default_owner_id(db)

        page = await db.get(Page, request.page_id)
        if not page:
            raise HTTPException(status_code=400, detail="关联的页面不存在")

        log = Log(
            message=get_cipher().encrypt(request.message),
            severity=request.severity,
            additional_data=request.additional_data,
            page_id=request.page_id,
            user_id=user_id,
        )
        db.add(log)
        await db.commit()
        await db.refresh(log)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"创建日志失败: {e}")
        if is_missing_table(e):
            raise HTTPException(status_code=500, detail=TABLES_NOT_INITIALIZED)
        if is_foreign_key_violation(e):
            raise HTTPException(status_code=400, detail="关联的页面或用户不存在")
        raise HTTPException(status_code=500, detail="创建日志失败")

    logger.info(f"创建日志: id={log.id}, page_id={log.page_id}, severity={log.severity}")
    response = LogResponse.model_validate(log)
    response.message = request.message
    return response


@router.delete("", response_model=SuccessResponse, summary="删除日志")
async def delete_log(
    log_id: Optional[int] = Query(None, alias="id", description="日志 ID"),
    db: AsyncSession = Depends(get_db),
):
    """按 ID 删除日志"""
    if log_id is None:
        raise HTTPException(status_code=400, detail="缺少日志 ID")

    try:
        log = await db.get(Log, log_id)
        if not log:
            raise HTTPException(status_code=404, detail="日志不存在")
        await db.delete(log)
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        if is_missing_table(e):
            raise HTTPException(status_code=404, detail="日志不存在（数据库表未初始化）")
        logger.error(f"删除日志失败: {e}")
        raise HTTPException(status_code=500, detail="删除日志失败")

    logger.info(f"删除日志: id={log_id}")
    return SuccessResponse()
