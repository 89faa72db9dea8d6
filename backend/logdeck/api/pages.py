"""
页面相关 API 路由
包含页面的 CRUD 操作
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select, delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from logdeck.core.auth import require_auth
from logdeck.core.errors import (
    TABLES_NOT_INITIALIZED,
    is_foreign_key_violation,
    is_missing_table,
)
from logdeck.core.owner import get_default_owner_id
from logdeck.database.connection import get_db
from logdeck.models.page import Page
from logdeck.schemas.page import PageWriteRequest, PageResponse, SuccessResponse

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/pages", tags=["页面管理"])


async def _get_page_or_404(db: AsyncSession, page_id: int) -> Page:
    """按 ID 获取页面；不存在（包括页面表不存在）时返回 404"""
    try:
        page = await db.get(Page, page_id)
    except SQLAlchemyError as e:
        if is_missing_table(e):
            await db.rollback()
            raise HTTPException(status_code=404, detail="页面不存在（数据库表未初始化）")
        raise
    if not page:
        raise HTTPException(status_code=404, detail="页面不存在")
    return page


@router.get(
    "",
    response_model=list[PageResponse],
    summary="获取页面列表",
    dependencies=[Depends(require_auth("PAGE_LIST_AUTH"))],
)
async def list_pages(
    db: AsyncSession = Depends(get_db),
):
    """获取所有页面，按创建时间倒序；页面表不存在时返回空列表"""
    try:
        result = await db.execute(
            select(Page).order_by(Page.created_at.desc(), Page.id.desc())
        )
        return result.scalars().all()
    except SQLAlchemyError as e:
        await db.rollback()
        if is_missing_table(e):
            logger.warning("页面表不存在，返回空列表")
            return []
        logger.error(f"获取页面列表失败: {e}")
        raise HTTPException(status_code=500, detail="获取页面列表失败")


@router.post("", response_model=PageResponse, status_code=201, summary="创建页面")
async def create_page(
    request: PageWriteRequest,
    db: AsyncSession = Depends(get_db),
):
    """创建新页面，归属默认用户"""
    try:
        user_id = await get_default_owner_id(db)
        page = Page(title=request.title, emoji=request.emoji, user_id=user_id)
        db.add(page)
        await db.commit()
        await db.refresh(page)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"创建页面失败: {e}")
        if is_missing_table(e):
            raise HTTPException(status_code=500, detail=TABLES_NOT_INITIALIZED)
        if is_foreign_key_violation(e):
            raise HTTPException(status_code=400, detail="关联的用户不存在")
        raise HTTPException(status_code=500, detail="创建页面失败")

    logger.info(f"创建页面: id={page.id}, title={page.title}")
    return page


# 必须注册在 /{page_id} 之前
@router.delete("/delete-all", response_model=SuccessResponse, summary="删除全部页面")
async def delete_all_pages(
    db: AsyncSession = Depends(get_db),
):
    """删除默认用户的全部页面（其日志随页面级联删除）；页面表不存在视为已删除"""
    try:
        user_id = await get_default_owner_id(db)
        result = await db.execute(delete(Page).where(Page.user_id == user_id))
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        if is_missing_table(e):
            logger.warning("页面表不存在，视为已全部删除")
            return SuccessResponse()
        logger.error(f"删除全部页面失败: {e}")
        raise HTTPException(status_code=500, detail="删除全部页面失败")

    logger.info(f"删除全部页面: user_id={user_id}, count={result.rowcount}")
    return SuccessResponse()


@router.get("/{page_id}", response_model=PageResponse, summary="获取页面详情")
async def get_page(
    page_id: int,
    db: AsyncSession = Depends(get_db),
):
    """根据 ID 获取页面详情"""
    return await _get_page_or_404(db, page_id)


@router.put("/{page_id}", response_model=PageResponse, summary="更新页面")
async def update_page(
    page_id: int,
    request: PageWriteRequest,
    db: AsyncSession = Depends(get_db),
):
    """更新页面标题和 emoji"""
    page = await _get_page_or_404(db, page_id)

    page.title = request.title
    page.emoji = request.emoji
    try:
        await db.commit()
        await db.refresh(page)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"更新页面失败: {e}")
        raise HTTPException(status_code=500, detail="更新页面失败")

    logger.info(f"更新页面: id={page.id}")
    return page


@router.delete("/{page_id}", response_model=SuccessResponse, summary="删除页面")
async def delete_page(
    page_id: int,
    db: AsyncSession = Depends(get_db),
):
    """删除页面，其日志随之级联删除"""
    page = await _get_page_or_404(db, page_id)

    try:
        await db.delete(page)
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"删除页面失败: {e}")
        raise HTTPException(status_code=500, detail="删除页面失败")

    logger.info(f"删除页面: id={page_id}")
    return SuccessResponse()
