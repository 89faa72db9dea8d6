"""
认证依赖
同一个依赖工厂按配置为每个受保护接口选择认证策略：
  - none:    不校验
  - api_key: 校验 X-API-Key 请求头（常量时间比较）
  - basic:   校验 Basic 认证中的密码（passlib 加盐哈希）
所有失败都返回 401（失败即拒绝）
"""

import base64
import binascii
import logging
from typing import Optional

from fastapi import HTTPException, Request

from logdeck.config import settings
from logdeck.core.security import constant_time_equals, verify_password

logger = logging.getLogger(__name__)

API_KEY_HEADER = "X-API-Key"


def _unauthorized(detail: str, basic: bool = False) -> HTTPException:
    headers = {"WWW-Authenticate": 'Basic realm="logdeck"'} if basic else None
    return HTTPException(status_code=401, detail=detail, headers=headers)


def check_api_key(provided: Optional[str]) -> None:
    """校验 API Key，未配置密钥时一律拒绝"""
    expected = settings.API_KEY
    if not provided or not expected:
        raise _unauthorized("缺少或无效的 API Key")
    if not constant_time_equals(provided, expected):
        raise _unauthorized("缺少或无效的 API Key")


def _extract_basic_password(authorization: Optional[str]) -> Optional[str]:
    """解析 Basic 认证头，返回密码部分；格式不对返回 None"""
    if not authorization:
        return None
    scheme, _, encoded = authorization.partition(" ")
    if scheme.lower() != "basic" or not encoded:
        return None
    try:
        decoded = base64.b64decode(encoded.strip(), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None
    _, sep, password = decoded.partition(":")
    if not sep:
        return None
    return password


def check_basic_password(authorization: Optional[str]) -> None:
    """校验 Basic 认证密码，未配置密码哈希时一律拒绝"""
    password = _extract_basic_password(authorization)
    if password is None:
        raise _unauthorized("需要 Basic 认证", basic=True)
    if not settings.WEB_PASSWORD or not verify_password(password, settings.WEB_PASSWORD):
        raise _unauthorized("密码错误", basic=True)


def require_auth(strategy_setting: str):
    """
    创建认证依赖

    Args:
        strategy_setting: 配置项名称（如 "LOG_INGEST_AUTH"），
            每次请求时读取，修改配置无需重建路由
    """

    async def _verify(request: Request) -> None:
        strategy = getattr(settings, strategy_setting)
        if strategy == "none":
            return
        try:
            if strategy == "api_key":
                check_api_key(request.headers.get(API_KEY_HEADER))
            elif strategy == "basic":
                check_basic_password(request.headers.get("Authorization"))
            else:
                logger.error(f"未知的认证策略 {strategy_setting}={strategy!r}，拒绝请求")
                raise _unauthorized("认证配置无效")
        except HTTPException:
            logger.warning(
                f"认证失败: {request.method} {request.url.path} (strategy={strategy})"
            )
            raise

    return _verify
