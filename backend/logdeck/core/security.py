"""
密码哈希与常量时间比较
"""

import hmac

from passlib.context import CryptContext

# pbkdf2_sha256 为默认方案，同时兼容已有的 bcrypt 哈希
pwd_context = CryptContext(schemes=["pbkdf2_sha256", "bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    """对密码做加盐哈希"""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    校验明文密码与哈希是否匹配
    哈希格式无法识别时视为不匹配
    """
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        return False


def constant_time_equals(provided: str, expected: str) -> bool:
    """
    常量时间比较两个字符串
    先比较长度，避免逐字节比较提前退出泄露时序
    """
    provided_bytes = provided.encode("utf-8")
    expected_bytes = expected.encode("utf-8")
    if len(provided_bytes) != len(expected_bytes):
        return False
    return hmac.compare_digest(provided_bytes, expected_bytes)
