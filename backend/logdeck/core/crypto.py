"""
日志消息加密
AES-256-GCM，密钥由 AES_SECRET 经 SHA-256 派生，每条消息使用随机 nonce。

存储格式: "enc:v1:" + urlsafe_base64(nonce + ciphertext)
不带前缀的值视为开启加密之前写入的明文，原样返回。
"""

import base64
import hashlib
import logging
import os
from typing import Optional

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from logdeck.config import settings, DEFAULT_AES_SECRET

logger = logging.getLogger(__name__)

ENCRYPTED_PREFIX = "enc:v1:"
NONCE_SIZE = 12


class LogCipher:
    """日志消息加解密器"""

    def __init__(self, secret: str, enabled: bool = True):
        self.secret = secret
        self.enabled = enabled
        key = hashlib.sha256(secret.encode("utf-8")).digest()
        self._aesgcm = AESGCM(key)

    def encrypt(self, plaintext: str) -> str:
        """加密消息；未开启加密时原样返回"""
        if not self.enabled:
            return plaintext
        nonce = os.urandom(NONCE_SIZE)
        ciphertext = self._aesgcm.encrypt(nonce, plaintext.encode("utf-8"), None)
        token = base64.urlsafe_b64encode(nonce + ciphertext).decode("ascii")
        return ENCRYPTED_PREFIX + token

    def decrypt(self, stored: str) -> str:
        """
        解密消息
        无论是否开启加密，带前缀的值都会尝试解密，便于关闭加密后读取旧数据。
        密钥不匹配时记录警告并返回原始存储值。
        """
        if not stored.startswith(ENCRYPTED_PREFIX):
            return stored
        try:
            raw = base64.urlsafe_b64decode(stored[len(ENCRYPTED_PREFIX):])
            nonce, ciphertext = raw[:NONCE_SIZE], raw[NONCE_SIZE:]
            return self._aesgcm.decrypt(nonce, ciphertext, None).decode("utf-8")
        except (InvalidTag, ValueError) as e:
            logger.warning(f"日志消息解密失败，返回原始值: {type(e).__name__}")
            return stored


_cipher: Optional[LogCipher] = None


def get_cipher() -> LogCipher:
    """按当前配置返回加解密器（配置变化时重建）"""
    global _cipher
    if (
        _cipher is None
        or _cipher.enabled != settings.LOG_ENCRYPTION_ENABLED
        or _cipher.secret != settings.AES_SECRET
    ):
        if settings.LOG_ENCRYPTION_ENABLED and settings.AES_SECRET == DEFAULT_AES_SECRET:
            logger.warning("AES_SECRET 未配置，日志加密正在使用默认密钥（不安全）")
        _cipher = LogCipher(settings.AES_SECRET, enabled=settings.LOG_ENCRYPTION_ENABLED)
    return _cipher
