# 凭据校验与日志加密测试

import base64

import pytest
from fastapi import HTTPException

from logdeck.config import settings
from logdeck.core.auth import _extract_basic_password, check_api_key, check_basic_password
from logdeck.core.crypto import ENCRYPTED_PREFIX, LogCipher, get_cipher
from logdeck.core.security import constant_time_equals, hash_password, verify_password


def _basic(raw: str) -> str:
    return "Basic " + base64.b64encode(raw.encode()).decode()


class TestConstantTimeEquals:
    def test_equal(self):
        assert constant_time_equals("abc", "abc")

    def test_different_length(self):
        assert not constant_time_equals("abc", "abcd")

    def test_same_length_mismatch(self):
        assert not constant_time_equals("abc", "abd")


class TestPasswordHash:
    def test_hash_is_salted(self):
        assert hash_password("pw") != hash_password("pw")

    def test_verify(self):
        hashed = hash_password("pw")
        assert verify_password("pw", hashed)
        assert not verify_password("other", hashed)

    def test_unrecognised_hash(self):
        assert not verify_password("pw", "plaintext-not-a-hash")


class TestApiKey:
    def test_valid(self, monkeypatch):
        monkeypatch.setattr(settings, "API_KEY", "k" * 32)
        check_api_key("k" * 32)

    @pytest.mark.parametrize("provided", [None, "", "wrong", "k" * 31])
    def test_rejected(self, monkeypatch, provided):
        monkeypatch.setattr(settings, "API_KEY", "k" * 32)
        with pytest.raises(HTTPException) as exc_info:
            check_api_key(provided)
        assert exc_info.value.status_code == 401


class TestBasicAuth:
    def test_extract_password(self):
        assert _extract_basic_password(_basic("admin:pa:ss")) == "pa:ss"

    @pytest.mark.parametrize("header", [
        None,
        "",
        "Bearer abc",
        "Basic",
        "Basic %%%",
        _basic("no-colon"),
    ])
    def test_extract_malformed(self, header):
        assert _extract_basic_password(header) is None

    def test_check(self, monkeypatch):
        monkeypatch.setattr(settings, "WEB_PASSWORD", hash_password("hunter2"))
        check_basic_password(_basic("me:hunter2"))
        with pytest.raises(HTTPException) as exc_info:
            check_basic_password(_basic("me:hunter3"))
        assert exc_info.value.status_code == 401
        assert "WWW-Authenticate" in exc_info.value.headers


class TestLogCipher:
    def test_round_trip(self):
        cipher = LogCipher("secret")
        for message in ["disk full", "", "ünïcødé ✓ 日志", "x" * 10_000]:
            token = cipher.encrypt(message)
            assert token.startswith(ENCRYPTED_PREFIX)
            assert cipher.decrypt(token) == message

    def test_random_nonce(self):
        cipher = LogCipher("secret")
        assert cipher.encrypt("same") != cipher.encrypt("same")

    def test_plaintext_passthrough(self):
        assert LogCipher("secret").decrypt("written before encryption") == "written before encryption"

    def test_disabled_does_not_encrypt(self):
        cipher = LogCipher("secret", enabled=False)
        assert cipher.encrypt("hello") == "hello"

    def test_disabled_still_decrypts_old_rows(self):
        token = LogCipher("secret").encrypt("hello")
        assert LogCipher("secret", enabled=False).decrypt(token) == "hello"

    def test_wrong_key_returns_stored_value(self):
        token = LogCipher("secret").encrypt("hello")
        assert LogCipher("another").decrypt(token) == token

    def test_get_cipher_follows_settings(self, monkeypatch):
        monkeypatch.setattr(settings, "LOG_ENCRYPTION_ENABLED", False)
        assert not get_cipher().enabled
        monkeypatch.setattr(settings, "LOG_ENCRYPTION_ENABLED", True)
        monkeypatch.setattr(settings, "AES_SECRET", "rotated")
        cipher = get_cipher()
        assert cipher.enabled
        assert cipher.secret == "rotated"
