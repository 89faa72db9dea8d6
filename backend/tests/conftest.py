# 测试公共夹具
# 导入 logdeck 之前先把数据库指向临时文件

import os
import tempfile

_TMP_DIR = tempfile.mkdtemp(prefix="logdeck-test-")
os.environ["DATABASE_PATH"] = os.path.join(_TMP_DIR, "test.db")
os.environ["API_KEY"] = "test-api-key"
os.environ["LOG_INGEST_AUTH"] = "api_key"
os.environ["PAGE_LIST_AUTH"] = "none"
os.environ["LOG_ENCRYPTION_ENABLED"] = "false"
os.environ["LOG_RETENTION_DAYS"] = "0"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from logdeck.database.connection import async_session_factory, drop_db, init_db  # noqa: E402
from logdeck.main import app  # noqa: E402

API_KEY = "test-api-key"
AUTH_HEADERS = {"X-API-Key": API_KEY}


async def _reset_db():
    await drop_db()
    await init_db()


@pytest.fixture
def client():
    """每个测试使用一个空数据库"""
    with TestClient(app) as c:
        c.portal.call(_reset_db)
        yield c


@pytest.fixture
def run_db(client):
    """在应用事件循环里执行 async def fn(session)，返回其结果"""

    def _run(fn):
        async def _call():
            async with async_session_factory() as session:
                return await fn(session)

        return client.portal.call(_call)

    return _run


@pytest.fixture
def make_page(client):
    def _make(title="Home", emoji="🏠"):
        resp = client.post("/api/pages", json={"title": title, "emoji": emoji})
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _make


@pytest.fixture
def make_log(client):
    def _make(page_id, message="hello", severity="info", **extra):
        body = {"message": message, "severity": severity, "pageId": page_id, **extra}
        resp = client.post("/api/logs", json=body, headers=AUTH_HEADERS)
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _make
