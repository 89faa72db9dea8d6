# 日志清理、演示数据与系统接口测试

from datetime import timedelta

from sqlalchemy import select

from logdeck.config import settings
from logdeck.core.retention import RetentionScheduler, purge_expired_logs
from logdeck.database.connection import drop_db
from logdeck.database.seed import seed_demo_data, table_counts
from logdeck.models.base import utcnow
from logdeck.models.log import Log


class TestRetention:
    def test_purges_only_expired(self, client, make_page, make_log, run_db):
        page = make_page()
        make_log(page["id"], "fresh")

        async def add_old(session):
            session.add(Log(
                message="stale",
                severity="info",
                page_id=page["id"],
                user_id=page["userId"],
                timestamp=utcnow() - timedelta(days=40),
            ))
            await session.commit()

        run_db(add_old)

        deleted = run_db(lambda session: purge_expired_logs(session, 30))
        assert deleted == 1
        assert [log["message"] for log in client.get("/api/logs").json()] == ["fresh"]

    def test_missing_table(self, client, run_db):
        client.portal.call(drop_db)
        assert run_db(lambda session: purge_expired_logs(session, 30)) == 0

    def test_scheduler_disabled_without_retention(self, monkeypatch):
        monkeypatch.setattr(settings, "LOG_RETENTION_DAYS", 0)
        scheduler = RetentionScheduler()
        scheduler.start()
        assert not scheduler.running


class TestSeed:
    def test_seed_and_counts(self, client, run_db):
        ids = run_db(seed_demo_data)
        assert run_db(table_counts) == {"users": 1, "pages": 1, "logs": 1}

        page = client.get(f"/api/pages/{ids['page_id']}").json()
        assert page["title"] == "Test Page"

        async def message(session):
            return (await session.execute(select(Log.message))).scalar_one()

        assert run_db(message) == "Test log message"

    def test_seed_reuses_owner(self, client, run_db):
        first = run_db(seed_demo_data)
        second = run_db(seed_demo_data)
        assert first["user_id"] == second["user_id"]
        assert run_db(table_counts) == {"users": 1, "pages": 2, "logs": 2}

    def test_counts_without_tables(self, client, run_db):
        client.portal.call(drop_db)
        assert run_db(table_counts) == {"users": None, "pages": None, "logs": None}


class TestSystem:
    def test_root(self, client):
        data = client.get("/").json()
        assert data["name"] == settings.APP_NAME
        assert data["status"] == "running"

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "ok"}

    def test_unknown_route_uses_error_body(self, client):
        resp = client.get("/api/nope")
        assert resp.status_code == 404
        assert "error" in resp.json()
