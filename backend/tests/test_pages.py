# 页面接口测试

from logdeck.core.security import hash_password
from logdeck.config import settings
from logdeck.database.connection import drop_db
from logdeck.models.page import Page
from logdeck.models.user import User

from sqlalchemy import select, func


class TestCreatePage:
    """POST /api/pages 创建页面"""

    def test_create_returns_201(self, client):
        resp = client.post("/api/pages", json={"title": "Work", "emoji": "💼"})
        assert resp.status_code == 201
        data = resp.json()
        assert data["title"] == "Work"
        assert data["emoji"] == "💼"
        assert isinstance(data["id"], int)
        assert "userId" in data
        assert "createdAt" in data

    def test_empty_title_rejected(self, client, run_db):
        resp = client.post("/api/pages", json={"title": "", "emoji": "💼"})
        assert resp.status_code == 400
        assert "error" in resp.json()

        async def count(session):
            return (await session.execute(select(func.count(Page.id)))).scalar()

        assert run_db(count) == 0

    def test_empty_emoji_rejected(self, client):
        resp = client.post("/api/pages", json={"title": "Work", "emoji": ""})
        assert resp.status_code == 400

    def test_missing_field_rejected(self, client):
        resp = client.post("/api/pages", json={"title": "Work"})
        assert resp.status_code == 400

    def test_invalid_json_rejected(self, client):
        resp = client.post(
            "/api/pages",
            content=b"not-json",
            headers={"Content-Type": "application/json"},
        )
        assert resp.status_code == 400

    def test_owner_created_once(self, client, run_db):
        client.post("/api/pages", json={"title": "A", "emoji": "🅰"})
        client.post("/api/pages", json={"title": "B", "emoji": "🅱"})

        async def users(session):
            return (await session.execute(select(User))).scalars().all()

        rows = run_db(users)
        assert len(rows) == 1
        assert rows[0].email == settings.DEFAULT_OWNER_EMAIL
        # 不保存明文密码
        assert rows[0].password.startswith("$pbkdf2-sha256$")

    def test_create_without_tables_is_500(self, client):
        client.portal.call(drop_db)
        resp = client.post("/api/pages", json={"title": "Work", "emoji": "💼"})
        assert resp.status_code == 500
        assert "error" in resp.json()


class TestListPages:
    """GET /api/pages 页面列表"""

    def test_empty(self, client):
        resp = client.get("/api/pages")
        assert resp.status_code == 200
        assert resp.json() == []

    def test_newest_first(self, client, make_page):
        first = make_page("First", "1️⃣")
        second = make_page("Second", "2️⃣")
        ids = [p["id"] for p in client.get("/api/pages").json()]
        assert ids == [second["id"], first["id"]]

    def test_missing_table_returns_empty(self, client):
        client.portal.call(drop_db)
        resp = client.get("/api/pages")
        assert resp.status_code == 200
        assert resp.json() == []


class TestPageBasicAuth:
    """PAGE_LIST_AUTH=basic 时的 GET /api/pages"""

    def _enable(self, monkeypatch, password="s3cret"):
        monkeypatch.setattr(settings, "PAGE_LIST_AUTH", "basic")
        monkeypatch.setattr(settings, "WEB_PASSWORD", hash_password(password))

    def test_correct_password(self, client, monkeypatch):
        self._enable(monkeypatch)
        resp = client.get("/api/pages", auth=("anyone", "s3cret"))
        assert resp.status_code == 200

    def test_wrong_password(self, client, monkeypatch):
        self._enable(monkeypatch)
        resp = client.get("/api/pages", auth=("anyone", "nope"))
        assert resp.status_code == 401
        assert resp.headers["www-authenticate"].startswith("Basic")
        assert "error" in resp.json()

    def test_missing_header(self, client, monkeypatch):
        self._enable(monkeypatch)
        assert client.get("/api/pages").status_code == 401

    def test_malformed_header(self, client, monkeypatch):
        self._enable(monkeypatch)
        resp = client.get("/api/pages", headers={"Authorization": "Basic !!!not-base64"})
        assert resp.status_code == 401

    def test_unset_hash_fails_closed(self, client, monkeypatch):
        monkeypatch.setattr(settings, "PAGE_LIST_AUTH", "basic")
        monkeypatch.setattr(settings, "WEB_PASSWORD", None)
        assert client.get("/api/pages", auth=("a", "b")).status_code == 401

    def test_other_routes_unprotected(self, client, monkeypatch):
        self._enable(monkeypatch)
        resp = client.post("/api/pages", json={"title": "Work", "emoji": "💼"})
        assert resp.status_code == 201


class TestSinglePage:
    """GET/PUT/DELETE /api/pages/{id} 单个页面"""

    def test_get(self, client, make_page):
        page = make_page()
        resp = client.get(f"/api/pages/{page['id']}")
        assert resp.status_code == 200
        assert resp.json()["title"] == "Home"

    def test_get_missing(self, client):
        resp = client.get("/api/pages/999")
        assert resp.status_code == 404
        assert "error" in resp.json()

    def test_update(self, client, make_page):
        page = make_page()
        resp = client.put(f"/api/pages/{page['id']}", json={"title": "Office", "emoji": "🏢"})
        assert resp.status_code == 200
        assert resp.json()["title"] == "Office"
        assert client.get(f"/api/pages/{page['id']}").json()["emoji"] == "🏢"

    def test_update_validation(self, client, make_page):
        page = make_page()
        resp = client.put(f"/api/pages/{page['id']}", json={"title": "", "emoji": "🏢"})
        assert resp.status_code == 400

    def test_update_missing(self, client):
        resp = client.put("/api/pages/999", json={"title": "Office", "emoji": "🏢"})
        assert resp.status_code == 404

    def test_delete(self, client, make_page):
        page = make_page()
        resp = client.delete(f"/api/pages/{page['id']}")
        assert resp.status_code == 200
        assert resp.json() == {"success": True}
        assert client.get(f"/api/pages/{page['id']}").status_code == 404

    def test_delete_missing_is_404(self, client):
        assert client.delete("/api/pages/999").status_code == 404

    def test_delete_cascades_to_logs(self, client, make_page, make_log):
        keep = make_page("Keep", "✅")
        gone = make_page("Gone", "🗑")
        make_log(keep["id"], "kept")
        make_log(gone["id"], "dropped")

        client.delete(f"/api/pages/{gone['id']}")

        messages = [log["message"] for log in client.get("/api/logs").json()]
        assert messages == ["kept"]


class TestDeleteAll:
    """DELETE /api/pages/delete-all 删除全部页面"""

    def test_delete_all_then_list_empty(self, client, make_page):
        make_page("A", "🅰")
        make_page("B", "🅱")
        resp = client.delete("/api/pages/delete-all")
        assert resp.status_code == 200
        assert resp.json() == {"success": True}
        assert client.get("/api/pages").json() == []

    def test_delete_all_without_tables(self, client):
        client.portal.call(drop_db)
        resp = client.delete("/api/pages/delete-all")
        assert resp.status_code == 200
        assert resp.json() == {"success": True}
