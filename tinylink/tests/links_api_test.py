import pytest
from fastapi.testclient import TestClient

from tinylink.core.config import Settings, settings
from tinylink.main import app
from tinylink.db.Connection import database
from tinylink.db.file_storage import FileLinkStorage
from tinylink.api.deps import get_registry
from tinylink.services.registry import LinkRegistry


def test_healthz(client):
    response = client.get("/healthz")
    assert response.status_code == 200
    assert response.json() == {"ok": True, "version": settings.VERSION}


def test_ready(client, storage):
    response = client.get("/ready")
    assert response.status_code == 200
    assert response.json() == {"ready": True, "backend": storage.name}


def test_create_link_with_code(client):
    """Test creating a link with an explicit code."""
    response = client.post(
        "/api/links",
        json={"target_url": "https://example.com/test", "code": "abc123"}
    )
    assert response.status_code == 201
    data = response.json()
    assert data["code"] == "abc123"
    assert data["target_url"] == "https://example.com/test"
    assert data["total_clicks"] == 0
    assert data["last_clicked"] is None
    assert data["short_url"].endswith("/abc123")
    assert "created_at" in data


def test_create_link_generates_code(client):
    response = client.post("/api/links", json={"target_url": "https://example.com/test"})
    assert response.status_code == 201
    code = response.json()["code"]
    assert len(code) == 6
    assert code.isalnum()


def test_create_link_blank_code_generates_one(client):
    response = client.post("/api/links", json={"target_url": "https://example.com/test", "code": "   "})
    assert response.status_code == 201
    assert len(response.json()["code"]) == 6


def test_create_link_trims_code(client):
    response = client.post("/api/links", json={"target_url": "https://example.com/test", "code": " abc123 "})
    assert response.status_code == 201
    assert response.json()["code"] == "abc123"


def test_create_link_keeps_url_as_given(client):
    response = client.post("/api/links", json={"target_url": "https://Example.com"})
    assert response.status_code == 201
    assert response.json()["target_url"] == "https://Example.com"


def test_create_link_code_collision(client):
    """Test that a duplicate code returns a conflict."""
    client.post("/api/links", json={"target_url": "https://example.com/first", "code": "taken1"})

    response = client.post(
        "/api/links",
        json={"target_url": "https://example.com/second", "code": "taken1"}
    )
    assert response.status_code == 409
    assert "already exists" in response.json()["detail"].lower()
    assert client.get("/api/links/taken1").json()["target_url"] == "https://example.com/first"


@pytest.mark.parametrize("target_url", [
    "not-a-url",
    "ftp://example.com",
    "http://",
    "javascript:alert(1)",
    "https://example.com/" + "a" * 2100,
])
def test_create_link_invalid_url(client, target_url):
    response = client.post("/api/links", json={"target_url": target_url})
    assert response.status_code == 422, f"Should reject: {target_url}"


def test_create_link_missing_url(client):
    response = client.post("/api/links", json={"code": "abc123"})
    assert response.status_code == 422


@pytest.mark.parametrize("code", ["abc", "abc123456", "abc-12", "abc_123"])
def test_create_link_invalid_code(client, code):
    response = client.post("/api/links", json={"target_url": "https://example.com/test", "code": code})
    assert response.status_code == 422


def test_list_links_empty(client):
    response = client.get("/api/links")
    assert response.status_code == 200
    assert response.json() == []


def test_list_links_newest_first(client, sample_urls):
    codes = []
    for url in sample_urls:
        codes.append(client.post("/api/links", json={"target_url": url}).json()["code"])

    response = client.get("/api/links")
    assert response.status_code == 200
    assert [item["code"] for item in response.json()] == list(reversed(codes))


def test_get_link_stats(client):
    client.post("/api/links", json={"target_url": "https://example.com/stats", "code": "stats1"})

    response = client.get("/api/links/stats1")
    assert response.status_code == 200
    data = response.json()
    assert data["target_url"] == "https://example.com/stats"
    assert data["total_clicks"] == 0


def test_get_link_stats_bad_format(client):
    response = client.get("/api/links/no")
    assert response.status_code == 400


def test_get_link_stats_not_found(client):
    response = client.get("/api/links/nothere")
    assert response.status_code == 404


def test_delete_link(client):
    client.post("/api/links", json={"target_url": "https://example.com/test", "code": "abc123"})

    response = client.delete("/api/links/abc123")
    assert response.status_code == 200
    assert response.json() == {"ok": True}

    assert client.get("/api/links/abc123").status_code == 404
    assert client.get("/abc123", follow_redirects=False).status_code == 404


def test_delete_link_bad_format(client):
    assert client.delete("/api/links/a-b").status_code == 400


def test_delete_link_not_found(client):
    assert client.delete("/api/links/abc123").status_code == 404


def test_delete_then_create_same_code(client):
    client.post("/api/links", json={"target_url": "https://example.com/old", "code": "abc123"})
    client.delete("/api/links/abc123")

    response = client.post("/api/links", json={"target_url": "https://example.com/new", "code": "abc123"})
    assert response.status_code == 201
    assert response.json()["target_url"] == "https://example.com/new"


def test_redirect_success(client):
    client.post("/api/links", json={"target_url": "https://example.com/redirect-test", "code": "go1234"})

    response = client.get("/go1234", follow_redirects=False)
    assert response.status_code == 302
    assert response.headers["location"] == "https://example.com/redirect-test"


def test_redirect_not_found(client):
    response = client.get("/nothere", follow_redirects=False)
    assert response.status_code == 404


def test_redirect_bad_format_is_not_found(client):
    response = client.get("/a-b", follow_redirects=False)
    assert response.status_code == 404


def test_redirect_increments_click_count(client):
    """Test that redirects increment click count."""
    client.post("/api/links", json={"target_url": "https://example.com/clicks", "code": "clicks"})

    stats = client.get("/api/links/clicks").json()
    assert stats["total_clicks"] == 0
    assert stats["last_clicked"] is None

    for _ in range(3):
        client.get("/clicks", follow_redirects=False)

    stats = client.get("/api/links/clicks").json()
    assert stats["total_clicks"] == 3
    assert stats["last_clicked"] is not None


def test_stats_do_not_count_as_clicks(client):
    client.post("/api/links", json={"target_url": "https://example.com/x", "code": "abc123"})
    for _ in range(3):
        client.get("/api/links/abc123")
    assert client.get("/api/links/abc123").json()["total_clicks"] == 0


def test_storage_failure_returns_503(tmp_path):
    """A corrupt snapshot surfaces as a server-side error, not a 404."""
    broken = FileLinkStorage(tmp_path / "links.json")
    broken.path.write_text("[oops")
    app.dependency_overrides[database.get_storage] = lambda: broken
    app.dependency_overrides[database.get_optional_storage] = lambda: broken
    try:
        client = TestClient(app)
        assert client.get("/api/links").status_code == 503
        assert client.get("/abc123", follow_redirects=False).status_code == 503
        assert client.get("/ready").status_code == 503
    finally:
        app.dependency_overrides.clear()


def test_unreachable_database_at_startup_returns_503(tmp_path, monkeypatch):
    """Building the SQL backend against an unreachable database is a 503, not a 500."""
    unreachable = f"sqlite:///{tmp_path / 'missing' / 'dir' / 'x.db'}"
    monkeypatch.setattr(database, "settings", Settings(STORAGE_BACKEND="sql", DATABASE_URL=unreachable))
    monkeypatch.setattr(database, "_storage", None)
    app.dependency_overrides.clear()

    client = TestClient(app)
    response = client.get("/ready")
    assert response.status_code == 503
    assert response.json() == {"ready": False, "backend": "sql"}

    response = client.get("/api/links")
    assert response.status_code == 503
    assert response.json() == {"detail": "Storage unavailable"}
    assert database._storage is None


def test_cors_preflight_on_links(client):
    response = client.options(
        "/api/links",
        headers={
            "Origin": "https://other.example.com",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "content-type",
        },
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] in ("*", "https://other.example.com")
    assert "POST" in response.headers["access-control-allow-methods"]


def test_cors_header_on_simple_request(client):
    response = client.get("/api/links", headers={"Origin": "https://other.example.com"})
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] in ("*", "https://other.example.com")


def test_security_headers(client):
    response = client.get("/healthz")
    assert response.headers["x-content-type-options"] == "nosniff"
    assert response.headers["x-frame-options"] == "SAMEORIGIN"
    assert response.headers["referrer-policy"] == "no-referrer"


def test_create_link_reserved_code(client):
    """A code that a built-in route would shadow is refused."""
    response = client.post("/api/links", json={"target_url": "https://example.com/x", "code": "healthz"})
    assert response.status_code == 409
    assert response.json()["detail"] == "code is reserved"
    assert client.get("/api/links/healthz").status_code == 404
    assert client.get("/healthz").json()["ok"] is True


def test_create_link_code_exhaustion(client, storage):
    """Generated-code exhaustion is a conflict with its own message."""
    storage.insert("same66", "https://example.com/existing")
    storage.insert("same777", "https://example.com/existing7")

    def scripted(length):
        return "same66" if length == 6 else "same777"

    app.dependency_overrides[get_registry] = lambda: LinkRegistry(storage, generator=scripted)
    response = client.post("/api/links", json={"target_url": "https://example.com/test"})
    assert response.status_code == 409
    assert response.json()["detail"] == "could not allocate a unique code"
    assert len(client.get("/api/links").json()) == 2
