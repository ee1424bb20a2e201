from fastapi.testclient import TestClient
from config import settings

def test_root(client: TestClient):
    """APIが生存しているか確認"""
    response = client.get("/")
    assert response.status_code == 200
    assert response.json() == {"message": "Setlist Manager API is running"}

def test_health_check(client: TestClient):
    response = client.get("/api/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["database"] == {"dialect": "sqlite", "connected": True}
    assert set(data["supabase"]) == {"url_configured", "anon_key_configured"}

def test_terms_rendered_as_html(client: TestClient, mocker, tmp_path):
    tos = tmp_path / "tos.md"
    tos.write_text("# Terms\n\nBe **nice**.", encoding="utf-8")
    mocker.patch.object(settings, "TOS_PATH", str(tos))

    response = client.get("/api/terms")
    assert response.status_code == 200
    html = response.json()["html"]
    assert "<h1>Terms</h1>" in html
    assert "<strong>nice</strong>" in html

def test_terms_missing_file(client: TestClient, mocker, tmp_path):
    mocker.patch.object(settings, "TOS_PATH", str(tmp_path / "missing.md"))
    response = client.get("/api/terms")
    assert response.status_code == 404

def test_bundled_terms_file(client: TestClient):
    response = client.get("/api/terms")
    assert response.status_code == 200
    assert "<h1>Terms of Service</h1>" in response.json()["html"]

def test_lifespan_initializes_database(session, mocker):
    from fastapi.testclient import TestClient as Client
    from main import app
    import infra.database.connection as db_connection

    close = mocker.patch.object(db_connection, "close_db")
    with Client(app):
        db_connection.init_db.assert_called_once()
    close.assert_called_once()
