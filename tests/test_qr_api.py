import io
import json

from PIL import Image

from app.models.qr_code import QRCode, UserToCode
from app.models.scan import Scan

from conftest import auth_headers, grant_access, make_qr_code


def _create(client, user_id="u1", **body):
    payload = {"type": "url", "data": "example.com"}
    payload.update(body)
    return client.post("/api/qr", json=payload, headers=auth_headers(user_id))


class TestCreate:

    def test_requires_authentication(self, client):
        response = client.post("/api/qr", json={"type": "text", "data": "hi"})
        assert response.status_code == 401

    def test_rejects_bad_token(self, client):
        response = client.post("/api/qr", json={"type": "text", "data": "hi"}, headers={"Authorization": "Bearer junk"})
        assert response.status_code == 401

    def test_static_code(self, client, db_session):
        response = _create(client, title="Site")
        assert response.status_code == 201
        body = response.json()
        assert body["content"] == "https://example.com"
        assert body["isDynamic"] is False
        assert body["targetUrl"] is None
        assert body["scanCount"] == 0
        assert len(body["shortId"]) == 6
        assert body["shortUrl"] == f"https://qr.example.com/qr/{body['shortId']}"

        stored = db_session.get(QRCode, body["id"])
        assert stored.is_encrypted is True
        assert "example.com" not in stored.content
        assert set(json.loads(stored.content)) == {"encrypted", "iv", "authTag"}
        assert db_session.query(UserToCode).filter_by(user_id="u1", qr_code_id=body["id"]).count() == 1

    def test_formats_by_type(self, client):
        response = _create(
            client,
            type="wifi",
            data="MyNet",
            additionalData={"security": "WPA", "password": "secret"},
        )
        assert response.json()["content"] == "WIFI:T:WPA;S:MyNet;P:secret;H:false;;"

    def test_missing_data(self, client):
        response = _create(client, data="")
        assert response.status_code == 400

    def test_dynamic_requires_access(self, client, db_session):
        response = _create(client, targetUrl="https://example.com/x")
        assert response.status_code == 402
        assert response.json() == {"detail": "Dynamic access required"}
        assert db_session.query(QRCode).count() == 0

    def test_dynamic_with_access(self, client, db_session):
        grant_access(db_session, "u1")
        response = _create(client, targetUrl="https://example.com/x")
        assert response.status_code == 201
        assert response.json()["isDynamic"] is True
        assert response.json()["targetUrl"] == "https://example.com/x"

    def test_invalid_target_url(self, client, db_session):
        grant_access(db_session, "u1")
        response = _create(client, targetUrl="not a url")
        assert response.status_code == 400
        assert response.json() == {"detail": "Invalid URL format"}

    def test_unknown_type_is_rejected(self, client):
        assert _create(client, type="vcard").status_code == 422


class TestReadAndList:

    def test_list_is_scoped_to_owner(self, client):
        _create(client, "u1", title="Mine")
        _create(client, "u2", title="Theirs")

        body = client.get("/api/qr", headers=auth_headers("u1")).json()
        assert body["total"] == 1
        assert [item["title"] for item in body["items"]] == ["Mine"]

    def test_search_by_title(self, client):
        _create(client, title="Spring menu")
        _create(client, title="Wifi card")

        body = client.get("/api/qr", params={"search": "menu"}, headers=auth_headers("u1")).json()
        assert [item["title"] for item in body["items"]] == ["Spring menu"]

    def test_get_includes_recent_scans(self, client, db_session):
        created = _create(client).json()
        for _ in range(12):
            client.get(f"/qr/{created['shortId']}")

        body = client.get(f"/api/qr/{created['id']}", headers=auth_headers("u1")).json()
        assert body["scanCount"] == 12
        assert len(body["recentScans"]) == 10
        assert body["recentScans"][0]["device"] == "Desktop"

    def test_get_other_users_code(self, client):
        created = _create(client, "u1").json()
        response = client.get(f"/api/qr/{created['id']}", headers=auth_headers("u2"))
        assert response.status_code == 404

    def test_legacy_record_is_readable(self, client, db_session):
        qr_code = make_qr_code(db_session, owner="u1", content="plain")
        body = client.get(f"/api/qr/{qr_code.id}", headers=auth_headers("u1")).json()
        assert body["content"] == "plain"


class TestUpdate:

    def test_update_static_fields(self, client):
        created = _create(client).json()
        response = client.put(
            f"/api/qr/{created['id']}",
            json={"title": "Renamed", "foregroundColor": "#112233", "isActive": False},
            headers=auth_headers("u1"),
        )
        assert response.status_code == 200
        body = response.json()
        assert body["title"] == "Renamed"
        assert body["foregroundColor"] == "#112233"
        assert body["isActive"] is False
        assert body["content"] == "https://example.com"

        assert client.get(f"/qr/{created['shortId']}").status_code == 404

    def test_update_content(self, client):
        created = _create(client).json()
        response = client.put(
            f"/api/qr/{created['id']}",
            json={"type": "text", "data": "new text"},
            headers=auth_headers("u1"),
        )
        assert response.json()["content"] == "new text"
        assert response.json()["type"] == "text"

    def test_making_static_dynamic_requires_access(self, client):
        created = _create(client).json()
        response = client.put(
            f"/api/qr/{created['id']}",
            json={"targetUrl": "https://example.com/x"},
            headers=auth_headers("u1"),
        )
        assert response.status_code == 402

    def test_editing_dynamic_after_lapse_requires_access(self, client, db_session):
        access = grant_access(db_session, "u1")
        created = _create(client, targetUrl="https://example.com/a").json()

        access.status = "canceled"
        db_session.commit()

        response = client.put(f"/api/qr/{created['id']}", json={"title": "x"}, headers=auth_headers("u1"))
        assert response.status_code == 402

    def test_clear_target_makes_static(self, client, db_session):
        grant_access(db_session, "u1")
        created = _create(client, targetUrl="https://example.com/a").json()

        response = client.put(f"/api/qr/{created['id']}", json={"targetUrl": None}, headers=auth_headers("u1"))
        assert response.json()["isDynamic"] is False
        assert client.get(f"/qr/{created['shortId']}").json() == {"content": "https://example.com"}

    def test_update_upgrades_legacy_record(self, client, db_session):
        qr_code = make_qr_code(db_session, owner="u1", content="plain")
        client.put(f"/api/qr/{qr_code.id}", json={"title": "t"}, headers=auth_headers("u1"))

        db_session.expire_all()
        stored = db_session.get(QRCode, qr_code.id)
        assert stored.is_encrypted is True
        assert stored.content != "plain"

    def test_update_other_users_code(self, client):
        created = _create(client, "u1").json()
        response = client.put(f"/api/qr/{created['id']}", json={"title": "x"}, headers=auth_headers("u2"))
        assert response.status_code == 404


class TestDelete:

    def test_delete_removes_code_and_scans(self, client, db_session):
        created = _create(client).json()
        client.get(f"/qr/{created['shortId']}")

        response = client.delete(f"/api/qr/{created['id']}", headers=auth_headers("u1"))
        assert response.status_code == 200
        assert response.json()["ok"] is True

        assert client.get(f"/qr/{created['shortId']}").status_code == 404
        db_session.expire_all()
        assert db_session.query(QRCode).count() == 0
        assert db_session.query(Scan).count() == 0
        assert db_session.query(UserToCode).count() == 0

    def test_delete_other_users_code(self, client):
        created = _create(client, "u1").json()
        response = client.delete(f"/api/qr/{created['id']}", headers=auth_headers("u2"))
        assert response.status_code == 404


class TestImage:

    def test_static_png(self, client):
        created = _create(client, size=128).json()
        response = client.get(f"/api/qr/{created['id']}/image", headers=auth_headers("u1"))
        assert response.status_code == 200
        assert response.headers["content-type"] == "image/png"
        assert Image.open(io.BytesIO(response.content)).size == (128, 128)

    def test_size_override(self, client):
        created = _create(client).json()
        response = client.get(f"/api/qr/{created['id']}/image", params={"size": 300}, headers=auth_headers("u1"))
        assert Image.open(io.BytesIO(response.content)).size == (300, 300)

    def test_image_other_users_code(self, client):
        created = _create(client, "u1").json()
        response = client.get(f"/api/qr/{created['id']}/image", headers=auth_headers("u2"))
        assert response.status_code == 404
