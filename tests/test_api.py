"""Tests for the JSON API and meta routes."""
from fastapi.testclient import TestClient

from pasties.database import PasteDatabase
from pasties.main import create_app
from pasties.manager import PasteManager


def create(client, url="abc", content="hello", password="right"):
    return client.post("/api/", json={"url": url, "content": content, "password": password})


def test_api_root(client):
    response = client.get("/api/")

    assert response.status_code == 200
    assert "reserved" in response.text


def test_create_and_fetch(client, clock):
    response = create(client)

    assert response.status_code == 201
    body = response.json()
    assert body["url"] == "abc"
    assert body["password"] == "right"
    assert body["link"].endswith("/abc")

    response = client.get("/api/abc")
    assert response.status_code == 200
    assert response.json() == {
        "url": "abc",
        "content": "hello",
        "date_published": clock.now,
        "date_edited": clock.now,
    }


def test_create_with_defaults(client):
    response = client.post("/api/", json={"content": "hello"})

    assert response.status_code == 201
    body = response.json()
    assert len(body["url"]) == 10
    assert len(body["password"]) == 10
    assert client.get(f"/api/{body['url']}").json()["content"] == "hello"


def test_create_invalid_url(client):
    response = create(client, url="abc def", content="x", password="p")

    assert response.status_code == 400
    assert response.json() == {"detail": "The specified URL is invalid, or is the wrong length"}


def test_create_invalid_content(client):
    response = create(client, content="")

    assert response.status_code == 400


def test_create_duplicate(client):
    create(client)

    response = create(client, content="second")

    assert response.status_code == 409
    assert client.get("/api/abc").json()["content"] == "hello"


def test_create_missing_content_field(client):
    response = client.post("/api/", json={"url": "abc"})

    assert response.status_code == 422


def test_fetch_missing(client):
    response = client.get("/api/missing")

    assert response.status_code == 404
    assert response.json() == {"detail": "No paste with this URL has been found"}


def test_update(client):
    create(client)

    response = client.put("/api/", json={
        "url": "abc",
        "password": "right",
        "content": "changed",
    })

    assert response.status_code == 200
    assert response.json()["url"] == "abc"
    assert client.get("/api/abc").json()["content"] == "changed"


def test_update_rename(client):
    create(client)

    response = client.put("/api/", json={
        "url": "abc",
        "password": "right",
        "content": "moved",
        "new_url": "xyz",
    })

    assert response.status_code == 200
    assert response.json()["url"] == "xyz"
    assert client.get("/api/abc").status_code == 404
    assert client.get("/api/xyz").json()["content"] == "moved"


def test_update_wrong_password(client):
    create(client)

    response = client.put("/api/", json={
        "url": "abc",
        "password": "wrong",
        "content": "changed",
    })

    assert response.status_code == 401
    assert client.get("/api/abc").json()["content"] == "hello"


def test_delete(client):
    create(client)

    response = client.request("DELETE", "/api/", json={"url": "abc", "password": "right"})

    assert response.status_code == 200
    assert client.get("/api/abc").status_code == 404


def test_delete_wrong_password(client):
    create(client)

    response = client.request("DELETE", "/api/", json={"url": "abc", "password": "wrong"})

    assert response.status_code == 401
    assert client.get("/api/abc").status_code == 200


def test_delete_missing(client):
    response = client.request("DELETE", "/api/", json={"url": "abc", "password": "right"})

    assert response.status_code == 404


def test_render(client):
    response = client.post("/api/render", json={"content": "# Title\n\nbody"})

    assert response.status_code == 200
    assert "<h1>Title</h1>" in response.text
    assert "<p>body</p>" in response.text


def test_health(client):
    response = client.get("/meta/healthz")

    assert response.status_code == 200
    assert response.json() == {"ok": True}


def test_health_with_broken_store(broken_store):
    client = TestClient(create_app(PasteManager(PasteDatabase(broken_store("ping")))))

    assert client.get("/meta/healthz").json() == {"ok": False}


def test_storage_fault_is_500(broken_store):
    client = TestClient(create_app(PasteManager(PasteDatabase(broken_store("hgetall")))))

    response = client.get("/api/abc")

    assert response.status_code == 500
    assert "failed" in response.json()["detail"]
    assert "hgetall" not in response.json()["detail"]


def test_meta_root(client):
    response = client.get("/meta/")

    assert response.status_code == 200
    assert "reserved" in response.text


def test_paste_named_like_meta_routes_is_reachable(client):
    for url in ("healthz", "meta"):
        assert create(client, url=url, content=f"named {url}").status_code == 201

        response = client.get(f"/api/{url}")

        assert response.status_code == 200
        assert response.json()["content"] == f"named {url}"
    assert client.get("/meta/healthz").json() == {"ok": True}


def test_validation_errors_list_messages(client):
    response = client.post("/api/", json={"url": "abc"})

    detail = response.json()["detail"]
    assert isinstance(detail, list)
    assert all("msg" in entry for entry in detail)
