"""Tests for the post endpoints."""

import base64

from fastapi import status
from fastapi.testclient import TestClient

from booru_stage.services.dedup import ChecksumIndex


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode()


def _upload(client: TestClient, content: bytes, headers: dict[str, str] | None = None, **fields):
    return client.post("/api/v1/posts/", json={"content": _b64(content), **fields}, headers=headers)


def test_create_post(client: TestClient, jpeg_bytes: bytes) -> None:
    r = _upload(client, jpeg_bytes, tags=["cat"], safety="sketchy")

    assert r.status_code == status.HTTP_201_CREATED
    data = r.json()
    assert len(data["name"]) == 40
    assert data["content_type"] == "image"
    assert data["content_mime_type"] == "image/jpeg"
    assert data["safety"] == "sketchy"
    assert data["tags"] == ["cat"]
    assert data["relations"] == []
    assert data["user_id"] is None


def test_create_post_as_user(client: TestClient, jpeg_bytes: bytes, auth_token, test_user) -> None:
    r = _upload(client, jpeg_bytes, headers=auth_token)

    assert r.status_code == status.HTTP_201_CREATED
    assert r.json()["user_id"] == test_user.id


def test_invalid_token_rejected(client: TestClient, jpeg_bytes: bytes) -> None:
    r = _upload(client, jpeg_bytes, headers={"Authorization": "Bearer not-a-token"})
    assert r.status_code == status.HTTP_401_UNAUTHORIZED


def test_duplicate_upload_conflicts(client: TestClient, jpeg_bytes: bytes) -> None:
    first = _upload(client, jpeg_bytes).json()

    r = _upload(client, jpeg_bytes)

    assert r.status_code == status.HTTP_409_CONFLICT
    assert r.json()["post_id"] == first["id"]


def test_upload_errors_map_to_status_codes(client: TestClient, test_settings) -> None:
    assert _upload(client, b"just text").status_code == status.HTTP_415_UNSUPPORTED_MEDIA_TYPE
    too_big = b"\xff\xd8\xff" + b"\x00" * test_settings.max_post_size
    assert _upload(client, too_big).status_code == status.HTTP_413_REQUEST_ENTITY_TOO_LARGE
    r = client.post("/api/v1/posts/", json={"tags": ["x"]})
    assert r.status_code == status.HTTP_400_BAD_REQUEST
    r = client.post("/api/v1/posts/", json={"url": "ftp://example.org/a.png"})
    assert r.status_code == status.HTTP_400_BAD_REQUEST
    r = client.post("/api/v1/posts/", json={"url": "https://example.org/missing.png"})
    assert r.status_code == status.HTTP_502_BAD_GATEWAY


def test_malformed_tag_rejected(client: TestClient, jpeg_bytes: bytes) -> None:
    r = _upload(client, jpeg_bytes, tags=["two words"])
    assert r.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_create_from_youtube(client: TestClient, fetcher) -> None:
    fetcher.responses["https://img.youtube.com/vi/abc123/mqdefault.jpg"] = b"thumb"

    r = client.post("/api/v1/posts/", json={"url": "https://youtube.com/watch?v=abc123"})

    assert r.status_code == status.HTTP_201_CREATED
    data = r.json()
    assert data["content_type"] == "remote_embed"
    assert data["content_checksum"] == "abc123"
    assert data["has_custom_thumbnail"] is True


def test_get_post_by_name_and_id(client: TestClient, jpeg_bytes: bytes) -> None:
    created = _upload(client, jpeg_bytes).json()

    by_name = client.get(f"/api/v1/posts/{created['name']}")
    by_id = client.get(f"/api/v1/posts/{created['id']}")

    assert by_name.status_code == status.HTTP_200_OK
    assert by_id.json()["name"] == created["name"]
    assert client.get("/api/v1/posts/unknown").status_code == status.HTTP_404_NOT_FOUND


def test_update_post(client: TestClient, make_jpeg) -> None:
    other = _upload(client, make_jpeg(1)).json()
    post = _upload(client, make_jpeg(2), tags=["old"]).json()

    r = client.put(
        f"/api/v1/posts/{post['id']}",
        json={
            "seen_edit_time": post["last_edit_time"],
            "tags": ["new"],
            "relations": [other["id"]],
        },
    )

    assert r.status_code == status.HTTP_200_OK
    data = r.json()
    assert data["tags"] == ["new"]
    assert data["relations"] == [other["id"]]
    assert data["source"] is None


def test_stale_update_conflicts(client: TestClient, jpeg_bytes: bytes) -> None:
    post = _upload(client, jpeg_bytes).json()
    edit = {"seen_edit_time": post["last_edit_time"], "source": "first"}

    assert client.put(f"/api/v1/posts/{post['id']}", json=edit).status_code == status.HTTP_200_OK
    r = client.put(f"/api/v1/posts/{post['id']}", json={**edit, "source": "second"})

    assert r.status_code == status.HTTP_409_CONFLICT
    assert client.get(f"/api/v1/posts/{post['id']}").json()["source"] == "first"


def test_unknown_relation_is_not_found(client: TestClient, jpeg_bytes: bytes) -> None:
    post = _upload(client, jpeg_bytes).json()

    r = client.put(
        f"/api/v1/posts/{post['id']}",
        json={"seen_edit_time": post["last_edit_time"], "relations": [4242]},
    )

    assert r.status_code == status.HTTP_404_NOT_FOUND


def test_oversized_thumbnail(client: TestClient, jpeg_bytes: bytes, test_settings) -> None:
    post = _upload(client, jpeg_bytes).json()
    thumbnail = b"x" * (test_settings.max_custom_thumbnail_size + 1)

    r = client.put(
        f"/api/v1/posts/{post['id']}",
        json={"seen_edit_time": post["last_edit_time"], "thumbnail": _b64(thumbnail)},
    )

    assert r.status_code == status.HTTP_413_REQUEST_ENTITY_TOO_LARGE


def test_delete_post(client: TestClient, jpeg_bytes: bytes) -> None:
    post = _upload(client, jpeg_bytes).json()

    r = client.delete(f"/api/v1/posts/{post['name']}")

    assert r.status_code == status.HTTP_204_NO_CONTENT
    assert client.get(f"/api/v1/posts/{post['id']}").status_code == status.HTTP_404_NOT_FOUND


def test_feature_and_read_featured(client: TestClient, make_jpeg) -> None:
    assert client.get("/api/v1/posts/featured").json() is None
    first = _upload(client, make_jpeg(1)).json()
    second = _upload(client, make_jpeg(2)).json()

    client.post(f"/api/v1/posts/{first['id']}/feature")
    r = client.post(f"/api/v1/posts/{second['id']}/feature")

    assert r.status_code == status.HTTP_200_OK
    assert r.json()["feature_count"] == 1
    assert client.get("/api/v1/posts/featured").json()["id"] == second["id"]


def test_history(client: TestClient, jpeg_bytes: bytes) -> None:
    post = _upload(client, jpeg_bytes).json()
    client.put(
        f"/api/v1/posts/{post['id']}",
        json={"seen_edit_time": post["last_edit_time"], "safety": "unsafe"},
    )

    r = client.get(f"/api/v1/posts/{post['id']}/history")

    assert r.status_code == status.HTTP_200_OK
    history = r.json()
    assert [entry["operation"] for entry in history] == ["change", "create"]
    assert history[0]["data_difference"] == {
        "+": [["safety", "unsafe"]],
        "-": [["safety", "safe"]],
    }


def test_racing_duplicate_upload_conflicts(
    client: TestClient, jpeg_bytes: bytes, monkeypatch
) -> None:
    assert _upload(client, jpeg_bytes).status_code == status.HTTP_201_CREATED
    monkeypatch.setattr(ChecksumIndex, "assert_available", lambda self, checksum, post_id=None: None)

    r = _upload(client, jpeg_bytes)

    assert r.status_code == status.HTTP_409_CONFLICT
