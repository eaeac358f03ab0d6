"""Greetings API — create/fetch round trip, validation, not-found and uploads serving.

Invariants:
    - Created greetings are fetchable with identical photos in identical order
    - Rejected creations persist nothing (no row, no stored file)
    - Unknown or malformed ids answer 404 with an error body
"""

import os
from uuid import uuid4

from httpx import ASGITransport, AsyncClient
from sqlalchemy import func, select

from app.config import get_settings
from app.main import app
from app.models.greeting import Greeting
from tests.services.upload_payloads import greeting_form, photo_files


def _uploads() -> set[str]:
    return set(os.listdir(get_settings().upload_dir))


async def _row_count(db) -> int:
    result = await db.execute(select(func.count()).select_from(Greeting))
    return result.scalar_one()


# --- Create -------------------------------------------------------------------

async def test_create_returns_full_greeting(client):
    res = await client.post(
        "/api/greetings", data=greeting_form(), files=photo_files(3),
    )
    assert res.status_code == 200
    body = res.json()
    assert set(body) == {"id", "recipientName", "recipientAge", "photos"}
    assert body["recipientName"] == "Sam"
    assert body["recipientAge"] == 30
    assert len(body["photos"]) == 3
    assert all(p.startswith("/uploads/") for p in body["photos"])


async def test_create_then_fetch_preserves_photo_order(client):
    for count in (2, 5, 12):
        created = (await client.post(
            "/api/greetings", data=greeting_form(), files=photo_files(count),
        )).json()

        res = await client.get(f"/api/greetings/{created['id']}")
        assert res.status_code == 200
        assert res.json() == created
        assert len(res.json()["photos"]) == count


async def test_stored_names_keep_extension(client):
    body = (await client.post(
        "/api/greetings", data=greeting_form(),
        files=photo_files(2, ext="jpg", content_type="image/jpeg"),
    )).json()
    for ref in body["photos"]:
        name = ref.rsplit("/", 1)[1]
        token, rest = name.rsplit("-", 1)
        assert token
        assert rest.endswith(".jpg")
        assert rest[:-4].isdigit()


async def test_stored_photo_served_from_uploads(client):
    files = photo_files(2)
    body = (await client.post(
        "/api/greetings", data=greeting_form(), files=files,
    )).json()

    res = await client.get(body["photos"][1])
    assert res.status_code == 200
    assert res.content == files[1][1][1]


async def test_missing_upload_is_404(client):
    res = await client.get("/uploads/does-not-exist.png")
    assert res.status_code == 404


async def test_name_is_stripped(client):
    body = (await client.post(
        "/api/greetings", data=greeting_form(name="  Alex  "), files=photo_files(2),
    )).json()
    assert body["recipientName"] == "Alex"


# --- Create: validation -------------------------------------------------------

async def test_too_few_photos_rejected(client, test_db):
    before = _uploads()
    res = await client.post(
        "/api/greetings", data=greeting_form(), files=photo_files(1),
    )
    assert res.status_code == 400
    error = res.json()["error"]
    assert error["code"] == "PHOTO_COUNT_OUT_OF_RANGE"
    assert error["context"]["field"] == "photos"
    assert await _row_count(test_db) == 0
    assert _uploads() == before


async def test_no_photos_rejected(client, test_db):
    res = await client.post("/api/greetings", data=greeting_form())
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "PHOTO_COUNT_OUT_OF_RANGE"
    assert await _row_count(test_db) == 0


async def test_too_many_photos_rejected(client, test_db):
    before = _uploads()
    res = await client.post(
        "/api/greetings", data=greeting_form(), files=photo_files(13),
    )
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "PHOTO_COUNT_OUT_OF_RANGE"
    assert await _row_count(test_db) == 0
    assert _uploads() == before


async def test_non_image_rejected(client, test_db):
    files = photo_files(2) + [("photos", ("notes.txt", b"hello", "text/plain"))]
    res = await client.post("/api/greetings", data=greeting_form(), files=files)
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "UNSUPPORTED_FILE_TYPE"
    assert await _row_count(test_db) == 0


async def test_blank_name_rejected(client, test_db):
    res = await client.post(
        "/api/greetings", data=greeting_form(name="   "), files=photo_files(2),
    )
    assert res.status_code == 400
    error = res.json()["error"]
    assert error["code"] == "INVALID_RECIPIENT_NAME"
    assert error["context"]["field"] == "recipientName"
    assert await _row_count(test_db) == 0


async def test_age_out_of_range_rejected(client, test_db):
    for age in ("0", "151", "-1", "abc"):
        res = await client.post(
            "/api/greetings", data=greeting_form(age=age), files=photo_files(2),
        )
        assert res.status_code == 400
        assert res.json()["error"]["code"] == "INVALID_RECIPIENT_AGE"
    assert await _row_count(test_db) == 0


async def test_missing_fields_rejected(client):
    res = await client.post("/api/greetings", files=photo_files(2))
    assert res.status_code == 400


# --- Fetch --------------------------------------------------------------------

async def test_fetch_seeded_greeting(client, seed_greeting):
    res = await client.get(f"/api/greetings/{seed_greeting.id}")
    assert res.status_code == 200
    assert res.json() == {
        "id": str(seed_greeting.id),
        "recipientName": "Sam",
        "recipientAge": 30,
        "photos": ["/uploads/p1.jpg", "/uploads/p2.jpg", "/uploads/p3.jpg"],
    }


async def test_fetch_unknown_id_is_404(client):
    res = await client.get(f"/api/greetings/{uuid4()}")
    assert res.status_code == 404
    error = res.json()["error"]
    assert error["code"] == "RESOURCE_NOT_FOUND"
    assert "not found" in error["message"]


async def test_fetch_malformed_id_is_404(client):
    res = await client.get("/api/greetings/not-a-uuid")
    assert res.status_code == 404


# --- Unexpected failures ------------------------------------------------------

async def test_unexpected_error_is_generic_500(client, monkeypatch):
    async def boom(self, greeting_id):
        raise RuntimeError("secret internals")

    monkeypatch.setattr(
        "app.api.routes.greetings.GreetingStore.get", boom,
    )
    async with AsyncClient(
        transport=ASGITransport(app=app, raise_app_exceptions=False),
        base_url="http://test",
    ) as c:
        res = await c.get(f"/api/greetings/{uuid4()}")
    assert res.status_code == 500
    body = res.json()
    assert body["error"]["code"] == "INTERNAL_ERROR"
    assert "secret" not in res.text
