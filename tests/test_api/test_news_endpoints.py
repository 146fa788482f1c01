import pytest
from unittest.mock import patch

from newsdesk.exceptions import PersistenceFault
from newsdesk.models.news import News

FORM = {"title": "City council meets", "body": "The council approved the new budget today."}


def image_part(data, name="photo.png", mime_type="image/png"):
    return {"image": (name, data, mime_type)}


@pytest.mark.asyncio
async def test_list_news_empty(async_client):
    response = await async_client.get("/api/v1/news", params={"page": "0", "limit": "0"})

    assert response.status_code == 200
    assert response.json() == {
        "status": 200,
        "news": [],
        "metadata": {"totalPages": 0, "current_page": 1, "page_limit": 10},
    }


@pytest.mark.asyncio
async def test_create_requires_authentication(async_client, png_bytes):
    response = await async_client.post("/api/v1/news", data=FORM, files=image_part(png_bytes))

    assert response.status_code == 401
    assert response.json() == {"status": 401, "message": "Unauthenticated."}


@pytest.mark.asyncio
async def test_create_rejects_unknown_token(async_client, png_bytes):
    response = await async_client.post(
        "/api/v1/news",
        data=FORM,
        files=image_part(png_bytes),
        headers={"Authorization": "Bearer not-a-token"},
    )

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_create_and_fetch(async_client, owner, owner_headers, png_bytes, image_store):
    response = await async_client.post(
        "/api/v1/news", data=FORM, files=image_part(png_bytes, name="council.meeting.png"), headers=owner_headers
    )

    assert response.status_code == 201
    created = response.json()
    assert created["status"] == 201
    assert created["message"] == "News entry created successfully."
    assert created["news"]["image"].endswith(".png")
    stored_name = created["news"]["image"].rsplit("/", 1)[-1]
    assert image_store.path_for(stored_name).read_bytes() == png_bytes

    response = await async_client.get(f"/api/v1/news/{created['news']['id']}")

    assert response.status_code == 200
    news = response.json()["news"]
    assert news["heading"] == FORM["title"]
    assert set(news["reporter"]) == {"id", "name", "email", "profile"}
    assert news["reporter"]["id"] == owner.id
    assert news["reporter"]["email"] == owner.email
    assert "api_token" not in response.text


@pytest.mark.asyncio
async def test_create_without_image(async_client, owner_headers, test_db):
    response = await async_client.post("/api/v1/news", data=FORM, headers=owner_headers)

    assert response.status_code == 400
    assert response.json() == {"status": 400, "message": "Image field is required."}
    assert test_db.query(News).count() == 0


@pytest.mark.asyncio
async def test_create_with_invalid_fields(async_client, owner_headers, png_bytes):
    response = await async_client.post(
        "/api/v1/news", data={"title": "Hi"}, files=image_part(png_bytes), headers=owner_headers
    )

    assert response.status_code == 400
    body = response.json()
    assert body["status"] == 400
    assert set(body["errors"]) == {"title", "body"}


@pytest.mark.asyncio
async def test_create_with_oversized_image(async_client, owner_headers, test_db, image_store):
    too_big = b"\x00" * 6_000_000

    response = await async_client.post("/api/v1/news", data=FORM, files=image_part(too_big), headers=owner_headers)

    assert response.status_code == 400
    assert response.json() == {"status": 400, "errors": {"image": "Image size must be less than 5 MB."}}
    assert test_db.query(News).count() == 0
    assert list(image_store.stored_files()) == []
    assert list(image_store.staged_files()) == []


@pytest.mark.asyncio
async def test_create_with_wrong_type(async_client, owner_headers, test_db):
    response = await async_client.post(
        "/api/v1/news", data=FORM, files=image_part(b"%PDF-1.4", name="doc.pdf", mime_type="application/pdf"),
        headers=owner_headers,
    )

    assert response.status_code == 400
    assert "image" in response.json()["errors"]
    assert test_db.query(News).count() == 0


@pytest.mark.asyncio
async def test_get_missing_news(async_client):
    response = await async_client.get("/api/v1/news/12345")

    assert response.status_code == 404
    assert response.json() == {"status": 404, "message": "News not found."}


@pytest.mark.asyncio
async def test_get_news_id_beyond_column_range(async_client):
    response = await async_client.get("/api/v1/news/99999999999999999999")

    assert response.status_code == 404
    assert response.json() == {"status": 404, "message": "News not found."}


@pytest.mark.asyncio
async def test_list_page_beyond_range(async_client):
    response = await async_client.get("/api/v1/news", params={"page": "99999999999999999999", "limit": "10"})

    assert response.status_code == 200
    assert response.json()["metadata"]["current_page"] == 1


@pytest.mark.asyncio
async def test_create_rejects_markup_declared_as_image(async_client, owner_headers, test_db, image_store):
    response = await async_client.post(
        "/api/v1/news", data=FORM,
        files=image_part(b"<script>alert(document.cookie)</script>", name="evil.html", mime_type="image/png"),
        headers=owner_headers,
    )

    assert response.status_code == 400
    assert response.json() == {"status": 400, "errors": {"image": "Image file extension must be one of: png."}}
    assert test_db.query(News).count() == 0
    assert list(image_store.stored_files()) == []
    assert list(image_store.staged_files()) == []


@pytest.mark.asyncio
async def test_update_by_owner(async_client, owner_headers, png_bytes, image_store):
    created = (await async_client.post("/api/v1/news", data=FORM, files=image_part(png_bytes), headers=owner_headers)).json()
    news_id = created["news"]["id"]
    old_name = created["news"]["image"].rsplit("/", 1)[-1]

    response = await async_client.put(
        f"/api/v1/news/{news_id}",
        data={"title": "Budget approved", "body": "The council approved the budget after a long debate."},
        files=image_part(png_bytes, name="new.jpg", mime_type="image/jpeg"),
        headers=owner_headers,
    )

    assert response.status_code == 200
    updated = response.json()
    assert updated["status"] == 200
    assert updated["news"]["heading"] == "Budget approved"
    new_name = updated["news"]["image"].rsplit("/", 1)[-1]
    assert new_name.endswith(".jpg")
    assert image_store.path_for(new_name).exists()
    assert not image_store.path_for(old_name).exists()


@pytest.mark.asyncio
async def test_update_by_non_owner(async_client, owner_headers, other_headers, png_bytes, test_db):
    created = (await async_client.post("/api/v1/news", data=FORM, files=image_part(png_bytes), headers=owner_headers)).json()
    news_id = created["news"]["id"]

    response = await async_client.put(
        f"/api/v1/news/{news_id}", data={"title": "x"}, headers=other_headers
    )

    assert response.status_code == 403
    assert response.json() == {"status": 403, "message": "User is unauthorized."}
    news = test_db.query(News).filter(News.id == news_id).one()
    test_db.refresh(news)
    assert news.title == FORM["title"]


@pytest.mark.asyncio
async def test_update_missing_news(async_client, owner_headers):
    response = await async_client.put("/api/v1/news/777", data=FORM, headers=owner_headers)

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_persistence_fault_is_generic_500(async_client, owner_headers):
    with patch("newsdesk.repositories.news_repository.NewsRepository.count", side_effect=PersistenceFault("db down")):
        response = await async_client.get("/api/v1/news")

    assert response.status_code == 500
    assert response.json() == {"status": 500, "message": "Something went wrong. Please try again."}
    assert "db down" not in response.text
