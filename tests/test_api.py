from fastapi import status

from conftest import day
from models import TopicStatus


def create_topic(client, **overrides):
    payload = {"title": "Post", "content": "Body", "status": 1, "tag_list": ["orm"]}
    payload.update(overrides)
    response = client.post("/topics", json=payload)
    assert response.status_code == status.HTTP_201_CREATED
    return response.json()["id"]


def test_create_and_get_topic(client, categories):
    python_id, _ = categories
    topic_id = create_topic(client, category_list=[python_id], date="2024-01-02T12:00:00")

    response = client.get(f"/topics/{topic_id}")
    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["title"] == "Post"
    assert body["status"] == 1
    assert body["tags"] == ["orm"]
    assert body["categories"] == [{"id": python_id, "name": "Python"}]


def test_get_missing_topic(client):
    response = client.get("/topics/999")
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_edit_topic(client, categories):
    _, web_id = categories
    topic_id = create_topic(client)

    response = client.put(f"/topics/{topic_id}", json={
        "title": "Edited", "content": "New", "status": 0,
        "category_list": [web_id], "tag_list": ["css"],
    })
    assert response.status_code == status.HTTP_200_OK

    body = client.get(f"/topics/{topic_id}").json()
    assert body["title"] == "Edited"
    assert body["tags"] == ["css"]
    assert [c["id"] for c in body["categories"]] == [web_id]


def test_edit_missing_topic(client):
    response = client.put("/topics/999", json={"title": "Nope"})
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["detail"] == "Topic not found"


def test_list_and_batch_status(client):
    first = create_topic(client, title="First", date="2024-01-01T00:00:00")
    second = create_topic(client, title="Second", date="2024-01-02T00:00:00")

    response = client.post("/topics/batch/status", json={"id_list": [first], "status": 2})
    assert response.status_code == status.HTTP_200_OK

    body = client.get("/topics", params={"page": 1, "page_size": 10}).json()
    assert body["total"] == 1
    assert body["items"][0]["id"] == second


def test_invalid_page_size(client):
    response = client.get("/topics", params={"page_size": 0})
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_archive_queries(client, categories):
    python_id, _ = categories
    create_topic(client, title="January", category_list=[python_id], date="2024-01-15T08:00:00")
    create_topic(client, title="February", tag_list=["css"], date="2024-02-15T08:00:00")

    assert client.get(f"/topics/by-category/{python_id}").json()["total"] == 1
    assert client.get("/topics/by-tag/css").json()["items"][0]["title"] == "February"
    assert client.get("/topics/by-month/2024/1").json()["items"][0]["title"] == "January"
    assert client.get("/topics/by-month/2024/13").status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    assert [t["title"] for t in client.get("/topics/recent", params={"count": 1}).json()] == ["February"]
    assert client.get("/topics/month-statistics").json() == [
        {"year": 2024, "month": 2, "count": 1},
        {"year": 2024, "month": 1, "count": 1},
    ]


def test_offset_date_is_archived_by_utc_month(client):
    topic_id = create_topic(client, title="Late January", date="2024-02-01T01:30:00+02:00")

    assert client.get(f"/topics/{topic_id}").json()["date"].startswith("2024-01-31T23:30:00")
    assert client.get("/topics/by-month/2024/1").json()["total"] == 1
    assert client.get("/topics/by-month/2024/2").json()["total"] == 0


def test_prev_next_and_related(client):
    first = create_topic(client, title="First", date="2024-01-01T00:00:00")
    second = create_topic(client, title="Second", date="2024-01-02T00:00:00")

    assert client.get(f"/topics/{second}/prev").json()["id"] == first
    assert client.get(f"/topics/{second}/next").json() is None
    assert [t["id"] for t in client.get(f"/topics/{second}/related").json()] == [first]


def test_tags_endpoints(client):
    create_topic(client, tag_list=["python", "pythonic", "web"])

    paged = client.get("/tags", params={"keywords": "python"}).json()
    assert paged["total"] == 2

    web = client.get("/tags/web").json()
    assert web["topics"] == {"all": 1, "published": 1}
    assert client.get("/tags/missing").status_code == status.HTTP_404_NOT_FOUND

    response = client.put(f"/tags/{web['id']}", json={"keyword": "python"})
    assert response.status_code == status.HTTP_409_CONFLICT

    response = client.post("/tags/batch/delete", json={"id_list": [web["id"]]})
    assert response.status_code == status.HTTP_200_OK
    assert len(client.get("/tags/all").json()) == 2


def test_categories_endpoints(client):
    response = client.post("/categories", json={"name": "Python"})
    assert response.status_code == status.HTTP_201_CREATED
    category_id = response.json()["id"]

    assert client.post("/categories", json={"name": "Python"}).status_code == status.HTTP_409_CONFLICT

    response = client.put(f"/categories/{category_id}", json={"name": "Py", "description": "Snakes"})
    assert response.status_code == status.HTTP_200_OK
    assert client.get("/categories").json()[0]["name"] == "Py"

    client.post("/categories/batch/delete", json={"id_list": [category_id]})
    assert client.get("/categories").json() == []


def test_admin_editor_flow(client, categories):
    python_id, _ = categories

    state = client.get("/admin/topics/editor").json()
    assert state["actions"] == ["publish", "save", "cancel"]

    response = client.post("/admin/topics/editor/save", json={"title": ""})
    assert response.status_code == status.HTTP_400_BAD_REQUEST

    response = client.post("/admin/topics/editor/publish", json={
        "title": "From editor", "content": "Body", "tags": ["orm"], "checked_categories": [python_id],
    })
    assert response.status_code == status.HTTP_200_OK
    topic_id = response.json()["id"]

    state = client.get(f"/admin/topics/{topic_id}/editor").json()
    assert state["topic"]["status"] == TopicStatus.PUBLISHED
    assert state["actions"] == ["view", "draft", "save", "cancel"]
    assert [c["checked"] for c in state["categories"]] == [True, False]

    response = client.post(f"/admin/topics/editor/draft?topic_id={topic_id}", json={"title": "From editor"})
    assert response.json()["id"] == topic_id
    assert client.get(f"/topics/{topic_id}").json()["status"] == TopicStatus.NORMAL

    assert client.get("/admin/topics/404/editor").status_code == status.HTTP_404_NOT_FOUND


def test_clear_cache(client, redis_client):
    client.get("/tags/all")
    assert redis_client.store

    response = client.post("/admin/cache/clear")
    assert response.status_code == status.HTTP_200_OK
    assert redis_client.store == {}


def test_health(client):
    response = client.get("/health")
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["status"] == "healthy"
