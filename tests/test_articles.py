import uuid

import pytest

from conftest import image_file, insert_article, insert_category, post_article
from inkwell.extensions import db
from inkwell.models import Category, Comment


def category_count(app, name):
    with app.app_context():
        return db.session.execute(
            db.select(Category.article_count).where(Category.name == name)
        ).scalar_one()


@pytest.fixture
def python_category(app):
    with app.app_context():
        return insert_category("Python").id


class TestCreateArticle:

    def test_create_uploads_both_images(self, client, media, python_category):
        response = post_article(client)

        assert response.status_code == 201
        article = response.get_json()["data"]["article"]
        assert article["slug"] == "understanding-python-decorators"
        assert article["views"] == 0
        assert article["likes"] == 0
        assert article["liked_by"] == []
        assert article["avatar_url"].startswith("https://cdn.example.com/articles/avatars/")
        assert article["image_url"].startswith("https://cdn.example.com/articles/images/")

        assert sorted(u["folder"] for u in media.uploads) == ["articles/avatars", "articles/images"]

    def test_create_increments_matching_category_ignoring_case(self, app, client, python_category):
        post_article(client, category="python")
        post_article(client, title="Another Python article")

        assert category_count(app, "Python") == 2

    def test_create_with_unknown_category_still_succeeds(self, client):
        response = post_article(client, category="Uncategorised")
        assert response.status_code == 201

    def test_missing_images_are_rejected(self, client, media):
        response = post_article(client, avatar=None)

        assert response.status_code == 400
        assert "avatar" in response.get_json()["error"]["details"]
        assert media.uploads == []

    def test_non_image_file_is_rejected(self, client, media):
        response = post_article(client, img=image_file("notes.txt", "text/plain", b"hello"))

        assert response.status_code == 400
        assert response.get_json()["error"]["details"]["img"] == "Only image files are allowed"
        assert media.uploads == []

    def test_missing_fields_are_reported(self, client, media):
        response = post_article(client, title=None, description="short")

        assert response.status_code == 400
        details = response.get_json()["error"]["details"]
        assert set(details) == {"title", "description"}
        assert media.uploads == []

    def test_duplicate_titles_get_disambiguated_slugs(self, client):
        slugs = [
            post_article(client).get_json()["data"]["article"]["slug"]
            for _ in range(3)
        ]

        assert slugs == [
            "understanding-python-decorators",
            "understanding-python-decorators-2",
            "understanding-python-decorators-3",
        ]

    def test_title_without_slug_characters_is_rejected(self, client, media):
        response = post_article(client, title="!!!!! ???")

        assert response.status_code == 400
        assert media.uploads == []

    def test_failed_upload_rolls_back_and_writes_nothing(self, client, media, python_category, app):
        media.fail_folders.add("articles/images")

        response = post_article(client)

        assert response.status_code == 500
        body = response.get_json()
        assert body["error"]["code"] == "MEDIA_UPLOAD_FAILED"
        assert body["error"]["details"]["retryable"] is True

        uploaded = [u["ref"] for u in media.uploads]
        assert uploaded and set(uploaded) <= set(media.deleted)

        listing = client.get("/api/articles").get_json()["data"]
        assert listing["pagination"]["total_items"] == 0
        assert category_count(app, "Python") == 0


class TestReadArticles:

    def test_get_by_id_records_a_view(self, client):
        article_id = post_article(client).get_json()["data"]["article"]["id"]

        first = client.get(f"/api/articles/{article_id}").get_json()["data"]["article"]
        second = client.get(f"/api/articles/{article_id}").get_json()["data"]["article"]

        assert first["views"] == 1
        assert second["views"] == 2

    def test_get_by_slug(self, client):
        post_article(client, title="Async IO explained")

        response = client.get("/api/articles/slug/async-io-explained")

        assert response.status_code == 200
        article = response.get_json()["data"]["article"]
        assert article["title"] == "Async IO explained"
        assert article["views"] == 1

        assert client.get("/api/articles/slug/missing-slug").status_code == 404

    def test_get_invalid_and_missing_ids(self, client):
        response = client.get("/api/articles/12345")
        assert response.status_code == 400
        assert response.get_json()["error"]["code"] == "INVALID_ID"

        response = client.get(f"/api/articles/{uuid.uuid4()}")
        assert response.status_code == 404
        assert response.get_json()["message"] == "Article not found"

    def test_list_paginates_sorted_by_views(self, app, client):
        with app.app_context():
            for i in range(25):
                insert_article(title=f"Article number {i}", views=i)

        response = client.get("/api/articles?page=2&limit=10&sort=views")

        assert response.status_code == 200
        data = response.get_json()["data"]
        assert [a["views"] for a in data["articles"]] == list(range(14, 4, -1))
        assert data["count"] == 10
        assert data["pagination"] == {
            "page": 2,
            "limit": 10,
            "total_items": 25,
            "total_pages": 3,
            "has_next": True,
            "has_prev": True,
        }

        last = client.get("/api/articles?page=3&limit=10&sort=views&order=asc").get_json()["data"]
        assert [a["views"] for a in last["articles"]] == [20, 21, 22, 23, 24]
        assert last["pagination"]["has_next"] is False

    def test_list_beyond_last_page_is_empty(self, app, client):
        with app.app_context():
            insert_article()

        data = client.get("/api/articles?page=5").get_json()["data"]

        assert data["articles"] == []
        assert data["pagination"]["total_items"] == 1

    def test_list_filters_by_category_and_search(self, app, client):
        with app.app_context():
            insert_article(title="Flask blueprints", category="Python")
            insert_article(title="React hooks", category="JavaScript")
            insert_article(title="Django signals", category="python")

        by_category = client.get("/api/articles?category=PYTHON").get_json()["data"]
        assert {a["title"] for a in by_category["articles"]} == {"Flask blueprints", "Django signals"}

        by_search = client.get("/api/articles?search=hooks").get_json()["data"]
        assert [a["title"] for a in by_search["articles"]] == ["React hooks"]

    def test_search_treats_wildcards_literally(self, app, client):
        with app.app_context():
            insert_article(title="Progress at 100% today")
            insert_article(title="Nothing special here")

        data = client.get("/api/articles?search=100%25").get_json()["data"]
        assert [a["title"] for a in data["articles"]] == ["Progress at 100% today"]

        assert client.get("/api/articles?search=%25").get_json()["data"]["count"] == 1

    def test_list_rejects_bad_pagination(self, client):
        assert client.get("/api/articles?page=0").status_code == 400
        assert client.get("/api/articles?limit=abc").status_code == 400

    def test_most_viewed(self, app, client):
        with app.app_context():
            for i, views in enumerate([3, 30, 10]):
                insert_article(title=f"Ranked article {i}", views=views)

        data = client.get("/api/articles/most-viewed?limit=2").get_json()["data"]

        assert data["count"] == 2
        assert [a["views"] for a in data["articles"]] == [30, 10]


class TestUpdateArticle:

    def test_update_title_reslugs(self, client):
        article_id = post_article(client).get_json()["data"]["article"]["id"]

        response = client.put(f"/api/articles/{article_id}", json={"title": "Decorators revisited"})

        assert response.status_code == 200
        article = response.get_json()["data"]["article"]
        assert article["title"] == "Decorators revisited"
        assert article["slug"] == "decorators-revisited"

    def test_update_keeps_slug_unique(self, client):
        post_article(client, title="Taken title here")
        article_id = post_article(client, title="Some other title").get_json()["data"]["article"]["id"]

        article = client.put(
            f"/api/articles/{article_id}", json={"title": "Taken title here"}
        ).get_json()["data"]["article"]

        assert article["slug"] == "taken-title-here-2"

    def test_update_replaces_image_and_deletes_old_asset(self, client, media):
        created = post_article(client).get_json()["data"]["article"]

        response = client.put(
            f"/api/articles/{created['id']}",
            data={"avatar": image_file("new-avatar.png")},
            content_type="multipart/form-data",
        )

        assert response.status_code == 200
        updated = response.get_json()["data"]["article"]
        assert updated["avatar_asset_ref"] != created["avatar_asset_ref"]
        assert updated["image_asset_ref"] == created["image_asset_ref"]
        assert media.deleted == [created["avatar_asset_ref"]]

    def test_update_category_moves_count(self, app, client):
        with app.app_context():
            insert_category("Python")
            insert_category("Rust")

        article_id = post_article(client).get_json()["data"]["article"]["id"]
        client.put(f"/api/articles/{article_id}", json={"category": "Rust"})

        assert category_count(app, "Python") == 0
        assert category_count(app, "Rust") == 1

    def test_update_validation(self, client):
        article_id = post_article(client).get_json()["data"]["article"]["id"]

        response = client.put(f"/api/articles/{article_id}", json={"description": "short"})

        assert response.status_code == 400
        assert "description" in response.get_json()["error"]["details"]

    def test_update_missing_article(self, client):
        response = client.put(f"/api/articles/{uuid.uuid4()}", json={"title": "Valid new title"})
        assert response.status_code == 404


class TestDeleteArticle:

    def test_delete_removes_media_comments_and_count(self, app, client, media, python_category):
        created = post_article(client).get_json()["data"]["article"]
        client.post(f"/api/articles/{created['id']}/comments", json={"user": "Ada", "text": "Great read"})
        client.post(f"/api/articles/{created['id']}/like", json={"user_id": "alice"})

        response = client.delete(f"/api/articles/{created['id']}")

        assert response.status_code == 200
        assert response.get_json()["message"] == "Article deleted successfully"
        assert sorted(media.deleted) == sorted([created["avatar_asset_ref"], created["image_asset_ref"]])
        assert category_count(app, "Python") == 0

        with app.app_context():
            assert db.session.execute(db.select(Comment)).scalars().all() == []

        assert client.get(f"/api/articles/{created['id']}").status_code == 404

    def test_delete_twice_is_not_found_and_count_never_negative(self, app, client, python_category):
        article_id = post_article(client).get_json()["data"]["article"]["id"]

        assert client.delete(f"/api/articles/{article_id}").status_code == 200
        assert client.delete(f"/api/articles/{article_id}").status_code == 404
        assert category_count(app, "Python") == 0

    def test_delete_does_not_drive_count_below_zero(self, app, client):
        with app.app_context():
            insert_category("Python", article_count=0)
            article_id = insert_article(category="Python").id

        assert client.delete(f"/api/articles/{article_id}").status_code == 200
        assert category_count(app, "Python") == 0


def test_update_with_non_object_json_body(client):
    article_id = post_article(client).get_json()["data"]["article"]["id"]

    response = client.put(f"/api/articles/{article_id}", json=["title", "New title here"])

    assert response.status_code == 400
    assert response.get_json()["error"]["code"] == "VALIDATION_ERROR"


def test_slug_lookup_with_malformed_slug_is_not_found(client):
    post_article(client, title="Async IO explained")

    assert client.get("/api/articles/slug/async--io-explained").status_code == 404
    assert client.get("/api/articles/slug/-async-io-explained").status_code == 404
    assert client.get("/api/articles/slug/ASYNC-IO-EXPLAINED").status_code == 200
