import io
import itertools
import threading

import pytest

from inkwell import create_app
from inkwell.errors import UpstreamError
from inkwell.extensions import db
from inkwell.models import Article, Category, Project
from inkwell.services.media_service import MediaAsset, MediaService
from inkwell.services.redis_service import RedisService

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


class StubResponse:
    def __init__(self, status_code=200, json_data=None, text=""):
        self.status_code = status_code
        self._json_data = json_data
        self.text = text

    def json(self):
        if isinstance(self._json_data, Exception):
            raise self._json_data
        return self._json_data


class StubSession:
    """Records requests.Session.post calls made by the media client."""

    def __init__(self):
        self.post_calls = []
        self.responses = []
        self.error = None

    def queue(self, response):
        self.responses.append(response)

    def post(self, url, data=None, files=None, timeout=None):
        self.post_calls.append({"url": url, "data": data, "files": files, "timeout": timeout})
        if self.error is not None:
            raise self.error
        if self.responses:
            return self.responses.pop(0)
        return StubResponse(200, {"result": "ok"})


class StubMedia(MediaService):
    """
    Media client that never leaves the process.

    Keeps the real fan-out helpers (upload_many, submit_deletes) and only
    replaces the single-asset calls.
    """

    def __init__(self):
        super().__init__("demo", "key", "secret", timeout=1, max_workers=2, session=StubSession())
        self.uploads = []
        self.deleted = []
        self.fail_folders = set()
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def upload(self, data, folder, filename=None):
        if folder in self.fail_folders:
            raise UpstreamError("Image upload failed", code="MEDIA_UPLOAD_FAILED")

        with self._lock:
            ref = f"{folder}/asset-{next(self._ids)}"
            self.uploads.append({"folder": folder, "filename": filename, "size": len(data), "ref": ref})

        return MediaAsset(url=f"https://cdn.example.com/{ref}.png", asset_ref=ref)

    def delete(self, asset_ref):
        if not asset_ref:
            return False
        with self._lock:
            self.deleted.append(asset_ref)
        return True


@pytest.fixture
def media():
    return StubMedia()


@pytest.fixture
def app(media):
    app = create_app("testing", media=media, cache=RedisService())
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def ctx(app):
    with app.app_context():
        yield app


def image_file(name="cover.png", content_type="image/png", data=PNG_BYTES):
    return (io.BytesIO(data), name, content_type)


def article_form(**overrides):
    form = {
        "category": "Python",
        "title": "Understanding Python decorators",
        "description": "A walk through closures, wrappers and functools.wraps.",
        "code": "def deco(fn):\n    return fn\n",
        "avatar": image_file("avatar.png"),
        "img": image_file("cover.png"),
    }
    form.update(overrides)
    return {k: v for k, v in form.items() if v is not None}


def post_article(client, **overrides):
    return client.post(
        "/api/articles",
        data=article_form(**overrides),
        content_type="multipart/form-data",
    )


def insert_article(title="Sample article title", category="Python", views=0, slug=None, **extra):
    article = Article(
        category=category,
        title=title,
        description="A description that is comfortably long enough.",
        code="print('hello')",
        slug=slug or title.lower().replace(" ", "-"),
        avatar_url="https://cdn.example.com/a.png",
        image_url="https://cdn.example.com/i.png",
        avatar_asset_ref=extra.pop("avatar_asset_ref", None),
        image_asset_ref=extra.pop("image_asset_ref", None),
    )
    article.views = views
    for key, value in extra.items():
        setattr(article, key, value)
    db.session.add(article)
    db.session.commit()
    return article


def insert_category(name="Python", slug=None, article_count=0):
    category = Category(name=name, slug=slug or name.lower())
    category.article_count = article_count
    db.session.add(category)
    db.session.commit()
    return category


def insert_project(title="Portfolio site", category="web", **extra):
    project = Project(
        title=title,
        description=extra.pop("description", "A personal portfolio"),
        full_description=extra.pop("full_description", "Built with Flask and React."),
        image_url="https://cdn.example.com/p.png",
        category=category,
        technologies=extra.pop("technologies", ["Flask", "React"]),
        github=extra.pop("github", None),
        demo=extra.pop("demo", None),
    )
    db.session.add(project)
    db.session.commit()
    return project
