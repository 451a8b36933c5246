# server/inkwell/config.py

import os

from dotenv import load_dotenv

load_dotenv()


def _env_bool(key: str, default: bool = False) -> bool:
    value = os.environ.get(key)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_list(key: str) -> list:
    value = os.environ.get(key, "")
    return [item.strip() for item in value.split(",") if item.strip()]


def _database_url() -> str:
    url = os.environ.get("DATABASE_URL", "sqlite:///inkwell.db")
    # Heroku/Render style URLs
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql://", 1)
    return url


class Config:
    FLASK_ENV = "production"
    DEBUG = False
    TESTING = False

    SECRET_KEY = os.environ.get("SECRET_KEY", "change-me")

    SQLALCHEMY_DATABASE_URI = _database_url()
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_pre_ping": True,
        "pool_recycle": 300,
    }

    REDIS_URL = os.environ.get("REDIS_URL")
    CACHE_TTL_CATEGORIES = int(os.environ.get("CACHE_TTL_CATEGORIES", 300))
    CACHE_TTL_MOST_VIEWED = int(os.environ.get("CACHE_TTL_MOST_VIEWED", 60))

    CLOUDINARY_CLOUD_NAME = os.environ.get("CLOUDINARY_CLOUD_NAME")
    CLOUDINARY_API_KEY = os.environ.get("CLOUDINARY_API_KEY")
    CLOUDINARY_API_SECRET = os.environ.get("CLOUDINARY_API_SECRET")
    MEDIA_TIMEOUT = int(os.environ.get("MEDIA_TIMEOUT", 30))
    MEDIA_MAX_WORKERS = int(os.environ.get("MEDIA_MAX_WORKERS", 4))

    MAX_IMAGE_SIZE = int(os.environ.get("MAX_IMAGE_SIZE", 5 * 1024 * 1024))
    MAX_CONTENT_LENGTH = int(os.environ.get("MAX_CONTENT_LENGTH", 12 * 1024 * 1024))

    CORS_ORIGINS = _env_list("CORS_ORIGINS")

    REQUIRE_ENGAGEMENT_IDENTITY = _env_bool("REQUIRE_ENGAGEMENT_IDENTITY", False)

    RATELIMIT_ENABLED = _env_bool("RATELIMIT_ENABLED", True)
    RATELIMIT_STORAGE_URI = os.environ.get("REDIS_URL") or "memory://"
    RATELIMIT_HEADERS_ENABLED = True

    DEFAULT_PAGE_SIZE = 10
    MAX_PAGE_SIZE = 100
    MOST_VIEWED_MAX = 50


class DevelopmentConfig(Config):
    FLASK_ENV = "development"
    DEBUG = True


class ProductionConfig(Config):
    FLASK_ENV = "production"


class TestingConfig(Config):
    FLASK_ENV = "testing"
    TESTING = True

    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SQLALCHEMY_ENGINE_OPTIONS = {}

    REDIS_URL = None
    RATELIMIT_ENABLED = False
    RATELIMIT_STORAGE_URI = "memory://"

    CLOUDINARY_CLOUD_NAME = None
    CLOUDINARY_API_KEY = None
    CLOUDINARY_API_SECRET = None

    REQUIRE_ENGAGEMENT_IDENTITY = False


config_by_name = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
}


def get_config(name=None):
    if name is None:
        return Config
    if isinstance(name, str):
        return config_by_name.get(name.lower(), ProductionConfig)
    return name
