# server/inkwell/services/__init__.py

from inkwell.services.redis_service import RedisService
from inkwell.services.media_service import MediaService, MediaAsset
from inkwell.services.category_service import CategoryService
from inkwell.services.article_service import ArticleService
from inkwell.services.engagement_service import EngagementService
from inkwell.services.comment_service import CommentService
from inkwell.services.project_service import ProjectService

__all__ = [
    "RedisService",
    "MediaService",
    "MediaAsset",
    "CategoryService",
    "ArticleService",
    "EngagementService",
    "CommentService",
    "ProjectService",
]
