# server/inkwell/routes/__init__.py

from inkwell.routes.categories import categories_bp
from inkwell.routes.articles import articles_bp
from inkwell.routes.engagement import engagement_bp
from inkwell.routes.comments import comments_bp
from inkwell.routes.projects import projects_bp

__all__ = [
    "categories_bp",
    "articles_bp",
    "engagement_bp",
    "comments_bp",
    "projects_bp",
]
