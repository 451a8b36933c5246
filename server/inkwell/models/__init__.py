# server/inkwell/models/__init__.py

from inkwell.models.category import Category
from inkwell.models.article import Article, ArticleLike
from inkwell.models.comment import Comment
from inkwell.models.project import Project

__all__ = [
    "Category",
    "Article",
    "ArticleLike",
    "Comment",
    "Project",
]
