# server/inkwell/services/comment_service.py

import logging
from typing import Dict, List

from inkwell.errors import NotFound, ValidationError, invalid_id
from inkwell.models.article import Article
from inkwell.models.comment import Comment
from inkwell.utils.helpers import is_valid_uuid
from inkwell.utils.validators import ContentValidator

logger = logging.getLogger(__name__)


class CommentService:

    def __init__(self, store):
        self.store = store

    def list_for_article(self, article_id: str) -> List[Comment]:
        if not is_valid_uuid(article_id):
            raise invalid_id("article")

        return self.store.find(
            Comment,
            order_by=[Comment.created_at.desc(), Comment.id],
            article_id=article_id,
        )

    def create(self, article_id: str, data: Dict) -> Comment:
        is_valid, fields, errors = ContentValidator.validate_comment(data)
        if not is_valid:
            raise ValidationError("User name and comment text are required", details=errors)

        if not is_valid_uuid(article_id):
            raise invalid_id("article")

        if self.store.find_by_id(Article, article_id) is None:
            raise NotFound("Article not found")

        comment = self.store.create(Comment, article_id=article_id, **fields)

        logger.info(f"Comment {comment.id} added to article {article_id}")
        return comment

    def like(self, comment_id: str) -> Comment:
        if not is_valid_uuid(comment_id):
            raise invalid_id("comment")

        comment = self.store.update_by_id(Comment, comment_id, increment={"likes": 1})
        if comment is None:
            raise NotFound("Comment not found")
        return comment

    def delete(self, comment_id: str) -> dict:
        if not is_valid_uuid(comment_id):
            raise invalid_id("comment")

        deleted = self.store.delete_by_id(Comment, comment_id)
        if deleted is None:
            raise NotFound("Comment not found")

        logger.info(f"Comment deleted: {comment_id}")
        return deleted
