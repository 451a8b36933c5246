# server/inkwell/services/engagement_service.py

import logging
from typing import List, Optional

from sqlalchemy import delete, insert, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from inkwell.errors import Conflict, NotFound, UpstreamError, ValidationError, invalid_id
from inkwell.models.article import Article, ArticleLike
from inkwell.utils.helpers import hash_string, is_valid_uuid

logger = logging.getLogger(__name__)

MAX_IDENTITY_LENGTH = 128
GUEST_PREFIX = "guest_"


class EngagementService:
    """
    View, like and share counters for articles.

    The liked_by set lives in article_likes with a primary key on
    (article_id, identity). A like inserts a row and bumps the counter in
    the same transaction, so two concurrent likes from one identity cannot
    both commit, and likes always equals the number of rows.
    """

    def __init__(self, store, cache=None, require_identity: bool = False, most_viewed_ttl: int = 60):
        self.store = store
        self.cache = cache
        self.require_identity = require_identity
        self.most_viewed_ttl = most_viewed_ttl

    def identity_for(self, user_id, remote_addr: Optional[str]) -> str:
        if user_id is not None and (isinstance(user_id, bool) or not isinstance(user_id, (str, int, float))):
            raise ValidationError("user_id must be a string or number", details={"user_id": "invalid type"})

        identity = str(user_id).strip() if user_id is not None else ""
        if identity:
            if len(identity) > MAX_IDENTITY_LENGTH:
                raise ValidationError(
                    f"user_id must not exceed {MAX_IDENTITY_LENGTH} characters",
                    details={"user_id": "too long"},
                )
            return identity

        if self.require_identity:
            raise ValidationError("user_id is required", details={"user_id": "required"})

        # Stable per caller address; shared by everyone behind the same NAT.
        return f"{GUEST_PREFIX}{hash_string(remote_addr or 'unknown')[:16]}"

    def _get_article(self, article_id: str) -> Article:
        if not is_valid_uuid(article_id):
            raise invalid_id("article")

        article = self.store.find_by_id(Article, article_id)
        if article is None:
            raise NotFound("Article not found")
        return article

    def record_view(self, article_id: str) -> Article:
        if not is_valid_uuid(article_id):
            raise invalid_id("article")

        article = self.store.update_by_id(Article, article_id, increment={"views": 1})
        if article is None:
            raise NotFound("Article not found")

        return article

    def record_share(self, article_id: str) -> Article:
        if not is_valid_uuid(article_id):
            raise invalid_id("article")

        article = self.store.update_by_id(Article, article_id, increment={"shares": 1})
        if article is None:
            raise NotFound("Article not found")

        return article

    def like(self, article_id: str, identity: str) -> Article:
        self._get_article(article_id)
        session = self.store.session

        try:
            session.execute(insert(ArticleLike).values(article_id=article_id, identity=identity))
            session.execute(
                update(Article)
                .where(Article.id == article_id)
                .values(likes=Article.likes + 1)
                .execution_options(synchronize_session=False)
            )
            session.commit()
        except IntegrityError:
            session.rollback()
            # foreign key failure means the article vanished mid-request
            self._get_article(article_id)
            raise Conflict("You have already liked this article", code="ALREADY_LIKED")
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Like failed for article {article_id}: {e}")
            raise UpstreamError("Failed to like article")

        logger.info(f"Article {article_id} liked by {identity}")
        return self._get_article(article_id)

    def unlike(self, article_id: str, identity: str) -> Article:
        self._get_article(article_id)
        session = self.store.session

        try:
            removed = session.execute(
                delete(ArticleLike).where(
                    ArticleLike.article_id == article_id,
                    ArticleLike.identity == identity,
                ).execution_options(synchronize_session=False)
            ).rowcount

            if not removed:
                session.rollback()
                raise Conflict("You haven't liked this article", code="NOT_LIKED")

            session.execute(
                update(Article)
                .where(Article.id == article_id, Article.likes > 0)
                .values(likes=Article.likes - 1)
                .execution_options(synchronize_session=False)
            )
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Unlike failed for article {article_id}: {e}")
            raise UpstreamError("Failed to unlike article")

        logger.info(f"Article {article_id} unliked by {identity}")
        return self._get_article(article_id)

    def like_status(self, article_id: str, identity: str) -> dict:
        article = self._get_article(article_id)
        liked = self.store.count(ArticleLike, article_id=article_id, identity=identity) > 0
        return {
            "article_id": article.id,
            "is_liked": liked,
            "like_count": article.likes,
        }

    def like_stats(self, article_id: str) -> dict:
        article = self._get_article(article_id)
        return {
            "article_id": article.id,
            "total_likes": article.likes,
            "unique_likers": len(article.liked_by),
        }

    def view_stats(self, article_id: str) -> dict:
        article = self._get_article(article_id)
        return {
            "article_id": article.id,
            "title": article.title,
            "total_views": article.views,
            "total_shares": article.shares,
        }

    def liked_articles(self, identity: str) -> List[Article]:
        liked_ids = select(ArticleLike.article_id).where(ArticleLike.identity == identity)
        return self.store.find(
            Article,
            Article.id.in_(liked_ids),
            order_by=[Article.created_at.desc(), Article.id],
        )

    def most_viewed(self, limit: int = 10) -> List[dict]:
        cache_key = f"most_viewed:{limit}"

        if self.cache:
            cached = self.cache.get_cached_json(cache_key)
            if cached is not None:
                return cached

        articles = self.store.find(
            Article,
            order_by=[Article.views.desc(), Article.created_at.desc(), Article.id],
            limit=limit,
        )
        data = [a.to_summary_dict() for a in articles]

        if self.cache:
            self.cache.cache_json(cache_key, data, ttl=self.most_viewed_ttl)

        return data
