# server/inkwell/models/article.py

import uuid
from datetime import datetime

from inkwell.extensions import db


class Article(db.Model):
    __tablename__ = "articles"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    category = db.Column(db.String(50), nullable=False, index=True)

    avatar_url = db.Column(db.String(512), nullable=False)
    avatar_asset_ref = db.Column(db.String(255), nullable=True)
    image_url = db.Column(db.String(512), nullable=False)
    image_asset_ref = db.Column(db.String(255), nullable=True)

    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=False)
    code = db.Column(db.Text, nullable=False)
    slug = db.Column(db.String(300), unique=True, nullable=False, index=True)

    views = db.Column(db.BigInteger, default=0, nullable=False, index=True)
    likes = db.Column(db.BigInteger, default=0, nullable=False)
    shares = db.Column(db.BigInteger, default=0, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    liked_by_rows = db.relationship(
        "ArticleLike",
        back_populates="article",
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by="ArticleLike.created_at",
    )

    __table_args__ = (
        db.CheckConstraint("views >= 0", name="ck_articles_views"),
        db.CheckConstraint("likes >= 0", name="ck_articles_likes"),
        db.CheckConstraint("shares >= 0", name="ck_articles_shares"),
    )

    def __init__(
        self,
        category: str,
        title: str,
        description: str,
        code: str,
        slug: str,
        avatar_url: str,
        image_url: str,
        avatar_asset_ref: str = None,
        image_asset_ref: str = None,
    ):
        self.category = category
        self.title = title
        self.description = description
        self.code = code
        self.slug = slug.lower()
        self.avatar_url = avatar_url
        self.avatar_asset_ref = avatar_asset_ref
        self.image_url = image_url
        self.image_asset_ref = image_asset_ref
        self.views = 0
        self.likes = 0
        self.shares = 0

    @property
    def liked_by(self) -> list:
        return [row.identity for row in self.liked_by_rows]

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "category": self.category,
            "avatar_url": self.avatar_url,
            "avatar_asset_ref": self.avatar_asset_ref,
            "image_url": self.image_url,
            "image_asset_ref": self.image_asset_ref,
            "title": self.title,
            "description": self.description,
            "code": self.code,
            "slug": self.slug,
            "views": self.views,
            "likes": self.likes,
            "shares": self.shares,
            "liked_by": self.liked_by,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    def to_summary_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "slug": self.slug,
            "views": self.views,
            "category": self.category,
            "image_url": self.image_url,
            "created_at": self.created_at.isoformat(),
        }

    def __repr__(self) -> str:
        return f"<Article {self.slug}>"


class ArticleLike(db.Model):
    __tablename__ = "article_likes"

    article_id = db.Column(db.String(36), db.ForeignKey("articles.id", ondelete="CASCADE"), primary_key=True)
    identity = db.Column(db.String(128), primary_key=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    article = db.relationship("Article", back_populates="liked_by_rows")

    __table_args__ = (
        db.Index("idx_article_likes_identity", "identity"),
    )
