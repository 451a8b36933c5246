# server/inkwell/models/category.py

import uuid
from datetime import datetime

from inkwell.extensions import db


class Category(db.Model):
    __tablename__ = "categories"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    name = db.Column(db.String(50), nullable=False)
    slug = db.Column(db.String(60), unique=True, nullable=False, index=True)

    article_count = db.Column(db.Integer, default=0, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        db.CheckConstraint("article_count >= 0", name="ck_categories_article_count"),
    )

    def __init__(self, name: str, slug: str):
        self.name = name.strip()
        self.slug = slug.lower()
        self.article_count = 0

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "article_count": self.article_count,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    def __repr__(self) -> str:
        return f"<Category {self.name}>"
