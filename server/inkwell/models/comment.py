# server/inkwell/models/comment.py

import uuid
from datetime import datetime

from inkwell.extensions import db
from inkwell.utils.helpers import time_ago


class Comment(db.Model):
    __tablename__ = "comments"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    article_id = db.Column(db.String(36), nullable=False, index=True)

    user = db.Column(db.String(60), nullable=False)
    text = db.Column(db.String(1000), nullable=False)
    likes = db.Column(db.Integer, default=0, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __init__(self, article_id: str, user: str, text: str):
        self.article_id = article_id
        self.user = user.strip()
        self.text = text.strip()
        self.likes = 0

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "article_id": self.article_id,
            "user": self.user,
            "text": self.text,
            "likes": self.likes,
            "time": time_ago(self.created_at),
            "created_at": self.created_at.isoformat(),
        }

    def __repr__(self) -> str:
        return f"<Comment {self.id[:8]} on {self.article_id[:8]}>"
