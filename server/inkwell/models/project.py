# server/inkwell/models/project.py

import uuid
from datetime import datetime
from typing import List, Optional

from inkwell.extensions import db


class Project(db.Model):
    __tablename__ = "projects"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=False)
    full_description = db.Column(db.Text, nullable=False)
    image_url = db.Column(db.String(512), nullable=False)
    category = db.Column(db.String(50), nullable=False, index=True)
    technologies = db.Column(db.JSON, nullable=False, default=list)

    github = db.Column(db.String(512), nullable=True)
    demo = db.Column(db.String(512), nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __init__(
        self,
        title: str,
        description: str,
        full_description: str,
        image_url: str,
        category: str,
        technologies: Optional[List[str]] = None,
        github: Optional[str] = None,
        demo: Optional[str] = None,
    ):
        self.title = title.strip()
        self.description = description.strip()
        self.full_description = full_description
        self.image_url = image_url
        self.category = category
        self.technologies = list(technologies or [])
        self.github = github
        self.demo = demo

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "full_description": self.full_description,
            "image_url": self.image_url,
            "category": self.category,
            "technologies": list(self.technologies or []),
            "github": self.github,
            "demo": self.demo,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    def __repr__(self) -> str:
        return f"<Project {self.title}>"
