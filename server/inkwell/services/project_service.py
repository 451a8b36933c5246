# server/inkwell/services/project_service.py

from typing import Optional

from inkwell.errors import NotFound, invalid_id
from inkwell.models.project import Project
from inkwell.utils.helpers import is_valid_uuid


class ProjectService:
    """Read-only access to portfolio projects."""

    def __init__(self, store):
        self.store = store

    def list(self, page: int = 1, limit: int = 10, category: Optional[str] = None, search: Optional[str] = None):
        criteria = []

        if category:
            criteria.append(self.store.iexact(Project.category, category))

        if search:
            criteria.append(
                self.store.contains(Project.title, search) | self.store.contains(Project.description, search)
            )

        return self.store.paginate(
            Project,
            *criteria,
            order_by=[Project.created_at.desc(), Project.id],
            page=page,
            limit=limit,
        )

    def get(self, project_id: str) -> Project:
        if not is_valid_uuid(project_id):
            raise invalid_id("project")

        project = self.store.find_by_id(Project, project_id)
        if project is None:
            raise NotFound("Project not found")
        return project
