# server/inkwell/routes/projects.py

import logging

from flask import Blueprint, request, current_app

from inkwell.errors import ValidationError
from inkwell.utils.validators import ContentValidator

projects_bp = Blueprint("projects", __name__)
logger = logging.getLogger(__name__)


def api_response():
    return current_app.api_response


def project_service():
    return current_app.project_service


@projects_bp.route("", methods=["GET"])
def get_projects():
    is_valid, (page, limit), error = ContentValidator.validate_pagination(
        request.args.get("page"),
        request.args.get("limit"),
        default_limit=current_app.config.get("DEFAULT_PAGE_SIZE", 10),
        max_limit=current_app.config.get("MAX_PAGE_SIZE", 100),
    )
    if not is_valid:
        raise ValidationError(error)

    pagination = project_service().list(
        page=page,
        limit=limit,
        category=request.args.get("category", "").strip() or None,
        search=request.args.get("search", "").strip() or None,
    )

    return api_response().success(data={
        "projects": [p.to_dict() for p in pagination.items],
        "count": len(pagination.items),
        "pagination": api_response().pagination(page, limit, pagination.total)
    })


@projects_bp.route("/<project_id>", methods=["GET"])
def get_project(project_id: str):
    project = project_service().get(project_id)

    return api_response().success(data={"project": project.to_dict()})
