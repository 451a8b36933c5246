# server/inkwell/routes/articles.py

import logging

from flask import Blueprint, request, current_app

from inkwell.errors import ValidationError
from inkwell.extensions import limiter
from inkwell.utils.helpers import json_object
from inkwell.utils.validators import ContentValidator

articles_bp = Blueprint("articles", __name__)
logger = logging.getLogger(__name__)


def api_response():
    return current_app.api_response


def article_service():
    return current_app.article_service


def engagement_service():
    return current_app.engagement_service


@articles_bp.route("", methods=["POST"])
@limiter.limit("30 per minute")
def create_article():
    article = article_service().create(request.form, request.files)

    return api_response().success(
        data={"article": article.to_dict()},
        message="Article created successfully",
        status=201
    )


@articles_bp.route("", methods=["GET"])
def get_articles():
    is_valid, (page, limit), error = ContentValidator.validate_pagination(
        request.args.get("page"),
        request.args.get("limit"),
        default_limit=current_app.config.get("DEFAULT_PAGE_SIZE", 10),
        max_limit=current_app.config.get("MAX_PAGE_SIZE", 100),
    )
    if not is_valid:
        raise ValidationError(error)

    category = request.args.get("category", "").strip() or None
    search = request.args.get("search", "").strip() or None
    sort = request.args.get("sort", "created_at")
    order = request.args.get("order", "desc").lower()

    pagination = article_service().list(
        page=page,
        limit=limit,
        category=category,
        search=search,
        sort=sort,
        order=order,
    )

    return api_response().success(data={
        "articles": [a.to_dict() for a in pagination.items],
        "count": len(pagination.items),
        "pagination": api_response().pagination(page, limit, pagination.total)
    })


@articles_bp.route("/most-viewed", methods=["GET"])
def get_most_viewed():
    max_limit = current_app.config.get("MOST_VIEWED_MAX", 50)
    limit = request.args.get("limit", 10, type=int)
    limit = max(1, min(limit, max_limit))

    articles = engagement_service().most_viewed(limit)

    return api_response().success(data={
        "articles": articles,
        "count": len(articles)
    })


@articles_bp.route("/slug/<slug>", methods=["GET"])
def get_article_by_slug(slug: str):
    article = article_service().get_by_slug(slug)
    article = engagement_service().record_view(article.id)

    return api_response().success(data={"article": article.to_dict()})


@articles_bp.route("/<article_id>", methods=["GET"])
def get_article(article_id: str):
    article = engagement_service().record_view(article_id)

    return api_response().success(data={"article": article.to_dict()})


@articles_bp.route("/<article_id>", methods=["PUT"])
def update_article(article_id: str):
    if request.is_json:
        form = json_object(request)
    else:
        form = request.form

    article = article_service().update(article_id, form, request.files)

    return api_response().success(
        data={"article": article.to_dict()},
        message="Article updated successfully"
    )


@articles_bp.route("/<article_id>", methods=["DELETE"])
def delete_article(article_id: str):
    article_service().delete(article_id)

    return api_response().success(message="Article deleted successfully")
