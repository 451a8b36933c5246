# server/inkwell/routes/engagement.py

import logging

from flask import Blueprint, request, current_app

from inkwell.extensions import limiter
from inkwell.utils.helpers import client_address, json_object

engagement_bp = Blueprint("engagement", __name__)
logger = logging.getLogger(__name__)


def api_response():
    return current_app.api_response


def engagement_service():
    return current_app.engagement_service


def requested_identity(source: dict) -> str:
    user_id = source.get("user_id")
    if user_id is None:
        user_id = source.get("userId")
    return engagement_service().identity_for(user_id, client_address(request))


@engagement_bp.route("/<article_id>/like", methods=["POST"])
@limiter.limit("60 per minute")
def like_article(article_id: str):
    identity = requested_identity(json_object(request))
    article = engagement_service().like(article_id, identity)

    return api_response().success(
        data={"article": article.to_dict()},
        message="Article liked successfully"
    )


@engagement_bp.route("/<article_id>/unlike", methods=["POST"])
@limiter.limit("60 per minute")
def unlike_article(article_id: str):
    identity = requested_identity(json_object(request))
    article = engagement_service().unlike(article_id, identity)

    return api_response().success(
        data={"article": article.to_dict()},
        message="Article unliked successfully"
    )


@engagement_bp.route("/<article_id>/like-status", methods=["GET"])
def get_like_status(article_id: str):
    identity = requested_identity(request.args)

    return api_response().success(data=engagement_service().like_status(article_id, identity))


@engagement_bp.route("/<article_id>/like-stats", methods=["GET"])
def get_like_stats(article_id: str):
    return api_response().success(data=engagement_service().like_stats(article_id))


@engagement_bp.route("/<article_id>/view", methods=["POST"])
def track_view(article_id: str):
    article = engagement_service().record_view(article_id)

    return api_response().success(
        data={"article_id": article.id, "views": article.views},
        message="View tracked successfully"
    )


@engagement_bp.route("/<article_id>/view-stats", methods=["GET"])
def get_view_stats(article_id: str):
    return api_response().success(data=engagement_service().view_stats(article_id))


@engagement_bp.route("/<article_id>/share", methods=["POST"])
def track_share(article_id: str):
    article = engagement_service().record_share(article_id)

    return api_response().success(
        data={"article_id": article.id, "shares": article.shares},
        message="Share tracked successfully"
    )


@engagement_bp.route("/liked", methods=["GET"])
def get_liked_articles():
    identity = requested_identity(request.args)
    articles = engagement_service().liked_articles(identity)

    return api_response().success(data={
        "articles": [a.to_dict() for a in articles],
        "count": len(articles)
    })
