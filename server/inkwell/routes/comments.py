# server/inkwell/routes/comments.py

import logging

from flask import Blueprint, request, current_app

from inkwell.extensions import limiter
from inkwell.utils.helpers import json_object

comments_bp = Blueprint("comments", __name__)
logger = logging.getLogger(__name__)


def api_response():
    return current_app.api_response


def comment_service():
    return current_app.comment_service


@comments_bp.route("/articles/<article_id>/comments", methods=["GET"])
def get_comments(article_id: str):
    comments = comment_service().list_for_article(article_id)

    return api_response().success(data={
        "comments": [c.to_dict() for c in comments],
        "count": len(comments)
    })


@comments_bp.route("/articles/<article_id>/comments", methods=["POST"])
@limiter.limit("20 per minute")
def create_comment(article_id: str):
    data = json_object(request)

    comment = comment_service().create(article_id, data)

    return api_response().success(
        data={"comment": comment.to_dict()},
        message="Comment added successfully",
        status=201
    )


@comments_bp.route("/comments/<comment_id>/like", methods=["POST"])
def like_comment(comment_id: str):
    comment = comment_service().like(comment_id)

    return api_response().success(
        data={"comment": comment.to_dict()},
        message="Comment liked successfully"
    )


@comments_bp.route("/comments/<comment_id>", methods=["DELETE"])
def delete_comment(comment_id: str):
    comment_service().delete(comment_id)

    return api_response().success(message="Comment deleted successfully")
