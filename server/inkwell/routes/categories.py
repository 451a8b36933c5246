# server/inkwell/routes/categories.py

import logging

from flask import Blueprint, request, current_app

from inkwell.utils.helpers import json_object

categories_bp = Blueprint("categories", __name__)
logger = logging.getLogger(__name__)


def api_response():
    return current_app.api_response


def category_service():
    return current_app.category_service


@categories_bp.route("", methods=["POST"])
def create_category():
    data = json_object(request)

    category = category_service().create(data.get("name"))

    return api_response().success(
        data={"category": category.to_dict()},
        message="Category created successfully",
        status=201
    )


@categories_bp.route("", methods=["GET"])
def get_categories():
    categories = category_service().list()

    return api_response().success(data={
        "categories": categories,
        "count": len(categories)
    })


@categories_bp.route("/<category_id>", methods=["GET"])
def get_category(category_id: str):
    category = category_service().get(category_id)

    return api_response().success(data={"category": category.to_dict()})


@categories_bp.route("/<category_id>", methods=["PUT"])
def update_category(category_id: str):
    data = json_object(request)

    category = category_service().rename(category_id, data.get("name"))

    return api_response().success(
        data={"category": category.to_dict()},
        message="Category updated successfully"
    )


@categories_bp.route("/<category_id>", methods=["DELETE"])
def delete_category(category_id: str):
    category_service().delete(category_id)

    return api_response().success(message="Category deleted successfully")
