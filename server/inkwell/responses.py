# server/inkwell/responses.py

import math
from typing import Any, Optional

from flask import jsonify


class ApiResponse:
    """Builds the uniform JSON envelope returned by every endpoint."""

    def success(self, data: Any = None, message: Optional[str] = None, status: int = 200):
        body = {"success": True}
        if message:
            body["message"] = message
        if data is not None:
            body["data"] = data
        return jsonify(body), status

    def error(
        self,
        message: str,
        status: int = 400,
        code: Optional[str] = None,
        details: Any = None,
    ):
        error = {"code": code or _default_code(status)}
        if details is not None:
            error["details"] = details
        return jsonify({
            "success": False,
            "message": message,
            "error": error,
        }), status

    @staticmethod
    def pagination(page: int, limit: int, total: int) -> dict:
        total_pages = math.ceil(total / limit) if limit else 0
        return {
            "page": page,
            "limit": limit,
            "total_items": total,
            "total_pages": total_pages,
            "has_next": page < total_pages,
            "has_prev": page > 1,
        }


def _default_code(status: int) -> str:
    return {
        400: "BAD_REQUEST",
        404: "NOT_FOUND",
        405: "METHOD_NOT_ALLOWED",
        409: "CONFLICT",
        413: "PAYLOAD_TOO_LARGE",
        429: "RATE_LIMITED",
    }.get(status, "SERVER_ERROR")
