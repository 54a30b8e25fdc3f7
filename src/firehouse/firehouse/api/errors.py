from __future__ import annotations

import logging
from typing import Any

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from ..core.exceptions import DomainError

logger = logging.getLogger(__name__)


def ok(data: Any = None, status: int = 200):
    return jsonify({"success": True, "data": data}), status


def fail(code: str, message: str, status: int, **details: Any):
    body = {"success": False, "code": code, "message": message}
    body.update(details)
    return jsonify(body), status


def register(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        logger.info("Rejected request (%s): %s", e.code, e)
        return fail(e.code, str(e), e.status, **e.details())

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        code = (e.name or "http_error").lower().replace(" ", "_")
        return fail(code, e.description or e.name, e.code or 500)

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        logger.exception("Unhandled error")
        return fail("internal_error", "Internal server error", 500)
