"""Global resilience and error-handler registration.

Synopsis:
Registers teardown and error handlers for database rollback safety, CSRF
failures, rate limiting and unknown routes. Every handler answers with the
standard JSON envelope.
"""

from __future__ import annotations

import logging

from flask import request
from flask_wtf.csrf import CSRFError
from sqlalchemy.exc import DBAPIError, OperationalError
from werkzeug.exceptions import MethodNotAllowed, NotFound, TooManyRequests

from .extensions import db
from .utils.api_responses import APIResponse

logger = logging.getLogger(__name__)


def register_resilience_handlers(app) -> None:
    """Install global DB rollback and JSON error handlers."""

    @app.teardown_request
    def _rollback_on_error(exc):
        if exc is not None:
            db.session.rollback()

    @app.errorhandler(OperationalError)
    @app.errorhandler(DBAPIError)
    def _db_error_handler(err):
        db.session.rollback()
        logger.error("Database unavailable while handling %s: %s", request.path, err)
        return APIResponse.error("Service temporarily unavailable. Please try again shortly.", status_code=503)

    @app.errorhandler(CSRFError)
    def _csrf_error_handler(err: CSRFError):
        details = {
            "path": request.path,
            "endpoint": request.endpoint,
            "reason": err.description,
        }
        logger.warning("CSRF validation failed: %s", details)
        return APIResponse.error("CSRF validation failed. Please refresh and try again.", status_code=400)

    @app.errorhandler(TooManyRequests)
    def _rate_limited(err):
        return APIResponse.error("Too many requests. Please slow down.", status_code=429)

    @app.errorhandler(NotFound)
    def _not_found(err):
        return APIResponse.not_found("Page")

    @app.errorhandler(MethodNotAllowed)
    def _method_not_allowed(err):
        return APIResponse.error("Method not allowed", status_code=405)
