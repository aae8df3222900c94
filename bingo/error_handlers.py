"""Centralized error handlers."""

from __future__ import annotations

from typing import Any

from flask import Flask, jsonify
from marshmallow import ValidationError as MarshmallowValidationError
from werkzeug.exceptions import HTTPException

from bingo.errors import AppError, InternalError, ValidationError


def error_response(code: str, message: str, status_code: int, details: Any | None = None):
    body = {'error': message, 'code': code}
    # Dict details are flattened so e.g. currentBalance sits at the top level
    if isinstance(details, dict):
        for key, value in details.items():
            body.setdefault(key, value)
    elif details is not None:
        body['details'] = details
    return jsonify(body), status_code


def register_error_handlers(app: Flask) -> None:
    """Register error handlers for the Flask app."""

    @app.errorhandler(AppError)
    def _handle_app_error(exc: AppError):
        if exc.status_code >= 500:
            app.logger.error(f"[error] code={exc.code} message={exc.message}")
        return error_response(exc.code, exc.message, exc.status_code, exc.details)

    @app.errorhandler(MarshmallowValidationError)
    def _handle_schema_error(exc: MarshmallowValidationError):
        # exc.messages is a dict of field -> list[str]
        wrapped = ValidationError(message='Invalid request body', details={'fields': exc.messages})
        return error_response(wrapped.code, wrapped.message, wrapped.status_code, wrapped.details)

    @app.errorhandler(HTTPException)
    def _handle_http_exception(exc: HTTPException):
        status = int(getattr(exc, 'code', 500) or 500)
        if status == 404:
            return error_response('NotFound', 'Not found', 404)
        return error_response(getattr(exc, 'name', 'HTTPException'), getattr(exc, 'description', 'HTTP error'), status)

    @app.errorhandler(Exception)
    def _handle_unexpected(exc: Exception):
        app.logger.exception('Unhandled exception')
        wrapped = InternalError()
        return error_response(wrapped.code, wrapped.message, wrapped.status_code)
