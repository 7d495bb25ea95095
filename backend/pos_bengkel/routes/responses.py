# Overview: Standard JSON envelope shared by every endpoint.

"""
Every response, success or error, is an envelope:

    {"status": "success"|"error", "message": str, "data"?: ..., "error"?: str}

`data` is omitted when there is no payload (e.g. delete) and `error` is
omitted on success. Invariant failures carry an "invariant: " prefix in
`error`. The HTTP status and the `status` field always agree.
"""

from __future__ import annotations

from typing import Any

from flask import current_app, jsonify

from ..errors import DomainError, InternalError, InvariantError

_NO_DATA = object()


def success(message: str, data: Any = _NO_DATA, status: int = 200):
    body: dict = {"status": "success", "message": message}
    if data is not _NO_DATA:
        body["data"] = data
    return jsonify(body), status


def error(message: str, diagnostic: str, status: int):
    return jsonify({"status": "error", "message": message, "error": diagnostic}), status


def fail(message: str, exc: DomainError):
    """Render a domain error; 5xx kinds are logged with their cause."""
    if isinstance(exc, InternalError) or exc.http_status >= 500:
        current_app.logger.error("%s: %s", message, exc, exc_info=exc.__cause__ or exc)
    else:
        current_app.logger.info("%s: %s (%s)", message, exc, exc.kind)
    diagnostic = str(exc) or exc.kind
    if isinstance(exc, InvariantError):
        diagnostic = f"{exc.kind}: {diagnostic}"
    return error(message, diagnostic, exc.http_status)
