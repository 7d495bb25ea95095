# Overview: Domain error taxonomy shared by repositories, usecases and HTTP delivery.

"""
Error kinds

Repositories translate database failures into these kinds before returning,
usecases raise them for domain rules, and route handlers map each kind to an
HTTP status through `http_status`. The message of the exception is the short
diagnostic rendered in the envelope's "error" field.
"""

from __future__ import annotations


class DomainError(Exception):
    """Base class for every error that crosses a layer boundary."""

    kind = "internal"
    http_status = 500


class ValidationError(DomainError, ValueError):
    """400-level input problem: malformed body, bad id, enum out of range."""

    kind = "validation"
    http_status = 400


class NotFoundError(DomainError, LookupError):
    """No entity matches the requested key."""

    kind = "not_found"
    http_status = 404


class ConflictError(DomainError):
    """409-level conflict: unique key collision or restricted delete."""

    kind = "conflict"
    http_status = 409


class InvariantError(DomainError):
    """A domain rule would be broken, e.g. stock driven below zero."""

    kind = "invariant"
    http_status = 400


class InternalError(DomainError):
    """Unexpected persistence or serialization failure."""

    kind = "internal"
    http_status = 500
