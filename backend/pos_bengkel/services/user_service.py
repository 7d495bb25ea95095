"""
User accounts.

Passwords are write-only: accepted on create (required) and update (optional),
hashed with bcrypt, and never rendered back.
"""

from __future__ import annotations

from typing import Any

import bcrypt
from flask import current_app

from ..errors import ValidationError
from .resource_service import ResourceService


def hash_password(password: str) -> str:
    """Hash password using bcrypt; cost factor comes from BCRYPT_ROUNDS."""
    rounds = current_app.config.get("BCRYPT_ROUNDS", 12)
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(password.encode("utf-8"), salt)
    return hashed.decode("utf-8")  # Store as string in database


class UserService(ResourceService):
    def columns(self, patch: dict) -> dict:
        values = super().columns(patch)
        if patch.get("password") is not None:
            values["password_hash"] = hash_password(patch["password"])
        return values

    def create(self, payload: Any):
        if isinstance(payload, dict) and not payload.get("password"):
            raise ValidationError("Missing required fields: password")
        return super().create(payload)
