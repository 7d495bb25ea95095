# Overview: Foundation context routes; users, outlets, roles and permissions.

from flask import Blueprint

from ..errors import DomainError, NotFoundError, ValidationError
from ..resources import get_resource
from .resource import INVALID_BODY, dump, json_body, parse_id, register_resource, usecases
from .responses import fail, success

foundation_bp = Blueprint("foundation", __name__, url_prefix="/api/v1")

for _name in ("user", "outlet", "role", "permission"):
    register_resource(foundation_bp, _name)

ROLE = get_resource("role")


@foundation_bp.get("/roles/<id>/permissions")
def role_permissions(id):
    try:
        role_id = parse_id(id)
    except ValidationError as e:
        return fail(ROLE.msg_invalid_id(), e)
    try:
        permissions = usecases().roles.permissions(role_id)
    except NotFoundError as e:
        return fail(ROLE.msg_not_found(), e)
    except DomainError as e:
        return fail("Failed to retrieve role permissions", e)
    return success("Role permissions retrieved successfully", dump(permissions))


@foundation_bp.put("/roles/<id>/permissions")
def replace_role_permissions(id):
    """
    Replace the role's permission set.

    Body: {"permission_ids": [int, ...]}; an empty list clears it.
    """
    try:
        role_id = parse_id(id)
    except ValidationError as e:
        return fail(ROLE.msg_invalid_id(), e)
    try:
        payload = json_body()
    except ValidationError as e:
        return fail(INVALID_BODY, e)
    try:
        role = usecases().roles.set_permissions(role_id, payload)
    except NotFoundError as e:
        return fail(ROLE.msg_not_found(), e)
    except DomainError as e:
        return fail("Failed to update role permissions", e)
    return success("Role permissions updated successfully", role.to_dict())
