# Overview: Generic HTTP delivery for the uniform resource contract; one registration per aggregate.

"""
register_resource(bp, name) mounts, for the aggregate `name`:

    POST   /<collection>                       create   -> 201
    GET    /<collection>                       list     (?page=&limit=)
    GET    /<collection>/search                search   (?q=&page=&limit=)   if searchable
    GET    /<collection>/<lookup>              secondary-unique lookup       per Lookup
    GET    /<collection>/<filter>              enumerated filter             per Filter
    GET    /<collection>/<id>                  get
    PUT    /<collection>/<id>                  update (partial)
    DELETE /<collection>/<id>                  delete (restrict)
    GET    /<collection>/<id>/<segment>        children                      per child Parent

Static segments outrank the <id> converter in Werkzeug's matcher, so lookups
never collide with ids. <id> is matched as a string and parsed here so that a
malformed id is a 400 envelope rather than a routing 404.
"""

from __future__ import annotations

from typing import Any

from flask import Blueprint, current_app, request

from ..errors import DomainError, NotFoundError, ValidationError
from ..resources import Filter, Lookup, Parent, ResourceSpec, children_of, get_resource
from ..services import UsecaseManager
from ..validation import MAX_UINT32, parse_int
from .responses import fail, success

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10

INVALID_BODY = "Invalid request body"


def usecases() -> UsecaseManager:
    return current_app.extensions["pos_bengkel"]


# ---- request parsing ---------------------------------------------------------

def parse_id(raw: str) -> int:
    """Path ids are unsigned 32-bit integers, digits only."""
    if not raw.isdigit() or not raw.isascii():
        raise ValidationError(f"id {raw!r} is not an unsigned integer")
    value = int(raw)
    if value > MAX_UINT32:
        raise ValidationError(f"id {raw!r} is out of range")
    return value


def pagination() -> tuple[int, int]:
    """(limit, offset) from ?page=&limit=, page being 1-based."""
    page_raw = request.args.get("page")
    limit_raw = request.args.get("limit")
    page = DEFAULT_PAGE if page_raw in (None, "") else parse_int("page", page_raw)
    limit = DEFAULT_LIMIT if limit_raw in (None, "") else parse_int("limit", limit_raw)
    if page < 1:
        raise ValidationError("page must be >= 1")
    return limit, (page - 1) * limit


def json_body() -> Any:
    payload = request.get_json(force=True, silent=True)
    if payload is None:
        raise ValidationError("request body is not valid JSON")
    return payload


def query_value(*names: str) -> str | None:
    for name in names:
        value = request.args.get(name)
        if value is not None:
            return value
    return None


def dump(entities) -> list:
    return [e.to_dict() for e in entities]


# ---- view factories ------------------------------------------------------------

def _create_view(spec: ResourceSpec):
    def view():
        try:
            payload = json_body()
        except ValidationError as e:
            return fail(INVALID_BODY, e)
        try:
            entity = usecases()[spec.name].create(payload)
        except DomainError as e:
            return fail(spec.msg_failed("create"), e)
        return success(spec.msg_created(), entity.to_dict(), 201)
    return view


def _list_view(spec: ResourceSpec):
    def view():
        try:
            limit, offset = pagination()
            entities = usecases()[spec.name].list(limit, offset)
        except DomainError as e:
            return fail(spec.msg_failed("retrieve", many=True), e)
        return success(spec.msg_listed(), dump(entities))
    return view


def _search_view(spec: ResourceSpec):
    def view():
        try:
            limit, offset = pagination()
            entities = usecases()[spec.name].search(request.args.get("q", ""), limit, offset)
        except DomainError as e:
            return fail(spec.msg_failed("search", many=True), e)
        return success(spec.msg_searched(), dump(entities))
    return view


def _lookup_view(spec: ResourceSpec, lookup: Lookup):
    def view():
        raw = query_value(*lookup.params)
        # a literal '+' in a query string decodes to a space
        if raw is not None and raw.startswith(" ") and lookup.normalize is not None:
            raw = "+" + raw.lstrip(" ")
        try:
            entity = usecases()[spec.name].get_by(lookup, raw)
        except NotFoundError as e:
            return fail(spec.msg_not_found(), e)
        except DomainError as e:
            return fail(spec.msg_failed("retrieve"), e)
        return success(spec.msg_retrieved(), entity.to_dict())
    return view


def _filter_view(spec: ResourceSpec, flt: Filter):
    def view():
        try:
            limit, offset = pagination()
            entities = usecases()[spec.name].filter(flt, query_value(*flt.params), limit, offset)
        except DomainError as e:
            return fail(spec.msg_failed("retrieve", many=True), e)
        return success(spec.msg_listed(), dump(entities))
    return view


def _get_view(spec: ResourceSpec):
    def view(id):
        try:
            entity_id = parse_id(id)
        except ValidationError as e:
            return fail(spec.msg_invalid_id(), e)
        try:
            entity = usecases()[spec.name].get(entity_id)
        except NotFoundError as e:
            return fail(spec.msg_not_found(), e)
        except DomainError as e:
            return fail(spec.msg_failed("retrieve"), e)
        return success(spec.msg_retrieved(), entity.to_dict())
    return view


def _update_view(spec: ResourceSpec):
    def view(id):
        try:
            entity_id = parse_id(id)
        except ValidationError as e:
            return fail(spec.msg_invalid_id(), e)
        try:
            payload = json_body()
        except ValidationError as e:
            return fail(INVALID_BODY, e)
        try:
            entity = usecases()[spec.name].update(entity_id, payload)
        except NotFoundError as e:
            return fail(spec.msg_not_found(), e)
        except DomainError as e:
            return fail(spec.msg_failed("update"), e)
        return success(spec.msg_updated(), entity.to_dict())
    return view


def _delete_view(spec: ResourceSpec):
    def view(id):
        try:
            entity_id = parse_id(id)
        except ValidationError as e:
            return fail(spec.msg_invalid_id(), e)
        try:
            usecases()[spec.name].delete(entity_id)
        except NotFoundError as e:
            return fail(spec.msg_not_found(), e)
        except DomainError as e:
            return fail(spec.msg_failed("delete"), e)
        return success(spec.msg_deleted())
    return view


def _children_view(parent_spec: ResourceSpec, child_spec: ResourceSpec, parent: Parent):
    def view(id):
        try:
            parent_id = parse_id(id)
        except ValidationError as e:
            return fail(parent_spec.msg_invalid_id(), e)
        try:
            entities = usecases()[child_spec.name].children(parent, parent_id)
        except NotFoundError as e:
            return fail(parent_spec.msg_not_found(), e)
        except DomainError as e:
            return fail(child_spec.msg_failed("retrieve", many=True), e)
        return success(child_spec.msg_listed(), dump(entities))
    return view


# ---- registration ----------------------------------------------------------------

def register_resource(bp: Blueprint, name: str) -> None:
    spec = get_resource(name)
    base = f"/{spec.collection}"

    bp.add_url_rule(base, f"{name}_create", _create_view(spec), methods=["POST"], strict_slashes=False)
    bp.add_url_rule(base, f"{name}_list", _list_view(spec), methods=["GET"], strict_slashes=False)

    if spec.search_fields:
        bp.add_url_rule(f"{base}/search", f"{name}_search", _search_view(spec), methods=["GET"])
    for lookup in spec.lookups:
        bp.add_url_rule(f"{base}/{lookup.path}", f"{name}_by_{lookup.field}", _lookup_view(spec, lookup), methods=["GET"])
    for flt in spec.filters:
        bp.add_url_rule(f"{base}/{flt.path}", f"{name}_by_{flt.field}", _filter_view(spec, flt), methods=["GET"])

    bp.add_url_rule(f"{base}/<id>", f"{name}_get", _get_view(spec), methods=["GET"])
    bp.add_url_rule(f"{base}/<id>", f"{name}_update", _update_view(spec), methods=["PUT"])
    bp.add_url_rule(f"{base}/<id>", f"{name}_delete", _delete_view(spec), methods=["DELETE"])

    for child_spec, parent in children_of(name):
        bp.add_url_rule(
            f"{base}/<id>/{parent.segment}",
            f"{name}_{child_spec.name}_children",
            _children_view(spec, child_spec, parent),
            methods=["GET"],
        )


__all__ = [
    "register_resource",
    "usecases",
    "parse_id",
    "pagination",
    "json_body",
    "query_value",
    "dump",
    "success",
    "fail",
    "INVALID_BODY",
]
