# Overview: Generic usecase for one aggregate; validation, referential checks and the transaction boundary.

from __future__ import annotations

from typing import Any

from ..errors import ValidationError
from ..repositories import RepositoryManager
from ..resources import Filter, Lookup, Parent, ResourceSpec, get_resource
from ..validation import validate_payload


class ResourceService:
    """
    The uniform resource contract, instantiated per aggregate from its ResourceSpec.

    Create/update validate the payload against the policy, run the aggregate's
    rule function, check that referenced parents exist, and persist inside one
    transaction. Reads hand back ORM entities; the delivery layer renders them.
    """

    def __init__(self, spec: ResourceSpec, repos: RepositoryManager):
        self.spec = spec
        self.repos = repos

    @property
    def repo(self):
        return self.repos[self.spec.name]

    # ---- validation --------------------------------------------------------

    def validate(self, payload: Any, *, partial: bool) -> dict:
        patch = validate_payload(
            model=self.spec.model,
            payload=payload,
            policy=self.spec.policy,
            partial=partial,
        )
        if self.spec.rules is not None:
            self.spec.rules(patch)
        return patch

    def check_references(self, values: dict) -> None:
        missing = self.repo.missing_references(values)
        if missing:
            field = missing[0]
            raise ValidationError(f"{field} {values[field]} does not exist")

    def columns(self, patch: dict) -> dict:
        """Drop non-column inputs (passwords, line items) before they reach the model."""
        return {k: v for k, v in patch.items() if k not in self.spec.policy.extra_fields}

    # ---- contract ----------------------------------------------------------

    def create(self, payload: Any):
        patch = self.validate(payload, partial=False)
        with self.repos.atomic():
            values = self.columns(patch)
            self.check_references(values)
            entity = self.repo.add(values)
        return entity

    def get(self, entity_id: int):
        return self.repo.get(entity_id)

    def get_by(self, lookup: Lookup, raw: str):
        value = (raw or "").strip()
        if not value:
            raise ValidationError(f"{lookup.params[0]} is required")
        if lookup.normalize is not None:
            value = lookup.normalize(value)
        return self.repo.get_by(lookup.field, value)

    def update(self, entity_id: int, payload: Any):
        patch = self.validate(payload, partial=True)
        with self.repos.atomic():
            entity = self.repo.get(entity_id)
            values = self.columns(patch)
            self.check_references(values)
            self.repo.update(entity, values)
        return entity

    def delete(self, entity_id: int) -> None:
        with self.repos.atomic():
            entity = self.repo.get(entity_id)
            self.repo.delete(entity)

    def list(self, limit: int, offset: int) -> list:
        return self.repo.list(limit, offset)

    def search(self, q: str, limit: int, offset: int) -> list:
        if not self.spec.search_fields:
            raise ValidationError(f"{self.spec.plural_noun} are not searchable")
        term = (q or "").strip()
        if not term:
            raise ValidationError("Search query is required")
        return self.repo.search(term, self.spec.search_fields, limit, offset)

    def filter(self, flt: Filter, raw: str, limit: int, offset: int) -> list:
        value = (raw or "").strip()
        if not value:
            raise ValidationError(f"{flt.params[0]} is required")
        if flt.choices and value not in flt.choices:
            raise ValidationError(f"{flt.params[0]} must be one of: {', '.join(flt.choices)}")
        return self.repo.list(limit, offset, **{flt.field: value})

    def children(self, parent: Parent, parent_id: int) -> list:
        """All rows whose `parent.field` points at parent_id, in insertion order."""
        parent_spec = get_resource(parent.resource)
        self.repos[parent_spec.name].get(parent_id)
        column = getattr(self.spec.model, parent.field)
        return self.repo.all_where(column == parent_id)
