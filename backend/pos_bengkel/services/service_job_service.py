"""
Service jobs

A job is received into its outlet's queue: it gets the next queue number for
that outlet and UTC day, and a history row is written alongside it. Every
status change writes another history row in the same database transaction.

Status side effects:
- in_progress needs a technician assigned (Invariant otherwise)
- completed recomputes grand_total from the job's service details, if any
- picked_up stamps picked_up_at
"""
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Optional

from ..errors import InvariantError, ValidationError
from ..models.services import SERVICE_JOB_STATUSES
from ..time_utils import utcnow
from ..validation import bounded_total, parse_int
from .resource_service import ResourceService

logger = logging.getLogger(__name__)

STATUS_CHANGE_FIELDS = {"status", "user_id", "notes"}


def parse_status_change(payload: Any) -> tuple[str, Optional[int], Optional[str]]:
    """Validate {"status", "user_id"?, "notes"?} into (status, user_id, notes)."""
    if not isinstance(payload, dict) or "status" not in payload:
        raise ValidationError("body must be {\"status\": ...}")
    unknown = set(payload) - STATUS_CHANGE_FIELDS
    if unknown:
        raise ValidationError(f"Unknown field: {sorted(unknown)[0]}")

    status = payload["status"]
    if status not in SERVICE_JOB_STATUSES:
        raise ValidationError(f"status must be one of: {', '.join(SERVICE_JOB_STATUSES)}")

    user_id = payload.get("user_id")
    if user_id is not None:
        user_id = parse_int("user_id", user_id)

    notes = payload.get("notes")
    if notes is not None:
        if not isinstance(notes, str):
            raise ValidationError("notes must be a string")
        notes = notes.strip() or None
    return status, user_id, notes


def parse_job_ids(payload: Any) -> list[int]:
    if not isinstance(payload, dict) or set(payload) != {"service_job_ids"}:
        raise ValidationError("body must be {\"service_job_ids\": [...]}")
    raw_ids = payload["service_job_ids"]
    if not isinstance(raw_ids, list):
        raise ValidationError("service_job_ids must be a list")
    ids = [parse_int("service_job_ids", v) for v in raw_ids]
    if len(set(ids)) != len(ids):
        raise ValidationError("service_job_ids must not repeat")
    return ids


class ServiceJobService(ResourceService):
    """Service jobs: the uniform contract plus the vehicle/customer pairing rule, status changes and the queue."""

    def _check_vehicle_owner(self, customer_id: int, vehicle_id: int) -> None:
        vehicle = self.repos["customer_vehicle"].get(vehicle_id)
        if vehicle.customer_id != customer_id:
            raise ValidationError(f"vehicle_id {vehicle_id} does not belong to customer_id {customer_id}")

    def create(self, payload: Any):
        patch = self.validate(payload, partial=False)
        with self.repos.atomic():
            values = self.columns(patch)
            self.check_references(values)
            self._check_vehicle_owner(values["customer_id"], values["vehicle_id"])
            values.setdefault("received_at", utcnow())
            values["queue_number"] = self.repo.next_queue_number(values["outlet_id"], values["received_at"])
            job = self.repo.add(values)
            self.repo.add_history(job, notes=job.problem_description)
        logger.info("service job received service_job_id=%s outlet_id=%s queue=%s", job.id, job.outlet_id, job.queue_number)
        return job

    def update(self, entity_id: int, payload: Any):
        patch = self.validate(payload, partial=True)
        with self.repos.atomic():
            job = self.repo.get(entity_id)
            values = self.columns(patch)
            self.check_references(values)
            if "customer_id" in values or "vehicle_id" in values:
                self._check_vehicle_owner(
                    values.get("customer_id", job.customer_id),
                    values.get("vehicle_id", job.vehicle_id),
                )
            self.repo.update(job, values)
        return job

    def update_status(self, entity_id: int, payload: Any):
        status, user_id, notes = parse_status_change(payload)
        with self.repos.atomic():
            job = self.repo.get(entity_id)
            if user_id is not None and self.repos["user"].find(user_id) is None:
                raise ValidationError(f"user_id {user_id} does not exist")

            values: dict = {"status": status}
            if status == "in_progress" and job.technician_id is None:
                raise InvariantError("technician must be assigned before starting work")
            if status == "completed" and job.details:
                values["grand_total"] = bounded_total(
                    "grand_total",
                    sum((d.price_per_item * d.quantity for d in job.details), Decimal("0")),
                )
            if status == "picked_up":
                values["picked_up_at"] = utcnow()

            self.repo.update(job, values)
            self.repo.add_history(job, user_id=user_id, notes=notes or f"Status changed to {status}")
        logger.info("service job status service_job_id=%s status=%s", job.id, status)
        return job

    def histories(self, entity_id: int) -> list:
        self.repo.get(entity_id)
        return self.repo.histories(entity_id)

    # ---- queue -------------------------------------------------------------

    def queue(self, outlet_id: int, *, today: bool = False) -> list:
        self.repos["outlet"].get(outlet_id)
        return self.repo.queue(outlet_id, utcnow() if today else None)

    def reorder_queue(self, outlet_id: int, payload: Any) -> list:
        """Number the listed jobs 1..n in the given order; jobs not listed keep their numbers."""
        job_ids = parse_job_ids(payload)
        with self.repos.atomic():
            self.repos["outlet"].get(outlet_id)
            for position, job_id in enumerate(job_ids, start=1):
                job = self.repo.find(job_id)
                if job is None:
                    raise ValidationError(f"service job {job_id} does not exist")
                if job.outlet_id != outlet_id:
                    raise ValidationError(f"service job {job_id} does not belong to outlet {outlet_id}")
                self.repo.update(job, {"queue_number": position})
        return self.repo.queue(outlet_id)
