# Overview: Service context routes; service catalog, categories, service jobs and the outlet queue.

"""
Besides the generic resource routes:

    PUT /service-jobs/<id>/status        {"status", "user_id"?, "notes"?}
    GET /service-jobs/<id>/histories     received + status-change trail, oldest first
    GET /queue/<outlet_id>               queued and in-progress jobs in queue order
    GET /queue/<outlet_id>/today         the same, received today (UTC)
    PUT /queue/<outlet_id>/reorder       {"service_job_ids": [...]} numbered 1..n
"""

from flask import Blueprint

from ..errors import DomainError, NotFoundError, ValidationError
from ..resources import get_resource
from .resource import INVALID_BODY, dump, json_body, parse_id, register_resource, usecases
from .responses import fail, success

service_bp = Blueprint("service", __name__, url_prefix="/api/v1")

for _name in ("service_category", "service", "service_job", "service_detail"):
    register_resource(service_bp, _name)

SERVICE_JOB = get_resource("service_job")
OUTLET = get_resource("outlet")


@service_bp.put("/service-jobs/<id>/status")
def update_service_job_status(id):
    try:
        job_id = parse_id(id)
    except ValidationError as e:
        return fail(SERVICE_JOB.msg_invalid_id(), e)
    try:
        payload = json_body()
    except ValidationError as e:
        return fail(INVALID_BODY, e)
    try:
        job = usecases().service_jobs.update_status(job_id, payload)
    except NotFoundError as e:
        return fail(SERVICE_JOB.msg_not_found(), e)
    except DomainError as e:
        return fail("Failed to update service job status", e)
    return success("Service job status updated successfully", job.to_dict())


@service_bp.get("/service-jobs/<id>/histories")
def service_job_histories(id):
    try:
        job_id = parse_id(id)
    except ValidationError as e:
        return fail(SERVICE_JOB.msg_invalid_id(), e)
    try:
        histories = usecases().service_jobs.histories(job_id)
    except NotFoundError as e:
        return fail(SERVICE_JOB.msg_not_found(), e)
    except DomainError as e:
        return fail("Failed to retrieve service job histories", e)
    return success("Service job histories retrieved successfully", dump(histories))


def _queue_response(outlet_raw: str, today: bool):
    try:
        outlet_id = parse_id(outlet_raw)
    except ValidationError as e:
        return fail(OUTLET.msg_invalid_id(), e)
    try:
        jobs = usecases().service_jobs.queue(outlet_id, today=today)
    except NotFoundError as e:
        return fail(OUTLET.msg_not_found(), e)
    except DomainError as e:
        return fail("Failed to retrieve service job queue", e)
    return success("Service job queue retrieved successfully", dump(jobs))


@service_bp.get("/queue/<outlet_id>")
def service_job_queue(outlet_id):
    return _queue_response(outlet_id, today=False)


@service_bp.get("/queue/<outlet_id>/today")
def today_service_job_queue(outlet_id):
    return _queue_response(outlet_id, today=True)


@service_bp.put("/queue/<outlet_id>/reorder")
def reorder_service_job_queue(outlet_id):
    try:
        parsed_outlet_id = parse_id(outlet_id)
    except ValidationError as e:
        return fail(OUTLET.msg_invalid_id(), e)
    try:
        payload = json_body()
    except ValidationError as e:
        return fail(INVALID_BODY, e)
    try:
        jobs = usecases().service_jobs.reorder_queue(parsed_outlet_id, payload)
    except NotFoundError as e:
        return fail(OUTLET.msg_not_found(), e)
    except DomainError as e:
        return fail("Failed to reorder service job queue", e)
    return success("Service job queue reordered successfully", dump(jobs))
