# Overview: Financial context routes; payment methods, transactions and cash flows.

from flask import Blueprint, request

from ..errors import DomainError, NotFoundError, ValidationError
from ..resources import get_resource
from .resource import dump, parse_id, register_resource, usecases
from .responses import fail, success

financial_bp = Blueprint("financial", __name__, url_prefix="/api/v1")

for _name in ("payment_method", "transaction", "cash_flow"):
    register_resource(financial_bp, _name)

TRANSACTION = get_resource("transaction")


@financial_bp.get("/transactions/date-range")
def transactions_by_date_range():
    """
    Transactions with start_date <= occurred_at <= end_date.

    Query params: start_date, end_date (RFC 3339 or YYYY-MM-DD; a date-only
    end_date covers the whole day).
    """
    try:
        transactions = usecases().transactions.date_range(
            request.args.get("start_date"),
            request.args.get("end_date"),
        )
    except DomainError as e:
        return fail(TRANSACTION.msg_failed("retrieve", many=True), e)
    return success(TRANSACTION.msg_listed(), dump(transactions))


@financial_bp.get("/transactions/<id>/items")
def transaction_items(id):
    try:
        transaction_id = parse_id(id)
    except ValidationError as e:
        return fail(TRANSACTION.msg_invalid_id(), e)
    try:
        items = usecases().transactions.items(transaction_id)
    except NotFoundError as e:
        return fail(TRANSACTION.msg_not_found(), e)
    except DomainError as e:
        return fail("Failed to retrieve transaction items", e)
    return success("Transaction items retrieved successfully", dump(items))
