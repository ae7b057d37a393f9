"""Translate domain exceptions into HTTP errors"""

from fastapi import HTTPException

from pot_ledger.domain.exceptions import (
    DomainException,
    InvariantViolation,
    LedgerReferenceError,
    MemberReferenceError,
    ValidationError,
)
from pot_ledger.infrastructure.observability.logging import log_invariant_violation
from pot_ledger.infrastructure.observability.metrics import invariant_violation_counter


def to_http_exception(error: DomainException, request_id: str, pot_id: str) -> HTTPException:
    """
    Status mapping:
    - unknown pot/expense → 404
    - unknown member → 422 naming the member
    - rule violation → 422 naming the rule
    - invariant violation → 500, logged and counted
    """
    if isinstance(error, LedgerReferenceError):
        return HTTPException(status_code=404, detail=str(error))

    if isinstance(error, MemberReferenceError):
        return HTTPException(
            status_code=422,
            detail={"rule": error.rule, "detail": error.message, "member_id": error.member_id},
        )

    if isinstance(error, ValidationError):
        return HTTPException(status_code=422, detail={"rule": error.rule, "detail": error.message})

    if isinstance(error, InvariantViolation):
        invariant_violation_counter.inc()
        log_invariant_violation(request_id, pot_id, error)

    return HTTPException(status_code=500, detail="Ledger data is inconsistent")
