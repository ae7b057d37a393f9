"""Expense endpoints - create, replace and delete expenses in a pot"""

import logging
import uuid
from typing import List

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session

from pot_ledger.api.dependencies import get_ledger_store, get_request_id
from pot_ledger.api.errors import to_http_exception
from pot_ledger.api.v1.schemas import ExpenseRequest, ExpenseResponse, SplitRequest, SplitSchema
from pot_ledger.domain.exceptions import DomainException
from pot_ledger.domain.ledger import LedgerState, add_expense, edit_expense, remove_expense
from pot_ledger.domain.models import Expense, Split
from pot_ledger.domain.splits import equal_splits, exact_splits, percentage_splits
from pot_ledger.infrastructure.database.repositories import LedgerRepository
from pot_ledger.infrastructure.database.session import get_db
from pot_ledger.infrastructure.observability.metrics import expense_counter
from pot_ledger.utils.date_utils import utc_now
from pot_ledger.utils.money import format_amount, to_minor_units

router = APIRouter()
logger = logging.getLogger(__name__)


def build_splits(split: SplitRequest, total_minor: int) -> List[Split]:
    if split.method == "equal":
        return equal_splits(total_minor, split.participants)
    if split.method == "percentage":
        return percentage_splits(total_minor, split.percentages)
    return exact_splits(split.amounts_minor)


def _expense_fields(request_body: ExpenseRequest, state: LedgerState) -> dict:
    """Domain fields for an Expense built from the request"""
    currency = (request_body.currency or state.currency).upper()
    if request_body.amount_minor is not None:
        total_minor = request_body.amount_minor
    else:
        total_minor = to_minor_units(request_body.amount, currency)

    return {
        "payer_id": request_body.payer_id,
        "amount_minor": total_minor,
        "currency": currency,
        "splits": tuple(build_splits(request_body.split, total_minor)),
        "description": request_body.description,
        "category": request_body.category,
        "expense_date": request_body.expense_date,
    }


def _expense_response(expense: Expense) -> ExpenseResponse:
    return ExpenseResponse(
        expense_id=expense.expense_id,
        pot_id=expense.pot_id,
        payer_id=expense.payer_id,
        amount_minor=expense.amount_minor,
        amount_display=format_amount(expense.amount_minor, expense.currency),
        currency=expense.currency,
        description=expense.description,
        category=expense.category,
        expense_date=expense.expense_date,
        splits=[
            SplitSchema(
                member_id=s.member_id,
                amount_minor=s.amount_minor,
                is_equal_split=s.is_equal_split,
                percentage=s.percentage,
            )
            for s in expense.splits
        ],
    )


@router.post("/pots/{pot_id}/expenses", response_model=ExpenseResponse, status_code=201)
def create_expense(
    pot_id: str,
    request_body: ExpenseRequest,
    request: Request,
    db: Session = Depends(get_db),
    store: LedgerRepository = Depends(get_ledger_store),
):
    """
    Record an expense paid by one member.

    Flow:
    1. Load the pot snapshot
    2. Build splits (equal / percentage / exact) in minor units
    3. Validate against current members
    4. Persist and commit
    """
    request_id = get_request_id(request)

    try:
        state = store.load_state(pot_id)
        expense = Expense(
            expense_id=str(uuid.uuid4()),
            pot_id=pot_id,
            created_at=utc_now(),
            **_expense_fields(request_body, state),
        )
        add_expense(state, expense)

        store.save_expense(expense)
        db.commit()

    except DomainException as e:
        db.rollback()
        logger.warning(f"Expense rejected: {e}", extra={"request_id": request_id, "pot_id": pot_id})
        raise to_http_exception(e, request_id, pot_id)

    expense_counter.labels(currency=expense.currency).inc()
    return _expense_response(expense)


@router.put("/pots/{pot_id}/expenses/{expense_id}", response_model=ExpenseResponse)
def replace_expense(
    pot_id: str,
    expense_id: str,
    request_body: ExpenseRequest,
    request: Request,
    db: Session = Depends(get_db),
    store: LedgerRepository = Depends(get_ledger_store),
):
    """Edit an expense; every rule is re-checked before saving"""
    request_id = get_request_id(request)

    try:
        state = store.load_state(pot_id)
        new_state = edit_expense(state, expense_id, **_expense_fields(request_body, state))
        expense = new_state.get_expense(expense_id)

        store.save_expense(expense)
        db.commit()

    except DomainException as e:
        db.rollback()
        logger.warning(f"Expense edit rejected: {e}", extra={"request_id": request_id, "pot_id": pot_id})
        raise to_http_exception(e, request_id, pot_id)

    return _expense_response(expense)


@router.delete("/pots/{pot_id}/expenses/{expense_id}", status_code=204)
def delete_expense(
    pot_id: str,
    expense_id: str,
    request: Request,
    db: Session = Depends(get_db),
    store: LedgerRepository = Depends(get_ledger_store),
):
    """Remove an expense; balances reflect it on the next computation"""
    try:
        remove_expense(store.load_state(pot_id), expense_id)
        store.delete_expense(pot_id, expense_id)
        db.commit()

    except DomainException as e:
        db.rollback()
        raise to_http_exception(e, get_request_id(request), pot_id)

    return Response(status_code=204)
