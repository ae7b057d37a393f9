"""Settlement endpoints - record payments and settle up"""

import uuid
from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from sqlalchemy.orm import Session

from pot_ledger.api.dependencies import get_ledger_store, get_request_id, get_webhook_client
from pot_ledger.api.errors import to_http_exception
from pot_ledger.api.v1.schemas import (
    SettleAllRequest,
    SettlementListResponse,
    SettlementRequest,
    SettlementResponse,
)
from pot_ledger.domain.exceptions import DomainException
from pot_ledger.domain.ledger import LedgerState, apply_settlement, settle_up, settlement_from_debt
from pot_ledger.domain.models import Settlement
from pot_ledger.infrastructure.clients.webhook import SettlementWebhookClient
from pot_ledger.infrastructure.database.repositories import LedgerRepository
from pot_ledger.infrastructure.database.session import get_db
from pot_ledger.infrastructure.observability.logging import log_settlement_recorded
from pot_ledger.infrastructure.observability.metrics import settlement_counter
from pot_ledger.utils.date_utils import utc_now

router = APIRouter()


def _settlement_response(settlement: Settlement) -> SettlementResponse:
    return SettlementResponse(
        settlement_id=settlement.settlement_id,
        pot_id=settlement.pot_id,
        from_member_id=settlement.from_member_id,
        to_member_id=settlement.to_member_id,
        amount_minor=settlement.amount_minor,
        currency=settlement.currency,
        payment_method=settlement.payment_method,
        confirmation_id=settlement.confirmation_id,
        notes=settlement.notes,
        created_at=settlement.created_at,
    )


def _event(settlement: Settlement) -> dict:
    return {
        "event": "SETTLEMENT_RECORDED",
        "settlement_id": settlement.settlement_id,
        "pot_id": settlement.pot_id,
        "from_member_id": settlement.from_member_id,
        "to_member_id": settlement.to_member_id,
        "amount_minor": settlement.amount_minor,
        "currency": settlement.currency,
    }


def _remaining_debts(state: LedgerState, currency: str) -> int:
    return sum(len(r.debts) for r in settle_up(state) if r.currency == currency)


def _announce(
    recorded: List[Settlement],
    state: LedgerState,
    request_id: str,
    background_tasks: BackgroundTasks,
    webhook_client: SettlementWebhookClient,
) -> None:
    for settlement in recorded:
        settlement_counter.labels(currency=settlement.currency).inc()
        log_settlement_recorded(
            request_id,
            settlement.pot_id,
            settlement.settlement_id,
            settlement.amount_minor,
            settlement.currency,
            _remaining_debts(state, settlement.currency),
        )
        if webhook_client.enabled:
            background_tasks.add_task(webhook_client.send_event, _event(settlement))


@router.post("/pots/{pot_id}/settlements", response_model=SettlementResponse, status_code=201)
def record_settlement(
    pot_id: str,
    request_body: SettlementRequest,
    background_tasks: BackgroundTasks,
    request: Request,
    db: Session = Depends(get_db),
    store: LedgerRepository = Depends(get_ledger_store),
    webhook_client: SettlementWebhookClient = Depends(get_webhook_client),
):
    """
    Record an actual payment between two members.

    Flow:
    1. Load the pot snapshot
    2. Validate and append to the settlement log
    3. Commit, then announce via webhook in the background
    """
    request_id = get_request_id(request)

    try:
        state = store.load_state(pot_id)
        settlement = Settlement(
            settlement_id=str(uuid.uuid4()),
            pot_id=pot_id,
            from_member_id=request_body.from_member_id,
            to_member_id=request_body.to_member_id,
            amount_minor=request_body.amount_minor,
            currency=(request_body.currency or state.currency).upper(),
            created_at=utc_now(),
            payment_method=request_body.payment_method,
            confirmation_id=request_body.confirmation_id,
            notes=request_body.notes,
        )
        new_state = apply_settlement(settlement, state)

        store.append_settlement(settlement)
        db.commit()

        _announce([settlement], new_state, request_id, background_tasks, webhook_client)

    except DomainException as e:
        db.rollback()
        raise to_http_exception(e, request_id, pot_id)

    return _settlement_response(settlement)


@router.post("/pots/{pot_id}/settle-all", response_model=SettlementListResponse, status_code=201)
def settle_all(
    pot_id: str,
    request_body: SettleAllRequest,
    background_tasks: BackgroundTasks,
    request: Request,
    db: Session = Depends(get_db),
    store: LedgerRepository = Depends(get_ledger_store),
    webhook_client: SettlementWebhookClient = Depends(get_webhook_client),
):
    """Record one settlement per suggested debt so the currency nets to zero"""
    request_id = get_request_id(request)

    try:
        state = store.load_state(pot_id)
        currency = (request_body.currency or state.currency).upper()
        debts = [d for r in settle_up(state) if r.currency == currency for d in r.debts]

        recorded = []
        for debt in debts:
            settlement = settlement_from_debt(debt, pot_id, payment_method=request_body.payment_method)
            state = apply_settlement(settlement, state)
            store.append_settlement(settlement)
            recorded.append(settlement)
        db.commit()

        _announce(recorded, state, request_id, background_tasks, webhook_client)

    except DomainException as e:
        db.rollback()
        raise to_http_exception(e, request_id, pot_id)

    return SettlementListResponse(pot_id=pot_id, settlements=[_settlement_response(s) for s in recorded])


@router.get("/pots/{pot_id}/settlements", response_model=SettlementListResponse)
def list_settlements(pot_id: str, request: Request, store: LedgerRepository = Depends(get_ledger_store)):
    """Settlement log in recorded order"""
    try:
        state = store.load_state(pot_id)
    except DomainException as e:
        raise to_http_exception(e, get_request_id(request), pot_id)

    return SettlementListResponse(
        pot_id=pot_id,
        settlements=[_settlement_response(s) for s in state.settlements],
    )
