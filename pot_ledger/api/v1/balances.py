"""GET balances, simplified debts and pot summary"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request

from pot_ledger.api.dependencies import get_ledger_store, get_request_id
from pot_ledger.api.errors import to_http_exception
from pot_ledger.api.v1.schemas import (
    BalanceItem,
    BalancesResponse,
    CategoryTotalSchema,
    CurrencyBalances,
    DebtSchema,
    SummaryResponse,
)
from pot_ledger.domain.exceptions import DomainException
from pot_ledger.domain.ledger import LedgerState, settle_up
from pot_ledger.domain.models import SettleUpResult
from pot_ledger.domain.stats import summarize_pot
from pot_ledger.infrastructure.database.repositories import LedgerRepository
from pot_ledger.infrastructure.observability.metrics import record_settle_up

router = APIRouter()


def _status(amount_minor: int) -> str:
    if amount_minor < 0:
        return "owes"
    if amount_minor > 0:
        return "owed"
    return "settled"


def currency_balances(state: LedgerState, results: List[SettleUpResult]) -> List[CurrencyBalances]:
    names = {m.member_id: m.display_name for m in state.members}
    return [
        CurrencyBalances(
            currency=result.currency,
            balances=[
                BalanceItem(
                    member_id=member_id,
                    display_name=names.get(member_id, member_id),
                    amount_minor=amount,
                    status=_status(amount),
                )
                for member_id, amount in result.balances.items()
            ],
            debts=[
                DebtSchema(
                    from_member_id=d.from_member_id,
                    to_member_id=d.to_member_id,
                    amount_minor=d.amount_minor,
                    currency=d.currency,
                )
                for d in result.debts
            ],
        )
        for result in results
    ]


@router.get("/pots/{pot_id}/balances", response_model=BalancesResponse)
def get_balances(pot_id: str, request: Request, store: LedgerRepository = Depends(get_ledger_store)):
    """
    Net balance per member and who-owes-whom, per currency.

    Always recomputed from the full expense and settlement log.
    """
    try:
        state = store.load_state(pot_id)
        results = settle_up(state)
    except DomainException as e:
        raise to_http_exception(e, get_request_id(request), pot_id)

    record_settle_up([len(r.debts) for r in results])
    return BalancesResponse(pot_id=pot_id, currencies=currency_balances(state, results))


@router.get("/pots/{pot_id}/summary", response_model=SummaryResponse)
def get_summary(
    pot_id: str,
    request: Request,
    currency: Optional[str] = Query(None, min_length=3, max_length=3, description="Defaults to pot currency"),
    store: LedgerRepository = Depends(get_ledger_store),
):
    """Spending statistics and settlement status for a pot"""
    try:
        summary = summarize_pot(store.load_state(pot_id), currency=currency.upper() if currency else None)
    except DomainException as e:
        raise to_http_exception(e, get_request_id(request), pot_id)

    return SummaryResponse(
        pot_id=summary.pot_id,
        currency=summary.currency,
        total_spent_minor=summary.total_spent_minor,
        expense_count=summary.expense_count,
        duration_days=summary.duration_days,
        biggest_spender_id=summary.biggest_spender_id,
        biggest_spender_amount_minor=summary.biggest_spender_amount_minor,
        biggest_expense_id=summary.biggest_expense_id,
        top_category=summary.top_category,
        average_expense_minor=summary.average_expense_minor,
        category_breakdown=[
            CategoryTotalSchema(category=c.category, amount_minor=c.amount_minor, count=c.count)
            for c in summary.category_breakdown
        ],
        settled_member_count=summary.settled_member_count,
        outstanding_member_count=summary.outstanding_member_count,
    )
