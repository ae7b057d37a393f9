"""Pot statistics - totals, top spender and category breakdown"""

from collections import defaultdict
from typing import Dict, Optional

from pot_ledger.domain.balances import compute_balances
from pot_ledger.domain.ledger import LedgerState
from pot_ledger.domain.models import CategoryTotal, PotSummary
from pot_ledger.utils.date_utils import span_days

UNCATEGORIZED = "uncategorized"


def summarize_pot(state: LedgerState, currency: Optional[str] = None) -> PotSummary:
    """
    Summarize spending in one currency (the pot's base currency by default).

    Ties are broken by id/name so repeated calls give the same summary.
    """
    currency = currency or state.currency
    expenses = [e for e in state.expenses if e.currency == currency]

    total_spent = sum(e.amount_minor for e in expenses)

    paid_by: Dict[str, int] = defaultdict(int)
    for expense in expenses:
        paid_by[expense.payer_id] += expense.amount_minor

    biggest_spender_id = None
    biggest_spender_amount = 0
    if paid_by:
        biggest_spender_id, biggest_spender_amount = min(paid_by.items(), key=lambda kv: (-kv[1], kv[0]))

    biggest_expense_id = None
    if expenses:
        biggest_expense_id = min(expenses, key=lambda e: (-e.amount_minor, e.expense_id)).expense_id

    by_category: Dict[str, CategoryTotal] = {}
    for expense in expenses:
        name = expense.category or UNCATEGORIZED
        entry = by_category.setdefault(name, CategoryTotal(category=name, amount_minor=0, count=0))
        entry.amount_minor += expense.amount_minor
        entry.count += 1
    breakdown = sorted(by_category.values(), key=lambda c: (-c.amount_minor, c.category))
    # most common category; ties by amount, then name
    top = min(by_category.values(), key=lambda c: (-c.count, -c.amount_minor, c.category), default=None)

    balances = compute_balances(state.members, state.expenses, state.settlements, currency=currency)
    settled = sum(1 for amount in balances.values() if amount == 0)

    return PotSummary(
        pot_id=state.pot_id,
        currency=currency,
        total_spent_minor=total_spent,
        expense_count=len(expenses),
        duration_days=span_days(e.expense_date for e in expenses),
        biggest_spender_id=biggest_spender_id,
        biggest_spender_amount_minor=biggest_spender_amount,
        biggest_expense_id=biggest_expense_id,
        top_category=top.category if top else None,
        average_expense_minor=total_spent // len(expenses) if expenses else 0,
        category_breakdown=breakdown,
        settled_member_count=settled,
        outstanding_member_count=len(balances) - settled,
    )
