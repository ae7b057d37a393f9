"""Balance aggregation - folds expenses and settlements into net positions"""

from typing import Dict, Iterable, List, Optional, Sequence

from pot_ledger.domain.exceptions import InvariantViolation, MemberReferenceError, ValidationError
from pot_ledger.domain.models import Expense, Member, Settlement


def _currencies(expenses: Iterable[Expense], settlements: Iterable[Settlement]) -> List[str]:
    found = {e.currency for e in expenses} | {s.currency for s in settlements}
    return sorted(found)


def compute_balances(
    members: Sequence[Member],
    expenses: Sequence[Expense],
    settlements: Sequence[Settlement] = (),
    currency: Optional[str] = None,
) -> Dict[str, int]:
    """
    Net balance per member in minor units.

    balance = Σ paid for expenses − Σ own split amounts
              + Σ settlements paid − Σ settlements received

    Positive means the member is owed money, negative means they owe.

    Requirements:
    - Every member in ``members`` appears in the result (zero included),
      ordered by member id
    - Unknown payer/split/settlement member → MemberReferenceError
    - Without ``currency`` all entries must share one currency; with it,
      entries in other currencies are ignored
    - Result sums to exactly zero (integer arithmetic)
    """
    if currency is None:
        found = _currencies(expenses, settlements)
        if len(found) > 1:
            raise ValidationError(
                "single_currency",
                f"Entries span several currencies ({', '.join(found)}); compute each currency separately",
            )
    else:
        expenses = [e for e in expenses if e.currency == currency]
        settlements = [s for s in settlements if s.currency == currency]

    balances: Dict[str, int] = {m.member_id: 0 for m in sorted(members, key=lambda m: m.member_id)}

    def credit(member_id: str, amount: int) -> None:
        if member_id not in balances:
            raise MemberReferenceError(member_id)
        balances[member_id] += amount

    for expense in expenses:
        credit(expense.payer_id, expense.amount_minor)
        # Payer's own share is not special-cased
        for split in expense.splits:
            credit(split.member_id, -split.amount_minor)

    for settlement in settlements:
        credit(settlement.from_member_id, settlement.amount_minor)
        credit(settlement.to_member_id, -settlement.amount_minor)

    total = sum(balances.values())
    if total != 0:
        raise InvariantViolation(f"Balances sum to {total}, expected 0")

    return balances


def compute_balances_by_currency(
    members: Sequence[Member],
    expenses: Sequence[Expense],
    settlements: Sequence[Settlement] = (),
) -> Dict[str, Dict[str, int]]:
    """Independent balance maps for every currency present in the inputs"""
    return {
        currency: compute_balances(members, expenses, settlements, currency=currency)
        for currency in _currencies(expenses, settlements)
    }
