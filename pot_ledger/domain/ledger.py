"""Ledger state for a single pot and the mutations that produce new states

The state is an immutable snapshot. Every mutation validates first and returns
a new LedgerState; balances and debts are never stored, only recomputed from
the current expenses and settlements.
"""

import dataclasses
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Protocol, Tuple

from pot_ledger.domain.balances import compute_balances_by_currency
from pot_ledger.domain.exceptions import LedgerReferenceError, MemberReferenceError, ValidationError
from pot_ledger.domain.models import Debt, Expense, Member, Settlement, SettleUpResult
from pot_ledger.domain.simplify import simplify
from pot_ledger.domain.validation import validate_expense, validate_settlement
from pot_ledger.utils.date_utils import utc_now


@dataclass(frozen=True)
class LedgerState:
    """Consistent snapshot of one pot"""

    pot_id: str
    currency: str
    members: Tuple[Member, ...] = ()
    expenses: Tuple[Expense, ...] = ()
    settlements: Tuple[Settlement, ...] = ()
    is_archived: bool = False

    @property
    def member_ids(self) -> List[str]:
        return [m.member_id for m in self.members]

    def get_expense(self, expense_id: str) -> Expense:
        for expense in self.expenses:
            if expense.expense_id == expense_id:
                return expense
        raise LedgerReferenceError(f"Expense {expense_id} not found in pot {self.pot_id}")


class LedgerStore(Protocol):
    """Persistence collaborator; implementations live in infrastructure"""

    def load_state(self, pot_id: str) -> LedgerState: ...

    def add_member(self, pot_id: str, member: Member) -> None: ...

    def remove_member(self, pot_id: str, member_id: str) -> None: ...

    def save_expense(self, expense: Expense) -> None: ...

    def delete_expense(self, pot_id: str, expense_id: str) -> None: ...

    def append_settlement(self, settlement: Settlement) -> None: ...

    def archive_pot(self, pot_id: str) -> None: ...


IMMUTABLE_EXPENSE_FIELDS = frozenset({"expense_id", "pot_id"})
EDITABLE_EXPENSE_FIELDS = frozenset(f.name for f in dataclasses.fields(Expense)) - IMMUTABLE_EXPENSE_FIELDS


def _ensure_writable(state: LedgerState) -> None:
    if state.is_archived:
        raise ValidationError("pot_archived", f"Pot {state.pot_id} is archived and read-only")


def archive_pot(state: LedgerState) -> LedgerState:
    """Mark the pot read-only; balances and summaries stay available"""
    return dataclasses.replace(state, is_archived=True)


def add_member(state: LedgerState, member: Member) -> LedgerState:
    _ensure_writable(state)
    if member.member_id in state.member_ids:
        raise ValidationError("unique_member", f"Member {member.member_id} is already in the pot")
    return dataclasses.replace(state, members=state.members + (member,))


def remove_member(state: LedgerState, member_id: str) -> LedgerState:
    """Drop a member who has no expense or settlement history in the pot"""
    _ensure_writable(state)
    if member_id not in state.member_ids:
        raise MemberReferenceError(member_id)

    referenced = any(
        e.payer_id == member_id or any(s.member_id == member_id for s in e.splits)
        for e in state.expenses
    ) or any(member_id in (s.from_member_id, s.to_member_id) for s in state.settlements)
    if referenced:
        raise ValidationError(
            "member_unreferenced",
            f"Member {member_id} appears in expenses or settlements and cannot be removed",
        )

    return dataclasses.replace(state, members=tuple(m for m in state.members if m.member_id != member_id))


def add_expense(state: LedgerState, expense: Expense) -> LedgerState:
    _ensure_writable(state)
    if expense.pot_id != state.pot_id:
        raise ValidationError("same_pot", f"Expense belongs to pot {expense.pot_id}, not {state.pot_id}")
    if any(e.expense_id == expense.expense_id for e in state.expenses):
        raise ValidationError("unique_expense", f"Expense {expense.expense_id} already exists")

    validate_expense(
        expense.payer_id, expense.amount_minor, expense.currency, expense.splits, state.member_ids
    ).raise_if_invalid()

    return dataclasses.replace(state, expenses=state.expenses + (expense,))


def edit_expense(state: LedgerState, expense_id: str, /, **changes) -> LedgerState:
    """
    Replace fields of an existing expense and re-validate it.

    ``dataclasses.replace`` re-runs the structural checks; membership is
    checked against the current member list.
    """
    _ensure_writable(state)
    if changes.keys() & IMMUTABLE_EXPENSE_FIELDS:
        raise ValidationError("immutable_identity", "Expense id and pot cannot be edited")
    unknown = sorted(changes.keys() - EDITABLE_EXPENSE_FIELDS)
    if unknown:
        raise ValidationError("editable_field", f"Unknown expense field(s): {', '.join(unknown)}")

    original = state.get_expense(expense_id)
    updated = dataclasses.replace(original, **changes)

    validate_expense(
        updated.payer_id, updated.amount_minor, updated.currency, updated.splits, state.member_ids
    ).raise_if_invalid()

    return dataclasses.replace(
        state,
        expenses=tuple(updated if e.expense_id == expense_id else e for e in state.expenses),
    )


def remove_expense(state: LedgerState, expense_id: str) -> LedgerState:
    _ensure_writable(state)
    state.get_expense(expense_id)
    return dataclasses.replace(state, expenses=tuple(e for e in state.expenses if e.expense_id != expense_id))


def apply_settlement(settlement: Settlement, state: LedgerState) -> LedgerState:
    """
    Append a recorded payment to the pot's settlement log.

    The log is append-only: a mistaken settlement is corrected by recording
    an offsetting one in the opposite direction.
    """
    _ensure_writable(state)
    if settlement.pot_id != state.pot_id:
        raise ValidationError("same_pot", f"Settlement belongs to pot {settlement.pot_id}, not {state.pot_id}")
    if any(s.settlement_id == settlement.settlement_id for s in state.settlements):
        raise ValidationError("unique_settlement", f"Settlement {settlement.settlement_id} already recorded")

    validate_settlement(
        settlement.from_member_id,
        settlement.to_member_id,
        settlement.amount_minor,
        settlement.currency,
        state.member_ids,
    ).raise_if_invalid()

    return dataclasses.replace(state, settlements=state.settlements + (settlement,))


def settlement_from_debt(
    debt: Debt,
    pot_id: str,
    settlement_id: Optional[str] = None,
    created_at: Optional[datetime] = None,
    payment_method: Optional[str] = None,
    confirmation_id: Optional[str] = None,
    notes: Optional[str] = None,
) -> Settlement:
    """Full settlement of a suggested debt"""
    return Settlement(
        settlement_id=settlement_id or str(uuid.uuid4()),
        pot_id=pot_id,
        from_member_id=debt.from_member_id,
        to_member_id=debt.to_member_id,
        amount_minor=debt.amount_minor,
        currency=debt.currency,
        created_at=created_at or utc_now(),
        payment_method=payment_method,
        confirmation_id=confirmation_id,
        notes=notes,
    )


def settle_up(state: LedgerState) -> List[SettleUpResult]:
    """
    Balances and simplified debts for every currency in the pot.

    The pot's base currency is always reported, even with no entries.
    """
    by_currency = compute_balances_by_currency(state.members, state.expenses, state.settlements)
    if state.currency not in by_currency:
        by_currency[state.currency] = {m.member_id: 0 for m in sorted(state.members, key=lambda m: m.member_id)}

    return [
        SettleUpResult(currency=currency, balances=balances, debts=simplify(balances, currency=currency))
        for currency, balances in sorted(by_currency.items())
    ]
