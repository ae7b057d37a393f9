"""Unit tests for ledger state mutations and settling up"""

import pytest

from pot_ledger.domain.balances import compute_balances
from pot_ledger.domain.exceptions import LedgerReferenceError, MemberReferenceError, ValidationError
from pot_ledger.domain.ledger import (
    add_expense,
    add_member,
    apply_settlement,
    archive_pot,
    edit_expense,
    remove_expense,
    remove_member,
    settle_up,
    settlement_from_debt,
)
from pot_ledger.domain.models import Member, Split


def test_add_expense_returns_new_state(empty_state, make_expense):
    expense = make_expense("A", 9000, ["A", "B", "C"])

    state = add_expense(empty_state, expense)

    assert state.expenses == (expense,)
    assert empty_state.expenses == ()


def test_add_expense_unknown_payer(empty_state, make_expense):
    with pytest.raises(MemberReferenceError) as exc:
        add_expense(empty_state, make_expense("Z", 1000, ["A", "B"]))
    assert exc.value.member_id == "Z"


def test_add_expense_wrong_pot(empty_state, make_expense):
    with pytest.raises(ValidationError) as exc:
        add_expense(empty_state, make_expense("A", 1000, ["A"], pot_id="other"))
    assert exc.value.rule == "same_pot"


def test_edit_expense_revalidates(empty_state, make_expense):
    state = add_expense(empty_state, make_expense("A", 9000, ["A", "B", "C"], expense_id="e1"))

    state = edit_expense(state, "e1", amount_minor=6000, splits=(Split("B", 3000), Split("C", 3000)))
    assert compute_balances(state.members, state.expenses) == {"A": 6000, "B": -3000, "C": -3000}

    with pytest.raises(ValidationError) as exc:
        edit_expense(state, "e1", amount_minor=7000)
    assert exc.value.rule == "split_sum_matches_total"

    with pytest.raises(MemberReferenceError):
        edit_expense(state, "e1", payer_id="Z")


def test_edit_expense_identity_is_fixed(empty_state, make_expense):
    state = add_expense(empty_state, make_expense("A", 1000, ["A"], expense_id="e1"))

    with pytest.raises(ValidationError) as exc:
        edit_expense(state, "e1", expense_id="e2")
    assert exc.value.rule == "immutable_identity"

    with pytest.raises(ValidationError) as exc:
        edit_expense(state, "e1", pot_id="other")
    assert exc.value.rule == "immutable_identity"


def test_edit_expense_unknown_field(empty_state, make_expense):
    state = add_expense(empty_state, make_expense("A", 1000, ["A"], expense_id="e1"))

    with pytest.raises(ValidationError) as exc:
        edit_expense(state, "e1", amount=1000, tip=5)
    assert exc.value.rule == "editable_field"
    assert "amount, tip" in exc.value.message


def test_edit_missing_expense(empty_state):
    with pytest.raises(LedgerReferenceError):
        edit_expense(empty_state, "nope", description="Taxi")


def test_remove_expense_changes_balances(empty_state, make_expense):
    state = add_expense(empty_state, make_expense("A", 9000, ["A", "B", "C"], expense_id="e1"))
    state = add_expense(state, make_expense("B", 3000, ["A", "B", "C"], expense_id="e2"))

    state = remove_expense(state, "e1")

    assert compute_balances(state.members, state.expenses) == {"A": -1000, "B": 2000, "C": -1000}

    with pytest.raises(LedgerReferenceError):
        remove_expense(state, "e1")


def test_apply_settlement_appends(empty_state, make_expense, make_settlement):
    state = add_expense(empty_state, make_expense("A", 9000, ["A", "B", "C"]))
    settlement = make_settlement("C", "A", 3000)

    state = apply_settlement(settlement, state)

    assert state.settlements == (settlement,)
    assert compute_balances(state.members, state.expenses, state.settlements) == {"A": 3000, "B": -3000, "C": 0}


def test_apply_settlement_rejects_unknown_member(empty_state, make_settlement):
    with pytest.raises(ValidationError) as exc:
        apply_settlement(make_settlement("A", "Z", 100), empty_state)
    assert exc.value.rule == "known_to_member"


def test_apply_settlement_rejects_duplicate_id(empty_state, make_settlement):
    settlement = make_settlement("A", "B", 100, settlement_id="s1")
    state = apply_settlement(settlement, empty_state)

    with pytest.raises(ValidationError) as exc:
        apply_settlement(settlement, state)
    assert exc.value.rule == "unique_settlement"


def test_offsetting_settlement_reverses_a_mistake(empty_state, make_settlement):
    state = apply_settlement(make_settlement("A", "B", 500), empty_state)
    state = apply_settlement(make_settlement("B", "A", 500), state)

    assert len(state.settlements) == 2
    assert compute_balances(state.members, state.expenses, state.settlements) == {"A": 0, "B": 0, "C": 0}


def test_settling_a_debt_zeroes_that_pair(empty_state, make_expense):
    state = add_expense(empty_state, make_expense("A", 9000, ["A", "B", "C"]))
    usd = settle_up(state)[0]
    debt = next(d for d in usd.debts if d.from_member_id == "C")

    settlement = settlement_from_debt(debt, state.pot_id, payment_method="Venmo")
    state = apply_settlement(settlement, state)

    assert settlement.amount_minor == 3000
    assert settlement.payment_method == "Venmo"
    after = settle_up(state)[0]
    assert after.balances == {"A": 3000, "B": -3000, "C": 0}
    assert [(d.from_member_id, d.to_member_id, d.amount_minor) for d in after.debts] == [("B", "A", 3000)]


def test_settle_up_reports_pot_currency_when_empty(empty_state):
    results = settle_up(empty_state)

    assert len(results) == 1
    assert results[0].currency == "USD"
    assert results[0].balances == {"A": 0, "B": 0, "C": 0}
    assert results[0].debts == []


def test_settle_up_per_currency(empty_state, make_expense):
    state = add_expense(empty_state, make_expense("A", 9000, ["A", "B", "C"]))
    state = add_expense(state, make_expense("B", 2000, ["A", "B"], currency="EUR"))

    results = settle_up(state)

    assert [r.currency for r in results] == ["EUR", "USD"]
    assert results[0].debts[0].from_member_id == "A"
    assert results[0].debts[0].currency == "EUR"


def test_add_and_remove_member(empty_state, make_expense):
    state = add_member(empty_state, Member("D", "Dan"))
    assert state.member_ids == ["A", "B", "C", "D"]

    with pytest.raises(ValidationError) as exc:
        add_member(state, Member("D", "Dan again"))
    assert exc.value.rule == "unique_member"

    state = remove_member(state, "D")
    assert state.member_ids == ["A", "B", "C"]


def test_remove_member_with_history_rejected(empty_state, make_expense):
    state = add_expense(empty_state, make_expense("A", 1000, ["A", "B"]))

    with pytest.raises(ValidationError) as exc:
        remove_member(state, "B")
    assert exc.value.rule == "member_unreferenced"

    with pytest.raises(MemberReferenceError):
        remove_member(state, "Z")


def test_archived_pot_is_read_only(empty_state, make_expense, make_settlement):
    state = add_expense(empty_state, make_expense("A", 9000, ["A", "B", "C"], expense_id="e1"))
    state = archive_pot(state)

    assert state.is_archived
    for write in [
        lambda: add_expense(state, make_expense("B", 100, ["B"])),
        lambda: edit_expense(state, "e1", description="Dinner"),
        lambda: remove_expense(state, "e1"),
        lambda: apply_settlement(make_settlement("B", "A", 3000), state),
        lambda: add_member(state, Member("D", "Dan")),
        lambda: remove_member(state, "C"),
    ]:
        with pytest.raises(ValidationError) as exc:
            write()
        assert exc.value.rule == "pot_archived"

    assert settle_up(state)[0].balances == {"A": 6000, "B": -3000, "C": -3000}
