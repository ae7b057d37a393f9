"""Unit tests for pot summary statistics"""

from datetime import date

from pot_ledger.domain.ledger import LedgerState, add_expense, apply_settlement
from pot_ledger.domain.stats import summarize_pot


def test_summary_of_empty_pot(empty_state):
    summary = summarize_pot(empty_state)

    assert summary.total_spent_minor == 0
    assert summary.expense_count == 0
    assert summary.duration_days == 0
    assert summary.biggest_spender_id is None
    assert summary.top_category is None
    assert summary.average_expense_minor == 0
    assert summary.category_breakdown == []
    assert summary.settled_member_count == 3
    assert summary.outstanding_member_count == 0


def test_summary_totals_and_breakdown(empty_state, make_expense, make_settlement):
    state: LedgerState = empty_state
    for expense in [
        make_expense("A", 9000, ["A", "B", "C"], expense_id="e1", category="Food", expense_date=date(2024, 6, 1)),
        make_expense("B", 12000, ["A", "B", "C"], expense_id="e2", category="Lodging", expense_date=date(2024, 6, 3)),
        make_expense("A", 3001, ["A", "B"], expense_id="e3", category="Food", expense_date=date(2024, 6, 2)),
        make_expense("C", 500, ["C"], expense_id="e4"),
        make_expense("C", 9999, ["A", "C"], expense_id="e5", currency="EUR"),
    ]:
        state = add_expense(state, expense)
    state = apply_settlement(make_settlement("B", "A", 100), state)

    summary = summarize_pot(state)

    assert summary.currency == "USD"
    assert summary.total_spent_minor == 24501
    assert summary.expense_count == 4
    assert summary.duration_days == 3
    assert summary.biggest_spender_id == "A"
    assert summary.biggest_spender_amount_minor == 12001
    assert summary.biggest_expense_id == "e2"
    assert summary.top_category == "Food"
    assert summary.average_expense_minor == 6125
    assert [(c.category, c.amount_minor, c.count) for c in summary.category_breakdown] == [
        ("Food", 12001, 2),
        ("Lodging", 12000, 1),
        ("uncategorized", 500, 1),
    ]
    assert summary.settled_member_count == 0
    assert summary.outstanding_member_count == 3


def test_summary_other_currency(empty_state, make_expense):
    state = add_expense(empty_state, make_expense("C", 9999, ["A", "C"], currency="EUR"))

    summary = summarize_pot(state, currency="EUR")

    assert summary.total_spent_minor == 9999
    assert summary.biggest_spender_id == "C"
    assert summary.settled_member_count == 1
    assert summary.outstanding_member_count == 2


def test_top_category_is_most_common(empty_state, make_expense):
    state = empty_state
    for i in range(3):
        state = add_expense(state, make_expense("A", 100, ["A", "B"], expense_id=f"f{i}", category="Food"))
    state = add_expense(state, make_expense("B", 10000, ["A", "B"], expense_id="l1", category="Lodging"))

    summary = summarize_pot(state)

    assert summary.top_category == "Food"
    assert summary.category_breakdown[0].category == "Lodging"


def test_top_category_count_tie_goes_to_bigger_spend(empty_state, make_expense):
    state = add_expense(empty_state, make_expense("A", 500, ["A"], category="Taxi"))
    state = add_expense(state, make_expense("A", 900, ["A"], category="Museum"))

    assert summarize_pot(state).top_category == "Museum"
