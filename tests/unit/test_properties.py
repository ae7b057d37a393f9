"""Property checks over randomly generated pots (seeded, reproducible)"""

import random
import uuid
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from pot_ledger.domain.balances import compute_balances
from pot_ledger.domain.ledger import LedgerState, apply_settlement, settle_up, settlement_from_debt
from pot_ledger.domain.models import Expense, Member, Settlement
from pot_ledger.domain.simplify import apply_debts, simplify
from pot_ledger.domain.splits import equal_splits, exact_splits, percentage_splits

SEEDS = list(range(25))


def random_pot(seed: int):
    rng = random.Random(seed)
    members = [Member(member_id=f"m{i:02d}", display_name=f"Member {i}") for i in range(rng.randint(2, 8))]
    ids = [m.member_id for m in members]

    expenses = []
    for _ in range(rng.randint(0, 15)):
        total = rng.randint(1, 500_000)
        participants = rng.sample(ids, rng.randint(1, len(ids)))
        method = rng.choice(["equal", "percentage", "exact"])
        if method == "equal":
            splits = equal_splits(total, participants)
        elif method == "percentage":
            cuts = sorted(rng.randint(0, 10_000) for _ in range(len(participants) - 1))
            bounds = [0] + cuts + [10_000]
            splits = percentage_splits(
                total,
                {p: Decimal(bounds[i + 1] - bounds[i]) / 100 for i, p in enumerate(participants)},
            )
        else:
            remaining = total
            amounts = {}
            for p in participants[:-1]:
                amounts[p] = rng.randint(0, remaining)
                remaining -= amounts[p]
            amounts[participants[-1]] = remaining
            splits = exact_splits(amounts)
        expenses.append(
            Expense(
                expense_id=str(uuid.UUID(int=rng.getrandbits(128))),
                pot_id="pot",
                payer_id=rng.choice(ids),
                amount_minor=total,
                currency="USD",
                splits=tuple(splits),
            )
        )

    settlements = []
    for _ in range(rng.randint(0, 5)):
        payer, payee = rng.sample(ids, 2)
        settlements.append(
            Settlement(
                settlement_id=str(uuid.UUID(int=rng.getrandbits(128))),
                pot_id="pot",
                from_member_id=payer,
                to_member_id=payee,
                amount_minor=rng.randint(1, 100_000),
                currency="USD",
                created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
            )
        )

    return members, expenses, settlements


@pytest.mark.parametrize("seed", SEEDS)
def test_balances_sum_to_zero(seed):
    members, expenses, settlements = random_pot(seed)
    assert sum(compute_balances(members, expenses, settlements).values()) == 0


@pytest.mark.parametrize("seed", SEEDS)
def test_recomputation_is_idempotent(seed):
    members, expenses, settlements = random_pot(seed)
    assert compute_balances(members, expenses, settlements) == compute_balances(members, expenses, settlements)


@pytest.mark.parametrize("seed", SEEDS)
def test_debts_zero_every_balance_within_bound(seed):
    members, expenses, settlements = random_pot(seed)
    balances = compute_balances(members, expenses, settlements)

    debts = simplify(balances)

    assert all(v == 0 for v in apply_debts(balances, debts).values())
    nonzero = sum(1 for v in balances.values() if v != 0)
    assert len(debts) <= max(nonzero - 1, 0)
    assert all(d.amount_minor > 0 for d in debts)
    assert simplify(balances) == debts


@pytest.mark.parametrize("seed", SEEDS)
def test_settling_every_debt_clears_the_pot(seed):
    members, expenses, settlements = random_pot(seed)
    state = LedgerState(
        pot_id="pot",
        currency="USD",
        members=tuple(members),
        expenses=tuple(expenses),
        settlements=tuple(settlements),
    )

    for debt in settle_up(state)[0].debts:
        state = apply_settlement(settlement_from_debt(debt, "pot"), state)

    after = settle_up(state)[0]
    assert all(v == 0 for v in after.balances.values())
    assert after.debts == []
