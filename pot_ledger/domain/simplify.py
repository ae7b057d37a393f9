"""Debt simplification - net balances to a short list of pairwise payments"""

import heapq
from typing import Dict, List, Tuple

from pot_ledger.domain.exceptions import InvariantViolation
from pot_ledger.domain.models import Debt


def simplify(balances: Dict[str, int], currency: str = "USD") -> List[Debt]:
    """
    Greedy largest-debtor / largest-creditor matching.

    Algorithm:
    - Creditors have balance > 0, debtors balance < 0; zeros are skipped
    - Each step pairs the debtor owing the most with the creditor owed the
      most, transfers min(|debt|, credit), and re-queues any residual
    - Equal magnitudes are ordered by member id, so output is deterministic

    Every step zeroes at least one party, so the result never holds more than
    (non-zero members - 1) debts. This is a heuristic, not a proof-optimal
    minimum: some balance sets admit fewer transfers via subset matching.

    Raises:
        InvariantViolation: balances do not sum to zero (including the
            single non-zero member case)
    """
    total = sum(balances.values())
    if total != 0:
        raise InvariantViolation(f"Cannot simplify balances that sum to {total}")

    # Max-heaps via negated magnitude; member id breaks ties ascending
    creditors: List[Tuple[int, str]] = [(-amt, mid) for mid, amt in balances.items() if amt > 0]
    debtors: List[Tuple[int, str]] = [(amt, mid) for mid, amt in balances.items() if amt < 0]
    heapq.heapify(creditors)
    heapq.heapify(debtors)

    debts: List[Debt] = []
    while creditors and debtors:
        neg_credit, creditor_id = heapq.heappop(creditors)
        neg_debt, debtor_id = heapq.heappop(debtors)
        credit, debt = -neg_credit, -neg_debt

        amount = min(credit, debt)
        debts.append(
            Debt(
                from_member_id=debtor_id,
                to_member_id=creditor_id,
                amount_minor=amount,
                currency=currency,
            )
        )

        if credit > amount:
            heapq.heappush(creditors, (-(credit - amount), creditor_id))
        if debt > amount:
            heapq.heappush(debtors, (-(debt - amount), debtor_id))

    if creditors or debtors:
        # Unreachable while the zero-sum check above holds
        raise InvariantViolation("Balances left unsettled after simplification")

    return debts


def apply_debts(balances: Dict[str, int], debts: List[Debt]) -> Dict[str, int]:
    """Balances after every debt is paid (all zero when debts are correct)"""
    result = dict(balances)
    for debt in debts:
        result[debt.from_member_id] = result.get(debt.from_member_id, 0) + debt.amount_minor
        result[debt.to_member_id] = result.get(debt.to_member_id, 0) - debt.amount_minor
    return result
