"""Split builders: turn a total plus a split method into exact Split rows"""

from decimal import Decimal, ROUND_FLOOR
from typing import Dict, List, Sequence

from pot_ledger.domain.exceptions import ValidationError
from pot_ledger.domain.models import Split

HUNDRED = Decimal(100)


def equal_splits(total_minor: int, member_ids: Sequence[str]) -> List[Split]:
    """
    Divide a total equally in integer minor units.

    The first ``total % n`` participants (in the given order) receive one extra
    minor unit, so the splits always sum exactly to the total.

    Example:
        1000 among [a, b, c] → [334, 333, 333]
    """
    if not member_ids:
        raise ValidationError("non_empty_splits", "Expense must be split among at least one member")

    count = len(member_ids)
    base_amount = total_minor // count
    remainder = total_minor % count

    return [
        Split(
            member_id=member_id,
            amount_minor=base_amount + (1 if i < remainder else 0),
            is_equal_split=True,
        )
        for i, member_id in enumerate(member_ids)
    ]


def percentage_splits(total_minor: int, percentages: Dict[str, Decimal]) -> List[Split]:
    """
    Split a total by percentage (0-100 per member, summing to exactly 100).

    Each share is floored to a whole minor unit; the last participant with a
    non-zero percentage absorbs the remainder to keep the sum exact, so a 0%
    participant always owes nothing.
    """
    if not percentages:
        raise ValidationError("non_empty_splits", "Expense must be split among at least one member")

    pcts = {member_id: Decimal(str(pct)) for member_id, pct in percentages.items()}

    for member_id, pct in pcts.items():
        if pct < 0 or pct > HUNDRED:
            raise ValidationError(
                "percentage_range",
                f"Percentage for {member_id} must be between 0 and 100, got {pct}",
            )

    pct_total = sum(pcts.values(), Decimal(0))
    if pct_total != HUNDRED:
        raise ValidationError("percentages_sum_to_100", f"Percentages sum to {pct_total}, expected 100")

    amounts = {
        member_id: int((Decimal(total_minor) * pct / HUNDRED).to_integral_value(rounding=ROUND_FLOOR))
        for member_id, pct in pcts.items()
    }
    absorber = [member_id for member_id, pct in pcts.items() if pct > 0][-1]
    amounts[absorber] += total_minor - sum(amounts.values())

    return [
        Split(member_id=member_id, amount_minor=amounts[member_id], percentage=pct)
        for member_id, pct in pcts.items()
    ]


def exact_splits(amounts: Dict[str, int]) -> List[Split]:
    """Custom per-member amounts, taken verbatim (the Expense checks the sum)"""
    if not amounts:
        raise ValidationError("non_empty_splits", "Expense must be split among at least one member")
    return [Split(member_id=member_id, amount_minor=int(amount)) for member_id, amount in amounts.items()]
