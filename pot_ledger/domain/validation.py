"""Entity validation for the ledger model

Checks are pure and return a ValidationResult listing every broken rule, so a
caller can validate a batch of user input before committing any of it.
``ValidationResult.raise_if_invalid`` turns a result into the exception form.
"""

from typing import Iterable, Optional, Sequence

from pot_ledger.domain.models import Split, ValidationResult


def _is_currency_code(currency: Optional[str]) -> bool:
    return bool(currency) and len(currency) == 3 and currency.isalpha() and currency.isupper()


def check_expense_structure(amount_minor: int, splits: Sequence[Split]) -> ValidationResult:
    """Rules that need nothing but the expense itself"""
    result = ValidationResult()

    if amount_minor <= 0:
        result.add("positive_total", f"Expense total must be positive, got {amount_minor}")

    if not splits:
        result.add("non_empty_splits", "Expense must be split among at least one member")
        return result

    seen = set()
    for split in splits:
        if split.amount_minor < 0:
            result.add(
                "non_negative_split",
                f"Split amount for {split.member_id} is negative ({split.amount_minor})",
            )
        if split.member_id in seen:
            result.add("duplicate_split_member", f"Member {split.member_id} appears in more than one split")
        seen.add(split.member_id)

    split_total = sum(s.amount_minor for s in splits)
    if split_total != amount_minor:
        result.add(
            "split_sum_matches_total",
            f"Splits sum to {split_total} but expense total is {amount_minor}",
        )

    return result


def validate_expense(
    payer_id: str,
    amount_minor: int,
    currency: str,
    splits: Sequence[Split],
    member_ids: Iterable[str],
) -> ValidationResult:
    """Full expense validation against the pot's current members"""
    members = set(member_ids)
    result = check_expense_structure(amount_minor, splits)

    if not _is_currency_code(currency):
        result.add("currency_code", f"Invalid currency code: {currency!r}")

    if payer_id not in members:
        result.add("known_payer", f"Payer {payer_id} is not a member of the pot", member_id=payer_id)

    for split in splits:
        if split.member_id not in members:
            result.add(
                "known_split_member",
                f"Split member {split.member_id} is not a member of the pot",
                member_id=split.member_id,
            )

    return result


def validate_settlement(
    from_member_id: str,
    to_member_id: str,
    amount_minor: int,
    currency: str,
    member_ids: Iterable[str],
) -> ValidationResult:
    """Settlement rules: positive amount, two distinct known members"""
    members = set(member_ids)
    result = ValidationResult()

    if amount_minor <= 0:
        result.add("positive_amount", f"Settlement amount must be positive, got {amount_minor}")

    if from_member_id == to_member_id:
        result.add("distinct_parties", f"Member {from_member_id} cannot settle with themselves")

    if not _is_currency_code(currency):
        result.add("currency_code", f"Invalid currency code: {currency!r}")

    if from_member_id not in members:
        result.add(
            "known_from_member",
            f"Paying member {from_member_id} is not a member of the pot",
            member_id=from_member_id,
        )

    if to_member_id not in members:
        result.add(
            "known_to_member",
            f"Receiving member {to_member_id} is not a member of the pot",
            member_id=to_member_id,
        )

    return result
