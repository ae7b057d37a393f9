"""Domain models - pure Python dataclasses representing ledger entities

All monetary amounts are integers in minor currency units (cents for USD,
whole yen for JPY).
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from pot_ledger.domain.exceptions import MemberReferenceError, ValidationError


@dataclass(frozen=True)
class Member:
    """Pot participant, referenced by id everywhere else"""

    member_id: str
    display_name: str
    preferred_currency: str = "USD"


@dataclass(frozen=True)
class Split:
    """Amount one member owes toward a single expense"""

    member_id: str
    amount_minor: int
    is_equal_split: bool = False
    percentage: Optional[Decimal] = None


@dataclass(frozen=True)
class Violation:
    """A single broken rule, named so callers can display it"""

    rule: str
    message: str
    member_id: Optional[str] = None  # set for unknown-member rules


@dataclass
class ValidationResult:
    """Outcome of a batch validation; never raises on its own"""

    violations: List[Violation] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.violations

    def add(self, rule: str, message: str, member_id: Optional[str] = None) -> None:
        self.violations.append(Violation(rule=rule, message=message, member_id=member_id))

    def rules(self) -> List[str]:
        return [v.rule for v in self.violations]

    def raise_if_invalid(self) -> None:
        """Convert the first violation into its exception form"""
        if not self.violations:
            return
        first = self.violations[0]
        if first.member_id is not None:
            raise MemberReferenceError(first.member_id, first.message, rule=first.rule)
        raise ValidationError(first.rule, first.message)


@dataclass(frozen=True)
class Expense:
    """Single expense within a pot

    Structural rules are enforced at construction; membership rules need the
    pot's member list and are checked by ``validate_expense``.
    """

    expense_id: str
    pot_id: str
    payer_id: str
    amount_minor: int
    currency: str
    splits: Tuple[Split, ...]
    description: str = ""
    category: Optional[str] = None
    expense_date: Optional[date] = None
    created_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        # validation imports this module, so resolve it lazily
        from pot_ledger.domain.validation import check_expense_structure

        # Accept any iterable of splits but store an immutable tuple
        object.__setattr__(self, "splits", tuple(self.splits))
        check_expense_structure(self.amount_minor, self.splits).raise_if_invalid()

    def split_for(self, member_id: str) -> int:
        return sum(s.amount_minor for s in self.splits if s.member_id == member_id)


@dataclass(frozen=True)
class Settlement:
    """Recorded payment between two members - persisted ground truth"""

    settlement_id: str
    pot_id: str
    from_member_id: str
    to_member_id: str
    amount_minor: int
    currency: str
    created_at: datetime
    payment_method: Optional[str] = None
    confirmation_id: Optional[str] = None
    notes: Optional[str] = None

    def __post_init__(self) -> None:
        if self.amount_minor <= 0:
            raise ValidationError("positive_amount", "Settlement amount must be greater than zero")
        if self.from_member_id == self.to_member_id:
            raise ValidationError("distinct_parties", "A member cannot settle with themselves")


@dataclass(frozen=True)
class Debt:
    """Suggested payment: from_member_id owes to_member_id amount_minor"""

    from_member_id: str
    to_member_id: str
    amount_minor: int
    currency: str


@dataclass(frozen=True)
class SettleUpResult:
    """Balances and simplified debts for one currency"""

    currency: str
    balances: Dict[str, int]
    debts: List[Debt]


@dataclass
class CategoryTotal:
    """Spend within one expense category"""

    category: str
    amount_minor: int
    count: int


@dataclass
class PotSummary:
    """Trip-wrapped style statistics for a pot in one currency"""

    pot_id: str
    currency: str
    total_spent_minor: int
    expense_count: int
    duration_days: int
    biggest_spender_id: Optional[str]
    biggest_spender_amount_minor: int
    biggest_expense_id: Optional[str]
    top_category: Optional[str]
    average_expense_minor: int
    category_breakdown: List[CategoryTotal]
    settled_member_count: int
    outstanding_member_count: int
