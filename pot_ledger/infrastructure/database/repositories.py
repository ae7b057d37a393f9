"""Data access layer for pots, expenses and settlements"""

import uuid
from decimal import Decimal
from typing import Iterable, List, Optional, Tuple

from sqlalchemy import and_, func
from sqlalchemy.orm import Session

from pot_ledger.domain.exceptions import LedgerReferenceError
from pot_ledger.domain.ledger import LedgerState
from pot_ledger.domain.models import Expense, Member, Settlement, Split
from pot_ledger.infrastructure.database.models import (
    ExpenseRecord,
    ExpenseSplitRecord,
    PotMemberRecord,
    PotRecord,
    SettlementRecord,
)


def _to_member(row: PotMemberRecord) -> Member:
    return Member(member_id=row.member_id, display_name=row.display_name, preferred_currency=row.preferred_currency)


def _to_expense(row: ExpenseRecord) -> Expense:
    return Expense(
        expense_id=row.id,
        pot_id=row.pot_id,
        payer_id=row.payer_id,
        amount_minor=row.amount_minor,
        currency=row.currency,
        splits=tuple(
            Split(
                member_id=s.member_id,
                amount_minor=s.amount_minor,
                is_equal_split=s.is_equal_split,
                percentage=Decimal(s.percentage) if s.percentage is not None else None,
            )
            for s in row.splits
        ),
        description=row.description or "",
        category=row.category,
        expense_date=row.expense_date,
        created_at=row.created_at,
    )


def _to_settlement(row: SettlementRecord) -> Settlement:
    return Settlement(
        settlement_id=row.id,
        pot_id=row.pot_id,
        from_member_id=row.from_member_id,
        to_member_id=row.to_member_id,
        amount_minor=row.amount_minor,
        currency=row.currency,
        created_at=row.created_at,
        payment_method=row.payment_method,
        confirmation_id=row.confirmation_id,
        notes=row.notes,
    )


def _split_rows(splits: Iterable[Split]) -> List[ExpenseSplitRecord]:
    return [
        ExpenseSplitRecord(
            position=i,
            member_id=s.member_id,
            amount_minor=s.amount_minor,
            is_equal_split=s.is_equal_split,
            percentage=s.percentage,
        )
        for i, s in enumerate(splits)
    ]


class LedgerRepository:
    """SQLAlchemy-backed ledger store; callers own the transaction"""

    def __init__(self, db: Session):
        self.db = db

    def create_pot(
        self,
        name: str,
        currency: str,
        members: Iterable[Member] = (),
        description: Optional[str] = None,
        created_by: Optional[str] = None,
    ) -> PotRecord:
        """Persist a new pot with its initial members"""
        db_pot = PotRecord(
            id=str(uuid.uuid4()),
            name=name,
            currency=currency,
            description=description,
            created_by=created_by,
            is_archived=False,
        )
        self.db.add(db_pot)
        self.db.flush()

        for member in members:
            self.add_member(db_pot.id, member)

        return db_pot

    def get_pot(self, pot_id: str) -> PotRecord:
        db_pot = self.db.query(PotRecord).filter(PotRecord.id == pot_id).first()
        if db_pot is None:
            raise LedgerReferenceError(f"Pot {pot_id} not found")
        return db_pot

    def list_pots(self) -> List[Tuple[PotRecord, int, int]]:
        """
        Every pot with its member count and total spent.

        Only expenses in the pot's own currency count toward the total.
        Newest pots first.
        """
        member_counts = (
            self.db.query(PotMemberRecord.pot_id, func.count(PotMemberRecord.member_id).label("member_count"))
            .group_by(PotMemberRecord.pot_id)
            .subquery()
        )
        totals = (
            self.db.query(
                ExpenseRecord.pot_id,
                ExpenseRecord.currency,
                func.sum(ExpenseRecord.amount_minor).label("total_spent"),
            )
            .group_by(ExpenseRecord.pot_id, ExpenseRecord.currency)
            .subquery()
        )

        rows = (
            self.db.query(
                PotRecord,
                func.coalesce(member_counts.c.member_count, 0),
                func.coalesce(totals.c.total_spent, 0),
            )
            .outerjoin(member_counts, member_counts.c.pot_id == PotRecord.id)
            .outerjoin(totals, and_(totals.c.pot_id == PotRecord.id, totals.c.currency == PotRecord.currency))
            .order_by(PotRecord.created_at.desc(), PotRecord.id)
            .all()
        )
        return [(pot, int(member_count), int(total_spent)) for pot, member_count, total_spent in rows]

    def archive_pot(self, pot_id: str) -> None:
        db_pot = self.get_pot(pot_id)
        db_pot.is_archived = True
        self.db.flush()

    def load_state(self, pot_id: str) -> LedgerState:
        """Full snapshot of a pot for the engine"""
        db_pot = self.get_pot(pot_id)

        members = (
            self.db.query(PotMemberRecord)
            .filter(PotMemberRecord.pot_id == pot_id)
            .order_by(PotMemberRecord.member_id)
            .all()
        )
        expenses = (
            self.db.query(ExpenseRecord)
            .filter(ExpenseRecord.pot_id == pot_id)
            .order_by(ExpenseRecord.created_at, ExpenseRecord.id)
            .all()
        )
        settlements = (
            self.db.query(SettlementRecord)
            .filter(SettlementRecord.pot_id == pot_id)
            .order_by(SettlementRecord.created_at, SettlementRecord.id)
            .all()
        )

        return LedgerState(
            pot_id=db_pot.id,
            currency=db_pot.currency,
            is_archived=bool(db_pot.is_archived),
            members=tuple(_to_member(m) for m in members),
            expenses=tuple(_to_expense(e) for e in expenses),
            settlements=tuple(_to_settlement(s) for s in settlements),
        )

    def add_member(self, pot_id: str, member: Member) -> None:
        self.db.add(
            PotMemberRecord(
                pot_id=pot_id,
                member_id=member.member_id,
                display_name=member.display_name,
                preferred_currency=member.preferred_currency,
            )
        )
        self.db.flush()

    def save_expense(self, expense: Expense) -> None:
        """Insert a new expense or overwrite an edited one, splits included"""
        db_expense = self.db.query(ExpenseRecord).filter(ExpenseRecord.id == expense.expense_id).first()
        if db_expense is None:
            db_expense = ExpenseRecord(id=expense.expense_id, pot_id=expense.pot_id)
            if expense.created_at is not None:
                db_expense.created_at = expense.created_at
            self.db.add(db_expense)

        db_expense.payer_id = expense.payer_id
        db_expense.amount_minor = expense.amount_minor
        db_expense.currency = expense.currency
        db_expense.description = expense.description
        db_expense.category = expense.category
        db_expense.expense_date = expense.expense_date
        db_expense.splits = _split_rows(expense.splits)

        self.db.flush()

    def delete_expense(self, pot_id: str, expense_id: str) -> None:
        db_expense = (
            self.db.query(ExpenseRecord)
            .filter(ExpenseRecord.pot_id == pot_id, ExpenseRecord.id == expense_id)
            .first()
        )
        if db_expense is None:
            raise LedgerReferenceError(f"Expense {expense_id} not found in pot {pot_id}")
        self.db.delete(db_expense)
        self.db.flush()

    def append_settlement(self, settlement: Settlement) -> None:
        """Insert only; the log has no update or delete path"""
        self.db.add(
            SettlementRecord(
                id=settlement.settlement_id,
                pot_id=settlement.pot_id,
                from_member_id=settlement.from_member_id,
                to_member_id=settlement.to_member_id,
                amount_minor=settlement.amount_minor,
                currency=settlement.currency,
                payment_method=settlement.payment_method,
                confirmation_id=settlement.confirmation_id,
                notes=settlement.notes,
                created_at=settlement.created_at,
            )
        )
        self.db.flush()

    def remove_member(self, pot_id: str, member_id: str) -> None:
        self.db.query(PotMemberRecord).filter(
            PotMemberRecord.pot_id == pot_id, PotMemberRecord.member_id == member_id
        ).delete()
        self.db.flush()
