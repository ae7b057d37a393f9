"""Pydantic schemas for API request/response validation"""

from datetime import date, datetime
from decimal import Decimal
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

CURRENCY_PATTERN = r"^[A-Za-z]{3}$"


class MemberSchema(BaseModel):
    """Pot member"""

    member_id: str = Field(..., min_length=1, max_length=64)
    display_name: str = Field(..., min_length=1)
    preferred_currency: str = Field("USD", pattern=CURRENCY_PATTERN)

    @field_validator("preferred_currency")
    @classmethod
    def upper_currency(cls, value: str) -> str:
        return value.upper()


class PotCreateRequest(BaseModel):
    """Request body for POST /v1/pots"""

    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    currency: Optional[str] = Field(None, pattern=CURRENCY_PATTERN, description="Defaults to service default")
    created_by: Optional[str] = Field(None, description="Member id of the organiser")
    members: List[MemberSchema] = Field(default_factory=list)


class PotResponse(BaseModel):
    pot_id: str
    name: str
    description: Optional[str] = None
    currency: str
    created_by: Optional[str] = None
    is_archived: bool
    members: List[MemberSchema]


class PotListItem(BaseModel):
    """One row of the pot list"""

    pot_id: str
    name: str
    currency: str
    is_archived: bool
    member_count: int
    total_spent_minor: int
    total_spent_display: str


class PotListResponse(BaseModel):
    """Response for GET /v1/pots"""

    active_count: int
    pots: List[PotListItem]


class SplitRequest(BaseModel):
    """How an expense is divided among members"""

    method: Literal["equal", "percentage", "exact"]
    participants: List[str] = Field(default_factory=list, description="Member ids for equal splits")
    percentages: Dict[str, Decimal] = Field(default_factory=dict, description="Member id → 0-100")
    amounts_minor: Dict[str, int] = Field(default_factory=dict, description="Member id → minor units")


class ExpenseRequest(BaseModel):
    """Request body for creating or replacing an expense

    Give the total either as ``amount_minor`` or as a decimal ``amount`` in
    major units ("12.50").
    """

    payer_id: str = Field(..., min_length=1)
    amount_minor: Optional[int] = Field(None, gt=0)
    amount: Optional[Decimal] = Field(None, gt=0)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    description: str = ""
    category: Optional[str] = None
    expense_date: Optional[date] = None
    split: SplitRequest

    @model_validator(mode="after")
    def exactly_one_amount(self) -> "ExpenseRequest":
        if (self.amount_minor is None) == (self.amount is None):
            raise ValueError("Provide exactly one of amount_minor or amount")
        return self


class SplitSchema(BaseModel):
    member_id: str
    amount_minor: int
    is_equal_split: bool
    percentage: Optional[Decimal] = None


class ExpenseResponse(BaseModel):
    expense_id: str
    pot_id: str
    payer_id: str
    amount_minor: int
    amount_display: str
    currency: str
    description: str
    category: Optional[str] = None
    expense_date: Optional[date] = None
    splits: List[SplitSchema]


class BalanceItem(BaseModel):
    """Member net position: positive is owed, negative owes"""

    member_id: str
    display_name: str
    amount_minor: int
    status: Literal["owes", "owed", "settled"]


class DebtSchema(BaseModel):
    from_member_id: str
    to_member_id: str
    amount_minor: int
    currency: str


class CurrencyBalances(BaseModel):
    currency: str
    balances: List[BalanceItem]
    debts: List[DebtSchema]


class BalancesResponse(BaseModel):
    """Response for GET /v1/pots/{pot_id}/balances"""

    pot_id: str
    currencies: List[CurrencyBalances]


class SettlementRequest(BaseModel):
    """Request body for POST /v1/pots/{pot_id}/settlements"""

    from_member_id: str = Field(..., min_length=1)
    to_member_id: str = Field(..., min_length=1)
    amount_minor: int = Field(..., description="Minor units; validated by the ledger")
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    payment_method: Optional[str] = None
    confirmation_id: Optional[str] = None
    notes: Optional[str] = None


class SettleAllRequest(BaseModel):
    """Request body for POST /v1/pots/{pot_id}/settle-all"""

    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    payment_method: Optional[str] = None


class SettlementResponse(BaseModel):
    settlement_id: str
    pot_id: str
    from_member_id: str
    to_member_id: str
    amount_minor: int
    currency: str
    payment_method: Optional[str] = None
    confirmation_id: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime


class SettlementListResponse(BaseModel):
    pot_id: str
    settlements: List[SettlementResponse]


class CategoryTotalSchema(BaseModel):
    category: str
    amount_minor: int
    count: int


class SummaryResponse(BaseModel):
    """Response for GET /v1/pots/{pot_id}/summary"""

    pot_id: str
    currency: str
    total_spent_minor: int
    expense_count: int
    duration_days: int
    biggest_spender_id: Optional[str] = None
    biggest_spender_amount_minor: int
    biggest_expense_id: Optional[str] = None
    top_category: Optional[str] = None
    average_expense_minor: int
    category_breakdown: List[CategoryTotalSchema]
    settled_member_count: int
    outstanding_member_count: int
