"""Pot and membership endpoints"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from pot_ledger.api.dependencies import get_ledger_store, get_request_id
from pot_ledger.api.errors import to_http_exception
from pot_ledger.api.v1.schemas import MemberSchema, PotCreateRequest, PotListItem, PotListResponse, PotResponse
from pot_ledger.config import settings
from pot_ledger.domain.exceptions import DomainException, MemberReferenceError, ValidationError
from pot_ledger.domain.ledger import add_member, archive_pot, remove_member
from pot_ledger.domain.models import Member
from pot_ledger.infrastructure.database.repositories import LedgerRepository
from pot_ledger.infrastructure.database.session import get_db
from pot_ledger.utils.money import format_amount

router = APIRouter()


def _pot_response(store: LedgerRepository, pot_id: str) -> PotResponse:
    db_pot = store.get_pot(pot_id)
    state = store.load_state(pot_id)
    return PotResponse(
        pot_id=db_pot.id,
        name=db_pot.name,
        description=db_pot.description,
        currency=db_pot.currency,
        created_by=db_pot.created_by,
        is_archived=state.is_archived,
        members=[_member_schema(m) for m in state.members],
    )


def _member_schema(member: Member) -> MemberSchema:
    return MemberSchema(
        member_id=member.member_id,
        display_name=member.display_name,
        preferred_currency=member.preferred_currency,
    )


@router.post("/pots", response_model=PotResponse, status_code=201)
def create_pot(
    request_body: PotCreateRequest,
    request: Request,
    db: Session = Depends(get_db),
    store: LedgerRepository = Depends(get_ledger_store),
):
    """Create a pot with its initial members"""
    request_id = get_request_id(request)
    members = [Member(**m.model_dump()) for m in request_body.members]

    try:
        ids = [m.member_id for m in members]
        if len(ids) != len(set(ids)):
            raise ValidationError("unique_member", "Member ids must be unique within a pot")
        if request_body.created_by is not None and request_body.created_by not in ids:
            raise MemberReferenceError(request_body.created_by, rule="known_creator")

        db_pot = store.create_pot(
            name=request_body.name,
            currency=(request_body.currency or settings.default_currency).upper(),
            members=members,
            description=request_body.description,
            created_by=request_body.created_by,
        )
        db.commit()
        return _pot_response(store, db_pot.id)

    except DomainException as e:
        db.rollback()
        raise to_http_exception(e, request_id, "new")


@router.get("/pots", response_model=PotListResponse)
def list_pots(store: LedgerRepository = Depends(get_ledger_store)):
    """All pots with member count and total spent in each pot's currency"""
    items = [
        PotListItem(
            pot_id=db_pot.id,
            name=db_pot.name,
            currency=db_pot.currency,
            is_archived=bool(db_pot.is_archived),
            member_count=member_count,
            total_spent_minor=total_spent,
            total_spent_display=format_amount(total_spent, db_pot.currency),
        )
        for db_pot, member_count, total_spent in store.list_pots()
    ]
    return PotListResponse(active_count=sum(1 for item in items if not item.is_archived), pots=items)


@router.post("/pots/{pot_id}/archive", response_model=PotResponse)
def archive(
    pot_id: str,
    request: Request,
    db: Session = Depends(get_db),
    store: LedgerRepository = Depends(get_ledger_store),
):
    """Make a pot read-only; balances and the summary stay readable"""
    try:
        archive_pot(store.load_state(pot_id))
        store.archive_pot(pot_id)
        db.commit()
        return _pot_response(store, pot_id)

    except DomainException as e:
        db.rollback()
        raise to_http_exception(e, get_request_id(request), pot_id)


@router.get("/pots/{pot_id}", response_model=PotResponse)
def get_pot(pot_id: str, request: Request, store: LedgerRepository = Depends(get_ledger_store)):
    try:
        return _pot_response(store, pot_id)
    except DomainException as e:
        raise to_http_exception(e, get_request_id(request), pot_id)


@router.post("/pots/{pot_id}/members", response_model=PotResponse, status_code=201)
def join_pot(
    pot_id: str,
    request_body: MemberSchema,
    request: Request,
    db: Session = Depends(get_db),
    store: LedgerRepository = Depends(get_ledger_store),
):
    """Add a member to an existing pot"""
    try:
        member = Member(**request_body.model_dump())
        add_member(store.load_state(pot_id), member)
        store.add_member(pot_id, member)
        db.commit()
        return _pot_response(store, pot_id)

    except DomainException as e:
        db.rollback()
        raise to_http_exception(e, get_request_id(request), pot_id)


@router.delete("/pots/{pot_id}/members/{member_id}", response_model=PotResponse)
def leave_pot(
    pot_id: str,
    member_id: str,
    request: Request,
    db: Session = Depends(get_db),
    store: LedgerRepository = Depends(get_ledger_store),
):
    """Remove a member with no expense or settlement history"""
    try:
        remove_member(store.load_state(pot_id), member_id)
        store.remove_member(pot_id, member_id)
        db.commit()
        return _pot_response(store, pot_id)

    except DomainException as e:
        db.rollback()
        raise to_http_exception(e, get_request_id(request), pot_id)
