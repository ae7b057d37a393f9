"""Dependency injection for FastAPI endpoints"""

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from pot_ledger.infrastructure.clients.webhook import SettlementWebhookClient
from pot_ledger.infrastructure.database.repositories import LedgerRepository
from pot_ledger.infrastructure.database.session import get_db


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_ledger_store(db: Session = Depends(get_db)) -> LedgerRepository:
    """Provide the persistence collaborator for the ledger engine"""
    return LedgerRepository(db)


def get_webhook_client() -> SettlementWebhookClient:
    """Provide settlement webhook client instance"""
    return SettlementWebhookClient()
