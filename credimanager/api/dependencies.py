"""Dependency injection for FastAPI endpoints"""

from datetime import date
from typing import Optional

from fastapi import Depends, Query, Request
from sqlalchemy.orm import Session

from credimanager.config import settings
from credimanager.infrastructure.clients.advisory import RiskAdvisoryClient
from credimanager.infrastructure.database.session import get_db
from credimanager.infrastructure.state_store import StateStore


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_state_store(db: Session = Depends(get_db)) -> StateStore:
    """Provide the state store bound to this request's session"""
    return StateStore(db, settings.storage_key)


def get_today(as_of: Optional[date] = Query(None, description="Evaluate as of this date (default: today)")) -> date:
    """The current date is read once here and passed into the engine"""
    return as_of or date.today()


def get_advisory_client() -> RiskAdvisoryClient:
    """Provide risk advisory client instance"""
    return RiskAdvisoryClient()
