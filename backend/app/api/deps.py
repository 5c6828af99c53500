"""
Shared API dependencies
"""

from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.exceptions import Unauthenticated
from app.core.logging import TracingContext
from app.core.security import AuthenticatedAccount, Authenticator, get_authenticator
from app.services.accounts import AccountService
from app.services.draft_manager import DraftManager
from app.services.snapshot_query import SnapshotQuery


async def get_current_account(
    authorization: Optional[str] = Header(None),
    authenticator: Authenticator = Depends(get_authenticator),
) -> AuthenticatedAccount:
    """
    Resolve the caller from the Authorization header.

    Accepts "Bearer <token>" as well as a bare token.
    """
    if not authorization:
        raise Unauthenticated()

    scheme, _, credentials = authorization.partition(" ")
    token = credentials.strip() if scheme.lower() == "bearer" else authorization.strip()
    if not token:
        raise Unauthenticated()

    account = authenticator.verify_token(token)
    TracingContext.set_account(account.account_id)
    return account


def get_draft_manager(db: AsyncSession = Depends(get_db)) -> DraftManager:
    return DraftManager(db)


def get_snapshot_query(db: AsyncSession = Depends(get_db)) -> SnapshotQuery:
    return SnapshotQuery(db)


def get_account_service(
    db: AsyncSession = Depends(get_db),
    authenticator: Authenticator = Depends(get_authenticator),
) -> AccountService:
    return AccountService(db, authenticator)
