"""
PBU Records Users API Endpoints

Endpoints:
- GET    /users/me        - brand/role of the authenticated account
"""

from fastapi import APIRouter, Depends

from app.api.deps import get_account_service, get_current_account
from app.core.security import AuthenticatedAccount
from app.schemas.account import AccountDetailsResponse
from app.services.accounts import AccountService

router = APIRouter()


@router.get("/me", response_model=AccountDetailsResponse)
async def get_user_details(
    current: AuthenticatedAccount = Depends(get_current_account),
    accounts: AccountService = Depends(get_account_service),
):
    details = await accounts.get_details(current.account_id)
    return AccountDetailsResponse(**details)
