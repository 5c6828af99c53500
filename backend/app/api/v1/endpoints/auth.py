"""
PBU Records Auth API Endpoints

Endpoints:
- POST   /auth/register   - brand/role account registration
- POST   /auth/login      - access token issuance
"""

from fastapi import APIRouter, Depends

from app.api.deps import get_account_service
from app.schemas.account import CredentialsRequest, RegisterResponse, TokenResponse
from app.services.accounts import AccountService

router = APIRouter()


@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(
    request: CredentialsRequest,
    accounts: AccountService = Depends(get_account_service),
):
    """Register a brand/role account"""
    account_id = await accounts.register(request.brand, request.role, request.password)
    return RegisterResponse(account_id=account_id)


@router.post("/login", response_model=TokenResponse)
async def login(
    request: CredentialsRequest,
    accounts: AccountService = Depends(get_account_service),
):
    """Exchange brand/role/password for an access token"""
    token = await accounts.login(request.brand, request.role, request.password)
    return TokenResponse(token=token)
