"""
Account Schemas
Registration / login / account details
"""

from pydantic import BaseModel, Field


class CredentialsRequest(BaseModel):
    """brand + role identify the account"""

    brand: str = Field(..., min_length=1, max_length=100)
    role: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=1)


class RegisterResponse(BaseModel):
    message: str = "User registered successfully"
    account_id: int


class TokenResponse(BaseModel):
    token: str
    token_type: str = "bearer"


class AccountDetailsResponse(BaseModel):
    brand: str
    role: str
