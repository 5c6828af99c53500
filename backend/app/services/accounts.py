"""
Account Service
Registration, login and account details for brand/role accounts
"""

from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import AccountExists, InvalidInput, NotFound, StorageFailure, Unauthenticated
from app.core.logging import get_logger, LogEvents
from app.core.security import Authenticator, get_authenticator
from app.services.record_store import RecordStore

logger = get_logger("AccountService")


class AccountService:
    def __init__(self, db: AsyncSession, authenticator: Optional[Authenticator] = None):
        self.store = RecordStore(db)
        self.authenticator = authenticator or get_authenticator()

    async def register(self, brand: str, role: str, password: str) -> int:
        """
        Create an account for a brand/role pair.

        Raises:
            InvalidInput: blank brand, role or password
            AccountExists: the pair is already registered
        """
        if not brand or not role or not password:
            raise InvalidInput("brand, role and password are required.")

        password_hash = self.authenticator.hash_password(password)

        try:
            async with self.store.transaction("register") as store:
                if await store.find_account(brand, role) is not None:
                    raise AccountExists()
                account = await store.add_account(brand, role, password_hash)
                account_id = account.account_id
        except StorageFailure as e:
            # Lost a race against a concurrent registration
            if isinstance(e.__cause__, IntegrityError):
                raise AccountExists() from e.__cause__
            raise

        logger.info(LogEvents.ACCOUNT_REGISTERED, account_id=account_id, brand=brand, role=role)
        return account_id

    async def login(self, brand: str, role: str, password: str) -> str:
        """
        Verify credentials and issue an access token.

        Raises:
            Unauthenticated: unknown account or wrong password
        """
        async with self.store.reading("login") as store:
            account = await store.find_account(brand, role)

        if account is None or not self.authenticator.verify_password(password, account.password_hash):
            logger.warning(LogEvents.ACCOUNT_LOGIN_REJECTED, brand=brand, role=role)
            raise Unauthenticated("Invalid credentials")

        logger.info(LogEvents.ACCOUNT_LOGIN, account_id=account.account_id)
        return self.authenticator.issue_token(account.account_id, account.brand, account.role)

    async def get_details(self, account_id: int) -> dict:
        async with self.store.reading("get_details") as store:
            account = await store.get_account(account_id)

        if account is None:
            raise NotFound("User not found.")
        return {"brand": account.brand, "role": account.role}
