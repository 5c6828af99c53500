"""
AccountService tests (register, login, details)
"""

import pytest

from app.core.exceptions import AccountExists, InvalidInput, InvalidToken, NotFound, Unauthenticated
from app.core.security import Authenticator, get_authenticator
from app.services.accounts import AccountService

pytestmark = pytest.mark.asyncio

OTHER_SECRET = "service-test-secret-0123456789-abcdefgh"


class TestAccountService:
    async def test_defaults_to_configured_authenticator(self, db):
        service = AccountService(db)

        account_id = await service.register("VW", "PBU", "pw-123")
        token = await service.login("VW", "PBU", "pw-123")

        account = get_authenticator().verify_token(token)
        assert account.account_id == account_id
        assert (account.brand, account.role) == ("VW", "PBU")

    async def test_uses_given_authenticator(self, db):
        authenticator = Authenticator(secret_key=OTHER_SECRET, bcrypt_rounds=4)
        service = AccountService(db, authenticator)

        await service.register("Audi", "PBU", "pw-123")
        token = await service.login("Audi", "PBU", "pw-123")

        assert authenticator.verify_token(token).brand == "Audi"
        with pytest.raises(InvalidToken):
            get_authenticator().verify_token(token)

    async def test_duplicate_registration(self, db):
        service = AccountService(db)
        await service.register("VW", "PBU", "pw-123")

        with pytest.raises(AccountExists):
            await service.register("VW", "PBU", "other")

    async def test_blank_fields_rejected(self, db):
        with pytest.raises(InvalidInput):
            await AccountService(db).register("VW", "", "pw-123")

    async def test_wrong_password(self, db):
        service = AccountService(db)
        await service.register("VW", "PBU", "pw-123")

        with pytest.raises(Unauthenticated):
            await service.login("VW", "PBU", "nope")

    async def test_details(self, db):
        service = AccountService(db)
        account_id = await service.register("VW", "Sales", "pw-123")

        assert await service.get_details(account_id) == {"brand": "VW", "role": "Sales"}
        with pytest.raises(NotFound):
            await service.get_details(account_id + 1000)
