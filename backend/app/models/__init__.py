# SQLAlchemy Models

from app.models.account import Account
from app.models.snapshot import Snapshot, RowEntry

__all__ = [
    "Account",
    "Snapshot",
    "RowEntry",
]
