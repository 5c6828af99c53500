"""
PBU Records Account Model
Brand/role accounts that own drafts and snapshots
"""

from datetime import datetime, UTC
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Uuid, UniqueConstraint

from app.core.database import Base


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Account(Base):
    """
    Account master table

    draft_snapshot_id points at the account's single live draft. It is only
    written by DraftManager and is nulled by the database when the draft
    snapshot row is deleted.
    """

    __tablename__ = "pbu_account"
    __table_args__ = (
        UniqueConstraint("brand", "role", name="uq_pbu_account_brand_role"),
    )

    account_id = Column(Integer, primary_key=True, autoincrement=True)
    brand = Column(String(100), nullable=False)
    role = Column(String(100), nullable=False)
    password_hash = Column(String(100), nullable=False)

    # use_alter: pbu_snapshot also references pbu_account
    draft_snapshot_id = Column(
        Uuid(as_uuid=True),
        ForeignKey(
            "pbu_snapshot.snapshot_id",
            ondelete="SET NULL",
            use_alter=True,
            name="fk_pbu_account_draft_snapshot",
        ),
        nullable=True,
    )

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    def __repr__(self):
        return f"<Account(account_id={self.account_id}, brand='{self.brand}', role='{self.role}')>"
