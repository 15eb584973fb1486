"""SQLAlchemy ORM models for bk_account.

These map to existing tables created by Alembic migrations.
DO NOT add/remove columns here without a corresponding migration.
Repositories use `AccountORM.__table__` as a Core table.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import CheckConstraint, DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column

from src.bk_common.database import Base, BigIntId, Money


class AccountORM(Base):
    __tablename__ = "accounts"
    __table_args__ = (
        CheckConstraint("balance >= 0", name="ck_accounts_balance_gte_0"),
        CheckConstraint("status IN ('ACTIVE', 'INACTIVE')", name="ck_accounts_status"),
    )

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(BigIntId, nullable=False, index=True)
    account_name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    account_number: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")
    balance: Mapped[Decimal] = mapped_column(Money(), nullable=False, default=Decimal("0.00"))
    status: Mapped[str] = mapped_column(String(10), nullable=False, default="ACTIVE")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )


accounts_table = AccountORM.__table__
