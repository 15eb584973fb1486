"""SQLAlchemy ORM models for bk_ledger.

These map to existing tables created by Alembic migrations.
DO NOT add/remove columns here without a corresponding migration.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, String, func
from sqlalchemy.orm import Mapped, mapped_column

from src.bk_common.database import Base, BigIntId, Money


class TransactionORM(Base):
    __tablename__ = "transactions"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_transactions_amount_positive"),
        CheckConstraint(
            "transaction_type IN ('DEPOSIT', 'WITHDRAWAL', 'TRANSFER')",
            name="ck_transactions_type",
        ),
        CheckConstraint(
            "transaction_status IN ('COMPLETED', 'FAILED')", name="ck_transactions_status"
        ),
        CheckConstraint(
            "from_account_id IS NULL OR from_account_id <> to_account_id",
            name="ck_transactions_distinct_legs",
        ),
        Index("idx_transactions_from_account", "from_account_id", "created_at"),
        Index("idx_transactions_to_account", "to_account_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    amount: Mapped[Decimal] = mapped_column(Money(), nullable=False)
    transaction_type: Mapped[str] = mapped_column(String(20), nullable=False)
    transaction_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="COMPLETED"
    )
    description: Mapped[str | None] = mapped_column(String(255), nullable=True)
    from_account_id: Mapped[int | None] = mapped_column(
        BigIntId, ForeignKey("accounts.id", ondelete="SET NULL"), nullable=True
    )
    to_account_id: Mapped[int | None] = mapped_column(
        BigIntId, ForeignKey("accounts.id", ondelete="SET NULL"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )


transactions_table = TransactionORM.__table__
