import enum
from datetime import date as date_type
from decimal import Decimal
from sqlalchemy import (
    String,
    Date,
    Numeric,
    Integer,
    Text,
    ForeignKey,
    Enum as SQLEnum,
    Index,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING, Optional

from app.core.db.base import BaseModel

if TYPE_CHECKING:
    from app.modules.assets.models import Asset
    from app.modules.warehouses.models import Warehouse


class TransactionDirection(str, enum.Enum):
    """Whether a transaction brings assets into a warehouse or takes them out"""

    IN = "IN"
    OUT = "OUT"


class Transaction(BaseModel):
    """
    Transaction model - a posted inventory movement with its line items.
    Line items are immutable once posted; only the metadata columns change.
    Extends BaseModel which provides: id, created_at, updated_at, deleted_at
    """

    __tablename__ = "transactions"

    __table_args__ = (
        Index("idx_transaction_date", "date"),
        Index("idx_transaction_warehouse_direction", "warehouse_id", "direction"),
    )

    date: Mapped[date_type] = mapped_column(Date, nullable=False)

    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True, default=None)

    reference_number: Mapped[Optional[str]] = mapped_column(
        String(100), nullable=True, default=None
    )

    warehouse_id: Mapped[int] = mapped_column(
        ForeignKey("warehouses.id", name="fk_transaction_warehouse_id"),
        nullable=False,
        index=True,
    )

    direction: Mapped[TransactionDirection] = mapped_column(
        SQLEnum(TransactionDirection, name="transaction_direction_enum"),
        nullable=False,
    )

    total_value: Mapped[Decimal] = mapped_column(
        Numeric(precision=15, scale=2),
        nullable=False,
        default=0,
    )

    # S3 object key of the optional supporting document
    attached_file: Mapped[Optional[str]] = mapped_column(
        String(500), nullable=True, default=None
    )
    attached_file_name: Mapped[Optional[str]] = mapped_column(
        String(255), nullable=True, default=None
    )
    attached_file_checksum: Mapped[Optional[str]] = mapped_column(
        String(32), nullable=True, default=None
    )

    # Relationships
    warehouse: Mapped["Warehouse"] = relationship("Warehouse", lazy="joined")

    asset_transactions: Mapped[list["AssetTransaction"]] = relationship(
        "AssetTransaction",
        back_populates="transaction",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="AssetTransaction.id",
    )

    def __repr__(self) -> str:
        return f"<Transaction(id={self.id}, direction={self.direction.value}, total={self.total_value})>"


class AssetTransaction(BaseModel):
    """
    Asset transaction - one line item (asset, quantity, unit amount) of a transaction.
    Extends BaseModel which provides: id, created_at, updated_at, deleted_at
    """

    __tablename__ = "asset_transactions"

    __table_args__ = (
        Index("idx_asset_transaction_transaction_id", "transaction_id"),
        Index("idx_asset_transaction_asset_id", "asset_id"),
    )

    transaction_id: Mapped[int] = mapped_column(
        ForeignKey("transactions.id", ondelete="CASCADE", name="fk_asset_transaction_transaction_id"),
        nullable=False,
    )

    asset_id: Mapped[int] = mapped_column(
        ForeignKey("assets.id", name="fk_asset_transaction_asset_id"),
        nullable=False,
    )

    quantity: Mapped[int] = mapped_column(Integer, nullable=False)

    # Unit amount
    amount: Mapped[Decimal] = mapped_column(
        Numeric(precision=15, scale=2),
        nullable=False,
        default=0,
    )

    total_value: Mapped[Decimal] = mapped_column(
        Numeric(precision=15, scale=2),
        nullable=False,
        default=0,
    )

    # Relationships
    transaction: Mapped["Transaction"] = relationship(
        "Transaction", back_populates="asset_transactions"
    )

    asset: Mapped["Asset"] = relationship("Asset", lazy="joined")

    def __repr__(self) -> str:
        return f"<AssetTransaction(id={self.id}, asset_id={self.asset_id}, qty={self.quantity}, total={self.total_value})>"
