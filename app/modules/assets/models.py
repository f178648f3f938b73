from typing import Optional
from sqlalchemy import String, Integer, Boolean, Index
from sqlalchemy.orm import Mapped, mapped_column

from app.core.db.base import BaseModel


class Asset(BaseModel):
    """
    Asset model - a fixed asset tracked by quantity on hand.
    Extends BaseModel which provides: id, created_at, updated_at, deleted_at
    """

    __tablename__ = "assets"

    __table_args__ = (
        Index("idx_asset_product_code", "product_code", unique=True),
    )

    name_en: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    name_ar: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    product_code: Mapped[str] = mapped_column(String(100), nullable=False)

    # Stock on hand; moved by IN/OUT transactions
    quantity: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default="1"
    )

    @property
    def display_name(self) -> str:
        return self.name_en or self.name_ar or self.product_code

    def __repr__(self) -> str:
        return f"<Asset(id={self.id}, code='{self.product_code}', qty={self.quantity})>"
