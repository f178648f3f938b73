from typing import Optional
from sqlalchemy import String, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.db.base import BaseModel


class Branch(BaseModel):
    """
    Branch model - an organisational site that owns warehouses.
    Extends BaseModel which provides: id, created_at, updated_at, deleted_at
    """

    __tablename__ = "branches"

    name_en: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    name_ar: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    warehouses: Mapped[list["Warehouse"]] = relationship(
        "Warehouse", back_populates="branch"
    )

    def __repr__(self) -> str:
        return f"<Branch(id={self.id}, name_en='{self.name_en}')>"


class Warehouse(BaseModel):
    """
    Warehouse model - the storage location a transaction is booked against.
    Extends BaseModel which provides: id, created_at, updated_at, deleted_at
    """

    __tablename__ = "warehouses"

    name_en: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    name_ar: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    branch_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("branches.id", name="fk_warehouse_branch_id"),
        nullable=True,
        index=True,
    )

    branch: Mapped[Optional["Branch"]] = relationship(
        "Branch", back_populates="warehouses", lazy="joined"
    )

    def __repr__(self) -> str:
        return f"<Warehouse(id={self.id}, name_en='{self.name_en}', branch_id={self.branch_id})>"
