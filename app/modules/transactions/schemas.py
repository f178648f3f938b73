"""
Transaction DTOs (Data Transfer Objects)
"""

from pydantic import BaseModel, Field, field_serializer
from typing import Optional, List
from datetime import datetime, date as date_type
from decimal import Decimal
from .models import TransactionDirection
from app.modules.assets.schemas import AssetResponse


# ============================================================================
# Request DTOs
# ============================================================================


class LineItemDto(BaseModel):
    """One asset line of a new transaction"""

    asset_id: int = Field(..., gt=0, description="Asset ID")
    quantity: int = Field(..., gt=0, description="Quantity must be positive")
    amount: Decimal = Field(default=Decimal("0"), ge=0, description="Unit amount")


class CreateTransactionDto(BaseModel):
    """
    JSON body of the ``data`` part of a multipart create request.
    The optional attachment travels as a separate file part.
    """

    date: date_type = Field(..., description="Date of transaction")
    description: Optional[str] = Field(None, max_length=2000)
    reference_number: Optional[str] = Field(None, max_length=100)
    warehouse_id: int = Field(..., gt=0, description="Warehouse the movement is booked against")
    direction: TransactionDirection = Field(..., description="IN or OUT")
    line_items: List[LineItemDto] = Field(..., min_length=1, description="At least one line")


class UpdateTransactionDto(BaseModel):
    """Metadata-only update; line items of a posted transaction never change"""

    date: date_type
    description: Optional[str] = Field(None, max_length=2000)
    reference_number: Optional[str] = Field(None, max_length=100)
    warehouse_id: int = Field(..., gt=0)


# ============================================================================
# Response DTOs
# ============================================================================


class AssetTransactionResponse(BaseModel):
    """Posted line item with its asset"""

    id: int
    asset_id: int
    asset: AssetResponse
    quantity: int
    amount: Decimal
    total_value: Decimal

    class Config:
        from_attributes = True


class TransactionResponse(BaseModel):
    """Full transaction with nested asset transactions"""

    id: int
    date: date_type
    description: Optional[str] = None
    reference_number: Optional[str] = None
    warehouse_id: int
    direction: TransactionDirection
    total_value: Decimal
    attached_file_name: Optional[str] = None
    asset_transactions: List[AssetTransactionResponse]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class AssetAverageResponse(BaseModel):
    """Quantity-weighted average unit cost of an asset's inbound history"""

    asset_id: int
    average: Decimal = Field(..., description="0 when the asset has no inbound history")

    @field_serializer("average")
    def _average_as_number(self, value: Decimal) -> float:
        return float(value)


class AttachmentDownloadResponse(BaseModel):
    """Presigned download link for a transaction attachment"""

    file_name: Optional[str] = None
    download_url: str
    expires_in_seconds: int
