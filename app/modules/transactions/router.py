"""
Transactions Router - FastAPI routes for asset IN/OUT transactions.
"""

from typing import Optional
from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import get_current_user
from app.core.db.engine import get_db_util
from app.core.exceptions import ValidationError
from .service import TransactionsService, UploadedAttachment
from .schemas import (
    AssetAverageResponse,
    AttachmentDownloadResponse,
    CreateTransactionDto,
    TransactionResponse,
    UpdateTransactionDto,
)

router = APIRouter(
    prefix="/transactions",
    tags=["transactions"],
    dependencies=[Depends(get_current_user)],
)


def _first_error_message(error: PydanticValidationError) -> str:
    first = error.errors()[0]
    field = ".".join(str(part) for part in first.get("loc", ()))
    return f"{field}: {first.get('msg')}" if field else first.get("msg", "Invalid data")


@router.post("", response_model=TransactionResponse, status_code=201)
async def create_transaction(
    data: str = Form(..., description="JSON encoded CreateTransactionDto"),
    attached_file: Optional[UploadFile] = File(None),
    db: AsyncSession = Depends(get_db_util),
):
    """
    Create a transaction from a multipart request.

    Parts:
    - data: JSON with date, description, reference_number, warehouse_id,
      direction (IN/OUT) and line_items [{asset_id, quantity, amount}]
    - attached_file: optional supporting document

    Automatically:
    - Adds (IN) or deducts (OUT) asset stock
    - Rejects OUT lines exceeding stock on hand
    - Stores the attachment
    """
    try:
        dto = CreateTransactionDto.model_validate_json(data)
    except PydanticValidationError as e:
        raise ValidationError(_first_error_message(e))

    attachment = None
    if attached_file is not None and attached_file.filename:
        attachment = UploadedAttachment(
            filename=attached_file.filename,
            content=await attached_file.read(),
            content_type=attached_file.content_type or "application/octet-stream",
        )

    return await TransactionsService.create_transaction(db, dto, attachment)


@router.get("/asset-average/{asset_id}", response_model=AssetAverageResponse)
async def get_asset_average(asset_id: int, db: AsyncSession = Depends(get_db_util)):
    """
    Average unit cost of an asset, used to value OUT lines.
    Returns 0 when the asset has never been received.
    """
    average = await TransactionsService.get_asset_average(db, asset_id)
    return {"asset_id": asset_id, "average": average}


@router.get("/{transaction_id}", response_model=TransactionResponse)
async def get_transaction(transaction_id: int, db: AsyncSession = Depends(get_db_util)):
    """
    Get a single transaction with its asset transactions.
    """
    return await TransactionsService.get_transaction(db, transaction_id)


@router.put("/{transaction_id}", response_model=TransactionResponse)
async def update_transaction(
    transaction_id: int,
    data: UpdateTransactionDto,
    db: AsyncSession = Depends(get_db_util),
):
    """
    Update transaction metadata (date, description, reference, warehouse).
    Asset transactions are immutable once posted and are not accepted here.
    """
    return await TransactionsService.update_transaction(db, transaction_id, data)


@router.get("/{transaction_id}/download", response_model=AttachmentDownloadResponse)
async def download_attachment(
    transaction_id: int,
    expiration: int = Query(
        3600, ge=300, le=86400, description="URL validity in seconds (5min - 24h)"
    ),
    db: AsyncSession = Depends(get_db_util),
):
    """
    Presigned URL for downloading the transaction's attachment directly from S3.
    """
    file_name, url = await TransactionsService.get_attachment_url(
        db, transaction_id, expiration
    )
    return {"file_name": file_name, "download_url": url, "expires_in_seconds": expiration}
