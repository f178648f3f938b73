"""
TransactionsService - Business logic for asset IN/OUT transactions.
Handles stock movement, average-cost lookups and attachment storage.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Dict, Optional
from decimal import Decimal
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ValidationError, NotFoundError, ExternalServiceError
from app.core.s3 import S3Service, StorageError
from .models import Transaction, AssetTransaction, TransactionDirection
from .schemas import CreateTransactionDto, UpdateTransactionDto
from app.modules.assets.service import AssetsService
from app.modules.warehouses.service import WarehousesService

logger = logging.getLogger(__name__)

TWO_PLACES = Decimal("0.01")


@dataclass
class UploadedAttachment:
    """File part received with a create request"""

    filename: str
    content: bytes
    content_type: str = "application/octet-stream"


class TransactionsService:
    """
    Transactions service.
    Posting a transaction moves stock on the referenced assets; afterwards only
    its metadata (date, description, reference, warehouse) may be corrected.
    """

    @staticmethod
    async def get_transaction(db: AsyncSession, transaction_id: int) -> Transaction:
        """
        Get a single non-deleted transaction with its asset transactions.

        Raises:
            NotFoundError: If transaction not found
        """
        query = select(Transaction).where(
            Transaction.id == transaction_id, Transaction.deleted_at.is_(None)
        )
        result = await db.execute(query)
        transaction = result.unique().scalar_one_or_none()

        if not transaction:
            raise NotFoundError("Transaction", transaction_id)

        return transaction

    @staticmethod
    async def create_transaction(
        db: AsyncSession,
        data: CreateTransactionDto,
        attachment: Optional[UploadedAttachment] = None,
    ) -> Transaction:
        """
        Create a transaction and move stock.

        Business Logic:
        1. Validate warehouse exists
        2. Validate all assets exist and are active (single batched query)
        3. OUT only: requested quantity per asset must not exceed stock on hand
        4. Create transaction and asset transactions with computed totals
        5. Adjust asset stock (+ for IN, - for OUT)
        6. Upload the attachment, if any

        Raises:
            ValidationError: If stock is insufficient or an asset is inactive
            NotFoundError: If warehouse/asset not found
            ExternalServiceError: If the attachment upload fails
        """
        # STEP 1: Validate warehouse
        await WarehousesService.get_active(db, data.warehouse_id)

        # STEP 2: Validate assets
        assets = await AssetsService.validate_assets_exist(
            db, (line.asset_id for line in data.line_items)
        )

        # STEP 3: Validate stock for outbound movements
        # The same asset may appear on several lines, so compare the sum
        if data.direction == TransactionDirection.OUT:
            requested: Dict[int, int] = {}
            for line in data.line_items:
                requested[line.asset_id] = requested.get(line.asset_id, 0) + line.quantity

            shortages = [
                f"{assets[asset_id].display_name} (Available: {assets[asset_id].quantity}, Requested: {qty})"
                for asset_id, qty in requested.items()
                if qty > assets[asset_id].quantity
            ]
            if shortages:
                raise ValidationError(
                    "Out transaction quantity exceeds available stock for: "
                    + ", ".join(shortages)
                )

        # STEP 4: Create transaction record with its lines
        lines = []
        for line in data.line_items:
            amount = line.amount.quantize(TWO_PLACES)
            lines.append(
                AssetTransaction(
                    asset_id=line.asset_id,
                    quantity=line.quantity,
                    amount=amount,
                    total_value=(amount * line.quantity).quantize(TWO_PLACES),
                )
            )

        transaction = Transaction(
            date=data.date,
            description=data.description,
            reference_number=data.reference_number,
            warehouse_id=data.warehouse_id,
            direction=data.direction,
            total_value=sum((line.total_value for line in lines), Decimal("0")),
            asset_transactions=lines,
        )
        db.add(transaction)

        # STEP 5: Move stock (in-memory, using pre-fetched assets)
        sign = 1 if data.direction == TransactionDirection.IN else -1
        for line in data.line_items:
            assets[line.asset_id].quantity += sign * line.quantity

        # STEP 6: Store attachment
        if attachment is not None:
            await TransactionsService._store_attachment(transaction, attachment)

        # Note: Don't commit here - let FastAPI dependency handle it
        await db.flush()
        logger.info(
            f"Transaction {transaction.id} created: {data.direction.value}, "
            f"{len(lines)} line(s), total {transaction.total_value}"
        )

        # Refresh server-generated columns and load assets for the response
        await db.refresh(transaction)
        for line in transaction.asset_transactions:
            await db.refresh(line, attribute_names=["asset"])

        return transaction

    @staticmethod
    async def _store_attachment(
        transaction: Transaction, attachment: UploadedAttachment
    ) -> None:
        """Upload in a worker thread (boto3 is blocking) and record key/checksum."""
        file_key = S3Service.build_attachment_key(attachment.filename)
        try:
            key, checksum = await asyncio.to_thread(
                S3Service.upload_file,
                attachment.content,
                file_key,
                attachment.content_type,
                {"original_name": attachment.filename},
            )
        except StorageError as e:
            logger.error(f"Attachment upload failed for {attachment.filename}: {e}")
            raise ExternalServiceError("Attachment storage", str(e)) from e

        transaction.attached_file = key
        transaction.attached_file_name = attachment.filename
        transaction.attached_file_checksum = checksum

    @staticmethod
    async def update_transaction(
        db: AsyncSession, transaction_id: int, data: UpdateTransactionDto
    ) -> Transaction:
        """
        Correct the metadata of a posted transaction.
        Asset transactions and stock are left untouched.

        Raises:
            NotFoundError: If transaction or warehouse not found
        """
        transaction = await TransactionsService.get_transaction(db, transaction_id)
        await WarehousesService.get_active(db, data.warehouse_id)

        transaction.date = data.date
        transaction.description = data.description
        transaction.reference_number = data.reference_number
        transaction.warehouse_id = data.warehouse_id

        await db.flush()
        logger.info(f"Transaction {transaction_id} metadata updated")
        await db.refresh(transaction)

        return transaction

    @staticmethod
    async def get_asset_average(db: AsyncSession, asset_id: int) -> Decimal:
        """
        Quantity-weighted average unit amount over the asset's inbound lines.

        Returns:
            Decimal rounded to 2 places; 0 when there is no inbound history

        Raises:
            NotFoundError: If the asset does not exist
        """
        await AssetsService.get_active(db, asset_id)

        query = (
            select(
                func.coalesce(func.sum(AssetTransaction.quantity * AssetTransaction.amount), 0),
                func.coalesce(func.sum(AssetTransaction.quantity), 0),
            )
            .join(Transaction, AssetTransaction.transaction_id == Transaction.id)
            .where(
                AssetTransaction.asset_id == asset_id,
                AssetTransaction.deleted_at.is_(None),
                Transaction.deleted_at.is_(None),
                Transaction.direction == TransactionDirection.IN,
            )
        )
        total_value, total_quantity = (await db.execute(query)).one()

        if not total_quantity:
            return Decimal("0.00")

        return (Decimal(str(total_value)) / Decimal(total_quantity)).quantize(TWO_PLACES)

    @staticmethod
    async def get_attachment_url(
        db: AsyncSession, transaction_id: int, expiration: int = 3600
    ) -> tuple[Optional[str], str]:
        """
        Presigned URL of the transaction's attachment.

        Returns:
            Tuple of (original file name, presigned url)

        Raises:
            NotFoundError: If the transaction or its attachment does not exist
            ExternalServiceError: If S3 refuses to sign the URL
        """
        transaction = await TransactionsService.get_transaction(db, transaction_id)
        if not transaction.attached_file:
            raise NotFoundError("Attachment of transaction", transaction_id)

        try:
            url = S3Service.generate_presigned_url(transaction.attached_file, expiration)
        except StorageError as e:
            raise ExternalServiceError("Attachment storage", str(e)) from e

        return transaction.attached_file_name, url
