"""
AssetsService - asset lookups used by transaction entry.
"""

from typing import Dict, Iterable, List, Tuple
from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundError, ValidationError
from app.core.pagination import paginate_query
from .models import Asset


class AssetsService:

    @staticmethod
    async def search(
        db: AsyncSession, query_text: str, page: int = 1, page_size: int = 10
    ) -> Tuple[List[Asset], int]:
        """
        Search active assets by English name, Arabic name or product code.

        Args:
            query_text: Case-insensitive fragment; blank returns every active asset
            page: 1-indexed page number
            page_size: Items per page

        Returns:
            Tuple of (assets on this page, total matches)
        """
        query = select(Asset).where(Asset.deleted_at.is_(None), Asset.is_active.is_(True))

        term = (query_text or "").strip()
        if term:
            pattern = f"%{term}%"
            query = query.where(
                or_(
                    Asset.name_en.ilike(pattern),
                    Asset.name_ar.ilike(pattern),
                    Asset.product_code.ilike(pattern),
                )
            )

        query = query.order_by(Asset.name_en, Asset.id)
        return await paginate_query(db, query, page=page, page_size=page_size)

    @staticmethod
    async def get_active(db: AsyncSession, asset_id: int) -> Asset:
        """
        Fetch a non-deleted asset.

        Raises:
            NotFoundError: If the asset does not exist or was deleted
        """
        asset = await db.get(Asset, asset_id)
        if asset is None or asset.deleted_at is not None:
            raise NotFoundError("Asset", asset_id)
        return asset

    @staticmethod
    async def validate_assets_exist(
        db: AsyncSession, asset_ids: Iterable[int]
    ) -> Dict[int, Asset]:
        """
        Batch-load assets for a transaction in one query.

        Returns:
            Dict of asset_id -> Asset

        Raises:
            NotFoundError: If any id is unknown or deleted
            ValidationError: If any asset is inactive
        """
        unique_ids = sorted(set(asset_ids))
        result = await db.execute(
            select(Asset).where(Asset.id.in_(unique_ids), Asset.deleted_at.is_(None))
        )
        assets = {asset.id: asset for asset in result.scalars().all()}

        for asset_id in unique_ids:
            if asset_id not in assets:
                raise NotFoundError("Asset", asset_id)
            if not assets[asset_id].is_active:
                raise ValidationError(f"Asset '{assets[asset_id].display_name}' is inactive")

        return assets
