"""
Assets Router - lookups backing the transaction entry form.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import get_current_user
from app.core.db.engine import get_db_util
from app.core.pagination import build_paginated_response
from .service import AssetsService
from .schemas import AssetResponse, AssetSearchResponse

router = APIRouter(
    prefix="/assets",
    tags=["assets"],
    dependencies=[Depends(get_current_user)],
)


@router.get("/search", response_model=AssetSearchResponse)
async def search_assets(
    q: str = Query("", max_length=100, description="Name (EN/AR) or product code fragment"),
    page: int = Query(1, ge=1),
    per_page: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_db_util),
):
    """
    Search active assets by name or product code.

    Examples:
    - GET /assets/search?q=laptop
    - GET /assets/search?q=PC-00&per_page=5&page=2
    """
    assets, total = await AssetsService.search(db, q, page=page, page_size=per_page)
    items = [AssetResponse.model_validate(asset) for asset in assets]
    return build_paginated_response(items, total, page, per_page)


@router.get("/{asset_id}", response_model=AssetResponse)
async def get_asset(asset_id: int, db: AsyncSession = Depends(get_db_util)):
    """Get a single asset with its stock on hand."""
    return await AssetsService.get_active(db, asset_id)
