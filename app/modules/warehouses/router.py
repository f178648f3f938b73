"""
Warehouses Router
"""

from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import get_current_user
from app.core.db.engine import get_db_util
from .service import WarehousesService
from .schemas import WarehouseResponse

router = APIRouter(
    prefix="/warehouses",
    tags=["warehouses"],
    dependencies=[Depends(get_current_user)],
)


@router.get("", response_model=List[WarehouseResponse])
async def list_warehouses(db: AsyncSession = Depends(get_db_util)):
    """
    List warehouses available for booking transactions.
    Each entry carries the owning branch name.
    """
    return await WarehousesService.find_all(db)
