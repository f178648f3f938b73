"""
WarehousesService - read access to warehouses and their branches.
"""

from typing import List
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundError
from .models import Warehouse


class WarehousesService:

    @staticmethod
    def _branch_label(warehouse: Warehouse) -> str | None:
        """Branch display name, falling back to ``Branch <id>`` when unresolved."""
        if warehouse.branch_id is None:
            return None
        branch = warehouse.branch
        if branch is not None and branch.deleted_at is None:
            name = branch.name_en or branch.name_ar
            if name:
                return name
        return f"Branch {warehouse.branch_id}"

    @staticmethod
    async def find_all(db: AsyncSession) -> List[dict]:
        """
        List active warehouses with their branch name resolved.

        Returns:
            List of dicts shaped like WarehouseResponse, ordered by id
        """
        query = (
            select(Warehouse)
            .where(Warehouse.deleted_at.is_(None))
            .order_by(Warehouse.id)
        )
        result = await db.execute(query)
        warehouses = result.unique().scalars().all()

        return [
            {
                "id": warehouse.id,
                "name_en": warehouse.name_en,
                "name_ar": warehouse.name_ar,
                "branch_id": warehouse.branch_id,
                "branch_name": WarehousesService._branch_label(warehouse),
            }
            for warehouse in warehouses
        ]

    @staticmethod
    async def get_active(db: AsyncSession, warehouse_id: int) -> Warehouse:
        """
        Fetch a non-deleted warehouse.

        Raises:
            NotFoundError: If the warehouse does not exist or was deleted
        """
        warehouse = await db.get(Warehouse, warehouse_id)
        if warehouse is None or warehouse.deleted_at is not None:
            raise NotFoundError("Warehouse", warehouse_id)
        return warehouse
