"""Warehouses module"""

from .models import Branch, Warehouse
from .service import WarehousesService
from .router import router

__all__ = ["Branch", "Warehouse", "WarehousesService", "router"]
