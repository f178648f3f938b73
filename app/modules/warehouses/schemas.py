"""
Warehouse DTOs
"""

from pydantic import BaseModel
from typing import Optional


class WarehouseResponse(BaseModel):
    """Warehouse option as shown in the transaction entry form"""

    id: int
    name_en: Optional[str] = None
    name_ar: Optional[str] = None
    branch_id: Optional[int] = None
    branch_name: Optional[str] = None

    class Config:
        from_attributes = True
