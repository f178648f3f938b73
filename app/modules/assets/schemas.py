"""
Asset DTOs
"""

from pydantic import BaseModel
from typing import List, Optional


class AssetResponse(BaseModel):
    """Asset as returned by lookups and embedded in asset transactions"""

    id: int
    name_en: Optional[str] = None
    name_ar: Optional[str] = None
    product_code: str
    quantity: int
    is_active: bool

    class Config:
        from_attributes = True


class AssetSearchResponse(BaseModel):
    """Paginated asset search result"""

    items: List[AssetResponse]
    total: int
    page: int
    page_size: int
    total_pages: int
    has_more: bool
