"""
Wire DTOs exchanged with the asset-ledger API.

Responses are parsed leniently (unknown keys ignored) since they come from
another service; request payloads are strict.
"""

import logging
from collections.abc import Mapping
from datetime import date as date_type
from decimal import Decimal, InvalidOperation
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from .models import Direction

logger = logging.getLogger(__name__)


# ============================================================================
# Responses
# ============================================================================


class AssetOption(BaseModel):
    """Asset as returned by the search lookup"""

    model_config = ConfigDict(extra="ignore", from_attributes=True)

    id: int
    name_en: Optional[str] = None
    name_ar: Optional[str] = None
    product_code: str = ""
    quantity: int = 0
    is_active: bool = True


class WarehouseOption(BaseModel):
    """Warehouse entry for the warehouse selector"""

    model_config = ConfigDict(extra="ignore")

    id: int
    name_en: Optional[str] = None
    name_ar: Optional[str] = None
    branch_id: Optional[int] = None
    branch_name: Optional[str] = None

    @property
    def label(self) -> str:
        return self.name_en or self.name_ar or f"Warehouse {self.id}"


class PersistedAssetTransaction(BaseModel):
    """A posted line item, used to hydrate EDIT drafts"""

    model_config = ConfigDict(extra="ignore")

    id: int
    asset_id: int
    asset: Optional[AssetOption] = None
    quantity: int = 0
    amount: Decimal = Decimal("0")
    total_value: Decimal = Decimal("0")


class TransactionDetail(BaseModel):
    """Transaction as returned by ``get_transaction``"""

    model_config = ConfigDict(extra="ignore")

    id: int
    date: date_type
    description: Optional[str] = None
    reference_number: Optional[str] = None
    warehouse_id: Optional[int] = None
    direction: Direction
    asset_transactions: List[PersistedAssetTransaction] = Field(default_factory=list)


class WrappedAverageCost(BaseModel):
    """Object form of the average-cost response: ``{"average": 7.5, ...}``"""

    model_config = ConfigDict(extra="ignore")

    average: Any = 0


# The average-cost endpoint answers either with a bare number or with an
# object exposing ``average``. No other shapes are recognised.
AverageCostResponse = Union[int, float, Decimal, str, WrappedAverageCost, Mapping]


def _to_cost(value: Any) -> Decimal:
    if isinstance(value, bool) or value is None:
        return Decimal("0")
    try:
        cost = Decimal(str(value).strip()) if isinstance(value, str) else Decimal(str(value))
    except (InvalidOperation, ValueError):
        return Decimal("0")
    if not cost.is_finite() or cost < 0:
        return Decimal("0")
    return cost


def parse_average_cost(raw: AverageCostResponse) -> Decimal:
    """
    Normalise an average-cost response to a non-negative Decimal.

    Bare numbers (or numeric strings) are used as-is; objects contribute their
    ``average`` field. Anything unrecognised yields 0.
    """
    if isinstance(raw, WrappedAverageCost):
        return _to_cost(raw.average)
    if isinstance(raw, Mapping):
        return _to_cost(raw.get("average"))
    if isinstance(raw, (int, float, Decimal, str)):
        return _to_cost(raw)
    logger.debug(f"Unrecognised average-cost response shape: {type(raw).__name__}")
    return Decimal("0")


# ============================================================================
# Requests
# ============================================================================


class LineItemPayload(BaseModel):
    """One ``{asset_id, quantity, amount}`` triple of a create request"""

    asset_id: int
    quantity: int
    amount: Decimal = Decimal("0")

    @field_serializer("amount")
    def _amount_as_number(self, value: Decimal) -> float:
        return float(value)


class TransactionCreatePayload(BaseModel):
    """JSON body sent as the ``data`` part of the multipart create request"""

    date: date_type
    description: Optional[str] = None
    reference_number: Optional[str] = None
    warehouse_id: int
    direction: Direction
    line_items: List[LineItemPayload]


class TransactionUpdatePayload(BaseModel):
    """Metadata-only update body; never carries line items"""

    date: date_type
    description: Optional[str] = None
    reference_number: Optional[str] = None
    warehouse_id: int
