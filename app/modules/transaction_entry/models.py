"""
In-memory state of a transaction being composed or edited.
"""

import enum
from dataclasses import dataclass, field
from datetime import date as date_type
from decimal import Decimal
from typing import Any, Optional, Tuple


class Direction(str, enum.Enum):
    """Movement direction; fixed for the lifetime of a draft"""

    IN = "IN"
    OUT = "OUT"


class EntryMode(str, enum.Enum):
    CREATE = "CREATE"
    EDIT = "EDIT"


class DraftStatus(str, enum.Enum):
    """
    UNINITIALIZED -> READY -> SUBMITTING -> READY (on error) | CLOSED (on success)
    """

    UNINITIALIZED = "UNINITIALIZED"
    READY = "READY"
    SUBMITTING = "SUBMITTING"
    CLOSED = "CLOSED"


class NoticeLevel(str, enum.Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Notice:
    """User-visible message raised by the engine (toast, inline banner...)"""

    level: NoticeLevel
    message: str
    local_id: Optional[int] = None


@dataclass(frozen=True)
class AssetSnapshot:
    """Identifying fields of the selected asset, copied at selection time"""

    asset_id: int
    product_code: str = ""
    name_en: Optional[str] = None
    name_ar: Optional[str] = None
    quantity: int = 0
    is_active: bool = True

    @property
    def display_name(self) -> str:
        return self.name_en or self.name_ar or self.product_code or f"Asset {self.asset_id}"

    @property
    def label(self) -> str:
        if self.product_code:
            return f"{self.display_name} ({self.product_code})"
        return self.display_name

    @classmethod
    def from_asset(cls, asset: Any) -> "AssetSnapshot":
        """Build from any asset-shaped object (``AssetOption``, ORM row...)."""
        if isinstance(asset, cls):
            return asset
        return cls(
            asset_id=asset.id,
            product_code=getattr(asset, "product_code", "") or "",
            name_en=getattr(asset, "name_en", None),
            name_ar=getattr(asset, "name_ar", None),
            quantity=int(getattr(asset, "quantity", 0) or 0),
            is_active=bool(getattr(asset, "is_active", True)),
        )


@dataclass(frozen=True)
class Attachment:
    """Binary document attached to a new transaction"""

    filename: str
    content: bytes
    content_type: str = "application/octet-stream"


@dataclass
class LineItem:
    """
    One asset/quantity/cost entry of a draft.

    ``line_total`` is only ever written together with its operands by
    ``FormState.update_line_item``.
    """

    local_id: int
    direction: Direction
    asset_id: Optional[int] = None
    asset: Optional[AssetSnapshot] = None
    quantity: int = 1
    unit_amount: Decimal = Decimal("0")
    line_total: Decimal = Decimal("0")

    # Id of the persisted asset transaction (EDIT drafts only)
    record_id: Optional[int] = None

    # Workflow state while the line is being edited
    search_query: str = ""
    search_results: Tuple[Any, ...] = ()
    search_loading: bool = False
    search_sequence: int = 0
    cost_loading: bool = False
    cost_sequence: int = 0
    cost_lookup_failed: bool = False

    @property
    def exceeds_stock(self) -> bool:
        """OUT line asking for more than the stock seen when the asset was picked."""
        return (
            self.direction == Direction.OUT
            and self.asset is not None
            and self.quantity > self.asset.quantity
        )

    @property
    def amount_editable(self) -> bool:
        """
        IN lines take a manual unit amount; OUT lines only after the
        average-cost lookup failed.
        """
        return self.direction == Direction.IN or self.cost_lookup_failed


@dataclass
class TransactionDraft:
    """Transaction metadata plus its ordered line items"""

    direction: Direction
    mode: EntryMode
    line_items_editable: bool
    date: date_type = field(default_factory=date_type.today)
    description: str = ""
    reference_number: str = ""
    warehouse_id: Optional[int] = None
    attached_file: Optional[Attachment] = None
    transaction_id: Optional[int] = None
    lines: list = field(default_factory=list)
    status: DraftStatus = DraftStatus.UNINITIALIZED

    @property
    def grand_total(self) -> Decimal:
        return sum((line.line_total for line in self.lines), Decimal("0"))


class SubmissionStatus(str, enum.Enum):
    SUBMITTED = "submitted"
    REJECTED = "rejected"  # validation failed, nothing sent
    FAILED = "failed"  # collaborator call failed, draft kept
    IGNORED = "ignored"  # not in a submittable state


@dataclass(frozen=True)
class SubmissionOutcome:
    status: SubmissionStatus
    message: str = ""
    errors: Tuple[str, ...] = ()
    response: Any = None

    @property
    def ok(self) -> bool:
        return self.status == SubmissionStatus.SUBMITTED
