"""
Form State - the draft transaction and its ordered line items.

All writes to a line go through ``update_line_item`` so that ``line_total``
is recomputed in the same call that changes ``quantity`` or ``unit_amount``.
"""

import itertools
import logging
from datetime import date as date_type
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Optional

from .exceptions import (
    DraftNotInitializedError,
    EntryError,
    LineItemNotFoundError,
    UnknownFieldError,
)
from .models import AssetSnapshot, Direction, DraftStatus, EntryMode, LineItem, TransactionDraft
from .schemas import TransactionDetail, WarehouseOption

logger = logging.getLogger(__name__)

METADATA_FIELDS = frozenset(
    {"date", "description", "reference_number", "warehouse_id", "attached_file"}
)

LINE_FIELDS = frozenset(
    {
        "asset_id",
        "asset",
        "quantity",
        "unit_amount",
        "search_query",
        "search_results",
        "search_loading",
        "search_sequence",
        "cost_loading",
        "cost_sequence",
        "cost_lookup_failed",
    }
)


def coerce_quantity(value: Any) -> int:
    """Whole-number quantity from user input; anything non-numeric becomes 0."""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    try:
        return int(Decimal(str(value).strip()))
    except (InvalidOperation, ValueError, TypeError, OverflowError):
        return 0


def coerce_amount(value: Any) -> Decimal:
    """Unit amount from user input; anything non-numeric becomes 0."""
    if isinstance(value, Decimal):
        return value if value.is_finite() else Decimal("0")
    if isinstance(value, bool) or value is None:
        return Decimal("0")
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return Decimal("0")
    return amount if amount.is_finite() else Decimal("0")


class FormState:
    def __init__(self):
        self._draft: Optional[TransactionDraft] = None
        # Ids are never reused, even across resets
        self._ids = itertools.count(1)
        self.warehouses: tuple = ()

    @property
    def draft(self) -> TransactionDraft:
        if self._draft is None:
            raise DraftNotInitializedError()
        return self._draft

    @property
    def is_initialized(self) -> bool:
        return self._draft is not None

    @property
    def lines(self) -> list:
        return self.draft.lines

    @property
    def grand_total(self) -> Decimal:
        return self.draft.grand_total

    def _new_line(self, direction: Direction) -> LineItem:
        return LineItem(local_id=next(self._ids), direction=direction)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(
        self,
        direction: Direction,
        mode: EntryMode,
        existing: Optional[TransactionDetail] = None,
    ) -> TransactionDraft:
        """
        Start a fresh draft.

        In EDIT mode metadata and lines are hydrated from ``existing``; the
        lines are read-only from then on.
        """
        direction = Direction(direction)
        mode = EntryMode(mode)

        if mode == EntryMode.CREATE:
            draft = TransactionDraft(
                direction=direction, mode=mode, line_items_editable=True
            )
            draft.lines.append(self._new_line(direction))
            draft.status = DraftStatus.READY
            self._draft = draft
            return draft

        if existing is None:
            raise EntryError("An existing transaction is required to edit")
        if existing.direction != direction:
            raise EntryError(
                f"Transaction {existing.id} is an {existing.direction.value} transaction"
            )

        draft = TransactionDraft(
            direction=direction,
            mode=mode,
            line_items_editable=False,
            date=existing.date,
            description=existing.description or "",
            reference_number=existing.reference_number or "",
            warehouse_id=existing.warehouse_id,
            transaction_id=existing.id,
        )

        for record in existing.asset_transactions:
            line = self._new_line(direction)
            line.record_id = record.id
            line.asset_id = record.asset_id
            if record.asset is not None:
                line.asset = AssetSnapshot.from_asset(record.asset)
                line.search_query = line.asset.label
            line.quantity = record.quantity
            line.unit_amount = record.amount
            line.line_total = Decimal(record.quantity) * record.amount
            draft.lines.append(line)

        if not draft.lines:
            draft.lines.append(self._new_line(direction))

        draft.status = DraftStatus.READY
        self._draft = draft
        logger.debug(
            f"Hydrated transaction {existing.id} with {len(draft.lines)} line item(s)"
        )
        return draft

    def reset(self, direction: Optional[Direction] = None) -> TransactionDraft:
        """Back to an empty CREATE draft with a single fresh line."""
        if direction is None:
            direction = self.draft.direction
        return self.initialize(direction, EntryMode.CREATE)

    def set_warehouses(self, warehouses: Iterable[WarehouseOption]) -> None:
        self.warehouses = tuple(warehouses)

    def selected_warehouse(self) -> Optional[WarehouseOption]:
        warehouse_id = self.draft.warehouse_id
        if warehouse_id is None:
            return None
        for warehouse in self.warehouses:
            if warehouse.id == warehouse_id:
                return warehouse
        return None

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------

    def update_metadata_field(self, field: str, value: Any) -> TransactionDraft:
        if field not in METADATA_FIELDS:
            raise UnknownFieldError(field)
        draft = self.draft
        if field == "date" and isinstance(value, str):
            try:
                value = date_type.fromisoformat(value)
            except ValueError as e:
                raise EntryError(f"Invalid date '{value}'") from e
        setattr(draft, field, value)
        return draft

    # ------------------------------------------------------------------
    # Line items
    # ------------------------------------------------------------------

    def find_line(self, local_id: int) -> Optional[LineItem]:
        for line in self.draft.lines:
            if line.local_id == local_id:
                return line
        return None

    def get_line(self, local_id: int) -> LineItem:
        line = self.find_line(local_id)
        if line is None:
            raise LineItemNotFoundError(local_id)
        return line

    def add_line_item(self) -> Optional[LineItem]:
        draft = self.draft
        if not draft.line_items_editable:
            return None
        line = self._new_line(draft.direction)
        draft.lines.append(line)
        return line

    def remove_line_item(self, local_id: int) -> bool:
        draft = self.draft
        if not draft.line_items_editable or len(draft.lines) <= 1:
            return False
        line = self.find_line(local_id)
        if line is None:
            return False
        draft.lines.remove(line)
        return True

    def update_line_item(self, local_id: int, **fields: Any) -> Optional[LineItem]:
        """
        Merge ``fields`` into a line and recompute its total.

        Returns None, leaving the line untouched, when the draft's lines are
        read-only.
        """
        for name in fields:
            if name not in LINE_FIELDS:
                raise UnknownFieldError(name)

        line = self.get_line(local_id)
        if not self.draft.line_items_editable:
            return None

        if "quantity" in fields:
            fields["quantity"] = coerce_quantity(fields["quantity"])
        if "unit_amount" in fields:
            fields["unit_amount"] = coerce_amount(fields["unit_amount"])
        if "search_results" in fields:
            fields["search_results"] = tuple(fields["search_results"] or ())

        for name, value in fields.items():
            setattr(line, name, value)
        line.line_total = Decimal(line.quantity) * line.unit_amount
        return line
