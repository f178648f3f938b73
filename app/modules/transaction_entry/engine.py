"""
Transaction Entry Engine - the state behind the IN/OUT transaction entry form.

Usage:
    async with HttpTransactionGateway(StaticCredentialProvider(token)) as gateway:
        engine = TransactionEntryEngine(gateway, Direction.OUT)
        await engine.open_for_create()
        line = engine.lines[0]
        results = await engine.search_assets(line.local_id, "laptop")
        await engine.select_asset(line.local_id, results[0])
        engine.update_metadata_field("warehouse_id", 3)
        outcome = await engine.submit()
"""

import logging
from decimal import Decimal
from typing import Any, Callable, List, Optional

from app.core.config import config
from .coordinator import SubmissionCoordinator
from .form_state import FormState
from .gateway import TransactionGateway
from .resolver import LineItemResolver
from .models import (
    Direction,
    DraftStatus,
    EntryMode,
    LineItem,
    Notice,
    NoticeLevel,
    SubmissionOutcome,
    TransactionDraft,
)
from .schemas import WarehouseOption

logger = logging.getLogger(__name__)

_LOG_LEVELS = {
    NoticeLevel.INFO: logging.INFO,
    NoticeLevel.SUCCESS: logging.INFO,
    NoticeLevel.WARNING: logging.WARNING,
    NoticeLevel.ERROR: logging.ERROR,
}


def log_notice(notice: Notice) -> None:
    """Default notifier: write notices to the log."""
    logger.log(_LOG_LEVELS[notice.level], notice.message)


class TransactionEntryEngine:
    def __init__(
        self,
        gateway: TransactionGateway,
        direction: Direction,
        notifier: Optional[Callable[[Notice], None]] = None,
        on_complete: Optional[Callable[[Any], Any]] = None,
        search_page_size: Optional[int] = None,
    ):
        self.gateway = gateway
        self.direction = Direction(direction)
        self.notices: List[Notice] = []
        self._notifier = notifier or log_notice

        self.state = FormState()
        self.resolver = LineItemResolver(
            self.state,
            gateway,
            self._notify,
            page_size=search_page_size or config.asset_search_page_size,
        )
        self.coordinator = SubmissionCoordinator(
            self.state, gateway, self._notify, on_complete=on_complete
        )

    def _notify(self, notice: Notice) -> None:
        self.notices.append(notice)
        self._notifier(notice)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def status(self) -> DraftStatus:
        if not self.state.is_initialized:
            return DraftStatus.UNINITIALIZED
        return self.state.draft.status

    @property
    def draft(self) -> TransactionDraft:
        return self.state.draft

    @property
    def lines(self) -> list:
        return self.state.lines

    @property
    def grand_total(self) -> Decimal:
        return self.state.grand_total

    @property
    def warehouses(self) -> tuple:
        return self.state.warehouses

    async def load_warehouses(self) -> tuple:
        try:
            warehouses = await self.gateway.get_warehouses()
        except Exception as e:
            logger.warning(f"Loading warehouses failed: {e}")
            self.state.set_warehouses(())
            self._notify(Notice(NoticeLevel.WARNING, "Failed to load warehouses"))
            return ()
        self.state.set_warehouses(warehouses)
        return self.state.warehouses

    async def open_for_create(self) -> TransactionDraft:
        draft = self.state.initialize(self.direction, EntryMode.CREATE)
        await self.load_warehouses()
        return draft

    async def open_for_edit(self, transaction_id: int) -> Optional[TransactionDraft]:
        """
        Load a persisted transaction for metadata editing.

        Returns None and emits an error notice when it cannot be loaded.
        """
        try:
            existing = await self.gateway.get_transaction(transaction_id)
            draft = self.state.initialize(self.direction, EntryMode.EDIT, existing)
        except Exception as e:
            message = getattr(e, "message", None) or str(e)
            logger.warning(f"Loading transaction {transaction_id} failed: {message}")
            self._notify(
                Notice(NoticeLevel.ERROR, f"Failed to load transaction: {message}")
            )
            return None
        await self.load_warehouses()
        return draft

    # ------------------------------------------------------------------
    # Form State
    # ------------------------------------------------------------------

    def update_metadata_field(self, field: str, value: Any) -> TransactionDraft:
        return self.state.update_metadata_field(field, value)

    def add_line_item(self) -> Optional[LineItem]:
        return self.state.add_line_item()

    def remove_line_item(self, local_id: int) -> bool:
        return self.state.remove_line_item(local_id)

    def update_line_item(self, local_id: int, **fields: Any) -> Optional[LineItem]:
        return self.state.update_line_item(local_id, **fields)

    def get_line(self, local_id: int) -> LineItem:
        return self.state.get_line(local_id)

    def selected_warehouse(self) -> Optional[WarehouseOption]:
        return self.state.selected_warehouse()

    # ------------------------------------------------------------------
    # Resolver
    # ------------------------------------------------------------------

    async def search_assets(self, local_id: int, query: str) -> Optional[tuple]:
        return await self.resolver.search_assets(local_id, query)

    async def select_asset(self, local_id: int, asset: Any) -> Optional[LineItem]:
        return await self.resolver.select_asset(local_id, asset)

    def set_quantity(self, local_id: int, quantity: Any) -> Optional[LineItem]:
        return self.resolver.set_quantity(local_id, quantity)

    def set_unit_amount(self, local_id: int, amount: Any) -> Optional[LineItem]:
        return self.resolver.set_unit_amount(local_id, amount)

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    def validate(self):
        return self.coordinator.validate()

    async def submit(self) -> SubmissionOutcome:
        return await self.coordinator.submit()


