"""
Submission Coordinator - validates a draft and sends it as one create or update call.
"""

import inspect
import logging
from typing import Any, Callable, List, Optional, Tuple

from .form_state import FormState
from .gateway import TransactionGateway
from .models import (
    Direction,
    DraftStatus,
    EntryMode,
    Notice,
    NoticeLevel,
    SubmissionOutcome,
    SubmissionStatus,
)
from .schemas import LineItemPayload, TransactionCreatePayload, TransactionUpdatePayload

logger = logging.getLogger(__name__)


class SubmissionCoordinator:
    def __init__(
        self,
        state: FormState,
        gateway: TransactionGateway,
        notify: Callable[[Notice], None],
        on_complete: Optional[Callable[[Any], Any]] = None,
    ):
        self.state = state
        self.gateway = gateway
        self.notify = notify
        self.on_complete = on_complete

    def validate(self) -> Optional[Tuple[str, List[str]]]:
        """
        Return ``(message, errors)`` for the first failing rule, or None.

        Rules, in order: warehouse chosen; (CREATE) every line has an asset;
        (CREATE) quantities positive and amounts non-negative; (CREATE) no
        average-cost lookup still pending; (CREATE, OUT) no line asks for more
        than the stock on hand.
        """
        draft = self.state.draft

        if draft.warehouse_id in (None, ""):
            return "Please select a warehouse", ["warehouse_id"]

        if draft.mode == EntryMode.EDIT:
            return None

        missing = [line.local_id for line in draft.lines if line.asset_id is None]
        if missing:
            return (
                "Please select assets for all transaction items",
                [f"line {local_id}" for local_id in missing],
            )

        invalid = [
            line.local_id
            for line in draft.lines
            if line.quantity <= 0 or line.unit_amount < 0
        ]
        if invalid:
            return (
                "Please enter valid quantity and amount for all items",
                [f"line {local_id}" for local_id in invalid],
            )

        pending = [line.local_id for line in draft.lines if line.cost_loading]
        if pending:
            return (
                "Please wait for the average cost to load",
                [f"line {local_id}" for local_id in pending],
            )

        if draft.direction == Direction.OUT:
            over_stock = [
                f"{line.asset.display_name} "
                f"(Available: {line.asset.quantity}, Requested: {line.quantity})"
                for line in draft.lines
                if line.exceeds_stock
            ]
            if over_stock:
                return (
                    "Out transaction quantity exceeds available stock for: "
                    + ", ".join(over_stock),
                    over_stock,
                )

        return None

    def build_create_payload(self) -> TransactionCreatePayload:
        draft = self.state.draft
        return TransactionCreatePayload(
            date=draft.date,
            description=draft.description or None,
            reference_number=draft.reference_number or None,
            warehouse_id=draft.warehouse_id,
            direction=draft.direction,
            line_items=[
                LineItemPayload(
                    asset_id=line.asset_id,
                    quantity=line.quantity,
                    amount=line.unit_amount,
                )
                for line in draft.lines
            ],
        )

    def build_update_payload(self) -> TransactionUpdatePayload:
        draft = self.state.draft
        return TransactionUpdatePayload(
            date=draft.date,
            description=draft.description or None,
            reference_number=draft.reference_number or None,
            warehouse_id=draft.warehouse_id,
        )

    async def submit(self) -> SubmissionOutcome:
        if not self.state.is_initialized or self.state.draft.status != DraftStatus.READY:
            status = self.state.draft.status.value if self.state.is_initialized else "UNINITIALIZED"
            logger.debug(f"Submit ignored while draft is {status}")
            return SubmissionOutcome(SubmissionStatus.IGNORED)

        draft = self.state.draft

        # STEP 1: Validate locally; nothing is sent on failure
        failure = self.validate()
        if failure is not None:
            message, errors = failure
            self.notify(Notice(NoticeLevel.ERROR, message))
            return SubmissionOutcome(
                SubmissionStatus.REJECTED, message=message, errors=tuple(errors)
            )

        # STEP 2: Send a single create or update call
        draft.status = DraftStatus.SUBMITTING
        try:
            if draft.mode == EntryMode.EDIT:
                response = await self.gateway.update_transaction(
                    draft.transaction_id, self.build_update_payload()
                )
                success_message = "Transaction updated successfully!"
            else:
                response = await self.gateway.create_transaction(
                    self.build_create_payload(), draft.attached_file
                )
                success_message = "Transaction created successfully!"
        except Exception as e:
            message = getattr(e, "message", None) or str(e) or "Failed to save transaction"
            logger.warning(f"Transaction submission failed: {message}")
            draft.status = DraftStatus.READY
            self.notify(Notice(NoticeLevel.ERROR, message))
            return SubmissionOutcome(SubmissionStatus.FAILED, message=message)

        # STEP 3: Reset to an empty draft of the same direction and close
        logger.info(f"{draft.mode.value} {draft.direction.value} transaction submitted")
        self.state.reset(draft.direction)
        self.state.draft.status = DraftStatus.CLOSED
        self.notify(Notice(NoticeLevel.SUCCESS, success_message))
        if self.on_complete is not None:
            try:
                result = self.on_complete(response)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception("Completion callback failed after a successful submission")

        return SubmissionOutcome(
            SubmissionStatus.SUBMITTED, message=success_message, response=response
        )
