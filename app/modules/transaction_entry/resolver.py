"""
Line-Item Resolver - asset search, asset selection and unit cost resolution.

Each line carries its own search and cost sequence numbers. A response is
applied only if its number is still the latest one issued for that line, so a
slow lookup can never overwrite the result of a newer one.
"""

import logging
from decimal import Decimal
from typing import Any, Callable, Optional

from .form_state import FormState
from .gateway import TransactionGateway
from .models import AssetSnapshot, Direction, LineItem, Notice, NoticeLevel
from .schemas import parse_average_cost

logger = logging.getLogger(__name__)


class LineItemResolver:
    def __init__(
        self,
        state: FormState,
        gateway: TransactionGateway,
        notify: Callable[[Notice], None],
        page_size: int = 10,
    ):
        self.state = state
        self.gateway = gateway
        self.notify = notify
        self.page_size = page_size

    def _editable_line(self, local_id: int) -> Optional[LineItem]:
        line = self.state.get_line(local_id)
        if not self.state.draft.line_items_editable:
            return None
        return line

    async def search_assets(self, local_id: int, query: str) -> Optional[tuple]:
        """
        Look up assets for a line's search box.

        Returns the results applied to the line, or None when the draft is
        read-only or the response was superseded.
        """
        line = self._editable_line(local_id)
        if line is None:
            return None

        query = query or ""
        token = line.search_sequence + 1

        if not query.strip():
            # Bumping the token also invalidates any search still in flight
            self.state.update_line_item(
                local_id,
                search_query=query,
                search_results=(),
                search_loading=False,
                search_sequence=token,
            )
            return ()

        self.state.update_line_item(
            local_id, search_query=query, search_loading=True, search_sequence=token
        )

        failed = False
        try:
            results = await self.gateway.search_assets(query.strip(), self.page_size)
        except Exception as e:
            logger.warning(f"Asset search for line {local_id} failed: {e}")
            results, failed = [], True

        current = self.state.find_line(local_id) if self.state.is_initialized else None
        if current is None or current.search_sequence != token:
            logger.debug(f"Dropping stale asset search result for line {local_id}")
            return None

        if failed:
            self.notify(
                Notice(NoticeLevel.WARNING, "Asset search failed. Please try again.", local_id)
            )

        self.state.update_line_item(
            local_id, search_results=tuple(results), search_loading=False
        )
        return current.search_results

    async def select_asset(self, local_id: int, asset: Any) -> Optional[LineItem]:
        """
        Commit an asset to a line.

        IN lines keep a manual unit amount. OUT lines are valued at the asset's
        average cost; when that lookup fails the amount stays 0 and becomes
        manually editable.
        """
        line = self._editable_line(local_id)
        if line is None:
            return None

        snapshot = AssetSnapshot.from_asset(asset)
        is_out = line.direction == Direction.OUT
        cost_token = line.cost_sequence + 1

        self.state.update_line_item(
            local_id,
            asset_id=snapshot.asset_id,
            asset=snapshot,
            search_query=snapshot.label,
            search_results=(),
            search_loading=False,
            search_sequence=line.search_sequence + 1,
            unit_amount=Decimal("0"),
            cost_loading=is_out,
            cost_sequence=cost_token,
            cost_lookup_failed=False,
        )
        if not is_out:
            return line

        average: Optional[Decimal] = None
        try:
            raw = await self.gateway.get_asset_average_cost(snapshot.asset_id)
            average = parse_average_cost(raw)
        except Exception as e:
            logger.warning(f"Average cost lookup for asset {snapshot.asset_id} failed: {e}")

        current = self.state.find_line(local_id) if self.state.is_initialized else None
        if current is None or current.cost_sequence != cost_token:
            logger.debug(f"Dropping stale average cost for line {local_id}")
            return None

        if average is None:
            self.state.update_line_item(
                local_id, cost_loading=False, cost_lookup_failed=True
            )
            self.notify(
                Notice(
                    NoticeLevel.WARNING,
                    f"Could not load the average cost of {snapshot.display_name}. "
                    "Please enter the amount manually.",
                    local_id,
                )
            )
            return current

        self.state.update_line_item(local_id, unit_amount=average, cost_loading=False)
        if average == 0:
            self.notify(
                Notice(
                    NoticeLevel.INFO,
                    f"No historical cost available for {snapshot.display_name}",
                    local_id,
                )
            )
        return current

    def set_quantity(self, local_id: int, quantity: Any) -> Optional[LineItem]:
        # OUT quantities above stock are accepted here and rejected on submit
        if self._editable_line(local_id) is None:
            return None
        return self.state.update_line_item(local_id, quantity=quantity)

    def set_unit_amount(self, local_id: int, amount: Any) -> Optional[LineItem]:
        line = self._editable_line(local_id)
        if line is None or not line.amount_editable:
            return None
        return self.state.update_line_item(local_id, unit_amount=amount)
