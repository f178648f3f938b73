import asyncio
from decimal import Decimal

import pytest

from app.modules.transaction_entry import (
    Direction,
    GatewayError,
    NoticeLevel,
    TransactionEntryEngine,
)
from conftest import CHAIR, LAPTOP, MONITOR, settle


@pytest.fixture
async def out_engine(gateway):
    engine = TransactionEntryEngine(gateway, Direction.OUT)
    await engine.open_for_create()
    return engine


@pytest.fixture
async def in_engine(gateway):
    engine = TransactionEntryEngine(gateway, Direction.IN)
    await engine.open_for_create()
    return engine


# ============================================================================
# Search
# ============================================================================


async def test_search_applies_results_and_clears_loading(in_engine, gateway):
    local_id = in_engine.lines[0].local_id

    results = await in_engine.search_assets(local_id, "lap")

    line = in_engine.get_line(local_id)
    assert results == (LAPTOP,)
    assert line.search_results == (LAPTOP,)
    assert line.search_loading is False
    assert line.search_query == "lap"
    assert gateway.calls_to("search_assets") == [("search_assets", "lap", 10)]


async def test_search_uses_configured_page_size(gateway):
    engine = TransactionEntryEngine(gateway, Direction.IN, search_page_size=2)
    await engine.open_for_create()
    await engine.search_assets(engine.lines[0].local_id, "-00")
    assert gateway.calls_to("search_assets") == [("search_assets", "-00", 2)]
    assert len(engine.lines[0].search_results) == 2


async def test_blank_search_clears_without_a_call(in_engine, gateway):
    local_id = in_engine.lines[0].local_id
    await in_engine.search_assets(local_id, "lap")

    results = await in_engine.search_assets(local_id, "   ")

    assert results == ()
    assert in_engine.get_line(local_id).search_results == ()
    assert in_engine.get_line(local_id).search_loading is False
    assert len(gateway.calls_to("search_assets")) == 1


async def test_search_failure_degrades_to_empty_results(in_engine, gateway):
    gateway.search_error = GatewayError("Network error", is_network_error=True)
    local_id = in_engine.lines[0].local_id

    results = await in_engine.search_assets(local_id, "lap")

    assert results == ()
    assert in_engine.get_line(local_id).search_loading is False
    assert in_engine.notices[-1].level == NoticeLevel.WARNING
    assert in_engine.notices[-1].local_id == local_id


async def test_stale_search_response_is_discarded(in_engine, gateway):
    local_id = in_engine.lines[0].local_id
    gate = asyncio.Event()
    gateway.search_gates["lap"] = gate

    slow = asyncio.create_task(in_engine.search_assets(local_id, "lap"))
    await settle()
    assert in_engine.get_line(local_id).search_loading is True

    fast = await in_engine.search_assets(local_id, "mon")
    gate.set()
    late = await slow

    assert fast == (MONITOR,)
    assert late is None
    line = in_engine.get_line(local_id)
    assert line.search_results == (MONITOR,)
    assert line.search_query == "mon"
    assert line.search_loading is False


async def test_searches_on_different_lines_do_not_interfere(in_engine, gateway):
    first = in_engine.lines[0].local_id
    second = in_engine.add_line_item().local_id
    gate = asyncio.Event()
    gateway.search_gates["lap"] = gate

    pending = asyncio.create_task(in_engine.search_assets(first, "lap"))
    await settle()
    await in_engine.search_assets(second, "mon")
    gate.set()
    await pending

    assert in_engine.get_line(first).search_results == (LAPTOP,)
    assert in_engine.get_line(second).search_results == (MONITOR,)


async def test_search_result_for_removed_line_is_dropped(in_engine, gateway):
    in_engine.add_line_item()
    local_id = in_engine.lines[0].local_id
    gate = asyncio.Event()
    gateway.search_gates["lap"] = gate

    pending = asyncio.create_task(in_engine.search_assets(local_id, "lap"))
    await settle()
    assert in_engine.remove_line_item(local_id) is True
    gate.set()

    assert await pending is None
    assert len(in_engine.lines) == 1


# ============================================================================
# Selection and cost resolution
# ============================================================================


async def test_select_on_in_line_keeps_manual_amount(in_engine, gateway):
    local_id = in_engine.lines[0].local_id
    await in_engine.search_assets(local_id, "lap")

    line = await in_engine.select_asset(local_id, LAPTOP)

    assert line.asset_id == LAPTOP.id
    assert line.asset.product_code == "LAP-001"
    assert line.search_query == "Laptop (LAP-001)"
    assert line.search_results == ()
    assert line.unit_amount == Decimal("0")
    assert gateway.calls_to("get_asset_average_cost") == []

    in_engine.set_quantity(local_id, 3)
    line = in_engine.set_unit_amount(local_id, "12.50")
    assert line.line_total == Decimal("37.50")


async def test_select_on_out_line_uses_average_cost(out_engine, gateway):
    local_id = out_engine.lines[0].local_id
    out_engine.set_quantity(local_id, 2)

    line = await out_engine.select_asset(local_id, LAPTOP)

    assert line.unit_amount == Decimal("7.5")
    assert line.line_total == Decimal("15.0")
    assert line.cost_loading is False
    assert line.cost_lookup_failed is False
    assert gateway.calls_to("get_asset_average_cost") == [("get_asset_average_cost", LAPTOP.id)]


async def test_wrapped_and_string_averages_are_understood(out_engine):
    first = out_engine.lines[0].local_id
    second = out_engine.add_line_item().local_id

    await out_engine.select_asset(first, CHAIR)
    await out_engine.select_asset(second, MONITOR)

    assert out_engine.get_line(first).unit_amount == Decimal("12.25")
    assert out_engine.get_line(second).unit_amount == Decimal("0")


async def test_zero_average_raises_info_notice(out_engine):
    local_id = out_engine.lines[0].local_id
    await out_engine.select_asset(local_id, MONITOR)

    notice = out_engine.notices[-1]
    assert notice.level == NoticeLevel.INFO
    assert "No historical cost" in notice.message
    assert notice.local_id == local_id


async def test_average_cost_failure_is_recoverable(out_engine, gateway):
    gateway.cost_error = GatewayError("Internal server error. Please try again later.", 500)
    local_id = out_engine.lines[0].local_id
    out_engine.set_quantity(local_id, 3)

    line = await out_engine.select_asset(local_id, LAPTOP)

    assert line.unit_amount == Decimal("0")
    assert line.line_total == Decimal("0")
    assert line.cost_loading is False
    assert line.cost_lookup_failed is True
    assert out_engine.notices[-1].level == NoticeLevel.WARNING
    assert "manually" in out_engine.notices[-1].message

    # The warning asks for manual entry, so the amount is now editable
    line = out_engine.set_unit_amount(local_id, "4")
    assert line.line_total == Decimal("12")


async def test_out_amount_is_not_user_editable_after_successful_lookup(out_engine):
    local_id = out_engine.lines[0].local_id
    await out_engine.select_asset(local_id, LAPTOP)

    assert out_engine.set_unit_amount(local_id, "100") is None
    assert out_engine.get_line(local_id).unit_amount == Decimal("7.5")


async def test_reselecting_drops_the_earlier_cost(out_engine, gateway):
    local_id = out_engine.lines[0].local_id
    gate = asyncio.Event()
    gateway.cost_gates[LAPTOP.id] = gate

    first = asyncio.create_task(out_engine.select_asset(local_id, LAPTOP))
    await settle()
    assert out_engine.get_line(local_id).cost_loading is True

    await out_engine.select_asset(local_id, CHAIR)
    gate.set()

    assert await first is None
    line = out_engine.get_line(local_id)
    assert line.asset_id == CHAIR.id
    assert line.unit_amount == Decimal("12.25")


async def test_quantity_above_stock_is_accepted_on_out_line(out_engine):
    local_id = out_engine.lines[0].local_id
    await out_engine.select_asset(local_id, LAPTOP)

    line = out_engine.set_quantity(local_id, 9)

    assert line.quantity == 9
    assert line.exceeds_stock is True
    assert line.line_total == Decimal("67.5")


async def test_non_numeric_quantity_becomes_zero(in_engine):
    local_id = in_engine.lines[0].local_id
    in_engine.set_unit_amount(local_id, 3)

    line = in_engine.set_quantity(local_id, "lots")

    assert line.quantity == 0
    assert line.line_total == Decimal("0")


async def test_resolver_is_inert_on_edit_draft(gateway, posted_transaction):
    gateway.transactions[42] = posted_transaction
    engine = TransactionEntryEngine(gateway, Direction.IN)
    await engine.open_for_edit(42)
    local_id = engine.lines[0].local_id

    assert await engine.search_assets(local_id, "lap") is None
    assert await engine.select_asset(local_id, CHAIR) is None
    assert engine.set_quantity(local_id, 10) is None
    assert engine.set_unit_amount(local_id, 1) is None

    line = engine.get_line(local_id)
    assert line.asset_id == LAPTOP.id
    assert line.quantity == 2
    assert gateway.calls_to("search_assets") == []
