import asyncio
import os
from datetime import datetime
from decimal import Decimal

# Must be set before the app (and its module-level engine) is imported
os.environ["DB_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["JWT_SECRET"] = "test-secret-key-that-is-long-enough-for-hs256"
os.environ["S3_BUCKET_NAME"] = "test-bucket"

import httpx
import pytest
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.core.auth import AuthService
from app.core.db.base import Base
from app.core.db.engine import configure_sqlite_connection, get_db_util
from app.main import app
from app.modules.assets.models import Asset
from app.modules.transaction_entry.exceptions import GatewayError
from app.modules.transaction_entry.schemas import (
    AssetOption,
    TransactionDetail,
    WarehouseOption,
)
from app.modules.warehouses.models import Branch, Warehouse


# ============================================================================
# API fixtures
# ============================================================================


@pytest.fixture
async def session_factory():
    test_engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    event.listen(test_engine.sync_engine, "connect", configure_sqlite_connection)

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )

    await test_engine.dispose()


@pytest.fixture
async def seeded(session_factory):
    """Two branches (one deleted), two warehouses and four assets."""
    async with session_factory() as session:
        head_office = Branch(name_en="Head Office", name_ar="المكتب الرئيسي")
        old_site = Branch(name_en="Old Site", deleted_at=datetime(2025, 1, 1))
        session.add_all([head_office, old_site])
        await session.flush()

        main_store = Warehouse(name_en="Main Store", branch_id=head_office.id)
        annex = Warehouse(name_en="Annex", branch_id=old_site.id)
        laptop = Asset(name_en="Laptop", product_code="LAP-001", quantity=5)
        monitor = Asset(name_en="Monitor", product_code="MON-001", quantity=0)
        printer = Asset(
            name_en="Old Printer", product_code="PRN-001", quantity=3, is_active=False
        )
        chair = Asset(name_ar="كرسي", product_code="CHR-001", quantity=10)
        session.add_all([main_store, annex, laptop, monitor, printer, chair])
        await session.commit()

        return {
            "branch_id": head_office.id,
            "old_branch_id": old_site.id,
            "warehouse_id": main_store.id,
            "annex_id": annex.id,
            "laptop_id": laptop.id,
            "monitor_id": monitor.id,
            "printer_id": printer.id,
            "chair_id": chair.id,
        }


@pytest.fixture
def auth_token():
    return AuthService.create_access_token({"sub": "tester", "user_id": 1})


@pytest.fixture
async def client(session_factory, auth_token):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_util] = override_get_db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(
        transport=transport,
        base_url="http://testserver/api",
        headers={"Authorization": f"Bearer {auth_token}"},
    ) as http_client:
        yield http_client
    app.dependency_overrides.clear()


# ============================================================================
# Engine fixtures
# ============================================================================


LAPTOP = AssetOption(id=1, name_en="Laptop", product_code="LAP-001", quantity=5)
MONITOR = AssetOption(id=2, name_en="Monitor", product_code="MON-001", quantity=0)
CHAIR = AssetOption(id=3, name_ar="كرسي", product_code="CHR-001", quantity=10)


class FakeGateway:
    """
    In-memory collaborator.

    ``search_gates`` / ``cost_gates`` hold events that a lookup waits on,
    which lets a test decide the order in which responses arrive.
    """

    def __init__(self):
        self.assets = [LAPTOP, MONITOR, CHAIR]
        self.averages = {LAPTOP.id: 7.5, MONITOR.id: {"average": 0}, CHAIR.id: "12.25"}
        self.warehouses = [
            WarehouseOption(id=1, name_en="Main Store", branch_id=1, branch_name="Head Office"),
            WarehouseOption(id=2, name_en="Annex", branch_id=2, branch_name="Branch 2"),
        ]
        self.transactions = {}
        self.search_gates = {}
        self.cost_gates = {}
        self.search_error = None
        self.cost_error = None
        self.warehouses_error = None
        self.create_error = None
        self.update_error = None
        self.calls = []

    def calls_to(self, name):
        return [call for call in self.calls if call[0] == name]

    async def search_assets(self, query, page_size):
        self.calls.append(("search_assets", query, page_size))
        if query in self.search_gates:
            await self.search_gates[query].wait()
        if self.search_error is not None:
            raise self.search_error
        term = query.lower()
        matches = [
            asset
            for asset in self.assets
            if term in (asset.name_en or "").lower()
            or term in (asset.name_ar or "")
            or term in asset.product_code.lower()
        ]
        return matches[:page_size]

    async def get_asset_average_cost(self, asset_id):
        self.calls.append(("get_asset_average_cost", asset_id))
        if asset_id in self.cost_gates:
            await self.cost_gates[asset_id].wait()
        if self.cost_error is not None:
            raise self.cost_error
        return self.averages.get(asset_id, 0)

    async def get_warehouses(self):
        self.calls.append(("get_warehouses",))
        if self.warehouses_error is not None:
            raise self.warehouses_error
        return list(self.warehouses)

    async def get_transaction(self, transaction_id):
        self.calls.append(("get_transaction", transaction_id))
        if transaction_id not in self.transactions:
            raise GatewayError(f"Transaction {transaction_id} not found", status_code=404)
        return TransactionDetail.model_validate(self.transactions[transaction_id])

    async def create_transaction(self, payload, attachment=None):
        self.calls.append(("create_transaction", payload, attachment))
        if self.create_error is not None:
            raise self.create_error
        return {"id": 101, **payload.model_dump(mode="json")}

    async def update_transaction(self, transaction_id, payload):
        self.calls.append(("update_transaction", transaction_id, payload))
        if self.update_error is not None:
            raise self.update_error
        return {"id": transaction_id, **payload.model_dump(mode="json")}


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def posted_transaction():
    """An IN transaction with two asset transactions, as the API returns it."""
    return {
        "id": 42,
        "date": "2026-03-14",
        "description": "Quarterly restock",
        "reference_number": "PO-7781",
        "warehouse_id": 1,
        "direction": "IN",
        "total_value": "95.00",
        "asset_transactions": [
            {
                "id": 7,
                "asset_id": LAPTOP.id,
                "asset": LAPTOP.model_dump(),
                "quantity": 2,
                "amount": "40.00",
                "total_value": "80.00",
            },
            {
                "id": 8,
                "asset_id": CHAIR.id,
                "asset": CHAIR.model_dump(),
                "quantity": 3,
                "amount": "5.00",
                "total_value": "15.00",
            },
        ],
    }


async def settle():
    """Let tasks started with ``asyncio.create_task`` run up to their first wait."""
    for _ in range(3):
        await asyncio.sleep(0)


def money(value) -> Decimal:
    return Decimal(str(value))
