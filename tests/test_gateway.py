import json
from datetime import date
from decimal import Decimal

import httpx
import pytest

from app.modules.transaction_entry import (
    Attachment,
    Direction,
    GatewayError,
    HttpTransactionGateway,
    StaticCredentialProvider,
)
from app.modules.transaction_entry.gateway import parse_error_message
from app.modules.transaction_entry.schemas import (
    LineItemPayload,
    TransactionCreatePayload,
    TransactionUpdatePayload,
)

BASE_URL = "http://ledger.test/api"


def _gateway(handler, token="secret-token"):
    client = httpx.AsyncClient(base_url=BASE_URL, transport=httpx.MockTransport(handler))
    return HttpTransactionGateway(StaticCredentialProvider(token), client=client), client


async def test_search_sends_bearer_token_and_reads_items():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["request"] = request
        return httpx.Response(
            200,
            json={
                "items": [
                    {"id": 1, "name_en": "Laptop", "name_ar": None, "product_code": "LAP-001",
                     "quantity": 5, "is_active": True},
                ],
                "total": 1,
                "page": 1,
                "page_size": 10,
                "total_pages": 1,
                "has_more": False,
            },
        )

    gateway, client = _gateway(handler)
    async with client:
        results = await gateway.search_assets("lap top", 10)

    request = seen["request"]
    assert request.headers["Authorization"] == "Bearer secret-token"
    assert request.url.path == "/api/assets/search"
    assert dict(request.url.params) == {"q": "lap top", "per_page": "10", "page": "1"}
    assert [asset.product_code for asset in results] == ["LAP-001"]


async def test_token_is_read_on_every_request():
    tokens = []

    def handler(request):
        tokens.append(request.headers["Authorization"])
        return httpx.Response(200, json=[])

    credentials = StaticCredentialProvider("first")
    client = httpx.AsyncClient(base_url=BASE_URL, transport=httpx.MockTransport(handler))
    gateway = HttpTransactionGateway(credentials, client=client)
    async with client:
        await gateway.get_warehouses()
        credentials.set_token("second")
        await gateway.get_warehouses()

    assert tokens == ["Bearer first", "Bearer second"]


async def test_missing_token_fails_without_sending():
    def handler(request):
        raise AssertionError("request must not be sent")

    gateway, client = _gateway(handler, token=None)
    async with client:
        with pytest.raises(GatewayError) as exc_info:
            await gateway.get_warehouses()

    assert exc_info.value.message == "Authentication required"
    assert exc_info.value.status_code == 401


async def test_warehouses_accept_list_or_paginated_body():
    bodies = [
        [{"id": 1, "name_en": "Main Store", "branch_id": 1, "branch_name": "Head Office"}],
        {"items": [{"id": 2, "name_ar": "المستودع"}]},
    ]

    def handler(request):
        return httpx.Response(200, json=bodies.pop(0))

    gateway, client = _gateway(handler)
    async with client:
        first = await gateway.get_warehouses()
        second = await gateway.get_warehouses()

    assert first[0].branch_name == "Head Office"
    assert second[0].label == "المستودع"


async def test_average_cost_is_returned_raw():
    def handler(request):
        assert request.url.path == "/api/transactions/asset-average/3"
        return httpx.Response(200, json={"asset_id": 3, "average": 7.5})

    gateway, client = _gateway(handler)
    async with client:
        assert await gateway.get_asset_average_cost(3) == {"asset_id": 3, "average": 7.5}


async def test_get_transaction_parses_detail():
    def handler(request):
        return httpx.Response(
            200,
            json={
                "id": 5,
                "date": "2026-01-20",
                "description": None,
                "reference_number": "R-1",
                "warehouse_id": 1,
                "direction": "OUT",
                "total_value": "15.00",
                "asset_transactions": [
                    {"id": 9, "asset_id": 1, "quantity": 2, "amount": "7.50", "total_value": "15.00"}
                ],
            },
        )

    gateway, client = _gateway(handler)
    async with client:
        detail = await gateway.get_transaction(5)

    assert detail.direction == Direction.OUT
    assert detail.date == date(2026, 1, 20)
    assert detail.asset_transactions[0].amount == Decimal("7.50")


async def test_create_sends_multipart_with_data_and_file():
    seen = {}

    def handler(request):
        seen["content_type"] = request.headers["Content-Type"]
        seen["body"] = request.content
        return httpx.Response(201, json={"id": 11})

    payload = TransactionCreatePayload(
        date=date(2026, 4, 1),
        description="Restock",
        warehouse_id=1,
        direction=Direction.IN,
        line_items=[LineItemPayload(asset_id=1, quantity=3, amount=Decimal("2"))],
    )
    attachment = Attachment("note.txt", b"delivered in full", "text/plain")

    gateway, client = _gateway(handler)
    async with client:
        response = await gateway.create_transaction(payload, attachment)

    assert response == {"id": 11}
    assert seen["content_type"].startswith("multipart/form-data")
    body = seen["body"]
    assert b'name="data"' in body
    assert b'name="attached_file"; filename="note.txt"' in body
    assert b"delivered in full" in body

    data_part = body.split(b'name="data"', 1)[1].split(b"\r\n\r\n", 1)[1].split(b"\r\n--", 1)[0]
    assert json.loads(data_part) == {
        "date": "2026-04-01",
        "description": "Restock",
        "reference_number": None,
        "warehouse_id": 1,
        "direction": "IN",
        "line_items": [{"asset_id": 1, "quantity": 3, "amount": 2.0}],
    }


async def test_update_sends_json_metadata():
    seen = {}

    def handler(request):
        seen["method"] = request.method
        seen["json"] = json.loads(request.content)
        return httpx.Response(200, json={"id": 5})

    payload = TransactionUpdatePayload(
        date=date(2026, 4, 2), description="Fixed", reference_number=None, warehouse_id=2
    )
    gateway, client = _gateway(handler)
    async with client:
        await gateway.update_transaction(5, payload)

    assert seen["method"] == "PUT"
    assert seen["json"] == {
        "date": "2026-04-02",
        "description": "Fixed",
        "reference_number": None,
        "warehouse_id": 2,
    }


@pytest.mark.parametrize(
    "status, body, expected",
    [
        (401, {"message": "Token has expired"}, "Session expired. Please log in again."),
        (403, {"message": "nope"}, "You do not have permission to perform this action."),
        (404, {"message": "Transaction 9 not found"}, "Transaction 9 not found"),
        (404, {"message": "missing"}, "The requested resource was not found."),
        (500, {"message": "Internal server error"}, "Internal server error. Please try again later."),
        (422, {"message": "Out transaction quantity exceeds available stock for: Laptop"},
         "Out transaction quantity exceeds available stock for: Laptop"),
    ],
)
async def test_error_statuses_map_to_user_messages(status, body, expected):
    def handler(request):
        return httpx.Response(status, json=body)

    gateway, client = _gateway(handler)
    async with client:
        with pytest.raises(GatewayError) as exc_info:
            await gateway.get_transaction(9)

    assert exc_info.value.message == expected
    assert exc_info.value.status_code == status
    assert exc_info.value.is_network_error is False


async def test_plain_text_error_body():
    def handler(request):
        return httpx.Response(400, text="bad things")

    gateway, client = _gateway(handler)
    async with client:
        with pytest.raises(GatewayError) as exc_info:
            await gateway.get_warehouses()

    assert exc_info.value.message == "bad things"


async def test_transport_failure_is_a_network_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    gateway, client = _gateway(handler)
    async with client:
        with pytest.raises(GatewayError) as exc_info:
            await gateway.search_assets("lap", 10)

    assert exc_info.value.is_network_error is True
    assert exc_info.value.status_code is None


async def test_gateway_closes_only_its_own_client():
    gateway = HttpTransactionGateway(StaticCredentialProvider("t"), base_url=BASE_URL)
    async with gateway:
        pass
    assert gateway._client.is_closed

    def handler(request):
        return httpx.Response(200, json=[])

    shared, client = _gateway(handler)
    await shared.aclose()
    assert not client.is_closed
    await client.aclose()


@pytest.mark.parametrize(
    "body, expected",
    [
        ({"message": "m", "error": "e"}, "m"),
        ({"error": "e", "msg": "x"}, "e"),
        ({"errors": {"quantity": ["must be positive"]}}, "quantity: must be positive"),
        ({"msg": "x"}, "x"),
        ({}, "fallback"),
        ("raw text", "raw text"),
        (None, "fallback"),
    ],
)
def test_parse_error_message_priority(body, expected):
    assert parse_error_message(body, "fallback") == expected
