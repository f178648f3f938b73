"""
Collaborators of the transaction entry engine.

``TransactionGateway`` is what the engine depends on; ``HttpTransactionGateway``
implements it against the asset-ledger REST API.
"""

import logging
from collections.abc import Mapping
from typing import Any, Dict, List, Optional, Protocol

import httpx

from app.core.config import config
from .credentials import CredentialProvider
from .exceptions import GatewayError
from .models import Attachment
from .schemas import (
    AssetOption,
    AverageCostResponse,
    TransactionCreatePayload,
    TransactionDetail,
    TransactionUpdatePayload,
    WarehouseOption,
)

logger = logging.getLogger(__name__)


class TransactionGateway(Protocol):
    async def search_assets(self, query: str, page_size: int) -> List[AssetOption]:
        ...

    async def get_asset_average_cost(self, asset_id: int) -> AverageCostResponse:
        ...

    async def get_warehouses(self) -> List[WarehouseOption]:
        ...

    async def get_transaction(self, transaction_id: int) -> TransactionDetail:
        ...

    async def create_transaction(
        self, payload: TransactionCreatePayload, attachment: Optional[Attachment] = None
    ) -> Any:
        ...

    async def update_transaction(
        self, transaction_id: int, payload: TransactionUpdatePayload
    ) -> Any:
        ...


def parse_error_message(error_data: Any, default_message: str = "An error occurred") -> str:
    """
    Pull a readable message out of an error body.

    Priority order: message -> error -> first entry of errors -> msg -> default
    """
    if isinstance(error_data, str):
        return error_data or default_message

    if isinstance(error_data, Mapping):
        for key in ("message", "error"):
            if error_data.get(key):
                return str(error_data[key])

        errors = error_data.get("errors")
        if isinstance(errors, Mapping) and errors:
            first_field, first_error = next(iter(errors.items()))
            if isinstance(first_error, (list, tuple)) and first_error:
                first_error = first_error[0]
            return f"{first_field}: {first_error}"

        if error_data.get("msg"):
            return str(error_data["msg"])

    return default_message


def _error_from_response(response: httpx.Response) -> GatewayError:
    status = response.status_code
    try:
        error_data: Any = response.json()
    except ValueError:
        error_data = {"error": response.text or f"HTTP {status}: {response.reason_phrase}"}

    message = parse_error_message(error_data, f"HTTP {status}: {response.reason_phrase}")

    if status == 401:
        message = "Session expired. Please log in again."
    elif status == 403:
        message = "You do not have permission to perform this action."
    elif status == 404:
        if "not found" not in message.lower():
            message = "The requested resource was not found."
    elif status >= 500:
        message = "Internal server error. Please try again later."

    return GatewayError(message, status_code=status, payload=error_data)


def _items(data: Any) -> list:
    """Accept both a bare list and a paginated ``{"items": [...]}`` body."""
    if isinstance(data, Mapping):
        data = data.get("items") or []
    return data if isinstance(data, list) else []


class HttpTransactionGateway:
    """
    ``TransactionGateway`` over HTTP.

    Usage:
        async with HttpTransactionGateway(StaticCredentialProvider(token)) as gateway:
            engine = TransactionEntryEngine(gateway, Direction.OUT)
    """

    def __init__(
        self,
        credentials: CredentialProvider,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._credentials = credentials
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=base_url or config.api_base_url,
            timeout=timeout if timeout is not None else config.api_timeout_seconds,
        )

    async def __aenter__(self) -> "HttpTransactionGateway":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def _auth_headers(self) -> Dict[str, str]:
        token = self._credentials.get_token()
        if not token:
            raise GatewayError("Authentication required", status_code=401)
        return {"Authorization": f"Bearer {token}", "Accept": "application/json"}

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        headers = self._auth_headers()
        try:
            response = await self._client.request(method, path, headers=headers, **kwargs)
        except httpx.TransportError as e:
            logger.warning(f"{method} {path} failed: {e}")
            raise GatewayError(
                "Network error: Please check your internet connection",
                is_network_error=True,
            ) from e

        if response.is_error:
            error = _error_from_response(response)
            logger.warning(f"{method} {path} -> {response.status_code}: {error.message}")
            raise error

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError:
            return response.text

    async def search_assets(self, query: str, page_size: int) -> List[AssetOption]:
        data = await self._request(
            "GET", "/assets/search", params={"q": query, "per_page": page_size, "page": 1}
        )
        return [AssetOption.model_validate(item) for item in _items(data)]

    async def get_asset_average_cost(self, asset_id: int) -> AverageCostResponse:
        return await self._request("GET", f"/transactions/asset-average/{asset_id}")

    async def get_warehouses(self) -> List[WarehouseOption]:
        data = await self._request("GET", "/warehouses")
        return [WarehouseOption.model_validate(item) for item in _items(data)]

    async def get_transaction(self, transaction_id: int) -> TransactionDetail:
        data = await self._request("GET", f"/transactions/{transaction_id}")
        return TransactionDetail.model_validate(data)

    async def create_transaction(
        self, payload: TransactionCreatePayload, attachment: Optional[Attachment] = None
    ) -> Any:
        # A part with no filename is read as a plain form field
        parts = [("data", (None, payload.model_dump_json().encode("utf-8")))]
        if attachment is not None:
            parts.append(
                ("attached_file", (attachment.filename, attachment.content, attachment.content_type))
            )
        return await self._request("POST", "/transactions", files=parts)

    async def update_transaction(
        self, transaction_id: int, payload: TransactionUpdatePayload
    ) -> Any:
        return await self._request(
            "PUT", f"/transactions/{transaction_id}", json=payload.model_dump(mode="json")
        )
