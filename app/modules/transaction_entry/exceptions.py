"""
Exceptions raised by the transaction entry engine.

Only programming errors (unknown line ids, unknown field names) escape the
engine; lookup and submission failures are turned into notices.
"""


class EntryError(Exception):
    """Base exception for the transaction entry engine."""

    def __init__(self, message: str = "Transaction entry error"):
        super().__init__(message)
        self.message = message


class UnknownFieldError(EntryError):
    """Raised when a mutation names a field the draft or line does not have."""

    def __init__(self, field: str):
        super().__init__(f"Unknown field '{field}'")
        self.field = field


class LineItemNotFoundError(EntryError):
    """Raised when a line id does not belong to the current draft."""

    def __init__(self, local_id: int):
        super().__init__(f"Line item {local_id} not found")
        self.local_id = local_id


class DraftNotInitializedError(EntryError):
    """Raised when the engine is used before a draft was opened."""

    def __init__(self):
        super().__init__("No transaction draft is open")


class GatewayError(EntryError):
    """
    Raised by a gateway when a collaborator call fails.

    ``message`` is already user-facing; ``status_code`` is None for failures
    that never produced an HTTP response.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        payload=None,
        is_network_error: bool = False,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload
        self.is_network_error = is_network_error
