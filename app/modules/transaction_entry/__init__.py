"""Transaction entry engine: draft state, line-item resolution and submission"""

from .credentials import CredentialProvider, SettingsCredentialProvider, StaticCredentialProvider
from .engine import TransactionEntryEngine
from .exceptions import (
    DraftNotInitializedError,
    EntryError,
    GatewayError,
    LineItemNotFoundError,
    UnknownFieldError,
)
from .gateway import HttpTransactionGateway, TransactionGateway
from .models import (
    AssetSnapshot,
    Attachment,
    Direction,
    DraftStatus,
    EntryMode,
    LineItem,
    Notice,
    NoticeLevel,
    SubmissionOutcome,
    SubmissionStatus,
    TransactionDraft,
)
from .schemas import parse_average_cost

__all__ = [
    "AssetSnapshot",
    "Attachment",
    "CredentialProvider",
    "Direction",
    "DraftNotInitializedError",
    "DraftStatus",
    "EntryError",
    "EntryMode",
    "GatewayError",
    "HttpTransactionGateway",
    "LineItem",
    "LineItemNotFoundError",
    "Notice",
    "NoticeLevel",
    "SettingsCredentialProvider",
    "StaticCredentialProvider",
    "SubmissionOutcome",
    "SubmissionStatus",
    "TransactionDraft",
    "TransactionEntryEngine",
    "TransactionGateway",
    "UnknownFieldError",
    "parse_average_cost",
]
