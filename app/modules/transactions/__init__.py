"""Transactions module"""

from .models import Transaction, AssetTransaction, TransactionDirection
from .service import TransactionsService
from .router import router

__all__ = [
    "Transaction",
    "AssetTransaction",
    "TransactionDirection",
    "TransactionsService",
    "router",
]
