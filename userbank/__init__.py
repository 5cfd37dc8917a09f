"""
userbank/__init__.py

UserBank: per-account ledger with registration, deposits, withdrawals,
deposit history and an administrator fixed at construction.
"""

__version__ = "0.1.0"

from userbank.core.exceptions import (
    AlreadyRegisteredError,
    InsufficientBalanceError,
    InsufficientFundsError,
    NotOwnerError,
    NotRegisteredError,
    RejectedCallError,
    StateError,
    TransferFailedError,
    UserBankError,
    ValidationError,
)
from userbank.core.models import EMPTY_PROFILE, Account, Identity, UserProfile
from userbank.core.crypto import Ed25519KeyManager
from userbank.core.units import format_amount, parse_amount
from userbank.ledger.ledger import Ledger
from userbank.ledger.state import StateFile
from userbank.ledger.transfer import NullTransfer, ValueTransfer, WalletBook
from userbank.config import BankConfig, load_config

__all__ = [
    # Ledger
    "Ledger",
    "Account",
    "UserProfile",
    "Identity",
    "EMPTY_PROFILE",
    # Host value transfer
    "ValueTransfer",
    "NullTransfer",
    "WalletBook",
    # Persistence and setup
    "StateFile",
    "BankConfig",
    "load_config",
    "Ed25519KeyManager",
    # Amounts
    "parse_amount",
    "format_amount",
    # Errors
    "UserBankError",
    "RejectedCallError",
    "AlreadyRegisteredError",
    "NotRegisteredError",
    "InsufficientBalanceError",
    "NotOwnerError",
    "TransferFailedError",
    "InsufficientFundsError",
    "ValidationError",
    "StateError",
]
