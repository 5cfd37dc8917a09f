"""
UserBank Ledger - account state, host transfers, state file.
"""

from userbank.ledger.ledger import Ledger
from userbank.ledger.store import AccountStore

__all__ = ["Ledger", "AccountStore"]
