"""
Per-account ledger.

Ledger contract: every operation, in this order:
  1. Acquire lock          (one writer at a time, re-entrant)
  2. Validate arguments    : ValidationError
  3. Check preconditions   : RejectedCallError subclasses, state untouched
  4. Apply effects         : balance, history
  5. Interact with host    : ValueTransfer.send() only after effects

withdraw() debits before it pays out. A re-entrant withdraw() raised from
inside the transfer sees the debited balance and cannot spend it twice.
If the transfer raises, the debit is undone and TransferFailedError is
raised.
"""

import logging
import threading
from typing import Any, Dict, List, Optional

from userbank.core.exceptions import (
    AlreadyRegisteredError,
    InsufficientBalanceError,
    NotOwnerError,
    NotRegisteredError,
    RejectedCallError,
    TransferFailedError,
    ValidationError,
)
from userbank.core.models import (
    EMPTY_PROFILE,
    Account,
    Identity,
    UserProfile,
    require_age,
    require_amount,
    require_identity,
    require_name,
)
from userbank.ledger.store import AccountStore
from userbank.ledger.transfer import NullTransfer, ValueTransfer

log = logging.getLogger(__name__)


class Ledger:
    """
    Registration, balance accounting, deposit history and access control
    for a set of accounts keyed by caller identity.

    The identity that constructs the ledger is its administrator for life.
    """

    def __init__(
        self,
        administrator: Identity,
        transfer:      Optional[ValueTransfer] = None,
        store:         Optional[AccountStore]  = None,
    ) -> None:
        self._administrator: Identity       = require_identity(administrator, "administrator")
        self._transfer:      ValueTransfer  = transfer if transfer is not None else NullTransfer()
        self._accounts:      AccountStore   = store if store is not None else AccountStore()
        self._lock:          threading.RLock = threading.RLock()

    # ── Properties ────────────────────────────────────────────

    @property
    def administrator(self) -> Identity:
        return self._administrator

    owner = administrator

    def __len__(self) -> int:
        return len(self._accounts)

    def is_registered(self, identity: Identity) -> bool:
        return identity in self._accounts

    # ── Mutators ──────────────────────────────────────────────

    def register(self, caller: Identity, name: str, age: int) -> None:
        """
        Create caller's Account with a zero balance and empty history.

        Raises AlreadyRegisteredError if caller already has one.
        """
        with self._lock:
            require_identity(caller)
            require_name(name)
            require_age(age)

            if caller in self._accounts:
                raise self._reject(AlreadyRegisteredError(details={"caller": caller}))

            self._accounts.insert(caller, Account(display_name=name, age=age))
            log.info("registered %s (name=%r, age=%d)", caller, name, age)

    def deposit(self, caller: Identity, amount: int) -> None:
        """
        Credit `amount` to caller's balance and append it to the history.

        Zero is a valid deposit and is recorded. The host transfer is asked
        to receive the value first; if it refuses, nothing changes.
        """
        with self._lock:
            require_identity(caller)
            require_amount(amount)

            account = self._accounts.get(caller)
            if account is None:
                raise self._reject(NotRegisteredError(details={"caller": caller}))

            self._transfer.receive(caller, amount)

            account.balance += amount
            account.deposit_history.append(amount)
            log.info("deposit %d by %s, balance=%d", amount, caller, account.balance)

    def withdraw(self, caller: Identity, amount: int) -> None:
        """
        Debit `amount` from caller's balance, then pay it out via the host.

        Raises NotRegisteredError before InsufficientBalanceError.
        Withdrawing zero succeeds at any balance.
        """
        with self._lock:
            require_identity(caller)
            require_amount(amount)

            account = self._accounts.get(caller)
            if account is None:
                raise self._reject(NotRegisteredError(details={"caller": caller}))
            if amount > account.balance:
                raise self._reject(InsufficientBalanceError(
                    details={"caller": caller, "requested": amount, "balance": account.balance}
                ))

            account.balance -= amount

            try:
                self._transfer.send(caller, amount)
            except Exception as exc:
                account.balance += amount
                log.warning("transfer of %d to %s failed: %s", amount, caller, exc)
                raise TransferFailedError(
                    details={"caller": caller, "amount": amount}
                ) from exc

            log.info("withdraw %d by %s, balance=%d", amount, caller, account.balance)

    # ── Queries ───────────────────────────────────────────────

    def get_balance(self, caller: Identity) -> int:
        """Caller's own balance. Unregistered callers read 0."""
        with self._lock:
            require_identity(caller)
            return self._accounts.lookup(caller).balance

    def get_deposit_history(self, caller: Identity) -> List[int]:
        """Copy of caller's deposits in the order they were made."""
        with self._lock:
            require_identity(caller)
            return list(self._accounts.lookup(caller).deposit_history)

    def get_user(self, admin: Identity, target: Identity) -> UserProfile:
        """
        Administrator-only profile read.

        Unknown targets report EMPTY_PROFILE rather than failing.
        """
        with self._lock:
            if admin != self._administrator:
                raise self._reject(NotOwnerError(details={"caller": admin}))
            require_identity(target, "target")

            account = self._accounts.get(target)
            if account is None:
                return EMPTY_PROFILE
            return account.profile()

    # ── Snapshot ──────────────────────────────────────────────

    def snapshot(self) -> Dict[str, Any]:
        """
        JSON-ready copy of the full ledger state.
        Accounts appear in registration order.
        """
        with self._lock:
            return {
                "administrator": self._administrator,
                "accounts": {
                    identity: account.to_dict()
                    for identity, account in self._accounts.items()
                },
            }

    @classmethod
    def restore(
        cls,
        data:     Dict[str, Any],
        transfer: Optional[ValueTransfer] = None,
    ) -> "Ledger":
        """
        Rebuild a ledger from snapshot() output.
        Raises ValidationError on malformed data.
        """
        try:
            administrator = data["administrator"]
            raw_accounts  = data["accounts"]
        except (KeyError, TypeError) as exc:
            raise ValidationError("Malformed ledger snapshot", {"error": exc}) from exc
        if not isinstance(raw_accounts, dict):
            raise ValidationError("Malformed ledger snapshot", {"accounts": type(raw_accounts).__name__})

        store = AccountStore()
        for identity, record in raw_accounts.items():
            require_identity(identity, "identity")
            store.insert(identity, Account.from_dict(record))

        return cls(administrator, transfer=transfer, store=store)

    # ── Internal ──────────────────────────────────────────────

    @staticmethod
    def _reject(error: RejectedCallError) -> RejectedCallError:
        log.debug("rejected: %s", error)
        return error

    def __repr__(self) -> str:
        return (
            f"Ledger(administrator={self._administrator!r}, "
            f"accounts={len(self._accounts)})"
        )
