"""
Host value transfer.

The ledger tracks balances; the host moves the value. A ValueTransfer is
injected into Ledger and is called:

    receive(sender, amount)    before a deposit is credited
    send(recipient, amount)    after a withdrawal is debited

Either call may raise. Ledger keeps its state consistent around both.
"""

import logging
from typing import Dict

from userbank.core.exceptions import InsufficientFundsError
from userbank.core.models import Identity

log = logging.getLogger(__name__)


class ValueTransfer:
    """Base class for host value movement."""

    def receive(self, sender: Identity, amount: int) -> None:
        raise NotImplementedError

    def send(self, recipient: Identity, amount: int) -> None:
        raise NotImplementedError


class NullTransfer(ValueTransfer):
    """Accepts every deposit and pays out nothing. Ledger accounting only."""

    def receive(self, sender: Identity, amount: int) -> None:
        log.debug("receive %s from %s (no host wallets)", amount, sender)

    def send(self, recipient: Identity, amount: int) -> None:
        log.debug("send %s to %s (no host wallets)", amount, recipient)


class WalletBook(ValueTransfer):
    """
    In-memory host wallets.

    Tracks each identity's external balance and the value currently held
    by the ledger. Deposits debit the sender's wallet; withdrawals credit
    the recipient's.
    """

    def __init__(self) -> None:
        self._wallets: Dict[Identity, int] = {}
        self.held: int = 0

    def fund(self, identity: Identity, amount: int) -> None:
        """Mint external value into a wallet."""
        if amount < 0:
            raise ValueError(f"Cannot fund a negative amount: {amount}")
        self._wallets[identity] = self._wallets.get(identity, 0) + amount

    def balance_of(self, identity: Identity) -> int:
        return self._wallets.get(identity, 0)

    def receive(self, sender: Identity, amount: int) -> None:
        available = self._wallets.get(sender, 0)
        if amount > available:
            raise InsufficientFundsError(
                details={"identity": sender, "requested": amount, "available": available}
            )
        self._wallets[sender] = available - amount
        self.held += amount

    def send(self, recipient: Identity, amount: int) -> None:
        if amount > self.held:
            raise RuntimeError(
                f"Ledger holds {self.held}, cannot pay out {amount}"
            )
        self.held -= amount
        self._wallets[recipient] = self._wallets.get(recipient, 0) + amount
