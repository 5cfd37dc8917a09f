"""
Host transfers that misbehave, for exercising Ledger.withdraw() ordering.
"""

from typing import List, Optional

from userbank.core.exceptions import RejectedCallError
from userbank.ledger.ledger import Ledger
from userbank.ledger.transfer import WalletBook


class ReentrantTransfer(WalletBook):
    """
    Calls back into ledger.withdraw() once, from inside send(), before
    paying out. Rejections of the nested call are recorded and swallowed
    so the outer payout still completes.
    """

    def __init__(self) -> None:
        super().__init__()
        self.ledger: Optional[Ledger] = None
        self.reentry_amount: Optional[int] = None
        self.blocked: List[RejectedCallError] = []
        self._reentered = False

    def send(self, recipient, amount):
        if not self._reentered and self.ledger is not None:
            self._reentered = True
            try:
                self.ledger.withdraw(recipient, self.reentry_amount or amount)
            except RejectedCallError as e:
                self.blocked.append(e)
        super().send(recipient, amount)


class FailingTransfer(WalletBook):
    """Accepts deposits, refuses every payout."""

    def send(self, recipient, amount):
        raise RuntimeError("host refused payout")
