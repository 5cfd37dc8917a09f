"""
In-memory account mapping with default-valued lookup.

Absent identities read as a zero-value Account; lookups never insert.
"""

from typing import Dict, Iterator, Optional, Tuple

from userbank.core.exceptions import AlreadyRegisteredError
from userbank.core.models import Account, Identity


class AccountStore:
    """
    identity -> Account mapping.

    Iteration yields identities in registration order.
    """

    def __init__(self) -> None:
        self._accounts: Dict[Identity, Account] = {}

    def __contains__(self, identity: object) -> bool:
        return identity in self._accounts

    def __len__(self) -> int:
        return len(self._accounts)

    def __iter__(self) -> Iterator[Identity]:
        return iter(self._accounts)

    def get(self, identity: Identity) -> Optional[Account]:
        """Return the stored Account or None."""
        return self._accounts.get(identity)

    def lookup(self, identity: Identity) -> Account:
        """
        Return the stored Account, or a fresh zero-value Account if absent.
        The default is not inserted.
        """
        account = self._accounts.get(identity)
        if account is None:
            return Account()
        return account

    def insert(self, identity: Identity, account: Account) -> None:
        """Add a new Account. Raises AlreadyRegisteredError on duplicates."""
        if identity in self._accounts:
            raise AlreadyRegisteredError(details={"identity": identity})
        self._accounts[identity] = account

    def items(self) -> Iterator[Tuple[Identity, Account]]:
        return iter(self._accounts.items())
