"""
userbank/core/models.py

UserBank Data Model

Identity
    Opaque caller key. Any non-empty str is accepted by the ledger;
    identities minted by this package are 0x-prefixed addresses
    (see core/crypto.py).

Account
    display_name     set at registration, never changed
    age              set at registration, never changed, >= 0
    balance          >= 0, sum(deposits) - sum(withdrawals)
    deposit_history  append-only, chronological

UserProfile
    (name, age, balance) as returned to the administrator.
    EMPTY_PROFILE is the zero value reported for unknown identities.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, NamedTuple

from userbank.core.exceptions import ValidationError


Identity = str


class UserProfile(NamedTuple):
    """Profile tuple returned by Ledger.get_user()."""
    name:    str
    age:     int
    balance: int


EMPTY_PROFILE = UserProfile(name="", age=0, balance=0)


@dataclass
class Account:
    """Per-identity record of profile and balance state."""
    display_name:    str       = ""
    age:             int       = 0
    balance:         int       = 0
    deposit_history: List[int] = field(default_factory=list)

    def profile(self) -> UserProfile:
        return UserProfile(
            name=    self.display_name,
            age=     self.age,
            balance= self.balance,
        )

    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize for the state file.

        Amounts are decimal strings: base-unit values routinely exceed
        2**53 and would be rounded by RFC 8785 number encoding.
        """
        return {
            "name":            self.display_name,
            "age":             self.age,
            "balance":         str(self.balance),
            "deposit_history": [str(amount) for amount in self.deposit_history],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Account":
        try:
            account = cls(
                display_name=    data["name"],
                age=             data["age"],
                balance=         int(data["balance"]),
                deposit_history= [int(a) for a in data["deposit_history"]],
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise ValidationError(
                "Malformed account record", {"error": exc}
            ) from exc

        require_name(account.display_name)
        require_age(account.age)
        require_amount(account.balance, "balance")
        for amount in account.deposit_history:
            require_amount(amount, "deposit")
        return account


# ─────────────────────────────────────────────────────────────
# Argument validation
# ─────────────────────────────────────────────────────────────

def _is_int(value: Any) -> bool:
    # bool is an int subclass but never a valid amount or age
    return isinstance(value, int) and not isinstance(value, bool)


def require_identity(value: Any, field_name: str = "caller") -> Identity:
    if not isinstance(value, str) or not value:
        raise ValidationError(
            f"{field_name} must be a non-empty string", {field_name: repr(value)}
        )
    return value


def require_amount(value: Any, field_name: str = "amount") -> int:
    if not _is_int(value):
        raise ValidationError(
            f"{field_name} must be an integer", {field_name: repr(value)}
        )
    if value < 0:
        raise ValidationError(
            f"{field_name} must be non-negative", {field_name: value}
        )
    return value


def require_age(value: Any) -> int:
    if not _is_int(value):
        raise ValidationError("age must be an integer", {"age": repr(value)})
    if value < 0:
        raise ValidationError("age must be non-negative", {"age": value})
    return value


def require_name(value: Any) -> str:
    if not isinstance(value, str):
        raise ValidationError("name must be a string", {"name": repr(value)})
    return value
