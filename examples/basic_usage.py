"""
UserBank: Basic Usage Example

Demonstrates:
- Creating a ledger with an administrator
- Registration, deposits and withdrawals against host wallets
- Rejected calls leaving state unchanged
- Administrator profile reads
- Saving and reloading the state file
"""

import tempfile
from pathlib import Path

from userbank import (
    Ed25519KeyManager,
    InsufficientBalanceError,
    Ledger,
    NotOwnerError,
    StateFile,
    WalletBook,
    format_amount,
    parse_amount,
)


def main():
    """Basic UserBank usage."""

    print("=" * 60)
    print("UserBank: Basic Usage Example")
    print("=" * 60)
    print()

    admin = Ed25519KeyManager.generate().address
    alice = Ed25519KeyManager.generate().address
    bob = Ed25519KeyManager.generate().address

    wallets = WalletBook()
    wallets.fund(alice, parse_amount("10"))

    # 1. Ledger
    ledger = Ledger(admin, transfer=wallets)
    print(f"1. Ledger administered by {ledger.administrator}")

    # 2. Register and deposit
    ledger.register(alice, "Alice", 25)
    for amount in ("1.0", "2.0", "0.5"):
        ledger.deposit(alice, parse_amount(amount))
    print(f"2. Alice balance:  {format_amount(ledger.get_balance(alice))}")
    print(f"   Deposits:       {[format_amount(a) for a in ledger.get_deposit_history(alice)]}")

    # 3. Withdraw
    ledger.withdraw(alice, parse_amount("3.0"))
    print(f"3. After withdraw: {format_amount(ledger.get_balance(alice))}")
    print(f"   Alice wallet:   {format_amount(wallets.balance_of(alice))}")

    # 4. Rejections
    try:
        ledger.withdraw(alice, parse_amount("1.0"))
    except InsufficientBalanceError as e:
        print(f"4. Rejected: {e.message}")
    try:
        ledger.get_user(bob, alice)
    except NotOwnerError as e:
        print(f"   Rejected: {e.message}")

    # 5. Administrator view
    print(f"5. get_user(alice): {ledger.get_user(admin, alice)}")
    print(f"   get_user(bob):   {ledger.get_user(admin, bob)}")

    # 6. State file
    with tempfile.TemporaryDirectory() as tmp:
        state = StateFile(Path(tmp) / "state.json")
        state_hash = state.save(ledger)
        restored = state.load()
        print(f"6. Saved state {state_hash[:16]}..., "
              f"restored {len(restored)} account(s)")

    print()
    print("Done")


if __name__ == "__main__":
    main()
