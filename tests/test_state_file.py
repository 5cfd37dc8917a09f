"""
tests/test_state_file.py

StateFile save/load and integrity checks.
"""

import json
import re
import threading

import pytest

from userbank import (
    AlreadyRegisteredError,
    InsufficientBalanceError,
    Ledger,
    NotOwnerError,
    StateError,
    WalletBook,
)
from userbank.core.canonical import canonical_hash
from userbank.ledger.state import STATE_FORMAT, StateFile, compute_state_hash

OWNER = "0x" + "a" * 40
ALICE = "0x" + "1" * 40
BOB   = "0x" + "2" * 40


@pytest.fixture
def populated():
    bank = Ledger(OWNER)
    bank.register(ALICE, "Alice", 25)
    bank.register(BOB, "Bob", 0)
    bank.deposit(ALICE, 10 ** 18)
    bank.deposit(ALICE, 0)
    bank.deposit(ALICE, 2 ** 70)
    bank.withdraw(ALICE, 5)
    return bank


@pytest.fixture
def state(tmp_path):
    return StateFile(tmp_path / "bank" / "state.json")


class TestRoundTrip:

    def test_save_then_load(self, populated, state):
        state.save(populated)
        restored = state.load()

        assert restored.administrator == OWNER
        assert restored.snapshot() == populated.snapshot()
        assert restored.get_user(OWNER, ALICE) == populated.get_user(OWNER, ALICE)
        assert restored.get_deposit_history(ALICE) == [10 ** 18, 0, 2 ** 70]
        assert restored.get_user(OWNER, BOB) == ("Bob", 0, 0)

    def test_large_amounts_survive_exactly(self, populated, state):
        state.save(populated)
        restored = state.load()
        assert restored.get_balance(ALICE) == 10 ** 18 + 2 ** 70 - 5

    def test_registration_order_preserved(self, populated, state):
        state.save(populated)
        assert list(state.load().snapshot()["accounts"]) == [ALICE, BOB]

    def test_load_attaches_transfer(self, populated, state):
        state.save(populated)
        wallets = WalletBook()
        wallets.fund(BOB, 7)

        restored = state.load(transfer=wallets)
        restored.deposit(BOB, 7)

        assert wallets.held == 7
        assert restored.get_balance(BOB) == 7

    def test_restored_ledger_keeps_rules(self, populated, state):
        state.save(populated)
        restored = state.load()
        with pytest.raises(AlreadyRegisteredError):
            restored.register(ALICE, "Alice", 25)
        with pytest.raises(NotOwnerError):
            restored.get_user(ALICE, BOB)

    def test_empty_ledger(self, state):
        state.save(Ledger(OWNER))
        restored = state.load()
        assert len(restored) == 0
        assert restored.administrator == OWNER


class TestDocument:

    def test_layout(self, populated, state):
        state_hash = state.save(populated)
        document = json.loads(state.path.read_text(encoding="utf-8"))

        assert document["format"] == STATE_FORMAT
        assert document["administrator"] == OWNER
        assert document["state_hash"] == state_hash
        assert document["saved_at"].endswith("Z")
        assert document["accounts"][ALICE] == {
            "name":            "Alice",
            "age":             25,
            "balance":         str(10 ** 18 + 2 ** 70 - 5),
            "deposit_history": [str(10 ** 18), "0", str(2 ** 70)],
        }

    def test_hash_independent_of_save_time(self, populated, state):
        first = state.save(populated)
        second = state.save(populated)
        assert first == second

    def test_hash_changes_with_state(self, populated, state):
        first = state.save(populated)
        populated.deposit(BOB, 1)
        assert state.save(populated) != first

    def test_saved_at_is_utc_milliseconds(self, populated, state):
        state.save(populated)
        document = json.loads(state.path.read_text(encoding="utf-8"))
        assert re.fullmatch(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z", document["saved_at"])

    def test_hash_ignores_key_order(self):
        body = {"format": STATE_FORMAT, "administrator": OWNER, "accounts": {}}
        reordered = {"accounts": {}, "administrator": OWNER, "format": STATE_FORMAT}
        assert canonical_hash(body) == canonical_hash(reordered)

    def test_no_temp_file_left(self, populated, state):
        state.save(populated)
        leftovers = [p.name for p in state.path.parent.iterdir()]
        assert leftovers == ["state.json"]


class TestIntegrity:

    def _rewrite(self, state, mutate):
        document = json.loads(state.path.read_text(encoding="utf-8"))
        mutate(document)
        state.path.write_text(json.dumps(document), encoding="utf-8")

    def test_missing_file(self, state):
        with pytest.raises(StateError, match="not found"):
            state.load()

    def test_invalid_json(self, state):
        state.path.parent.mkdir(parents=True)
        state.path.write_text("{not json", encoding="utf-8")
        with pytest.raises(StateError, match="Invalid JSON"):
            state.load()

    def test_not_an_object(self, state):
        state.path.parent.mkdir(parents=True)
        state.path.write_text("[1, 2]", encoding="utf-8")
        with pytest.raises(StateError, match="JSON object"):
            state.load()

    def test_tampered_balance(self, populated, state):
        state.save(populated)

        def inflate(doc):
            doc["accounts"][BOB]["balance"] = "1000000"
        self._rewrite(state, inflate)

        with pytest.raises(StateError, match="hash mismatch"):
            state.load()

    def test_tampered_administrator(self, populated, state):
        state.save(populated)

        def usurp(doc):
            doc["administrator"] = BOB
        self._rewrite(state, usurp)

        with pytest.raises(StateError, match="hash mismatch"):
            state.load()

    def test_unknown_format(self, populated, state):
        state.save(populated)

        def bump(doc):
            doc["format"] = "userbank-state/99"
        self._rewrite(state, bump)

        with pytest.raises(StateError, match="Unsupported state format"):
            state.load()

    def test_missing_field(self, populated, state):
        state.save(populated)
        self._rewrite(state, lambda doc: doc.pop("state_hash"))

        with pytest.raises(StateError, match="state_hash"):
            state.load()

    def test_consistent_but_invalid_account(self, populated, state):
        """A re-hashed document with a negative balance is still refused."""
        state.save(populated)

        def corrupt(doc):
            doc["accounts"][BOB]["balance"] = "-3"
            doc["state_hash"] = compute_state_hash(doc)
        self._rewrite(state, corrupt)

        with pytest.raises(StateError, match="Invalid ledger state"):
            state.load()


class TestConcurrentWriters:
    """Separate StateFile handles on one path, as separate processes would hold."""

    def _run(self, target, count):
        errors = []

        def guarded():
            try:
                target()
            except Exception as e:
                errors.append(repr(e))

        threads = [threading.Thread(target=guarded) for _ in range(count)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        return errors

    def test_locked_withdrawals_never_overdraw(self, tmp_path):
        path = tmp_path / "bank" / "state.json"
        bank = Ledger(OWNER)
        bank.register(ALICE, "Alice", 25)
        bank.deposit(ALICE, 10)
        StateFile(path).save(bank)
        rejected = []

        def withdraw_3():
            state = StateFile(path)
            with state.locked():
                ledger = state.load()
                try:
                    ledger.withdraw(ALICE, 3)
                except InsufficientBalanceError:
                    rejected.append(1)
                    return
                state.save(ledger)

        assert self._run(withdraw_3, 6) == []

        # 10 covers three withdrawals of 3
        assert len(rejected) == 3
        assert StateFile(path).load().get_balance(ALICE) == 1

    def test_concurrent_saves_leave_one_valid_file(self, populated, tmp_path):
        path = tmp_path / "bank" / "state.json"

        def save():
            for _ in range(20):
                StateFile(path).save(populated)

        assert self._run(save, 4) == []

        assert StateFile(path).load().snapshot() == populated.snapshot()
        assert sorted(p.name for p in path.parent.iterdir()) == ["state.json"]

    def test_lock_file_sits_beside_state(self, state):
        with state.locked():
            assert state.lock_path.exists()
        assert state.lock_path == state.path.with_name("state.json.lock")
