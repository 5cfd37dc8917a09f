"""
On-disk form of the ledger mapping.

Document layout:

    {
      "format":        "userbank-state/1",
      "administrator": "0x...",
      "accounts":      {identity: {name, age, balance, deposit_history}},
      "saved_at":      "YYYY-MM-DDTHH:MM:SS.mmmZ",
      "state_hash":    sha256(JCS({format, administrator, accounts}))
    }

saved_at is outside the hash: re-saving unchanged state yields the same
state_hash.

Processes sharing a state file serialize load, call and save with
StateFile.locked(), an exclusive POSIX lock (fcntl) on "<state>.lock".
"""

import fcntl
import json
import logging
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, Optional

from userbank.core.canonical import canonical_hash
from userbank.core.exceptions import StateError, UserBankError
from userbank.core.time import utc_timestamp
from userbank.ledger.ledger import Ledger
from userbank.ledger.transfer import ValueTransfer

log = logging.getLogger(__name__)

STATE_FORMAT = "userbank-state/1"


def compute_state_hash(body: Dict[str, Any]) -> str:
    return canonical_hash({
        "format":        body["format"],
        "administrator": body["administrator"],
        "accounts":      body["accounts"],
    })


class StateFile:
    """
    JSON state file for a single Ledger.

    save() is atomic: the document is written to a uniquely named sibling
    temp file, fsynced, then moved over the target with os.replace().
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self.lock_path = self.path.with_name(self.path.name + ".lock")

    def exists(self) -> bool:
        return self.path.exists()

    @contextmanager
    def locked(self) -> Iterator[None]:
        """
        Hold an exclusive lock on the lock file for the duration of the block.
        Blocks until any other holder releases it.
        """
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            lock_file = open(self.lock_path, "a+b")
        except OSError as e:
            raise StateError(f"Failed to open lock file: {e}", {"path": self.lock_path}) from e

        with lock_file:
            fcntl.flock(lock_file.fileno(), fcntl.LOCK_EX)
            log.debug("locked %s", self.lock_path)
            try:
                yield
            finally:
                fcntl.flock(lock_file.fileno(), fcntl.LOCK_UN)

    def save(self, ledger: Ledger) -> str:
        """Write ledger state. Returns the state_hash written."""
        body = {"format": STATE_FORMAT, **ledger.snapshot()}
        state_hash = compute_state_hash(body)
        document = {**body, "saved_at": utc_timestamp(), "state_hash": state_hash}

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, temp_name = tempfile.mkstemp(
                prefix=self.path.name + ".", suffix=".tmp", dir=str(self.path.parent)
            )
        except OSError as e:
            raise StateError(f"Failed to write state file: {e}", {"path": self.path}) from e
        temp_path = Path(temp_name)

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(document, f, ensure_ascii=False, indent=2)
                f.write("\n")
                f.flush()
                os.fsync(f.fileno())
            os.replace(temp_path, self.path)
        except OSError as e:
            if temp_path.exists():
                temp_path.unlink()
            raise StateError(f"Failed to write state file: {e}", {"path": self.path}) from e

        log.debug("saved %d accounts to %s (%s)", len(ledger), self.path, state_hash[:12])
        return state_hash

    def load(self, transfer: Optional[ValueTransfer] = None) -> Ledger:
        """
        Read and verify the state file.
        Raises StateError if missing, malformed, or the hash does not match.
        """
        if not self.path.exists():
            raise StateError("State file not found", {"path": self.path})

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                document = json.load(f)
        except json.JSONDecodeError as e:
            raise StateError(f"Invalid JSON in state file: {e}", {"path": self.path}) from e
        except OSError as e:
            raise StateError(f"Failed to read state file: {e}", {"path": self.path}) from e

        self.verify_or_raise(document)

        try:
            ledger = Ledger.restore(document, transfer=transfer)
        except UserBankError as e:
            raise StateError(f"Invalid ledger state: {e}", {"path": self.path}) from e

        log.debug("loaded %d accounts from %s", len(ledger), self.path)
        return ledger

    def verify_or_raise(self, document: Any) -> None:
        """Check format tag and state_hash of a parsed document."""
        if not isinstance(document, dict):
            raise StateError("State document must be a JSON object", {"path": self.path})

        fmt = document.get("format")
        if fmt != STATE_FORMAT:
            raise StateError(
                "Unsupported state format",
                {"path": self.path, "expected": STATE_FORMAT, "got": fmt},
            )

        for key in ("administrator", "accounts", "state_hash"):
            if key not in document:
                raise StateError(f"State document missing '{key}'", {"path": self.path})

        try:
            expected = compute_state_hash(document)
        except Exception as e:
            raise StateError(f"Cannot canonicalize state: {e}", {"path": self.path}) from e

        if document["state_hash"] != expected:
            raise StateError(
                "State hash mismatch, file was modified outside userbank",
                {"path": self.path, "expected": expected[:12], "got": str(document["state_hash"])[:12]},
            )
