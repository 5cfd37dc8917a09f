"""
userbank/core/crypto.py

Caller identities backed by Ed25519 keys.

Key contracts:
    public_key_hex : @property → 64-char lowercase hex
    address        : @property → "0x" + 40 lowercase hex chars
                     (last 20 bytes of SHA-256 over the raw public key)

Holding the private key file is what lets a CLI user act as the
identity the address names.
"""

import hashlib
import re
from pathlib import Path

from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)
from cryptography.hazmat.primitives.serialization import (
    Encoding,
    NoEncryption,
    PrivateFormat,
    PublicFormat,
    load_pem_private_key,
)

_ADDRESS_RE = re.compile(r"^0x[0-9a-f]{40}$")


def address_from_public_bytes(raw_public_key: bytes) -> str:
    """Derive the 0x address for a raw 32-byte Ed25519 public key."""
    if len(raw_public_key) != 32:
        raise ValueError(
            f"Ed25519 public key must be 32 bytes, got {len(raw_public_key)}"
        )
    digest = hashlib.sha256(raw_public_key).digest()
    return "0x" + digest[-20:].hex()


def is_address(value: object) -> bool:
    """True if value is a well-formed lowercase 0x address."""
    return isinstance(value, str) and bool(_ADDRESS_RE.match(value))


class Ed25519KeyManager:
    """
    Ed25519 key manager for caller identities.

    Public surface:
        Ed25519KeyManager.generate()     → new random key
        Ed25519KeyManager.from_file(path) → load PEM private key

        key.public_key_hex  (@property) → 64-char lowercase hex
        key.address         (@property) → 0x address used as ledger identity
        key.save(path)                  → write PEM private key
    """

    def __init__(self, private_key: Ed25519PrivateKey) -> None:
        self._private_key: Ed25519PrivateKey = private_key
        self._public_key:  Ed25519PublicKey  = private_key.public_key()
        raw_public = self._public_key.public_bytes(Encoding.Raw, PublicFormat.Raw)
        self._public_key_hex: str = raw_public.hex()
        self._address:        str = address_from_public_bytes(raw_public)

    # ── Construction ──────────────────────────────────────────

    @classmethod
    def generate(cls) -> "Ed25519KeyManager":
        """Generate a new random Ed25519 key pair."""
        return cls(Ed25519PrivateKey.generate())

    @classmethod
    def from_file(cls, path: Path) -> "Ed25519KeyManager":
        """
        Load an Ed25519 private key from a PEM file.
        Raises FileNotFoundError if path does not exist.
        Raises ValueError if the file is not a valid Ed25519 PEM key.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Key file not found: {path}")
        pem_bytes = path.read_bytes()
        try:
            private_key = load_pem_private_key(pem_bytes, password=None)
        except Exception as exc:
            raise ValueError(
                f"Failed to load Ed25519 key from {path}: {exc}"
            ) from exc
        if not isinstance(private_key, Ed25519PrivateKey):
            raise ValueError(
                f"Key file {path} does not contain an Ed25519 private key"
            )
        return cls(private_key)

    # ── Public identity ───────────────────────────────────────

    @property
    def public_key_hex(self) -> str:
        return self._public_key_hex

    @property
    def address(self) -> str:
        """Ledger identity for this key. Access as key.address (no parentheses)."""
        return self._address

    # ── Persistence ───────────────────────────────────────────

    def save(self, path: Path) -> None:
        """
        Write the private key to disk as a PEM file.
        Creates parent directories if needed.
        Raises RuntimeError on write failure.
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        try:
            pem = self._private_key.private_bytes(
                encoding=             Encoding.PEM,
                format=               PrivateFormat.PKCS8,
                encryption_algorithm= NoEncryption(),
            )
            path.write_bytes(pem)
        except Exception as exc:
            raise RuntimeError(
                f"Failed to save Ed25519 key to {path}: {exc}"
            ) from exc

    def __repr__(self) -> str:
        return f"Ed25519KeyManager(address={self._address})"
