"""
RFC 8785 (JCS) encoding for state-file hashes.

Two state documents with the same administrator and accounts hash the
same no matter how their keys were ordered when written. Amounts reach
this module as decimal strings, since JCS writes numbers as IEEE doubles.

RFC 8785: https://www.rfc-editor.org/rfc/rfc8785
"""

import hashlib
from typing import Any, Dict

try:
    import jcs as _jcs
except ImportError as exc:
    raise ImportError(
        "userbank needs the 'jcs' package to hash state files.\n"
        "Install with: pip install jcs\n"
        f"Original error: {exc}"
    ) from exc


def canonicalize(obj: Dict[str, Any]) -> bytes:
    """JCS bytes of a JSON-ready dict."""
    return _jcs.canonicalize(obj)


def canonical_hash(obj: Dict[str, Any]) -> str:
    """Hex SHA-256 of canonicalize(obj)."""
    return hashlib.sha256(canonicalize(obj)).hexdigest()
