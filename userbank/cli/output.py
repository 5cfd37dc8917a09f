"""
Shared CLI plumbing: exit codes, error output, key loading.

Exit codes:
    0  Call succeeded
    1  Call rejected by the ledger (state unchanged)
    2  Error  (missing file, bad key, bad state, bad argument)
"""

import json
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator

import click

from userbank.core.crypto import Ed25519KeyManager
from userbank.core.exceptions import RejectedCallError, UserBankError

EXIT_REJECTED = 1
EXIT_ERROR    = 2

FORMAT_OPTION = click.option(
    "--format", "fmt",
    type=click.Choice(["human", "json"], case_sensitive=False),
    default="human",
    show_default=True,
    help="Output format.",
)

KEY_OPTION = click.option(
    "--key", "key_path",
    type=click.Path(dir_okay=False, path_type=Path),
    required=True,
    help="PEM key file of the calling identity.",
)


def emit_error(msg: str) -> None:
    click.echo(f"Error: {msg}", err=True)


def emit_json(data: Any) -> None:
    click.echo(json.dumps(data, indent=2))


def load_key(key_path: Path) -> Ed25519KeyManager:
    return Ed25519KeyManager.from_file(key_path)


@contextmanager
def handled_errors() -> Iterator[None]:
    """Map library errors onto exit codes."""
    try:
        yield
    except RejectedCallError as e:
        emit_error(f"rejected: {e}")
        sys.exit(EXIT_REJECTED)
    except (UserBankError, FileNotFoundError, ValueError, RuntimeError) as e:
        emit_error(str(e))
        sys.exit(EXIT_ERROR)
