"""
userbank keygen / userbank address: identity key files.
"""

import sys
from pathlib import Path

import click

from userbank.cli.output import EXIT_ERROR, emit_error, handled_errors, load_key
from userbank.core.crypto import Ed25519KeyManager


@click.command(name="keygen")
@click.argument("path", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--force", is_flag=True, help="Overwrite an existing key file.")
def keygen_command(path: Path, force: bool) -> None:
    """Write a new Ed25519 key to PATH and print its address."""
    if path.exists() and not force:
        emit_error(f"Key file already exists: {path} (use --force to overwrite)")
        sys.exit(EXIT_ERROR)

    with handled_errors():
        key = Ed25519KeyManager.generate()
        key.save(path)
    click.echo(key.address)


@click.command(name="address")
@click.argument("key_path", type=click.Path(dir_okay=False, path_type=Path))
def address_command(key_path: Path) -> None:
    """Print the ledger address of a key file."""
    with handled_errors():
        key = load_key(key_path)
    click.echo(key.address)
