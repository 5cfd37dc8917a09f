"""
userbank/cli/__init__.py

UserBank CLI: root Click command group.

Registered in pyproject.toml as:

    [project.scripts]
    userbank = "userbank.cli:cli"

Adding a new command:
    1. Create userbank/cli/your_command.py with a @click.command()
    2. Import it here
    3. cli.add_command(your_command)
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click

from userbank.cli.accounts import (
    balance_command,
    deposit_command,
    get_user_command,
    history_command,
    init_command,
    register_command,
    withdraw_command,
)
from userbank.cli.keys import address_command, keygen_command
from userbank.cli.output import EXIT_ERROR, emit_error
from userbank.config import load_config
from userbank.core.exceptions import ConfigError


@click.group()
@click.version_option(package_name="userbank")
@click.option(
    "--config", "config_file",
    type=click.Path(dir_okay=False, path_type=Path),
    envvar="USERBANK_CONFIG",
    default=None,
    help="YAML configuration file (env: USERBANK_CONFIG).",
)
@click.option("-v", "--verbose", is_flag=True, help="Log at DEBUG level.")
@click.pass_context
def cli(ctx: click.Context, config_file: Optional[Path], verbose: bool) -> None:
    """
    UserBank: per-account ledger CLI.

    \b
    Every call is made as the identity of a key file (--key).
    The key that runs `init` is the administrator for good.

    \b
    Quick start:
      userbank keygen admin.pem
      userbank keygen alice.pem
      userbank init --key admin.pem
      userbank register --key alice.pem Alice 25
      userbank deposit --key alice.pem 1.5
      userbank withdraw --key alice.pem 0.5
      userbank get-user --key admin.pem 0x...
    """
    try:
        config = load_config(config_file)
    except ConfigError as e:
        emit_error(str(e))
        sys.exit(EXIT_ERROR)

    logging.basicConfig(
        level=  logging.DEBUG if verbose else config.log_level_value,
        format= "%(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = config


cli.add_command(keygen_command)
cli.add_command(address_command)
cli.add_command(init_command)
cli.add_command(register_command)
cli.add_command(deposit_command)
cli.add_command(withdraw_command)
cli.add_command(balance_command)
cli.add_command(history_command)
cli.add_command(get_user_command)
