"""
Ledger commands.

Each command loads the state file, makes one call as the --key identity,
and saves the state file only if the call succeeded. Mutating commands
hold the state file lock from load to save.
"""

import sys
from pathlib import Path

import click

from userbank.cli.output import (
    EXIT_ERROR,
    FORMAT_OPTION,
    KEY_OPTION,
    emit_error,
    emit_json,
    handled_errors,
    load_key,
)
from userbank.config import BankConfig
from userbank.core.units import format_amount, parse_amount
from userbank.ledger.ledger import Ledger
from userbank.ledger.state import StateFile


def _state(config: BankConfig) -> StateFile:
    return StateFile(config.state_file)


@click.command(name="init")
@KEY_OPTION
@click.option("--force", is_flag=True, help="Replace an existing state file.")
@click.pass_obj
def init_command(config: BankConfig, key_path: Path, force: bool) -> None:
    """Create an empty ledger administered by the --key identity."""
    state = _state(config)
    with handled_errors():
        admin = load_key(key_path)
        with state.locked():
            if state.exists() and not force:
                emit_error(f"State file already exists: {state.path} (use --force to replace)")
                sys.exit(EXIT_ERROR)
            state.save(Ledger(admin.address))
    click.echo(f"Ledger created at {state.path}")
    click.echo(f"Administrator: {admin.address}")


@click.command(name="register")
@KEY_OPTION
@click.argument("name")
@click.argument("age", type=int)
@click.pass_obj
def register_command(config: BankConfig, key_path: Path, name: str, age: int) -> None:
    """Register the --key identity with NAME and AGE."""
    with handled_errors():
        caller = load_key(key_path).address
        state = _state(config)
        with state.locked():
            ledger = state.load()
            ledger.register(caller, name, age)
            state.save(ledger)
    click.echo(f"Registered {caller} as {name!r}")


@click.command(name="deposit")
@KEY_OPTION
@click.argument("amount")
@click.pass_obj
def deposit_command(config: BankConfig, key_path: Path, amount: str) -> None:
    """Deposit AMOUNT (display units) into the --key identity's account."""
    with handled_errors():
        value = parse_amount(amount, config.decimals)
        caller = load_key(key_path).address
        state = _state(config)
        with state.locked():
            ledger = state.load()
            ledger.deposit(caller, value)
            state.save(ledger)
        balance = ledger.get_balance(caller)
    click.echo(f"Deposited {format_amount(value, config.decimals)}, "
               f"balance {format_amount(balance, config.decimals)}")


@click.command(name="withdraw")
@KEY_OPTION
@click.argument("amount")
@click.pass_obj
def withdraw_command(config: BankConfig, key_path: Path, amount: str) -> None:
    """Withdraw AMOUNT (display units) from the --key identity's account."""
    with handled_errors():
        value = parse_amount(amount, config.decimals)
        caller = load_key(key_path).address
        state = _state(config)
        with state.locked():
            ledger = state.load()
            ledger.withdraw(caller, value)
            state.save(ledger)
        balance = ledger.get_balance(caller)
    click.echo(f"Withdrew {format_amount(value, config.decimals)}, "
               f"balance {format_amount(balance, config.decimals)}")


@click.command(name="balance")
@KEY_OPTION
@FORMAT_OPTION
@click.pass_obj
def balance_command(config: BankConfig, key_path: Path, fmt: str) -> None:
    """Show the --key identity's balance."""
    with handled_errors():
        caller = load_key(key_path).address
        balance = _state(config).load().get_balance(caller)

    if fmt == "json":
        emit_json({"address": caller, "balance": balance})
    else:
        click.echo(format_amount(balance, config.decimals))


@click.command(name="history")
@KEY_OPTION
@FORMAT_OPTION
@click.pass_obj
def history_command(config: BankConfig, key_path: Path, fmt: str) -> None:
    """List the --key identity's deposits, oldest first."""
    with handled_errors():
        caller = load_key(key_path).address
        history = _state(config).load().get_deposit_history(caller)

    if fmt == "json":
        emit_json({"address": caller, "deposits": history})
        return
    if not history:
        click.echo("No deposits")
        return
    for i, amount in enumerate(history):
        click.echo(f"{i:>4}  {format_amount(amount, config.decimals)}")


@click.command(name="get-user")
@KEY_OPTION
@click.argument("target")
@FORMAT_OPTION
@click.pass_obj
def get_user_command(config: BankConfig, key_path: Path, target: str, fmt: str) -> None:
    """Show TARGET's profile. Administrator only."""
    with handled_errors():
        admin = load_key(key_path).address
        profile = _state(config).load().get_user(admin, target)

    if fmt == "json":
        emit_json({"address": target, **profile._asdict()})
    else:
        click.echo(f"name:    {profile.name}")
        click.echo(f"age:     {profile.age}")
        click.echo(f"balance: {format_amount(profile.balance, config.decimals)}")
