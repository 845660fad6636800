# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from evertextbot.accounts import AccountStore, AccountStoreError, migrate_database
from evertextbot.logging import configure_logging
from evertextbot.models import RunMode
from evertextbot.runner import run_account, run_accounts
from evertextbot.settings import Settings

console = Console()

MODE_CHOICE = click.Choice([m.value for m in RunMode], case_sensitive=False)


def _settings(db: Path | None, cookie: str | None) -> Settings:
    settings = Settings()
    if db is not None:
        settings.db_path = db
    if cookie:
        settings.cookie = cookie
    configure_logging(settings)
    return settings


def _load_accounts(settings: Settings):
    try:
        return AccountStore(settings.db_path).load().accounts
    except AccountStoreError as e:
        raise click.ClickException(str(e)) from e


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
def cli() -> None:
    """evertextbot command line interface."""


@cli.command("run")
@click.argument("name")
@click.option("--mode", type=MODE_CHOICE, default=RunMode.DAILY.value, show_default=True)
@click.option("--db", type=click.Path(path_type=Path), default=None, help="Account database (JSON).")
@click.option("--cookie", default=None, help="Session cookie (overrides EVERTEXT_COOKIE).")
def run(name: str, mode: str, db: Path | None, cookie: str | None) -> None:
    """Run one account's session and exit with its outcome code."""
    settings = _settings(db, cookie)
    account = next((a for a in _load_accounts(settings) if a.name == name), None)
    if account is None:
        raise click.ClickException(f"unknown account: {name}")

    outcome = asyncio.run(run_account(account, RunMode(mode.lower()), settings))
    console.print(f"{account.name}: [bold]{outcome.kind.value}[/bold]")
    sys.exit(outcome.exit_code)


@cli.command("run-all")
@click.option("--mode", type=MODE_CHOICE, default=RunMode.DAILY.value, show_default=True)
@click.option("--db", type=click.Path(path_type=Path), default=None, help="Account database (JSON).")
@click.option("--cookie", default=None, help="Session cookie (overrides EVERTEXT_COOKIE).")
@click.option("--attempts", type=click.IntRange(min=1), default=3, show_default=True)
@click.option("--retry-delay", type=float, default=5.0, show_default=True, help="Seconds between attempts.")
def run_all(mode: str, db: Path | None, cookie: str | None, attempts: int, retry_delay: float) -> None:
    """Run every account in the database, one at a time."""
    settings = _settings(db, cookie)
    accounts = _load_accounts(settings)

    results = asyncio.run(
        run_accounts(
            accounts,
            RunMode(mode.lower()),
            settings,
            max_attempts=attempts,
            retry_delay_s=retry_delay,
        )
    )

    table = Table(title="Session outcomes")
    table.add_column("Account", style="cyan")
    table.add_column("Outcome")
    table.add_column("Reason", style="dim")
    for name, outcome in results.items():
        style = "green" if outcome.ok else "red"
        table.add_row(name, f"[{style}]{outcome.kind.value}[/{style}]", outcome.reason or "")
    console.print(table)

    sys.exit(0 if all(o.ok for o in results.values()) else 1)


@cli.command("accounts")
@click.option("--db", type=click.Path(path_type=Path), default=None, help="Account database (JSON).")
def accounts(db: Path | None) -> None:
    """List accounts (codes are never printed)."""
    settings = _settings(db, None)
    table = Table(title=str(settings.db_path))
    table.add_column("Name", style="cyan")
    table.add_column("Target server")
    table.add_column("Code")
    for account in _load_accounts(settings):
        table.add_row(account.name, account.preferred_server or "Default", "set" if account.code else "[red]missing[/red]")
    console.print(table)


@cli.command("migrate")
@click.argument("src", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("dst", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--key", required=True, envvar="EVERTEXT_SECRET_KEY", help="Passphrase the codes were encrypted with.")
def migrate(src: Path, dst: Path, key: str) -> None:
    """Decrypt stored access codes into a plain-code database."""
    configure_logging()
    try:
        db = migrate_database(src, dst, key)
    except AccountStoreError as e:
        raise click.ClickException(str(e)) from e
    missing = sum(1 for a in db.accounts if not a.code)
    console.print(f"[green]Migrated {len(db.accounts)} accounts to {dst}[/green]")
    if missing:
        console.print(f"[yellow]{missing} account(s) without a usable code[/yellow]")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
