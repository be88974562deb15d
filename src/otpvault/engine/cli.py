# src/otpvault/engine/cli.py

import sys
import argparse
import math
import time
from datetime import datetime

from rich.console import Console
from rich.table import Table

from otpvault.common.errors import ParseError
from otpvault.common.log import setup_logging
from otpvault.common.models import OtpKind
from otpvault.common.settings import load_settings
from otpvault.importer.migration import parse_migration_export
from . import totp

console = Console(stderr=True)


def _load(uri: str):
    try:
        return parse_migration_export(uri)
    except ParseError as e:
        console.print(f"[bold red]✗ Error:[/bold red] {e}")
        sys.exit(1)


def codes_main():
    settings = load_settings()
    parser = argparse.ArgumentParser(
        prog="otpvault codes",
        description="Show the current one-time code for every account in a URI."
    )
    parser.add_argument("uri", help="otpauth:// or otpauth-migration:// URI")
    parser.add_argument(
        "--future", type=int, default=settings.future_count, metavar="N",
        help=f"List the next N codes (default {settings.future_count}, 0 to skip)."
    )
    parser.add_argument("--at", type=float, help="Unix timestamp to use instead of the system clock.")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(sys.argv[2:])
    setup_logging(args.verbose, console)

    now = args.at if args.at is not None else time.time()
    credentials = _load(args.uri)

    table = Table(border_style="cyan", header_style="bold magenta")
    table.add_column("Account", style="cyan")
    table.add_column("Code", style="bold green", justify="right")
    table.add_column("Expires in", style="dim", justify="right")
    for cred in credentials:
        if cred.kind is OtpKind.HOTP:
            table.add_row(cred.display_name, totp.format_code(totp.current(cred, now)), f"counter {cred.counter}")
            continue
        snapshot = totp.display(cred, now)
        table.add_row(cred.display_name, totp.format_code(snapshot.code), f"{math.ceil(snapshot.time_remaining)}s")
    console.print(table)

    if args.future > 0:
        for cred in credentials:
            upcoming = Table(title=f"Next codes: {cred.display_name}", border_style="dim")
            upcoming.add_column("Valid from")
            upcoming.add_column("Code", justify="right")
            for entry in totp.future_codes(cred, now, args.future):
                when = (
                    datetime.fromtimestamp(entry.timestamp).strftime('%H:%M:%S')
                    if entry.timestamp is not None else "next counter"
                )
                upcoming.add_row(when, totp.format_code(entry.code))
            console.print(upcoming)


def verify_main():
    settings = load_settings()
    parser = argparse.ArgumentParser(
        prog="otpvault verify",
        description="Check a one-time code against a single-account URI. Exit status 0 when valid."
    )
    parser.add_argument("uri", help="otpauth:// URI of the account")
    parser.add_argument("code", help="Code to check")
    parser.add_argument("--skew", type=int, default=settings.skew_window, help="Adjacent steps to accept.")
    parser.add_argument("--at", type=float, help="Unix timestamp to use instead of the system clock.")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(sys.argv[2:])
    setup_logging(args.verbose, console)

    credentials = _load(args.uri)
    if len(credentials) != 1:
        console.print(f"[bold red]✗ Error:[/bold red] expected one account, URI holds {len(credentials)}")
        sys.exit(1)

    if totp.verify(credentials[0], args.code, args.at, args.skew):
        console.print("[bold green]✓ Code is valid[/]")
        return
    console.print("[bold red]✗ Code is not valid[/]")
    sys.exit(1)
