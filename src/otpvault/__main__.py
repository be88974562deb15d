# src/otpvault/__main__.py

import sys
import argparse

import pyfiglet
from rich.console import Console
from rich.panel import Panel

from otpvault.importer import cli as import_cli
from otpvault.engine import cli as engine_cli

console = Console(stderr=True)


def _display_banner():
    console.print(
        Panel(
            pyfiglet.figlet_format("otpvault", font="slant"),
            subtitle="[cyan] one-time codes & account import [/cyan]",
            border_style="cyan",
            expand=False,
        )
    )


def main():
    parser = argparse.ArgumentParser(
        prog="otpvault",
        description="One-time password generator and authenticator account importer.",
        epilog="Use 'otpvault <command> --help' for more information on a specific command."
    )

    subparsers = parser.add_subparsers(
        title="Available Commands",
        dest="command",
        required=True,
        metavar="<command>"
    )
    subparsers.add_parser(
        "import",
        help="Import accounts from otpauth / otpauth-migration URIs or QR images.",
    )
    subparsers.add_parser(
        "codes",
        help="Show current and upcoming codes for the accounts in a URI.",
    )
    subparsers.add_parser(
        "verify",
        help="Check a code against an account URI.",
    )

    # Only the command name is parsed here; each command parses the rest
    args = parser.parse_args(sys.argv[1:2])

    if args.command == "import":
        _display_banner()
        import_cli.main()
    elif args.command == "codes":
        engine_cli.codes_main()
    elif args.command == "verify":
        engine_cli.verify_main()
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
