# src/otpvault/importer/cli.py

import sys
import argparse
import json
from pathlib import Path
from typing import List

from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.prompt import Prompt

from .migration import parse_migration_export
from .scanner import extract_uris_from_path
from .uri import parse_credential_uri
from otpvault.common.errors import ParseError
from otpvault.common.exporter import DataExporter
from otpvault.common.log import setup_logging
from otpvault.common.models import Credential
from otpvault.common.settings import EXPORT_FORMATS, load_settings

# Messages go to stderr so stdout stays clean for pipes
console = Console(stderr=True)


def _load_json_report(path: Path) -> List[Credential]:
    """Reload accounts from a report previously written with `-o accounts.json`."""
    data = json.loads(path.read_text(encoding='utf-8'))
    entries = data.get("accounts", []) if isinstance(data, dict) else data
    return [parse_credential_uri(e["uri"]) for e in entries if isinstance(e, dict) and e.get("uri")]


def _save_report(credentials: List[Credential], output: Path, fmt: str):
    exporter = DataExporter(banner="AUTHENTICATOR ACCOUNT REPORT")
    exporter.export(credentials, output, fmt)


def main():
    settings = load_settings()
    parser = argparse.ArgumentParser(
        prog="otpvault import",
        description="Import authenticator accounts from otpauth URIs, export URIs or QR images."
    )
    parser.add_argument(
        "inputs",
        nargs="*",
        help="otpauth:// or otpauth-migration:// URIs, QR screenshots, directories, or JSON reports."
    )
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        help="Destination path for export (supports .md, .csv, .txt, .json)"
    )
    parser.add_argument(
        "--preview",
        action="store_true",
        help="Display the imported accounts in terminal without exporting."
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show debug logging.")

    # Invoked as `otpvault import ...`
    args = parser.parse_args(sys.argv[2:])
    setup_logging(args.verbose, console)

    all_creds: List[Credential] = []

    def ingest(item: str):
        """Accepts a URI, a JSON report, an image file or a directory of images."""
        item = item.strip().strip("'").strip('"')
        if not item:
            return

        if item.startswith(("otpauth://", "otpauth-migration://")):
            try:
                all_creds.extend(parse_migration_export(item))
            except ParseError as e:
                console.print(f"[bold red]Import failed:[/] {item[:30]}... {e}")
            return

        path = Path(item)
        if not path.exists():
            console.print(f"[bold yellow]Warning:[/] path does not exist: {item}")
            return

        if path.is_file() and path.suffix == ".json":
            try:
                all_creds.extend(_load_json_report(path))
            except (ValueError, KeyError) as e:
                console.print(f"[bold red]Could not load JSON report:[/] {e}")
            return

        uris = extract_uris_from_path(str(path))
        if not uris:
            console.print(f"[yellow]No authenticator QR codes found in: {path}[/]")
        for uri in sorted(uris):
            try:
                all_creds.extend(parse_migration_export(uri))
            except ParseError as e:
                console.print(f"[bold red]Import failed:[/] {uri[:30]}... {e}")

    if args.inputs:
        with console.status("[bold green]Processing inputs..."):
            for item in args.inputs:
                ingest(item)

    # Interactive mode when nothing usable was given on the command line
    if not all_creds:
        console.print(Panel(
            "[bold cyan]otpvault import[/]\n\n"
            "Paste an [bold yellow]otpauth://[/bold yellow] or [bold yellow]otpauth-migration://[/bold yellow] link\n"
            "or drop in a [bold green]QR screenshot / folder of images[/bold green].",
            title="Waiting for Input"
        ))
        while True:
            val = Prompt.ask("[yellow]URI or path (empty to finish)[/]").strip()
            if not val:
                break
            ingest(val)

    if not all_creds:
        console.print("[red]No accounts found, nothing to do.[/red]")
        return

    # De-duplicate by secret, then sort by label
    unique_map = {c.secret: c for c in all_creds}
    final_creds = sorted(unique_map.values(), key=lambda c: (c.label.lower(), (c.account or "").lower()))

    table = Table(
        title=f"Imported [bold green]{len(final_creds)}[/bold green] Accounts",
        border_style="cyan",
        show_header=True,
        header_style="bold magenta"
    )
    table.add_column("Issuer", style="cyan", no_wrap=True)
    table.add_column("Account", style="green")
    table.add_column("Type", style="dim")
    table.add_column("Algorithm", style="dim")
    table.add_column("Digits", style="dim", justify="right")

    for cred in final_creds:
        table.add_row(
            cred.label,
            cred.account or "",
            cred.kind.value.upper(),
            cred.algorithm.value,
            str(cred.digits),
        )
    console.print(table)

    if args.output:
        fmt = args.output.suffix[1:].lower() if args.output.suffix else settings.export_format
        if fmt not in EXPORT_FORMATS:
            fmt = settings.export_format

        try:
            _save_report(final_creds, args.output, fmt)
            console.print(f"\n[bold green]✓ Exported:[/] [magenta]{args.output}[/]")
        except OSError as e:
            console.print(f"\n[bold red]✗ Export failed:[/] {e}")
            sys.exit(1)
    elif not args.preview:
        console.print("\n[dim]Tip: use -o to save the accounts to a file (e.g. -o backup.md)[/]")


if __name__ == "__main__":
    main()
