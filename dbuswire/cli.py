"""Command-line interface for inspecting D-Bus message bodies."""

from __future__ import annotations

import json
import logging
import sys

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from dbuswire.proto import ByteOrder, Message
from dbuswire.signature import MalformedSignature, Signature, SignatureType
from dbuswire.summary import describe_signature, summarize


@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """D-Bus message argument inspector."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


@cli.command()
@click.option("--signature", "-s", "signature", required=True, help="Body signature")
@click.option("--input", "-i", "input_file", default=None, help="File holding the raw body")
@click.option("--hex", "hex_data", default=None, help="Body as a hex string")
@click.option(
    "--byteorder",
    "-b",
    "marker",
    default="l",
    help="Header byte order marker: l (little) or B (big)",
)
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def decode(
    signature: str,
    input_file: str | None,
    hex_data: str | None,
    marker: str,
    output_json: bool,
) -> None:
    """Decode a message body and print its arguments."""
    if (input_file is None) == (hex_data is None):
        print("Exactly one of --input and --hex is required")
        sys.exit(1)

    if input_file is not None:
        with open(input_file, "rb") as f:
            body = f.read()
    else:
        try:
            body = bytes.fromhex(hex_data)
        except ValueError as e:
            print(f"Invalid hex data: {e}")
            sys.exit(1)

    try:
        byteorder = ByteOrder.from_marker(marker)
    except ValueError as e:
        print(e)
        sys.exit(1)

    try:
        message = Message(signature, body, byteorder)
    except MalformedSignature as e:
        print(e)
        sys.exit(1)

    infos = summarize(message)

    if output_json:
        print(json.dumps([info.to_dict() for info in infos], indent=2))
    else:
        console = Console()
        table = Table(show_header=True, box=None, padding=(0, 2, 0, 0))
        table.add_column("#", style="dim", justify="right")
        table.add_column("Signature", style="yellow")
        table.add_column("Value", style="white")

        for info in infos:
            value = escape(info.text) if info.error is None else f"[red]{escape(info.error)}[/red]"
            table.add_row(str(info.index), info.signature, value)
        console.print(table)

    if any(info.error is not None for info in infos):
        sys.exit(1)


@cli.command()
@click.argument("signature")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def signature(signature: str, output_json: bool) -> None:
    """Validate a signature and show its type tree."""
    try:
        parsed = Signature.parse(signature)
    except MalformedSignature as e:
        print(e)
        sys.exit(1)

    if output_json:
        print(json.dumps([info.to_dict() for info in describe_signature(parsed)], indent=2))
        return

    tree = Tree(f"[bold cyan]{parsed}[/bold cyan]")
    for t in parsed:
        _add_branch(tree, t)
    Console().print(tree)


def _add_branch(tree: Tree, t: SignatureType) -> None:
    branch = tree.add(f"{t} [dim]{t.code.name.lower()}, align {t.alignment}[/dim]")
    for member in t.members:
        _add_branch(branch, member)


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
