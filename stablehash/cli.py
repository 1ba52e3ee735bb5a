"""
stablehash CLI: Command-line interface for fingerprint utilities.

Provides commands for:
- hash: Fingerprint a sequence of values
- explain: Show what each value contributes to a fingerprint
- int: Parse a fingerprint into its 64-bit integer
- mod: Map a fingerprint onto a bucket
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.table import Table
from rich.text import Text

from stablehash.config import ProjectConfig
from stablehash.engine import explain, fingerprint
from stablehash.numeric import (
    InvalidFingerprintError,
    modulo,
    to_uint64,
    to_uint64_checked,
)

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="stablehash",
        description="stablehash: deterministic value fingerprints",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # hash
    hash_parser = subparsers.add_parser(
        "hash",
        help="Fingerprint values",
    )
    hash_parser.add_argument("values", nargs="*", help="Values, in order")
    hash_parser.add_argument(
        "--json",
        action="store_true",
        dest="json_values",
        help="Parse each value as a JSON document instead of text",
    )

    # explain
    explain_parser = subparsers.add_parser(
        "explain",
        help="Show the bytes each value contributes",
    )
    explain_parser.add_argument("values", nargs="*", help="Values, in order")
    explain_parser.add_argument(
        "--json",
        action="store_true",
        dest="json_values",
        help="Parse each value as a JSON document instead of text",
    )

    # int
    int_parser = subparsers.add_parser(
        "int",
        help="Print a fingerprint as an unsigned 64-bit integer",
    )
    int_parser.add_argument("fingerprint", help="Hex fingerprint")
    int_parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail on invalid fingerprints instead of printing 0",
    )

    # mod
    mod_parser = subparsers.add_parser(
        "mod",
        help="Map a fingerprint onto a bucket",
    )
    mod_parser.add_argument("fingerprint", help="Hex fingerprint")
    mod_parser.add_argument(
        "buckets",
        nargs="?",
        type=int,
        help="Bucket count (default: from the configured partition)",
    )
    mod_parser.add_argument(
        "--partition", "-p",
        help="Partition scheme name from .stablehash.toml",
    )
    mod_parser.add_argument(
        "--config-dir",
        help="Directory to search for .stablehash.toml (default: cwd)",
    )

    args = parser.parse_args(argv)

    # Setup logging
    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if args.command in ("hash", "explain"):
        return handle_values(args)
    elif args.command == "int":
        return handle_int(args)
    elif args.command == "mod":
        return handle_mod(args)
    else:
        parser.print_help()
        return 0


def parse_values(raw: list[str], as_json: bool) -> list[Any]:
    """Turn command-line arguments into fingerprint inputs."""
    if not as_json:
        return list(raw)
    return [json.loads(item) for item in raw]


def handle_values(args: argparse.Namespace) -> int:
    """Handle hash and explain."""
    try:
        values = parse_values(args.values, args.json_values)
    except json.JSONDecodeError as e:
        print(f"Error: invalid JSON value: {e}", file=sys.stderr)
        return 1

    if args.command == "hash":
        print(fingerprint(*values))
        return 0

    result = explain(*values)
    console = Console()
    table = Table(title="Absorbed values")
    table.add_column("#", justify="right")
    table.add_column("Variant")
    table.add_column("Bytes")
    for absorption in result.absorptions:
        table.add_row(
            Text(str(absorption.index)),
            Text(absorption.variant),
            Text(repr(absorption.data)),
        )
    console.print(table)
    console.print(Text(f"fingerprint: {result.fingerprint}"))
    return 0


def handle_int(args: argparse.Namespace) -> int:
    """Handle int."""
    if not args.strict:
        print(to_uint64(args.fingerprint))
        return 0

    try:
        print(to_uint64_checked(args.fingerprint))
        return 0
    except InvalidFingerprintError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def handle_mod(args: argparse.Namespace) -> int:
    """Handle mod."""
    try:
        if args.buckets is not None:
            if args.partition:
                print("Error: give either BUCKETS or --partition", file=sys.stderr)
                return 1
            print(modulo(args.fingerprint, args.buckets))
            return 0

        start_dir = Path(args.config_dir) if args.config_dir else None
        scheme = ProjectConfig.load(start_dir).partition(args.partition)
        logger.debug("Using partition %s with %d buckets", scheme.name, scheme.buckets)
        print(scheme.bucket_for(args.fingerprint))
        return 0

    except (ValueError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
