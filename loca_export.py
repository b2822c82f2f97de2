#!/usr/bin/env python3
"""
Loca Localization Table Exporter

Reads a .loca localization table, decodes it with loca_parser and writes
the id -> text mapping as JSON and/or Markdown.

Usage:
    python loca_export.py <input_file> [options]

Examples:
    # Write english.json next to the input
    python loca_export.py english.loca

    # Custom JSON path plus a Markdown listing
    python loca_export.py english.loca -o strings.json -m strings.md

    # Markdown only, no progress output
    python loca_export.py english.loca -m strings.md --markdown-only -q

Author: agentical
License: MIT
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from loca_parser import LocaError, decode


LOCA_EXTENSION = '.loca'

PathLike = Union[str, Path]


# =============================================================================
# FILE CHECKS
# =============================================================================

class LocaFileNotFoundError(FileNotFoundError):
    """The input path does not exist or is not a regular file."""


class WrongExtensionError(ValueError):
    """The input path does not have a .loca extension."""


def check_loca_path(path: PathLike) -> Path:
    """
    Make sure a path names an existing .loca file.

    Args:
        path: Path to the input file.

    Returns:
        The path as a Path object.

    Raises:
        LocaFileNotFoundError: If the file doesn't exist.
        WrongExtensionError: If the extension isn't .loca (any case).
    """
    path = Path(path)
    if not path.is_file():
        raise LocaFileNotFoundError(f"Input file not found: {path}")
    if path.suffix.lower() != LOCA_EXTENSION:
        raise WrongExtensionError(f"Not a {LOCA_EXTENSION} file: {path}")
    return path


def load_loca(path: PathLike, quiet: bool = True) -> Dict[str, str]:
    """
    Read and decode a .loca file.

    Args:
        path: Path to the .loca file.
        quiet: If False, print progress messages.

    Returns:
        Dictionary of identifier -> text, in file order.
    """
    path = check_loca_path(path)
    data = path.read_bytes()
    if not quiet:
        print(f"Parsing {path}...")
        print(f"Size: {len(data):,} bytes")
    table = decode(data)
    if not quiet:
        print(f"Decoded {len(table):,} strings")
    return table


# =============================================================================
# OUTPUT FORMATTING
# =============================================================================

def to_json(table: Dict[str, str], indent: Optional[int] = 2) -> str:
    """Render a table as JSON, keeping non-ASCII text unescaped."""
    return json.dumps(table, indent=indent, ensure_ascii=False)


def _md_cell(text: str) -> str:
    """Escape a value for use inside a Markdown table cell."""
    return (text.replace('\\', '\\\\')
                .replace('|', '\\|')
                .replace('\r\n', '<br>')
                .replace('\n', '<br>'))


def render_markdown(table: Dict[str, str], source: Optional[Path] = None) -> str:
    """
    Render a table as a Markdown listing.

    Args:
        table: The decoded table from decode().
        source: Input file name for the heading, if known.
    """
    lines: List[str] = ["# Localization Table\n"]

    if source is not None:
        lines.append(f"- **Source:** {source.name}")
    lines.append(f"- **Strings:** {len(table):,}")
    lines.append("")

    lines.append("| Id | Text |")
    lines.append("|----|------|")
    for identifier, text in table.items():
        lines.append(f"| `{identifier}` | {_md_cell(text)} |")

    return "\n".join(lines) + "\n"


def to_markdown(table: Dict[str, str], output_path: Path,
                source: Optional[Path] = None) -> None:
    """Write a table as a Markdown listing to output_path."""
    output_path.write_text(render_markdown(table, source), encoding='utf-8')


def export_to_file(destination: PathLike, loca_path: PathLike,
                   quiet: bool = True) -> Dict[str, str]:
    """
    Decode a .loca file and write it as JSON.

    The destination is only opened once decoding succeeded, so a bad input
    never leaves a partial or empty output file behind.

    Returns:
        The decoded table.
    """
    table = load_loca(loca_path, quiet=quiet)
    Path(destination).write_bytes(to_json(table).encode('utf-8'))
    return table


# =============================================================================
# COMMAND LINE INTERFACE
# =============================================================================

def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for command-line usage."""
    parser = argparse.ArgumentParser(
        description='Export .loca localization tables to JSON',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s english.loca
  %(prog)s english.loca -o strings.json -m strings.md
  %(prog)s english.loca -m strings.md --markdown-only --quiet
        """
    )

    parser.add_argument(
        'input_file',
        type=Path,
        help='Path to the .loca file'
    )

    parser.add_argument(
        '-o', '--output',
        type=Path,
        default=None,
        help='JSON output path (default: <input_name>.json)'
    )

    parser.add_argument(
        '-m', '--markdown',
        type=Path,
        default=None,
        help='Also write a Markdown listing to this path'
    )

    parser.add_argument(
        '--markdown-only',
        action='store_true',
        help='Only output Markdown, skip JSON (requires --markdown)'
    )

    parser.add_argument(
        '-q', '--quiet',
        action='store_true',
        help='Suppress progress output'
    )

    args = parser.parse_args(argv)

    if args.markdown_only and args.markdown is None:
        parser.error('--markdown-only requires --markdown')

    json_out = args.output or args.input_file.with_suffix('.json')

    try:
        table = load_loca(args.input_file, quiet=args.quiet)
    except (LocaFileNotFoundError, WrongExtensionError, LocaError) as e:
        print(f"Error: {type(e).__name__}: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error: could not read {args.input_file}: {e}", file=sys.stderr)
        return 1

    # Render everything first; outputs are written together or not at all
    outputs: List[Tuple[str, Path, bytes]] = []
    if not args.markdown_only:
        outputs.append(('JSON', json_out, to_json(table).encode('utf-8')))
    if args.markdown is not None:
        markdown = render_markdown(table, source=args.input_file)
        outputs.append(('Markdown', args.markdown, markdown.encode('utf-8')))

    written: List[Path] = []
    try:
        for label, path, payload in outputs:
            path.write_bytes(payload)
            written.append(path)
            if not args.quiet:
                print(f"{label}: {path}")
    except OSError as e:
        for path in written:
            path.unlink()
        print(f"Error: could not write output: {e}", file=sys.stderr)
        return 1

    if not args.quiet:
        print()
        print("=" * 60)
        print(f"Strings: {len(table):,}")
        suffixed = sum(1 for identifier in table if '_' in identifier)
        print(f"Suffixed ids: {suffixed:,}")

    return 0


if __name__ == "__main__":
    # Configure stdout for Unicode on Windows
    if sys.platform == 'win32':
        sys.stdout.reconfigure(encoding='utf-8', errors='replace')

    sys.exit(main())
