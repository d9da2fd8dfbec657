"""Console formatting for chat-ledger commands.

Colors are plain ANSI escapes, switched off when stdout is not a
terminal or ``NO_COLOR`` is set.  Errors go to stderr so that
command output can still be piped.
"""

from __future__ import annotations

import os
import sys
from collections.abc import Sequence
from enum import StrEnum


class Style(StrEnum):
    BOLD = "1"
    DIM = "2"
    RED = "31"
    GREEN = "32"
    YELLOW = "33"
    CYAN = "36"


def _color_enabled() -> bool:
    if os.environ.get("NO_COLOR"):
        return False
    isatty = getattr(sys.stdout, "isatty", None)
    return bool(isatty and isatty())


_COLOR = _color_enabled()


def paint(style: Style, text: str) -> str:
    if not _COLOR:
        return text
    return f"\033[{style}m{text}\033[0m"


def dim(text: str) -> str:
    return paint(Style.DIM, text)


def header(title: str) -> None:
    """Blank line, then *title* in bold."""
    print(f"\n{paint(Style.BOLD, title)}")


def success(msg: str) -> None:
    print(f"  {paint(Style.GREEN, '✓')} {msg}")


def warn(msg: str) -> None:
    print(f"  {paint(Style.YELLOW, '!')} {msg}")


def error(msg: str) -> None:
    print(f"  {paint(Style.RED, '✗')} {msg}", file=sys.stderr)


def info(msg: str) -> None:
    print(f"  {msg}")


def kv(key: str, value: object) -> None:
    print(f"  {dim(key + ':')}  {value}")


def truncated(items: Sequence[str], limit: int) -> None:
    """Bullet the first *limit* items and say how many were left out."""
    for item in items[:limit]:
        print(f"    - {item}")
    hidden = len(items) - limit
    if hidden > 0:
        print(f"    {dim(f'...and {hidden} more')}")


def next_step(command: str, description: str = "") -> None:
    line = f"    {paint(Style.CYAN, command)}"
    if description:
        line += f"  {dim(description)}"
    print(line)
