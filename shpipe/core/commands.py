"""
Argument-safe factories for commonly composed commands.

Each factory returns a fresh, unrun ShCmd; build a new one per pipeline.
"""

from __future__ import annotations

from typing import Optional

from .command import ShCmd
from .resolver import PathResolver


def ls_la(resolver: Optional[PathResolver] = None) -> ShCmd:
    return ShCmd("ls", ["-l", "-a"], resolver=resolver)


def echo(text: str, resolver: Optional[PathResolver] = None) -> ShCmd:
    return ShCmd("echo", [text], resolver=resolver)


def rev(resolver: Optional[PathResolver] = None) -> ShCmd:
    return ShCmd("rev", resolver=resolver)


def cut(delimiter: str, field: int, resolver: Optional[PathResolver] = None) -> ShCmd:
    """``cut -d <delimiter> -f <field>``; fields count from 1."""
    if field < 1:
        raise ValueError("cut fields are numbered from 1")
    return ShCmd("cut", ["-d", delimiter, "-f", str(field)], resolver=resolver)
