"""Normalisation of source slices."""

from __future__ import annotations

import re

_INDENTED_LINE = re.compile(r"^(\s+)\S")


def dedent_block(text: str) -> str:
    """Remove the smallest indentation found on indented lines, then trim.

    Lines without leading whitespace do not count towards the margin, so a
    slice starting mid-line (``Hello\\n    <B />``) still loses its indent.
    """
    lines = text.split("\n")
    indents = [len(match.group(1)) for match in map(_INDENTED_LINE.match, lines) if match]
    if indents:
        margin = min(indents)
        lines = [line[margin:] if line[:1] in (" ", "\t") else line for line in lines]
    return "\n".join(lines).strip()


def strip_newlines(text: str) -> str:
    """Collapse a slice onto one line by dropping every newline."""
    return text.replace("\r", "").replace("\n", "").strip()


__all__ = ["dedent_block", "strip_newlines"]
