"""Source documents and the loading of their syntax trees."""

from __future__ import annotations

import json
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence

from .errors import DocumentError
from .logging import get_logger

_LOGGER = get_logger("document")


@dataclass(frozen=True)
class SourceDocument:
    """Original text of a stories file plus the tree parsed from it.

    Offsets in ``ast`` count UTF-16 code units, like every JavaScript parser.
    Use :meth:`slice` rather than indexing ``source`` directly.
    """

    filename: str
    source: str
    ast: Mapping[str, Any]
    _wide: bool = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not isinstance(self.ast, Mapping) or self.ast.get("type") != "Root":
            raise DocumentError("Expected a Svelte 'Root' node as syntax tree.", filename=self.filename)
        object.__setattr__(self, "_wide", any(ord(char) > 0xFFFF for char in self.source))
        end = self.ast.get("end")
        if isinstance(end, int) and end > self.length:
            raise DocumentError(
                f"Syntax tree ends at offset {end} beyond the source length {self.length}.",
                filename=self.filename,
            )

    @property
    def length(self) -> int:
        if not self._wide:
            return len(self.source)
        return len(self.source.encode("utf-16-le")) // 2

    @property
    def fragment(self) -> Mapping[str, Any]:
        return self.ast.get("fragment") or {"type": "Fragment", "nodes": []}

    @property
    def module(self) -> Optional[Mapping[str, Any]]:
        return self.ast.get("module")

    @property
    def instance(self) -> Optional[Mapping[str, Any]]:
        return self.ast.get("instance")

    def slice(self, start: int, end: int) -> str:
        """Return the source text between two parser offsets (end exclusive)."""
        if not self._wide:
            return self.source[start:end]
        encoded = self.source.encode("utf-16-le")
        return encoded[start * 2 : end * 2].decode("utf-16-le")


def parse_ast_json(text: str, *, filename: Optional[str] = None) -> Mapping[str, Any]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise DocumentError(f"Syntax tree is not valid JSON: {exc}", filename=filename) from exc
    if not isinstance(data, dict):
        raise DocumentError("Syntax tree JSON must be an object.", filename=filename)
    return data


def run_parser_command(command: Sequence[str], path: Path) -> Mapping[str, Any]:
    """Invoke the external parser and read the tree it prints on stdout."""
    args = [*command, str(path)]
    _LOGGER.debug("Running parser command: %s", " ".join(args))
    try:
        completed = subprocess.run(
            args,
            check=True,
            text=True,
            capture_output=True,
        )
    except FileNotFoundError as exc:
        raise DocumentError(f"Parser command not found: {command[0]}", filename=str(path)) from exc
    except subprocess.CalledProcessError as exc:
        stderr = (exc.stderr or "").strip()
        raise DocumentError(
            f"Parser command failed with exit code {exc.returncode}: {stderr}",
            filename=str(path),
        ) from exc
    return parse_ast_json(completed.stdout, filename=str(path))


def load_document(
    path: Path,
    *,
    ast_path: Path | None = None,
    parser_command: Sequence[str] | None = None,
) -> SourceDocument:
    """Read a stories file and its syntax tree from disk.

    The tree comes from ``ast_path`` when given, otherwise from
    ``<path>.json`` when it exists, otherwise from ``parser_command``.
    """
    path = path.expanduser()
    try:
        source = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise DocumentError(f"Unable to read stories file: {exc}", filename=str(path)) from exc

    if ast_path is None:
        sibling = path.with_name(path.name + ".json")
        if sibling.exists():
            ast_path = sibling

    if ast_path is not None:
        try:
            text = ast_path.read_text(encoding="utf-8")
        except OSError as exc:
            raise DocumentError(f"Unable to read syntax tree: {exc}", filename=str(path)) from exc
        ast = parse_ast_json(text, filename=str(path))
    elif parser_command:
        ast = run_parser_command(parser_command, path)
    else:
        raise DocumentError(
            "No syntax tree available: pass an AST file or configure 'parser.command'.",
            filename=str(path),
        )

    return SourceDocument(filename=str(path), source=source, ast=ast)


__all__ = ["SourceDocument", "load_document", "parse_ast_json", "run_parser_command"]
