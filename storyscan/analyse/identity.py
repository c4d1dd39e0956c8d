"""Story names, ids and export names."""

from __future__ import annotations

import re
from typing import Optional, Set, Tuple

from ..errors import (
    DuplicateStoryNameError,
    InvalidStoryExportNameError,
    MissingStoryNameError,
    NoStoryIdentifierFoundError,
)
from ..logging import document_logger
from ..walker import Node
from .attributes import get_string_from_attribute

_NON_WORD_RUN = re.compile(r"\W+(.|\Z)", re.ASCII)
_JS_IDENTIFIER = re.compile(r"[A-Za-z_$][A-Za-z0-9_$]*\Z")


def hash_code(text: str) -> str:
    """32-bit fold hash (``acc * 31 + unit``) over UTF-16 code units, as hex.

    Matches the JavaScript ids generated by earlier releases bit for bit.
    """
    encoded = text.encode("utf-16-le")
    acc = 0
    for index in range(0, len(encoded), 2):
        unit = encoded[index] | (encoded[index + 1] << 8)
        acc = (acc * 31 + unit) & 0xFFFFFFFF
    if acc & 0x80000000:
        acc -= 0x100000000
    return format(abs(acc), "x")


def fold_identifier(name: str) -> str:
    """Drop runs of non-word characters, upper-casing the character after each.

    ``"My story!!"`` becomes ``"MyStory"``.
    """
    return _NON_WORD_RUN.sub(lambda match: match.group(1).upper(), name)


def story_name_to_export_name(name: str) -> str:
    folded = fold_identifier(name)
    if not folded or folded[0].isdigit():
        folded = f"_{folded}"
    return folded


def export_name_to_story_name(export_name: str) -> str:
    """Start-case an export name: ``"myStory_2"`` becomes ``"My Story 2"``."""
    text = export_name.replace("_", " ").replace("-", " ").replace(".", " ")
    text = re.sub(r"([^\n])([A-Z])([a-z])", r"\1 \2\3", text)
    text = re.sub(r"([a-z])([A-Z])", r"\1 \2", text)
    text = re.sub(r"([a-z])([0-9])", r"\1 \2", text, flags=re.IGNORECASE)
    text = re.sub(r"([0-9])([a-z])", r"\1 \2", text, flags=re.IGNORECASE)
    text = re.sub(r"(\s|^)(\w)", lambda m: m.group(1) + m.group(2).upper(), text, flags=re.ASCII)
    return re.sub(r" +", " ", text).strip()


def is_valid_export_name(value: str) -> bool:
    return bool(_JS_IDENTIFIER.match(value))


class StoryIdentityResolver:
    """Assigns names and ids to the stories of one document.

    Names must be unique. Generated ids that collide with an earlier
    generated id get a hash suffix; explicit ids are used verbatim and are
    not compared with anything.
    """

    def __init__(self, *, filename: Optional[str] = None) -> None:
        self._filename = filename
        self._log = document_logger("analyse.identity", filename)
        self._names: Set[str] = set()
        self._generated_ids: Set[str] = set()

    def resolve_name(self, component: Node) -> str:
        name = get_string_from_attribute(component, "name", filename=self._filename)
        if not name:
            raise MissingStoryNameError(filename=self._filename)
        if name in self._names:
            raise DuplicateStoryNameError(name, filename=self._filename)
        self._names.add(name)
        return name

    def resolve_id(self, component: Node, name: str) -> str:
        explicit = get_string_from_attribute(component, "id", filename=self._filename)
        if explicit:
            return explicit

        generated = fold_identifier(name)
        if generated in self._generated_ids:
            self._log.warning(
                "Story name conflict with exports - Please add an explicit id for story %s", name
            )
            generated += hash_code(name)
        self._generated_ids.add(generated)
        return generated


def get_story_identifiers(component: Node, *, filename: Optional[str] = None) -> Tuple[str, str]:
    """Return ``(export_name, name)`` for a story, deriving whichever is missing."""
    export_name = get_string_from_attribute(component, "exportName", filename=filename)
    name = get_string_from_attribute(component, "name", filename=filename)

    if not export_name and not name:
        raise NoStoryIdentifierFoundError(filename=filename)
    if export_name and not is_valid_export_name(export_name):
        raise InvalidStoryExportNameError(export_name, filename=filename)

    if not export_name:
        export_name = story_name_to_export_name(name or "")
    if not name:
        name = export_name_to_story_name(export_name)
    return export_name, name


__all__ = [
    "StoryIdentityResolver",
    "export_name_to_story_name",
    "fold_identifier",
    "get_story_identifiers",
    "hash_code",
    "is_valid_export_name",
    "story_name_to_export_name",
]
