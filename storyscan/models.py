"""Core data models shared across storyscan components."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Union


@dataclass(frozen=True)
class StoryMeta:
    """Metadata recovered for a single ``<Story>`` declaration."""

    id: str
    name: str
    description: Optional[str] = None
    source: Union[bool, str, None] = None
    raw_source: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"id": self.id, "name": self.name}
        if self.description is not None:
            payload["description"] = self.description
        if self.source is not None:
            payload["source"] = self.source
        if self.raw_source is not None:
            payload["rawSource"] = self.raw_source
        return payload


Catalog = Dict[str, StoryMeta]


@dataclass
class FragmentMeta:
    """Accumulator filled while walking the markup fragment."""

    stories: Catalog = field(default_factory=dict)


def catalog_to_dict(catalog: Mapping[str, StoryMeta]) -> Dict[str, Dict[str, Any]]:
    return {name: meta.to_dict() for name, meta in catalog.items()}


@dataclass
class IndexedMeta:
    """Document level values needed by the stories index."""

    title: Optional[str] = None
    tags: Optional[List[str]] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {}
        if self.title is not None:
            payload["title"] = self.title
        if self.tags is not None:
            payload["tags"] = list(self.tags)
        return payload


@dataclass
class IndexedStory:
    """Minimal summary of a story for the stories index."""

    export_name: str
    name: str
    tags: List[str] = field(default_factory=list)
    raw_source: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "exportName": self.export_name,
            "name": self.name,
            "tags": list(self.tags),
        }
        if self.raw_source is not None:
            payload["rawSource"] = self.raw_source
        return payload


@dataclass
class IndexerResult:
    """Stories index entry for one document."""

    meta: IndexedMeta = field(default_factory=IndexedMeta)
    stories: List[IndexedStory] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "meta": self.meta.to_dict(),
            "stories": [story.to_dict() for story in self.stories],
        }


@dataclass(frozen=True)
class CompiledASTNodes:
    """References into a compiled program needed by the source rewrite step."""

    define_meta_import: Mapping[str, Any]
    define_meta_variable_declaration: Mapping[str, Any]
    export_default: Mapping[str, Any]
    story_identifier: Mapping[str, Any]
    stories_function_declaration: Mapping[str, Any]

    def summary(self) -> Dict[str, Any]:
        """Return a JSON-friendly description of the located nodes."""
        function_id = self.stories_function_declaration.get("id") or {}
        return {
            "defineMeta": self.define_meta_import.get("local", {}).get("name"),
            "story": self.story_identifier.get("name"),
            "storiesFunction": function_id.get("name"),
            "exportDefault": {
                "start": self.export_default.get("start"),
                "end": self.export_default.get("end"),
            },
            "defineMetaDeclaration": {
                "start": self.define_meta_variable_declaration.get("start"),
                "end": self.define_meta_variable_declaration.get("end"),
            },
        }


__all__ = [
    "Catalog",
    "CompiledASTNodes",
    "FragmentMeta",
    "IndexedMeta",
    "IndexedStory",
    "IndexerResult",
    "StoryMeta",
    "catalog_to_dict",
]
