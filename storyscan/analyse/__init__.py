"""Static analysis helpers applied to recognised story markers."""

from .attributes import (
    AttributeValue,
    ValueKind,
    get_array_of_strings_from_attribute,
    get_boolean_from_attribute,
    get_source_attribute,
    get_string_from_attribute,
    read_attribute,
)
from .comments import CommentCursor
from .identity import StoryIdentityResolver, fold_identifier, hash_code
from .raw_source import RawSourceStyle, TemplateContext, get_story_children_raw_source

__all__ = [
    "AttributeValue",
    "CommentCursor",
    "RawSourceStyle",
    "StoryIdentityResolver",
    "TemplateContext",
    "ValueKind",
    "fold_identifier",
    "get_array_of_strings_from_attribute",
    "get_boolean_from_attribute",
    "get_source_attribute",
    "get_story_children_raw_source",
    "get_string_from_attribute",
    "hash_code",
    "read_attribute",
]
