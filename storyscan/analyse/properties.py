"""Static value accessors for properties of the meta object literal."""

from __future__ import annotations

from typing import List, Optional

from ..errors import InvalidPropertyValueError
from ..walker import Node, node_type
from .attributes import ValueKind, read_expression, strings_from_array


def property_key_name(prop: Node) -> Optional[str]:
    if node_type(prop) != "Property" or prop.get("computed"):
        return None
    key = prop.get("key") or {}
    if node_type(key) == "Identifier":
        return key.get("name")
    if node_type(key) == "Literal" and isinstance(key.get("value"), str):
        return key["value"]
    return None


def lookup_property(object_expression: Node, name: str) -> Optional[Node]:
    for prop in object_expression.get("properties") or []:
        if property_key_name(prop) == name:
            return prop
    return None


def get_property_string_value(prop: Node, *, filename: Optional[str] = None) -> str:
    value = read_expression(prop.get("value"))
    if value.kind is ValueKind.STRING:
        return value.value
    raise InvalidPropertyValueError(
        property_key_name(prop) or "?", "a static string", filename=filename
    )


def get_property_array_of_strings_value(prop: Node, *, filename: Optional[str] = None) -> List[str]:
    strings = strings_from_array(read_expression(prop.get("value")))
    if strings is None:
        raise InvalidPropertyValueError(
            property_key_name(prop) or "?", "a static array of strings", filename=filename
        )
    return strings


__all__ = [
    "get_property_array_of_strings_value",
    "get_property_string_value",
    "lookup_property",
    "property_key_name",
]
