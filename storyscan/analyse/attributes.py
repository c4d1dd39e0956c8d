"""Static value accessors for markup attributes.

Every read produces an :class:`AttributeValue` tagged with a :class:`ValueKind`;
the ``get_*`` helpers convert the tagged value and raise a schema error when
the tag does not match, instead of coercing.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Mapping, Optional, Sequence, Union

from ..errors import InvalidAttributeValueError, InvalidStoryChildrenAttributeError
from ..walker import Node, node_type


class ValueKind(Enum):
    STRING = "string"
    BOOLEAN = "boolean"
    ARRAY = "array"
    DYNAMIC = "dynamic"
    ABSENT = "absent"


@dataclass(frozen=True)
class AttributeValue:
    kind: ValueKind
    value: Any = None
    node: Optional[Node] = None

    @property
    def is_absent(self) -> bool:
        return self.kind is ValueKind.ABSENT


ABSENT = AttributeValue(ValueKind.ABSENT)


def read_expression(expression: Optional[Node]) -> AttributeValue:
    """Classify an ESTree expression as a static literal or a dynamic value."""
    if expression is None:
        return ABSENT
    kind = node_type(expression)
    if kind == "Literal":
        value = expression.get("value")
        if isinstance(value, bool):
            return AttributeValue(ValueKind.BOOLEAN, value, expression)
        if isinstance(value, str):
            return AttributeValue(ValueKind.STRING, value, expression)
    elif kind == "TemplateLiteral" and not expression.get("expressions"):
        quasis = expression.get("quasis") or []
        text = "".join(_cooked(quasi) for quasi in quasis)
        return AttributeValue(ValueKind.STRING, text, expression)
    elif kind == "ArrayExpression":
        elements = [read_expression(element) for element in expression.get("elements") or []]
        return AttributeValue(ValueKind.ARRAY, elements, expression)
    return AttributeValue(ValueKind.DYNAMIC, None, expression)


def _cooked(quasi: Node) -> str:
    value = quasi.get("value") or {}
    cooked = value.get("cooked")
    return cooked if isinstance(cooked, str) else str(value.get("raw", ""))


def lookup_attribute(component: Node, name: str) -> Optional[Node]:
    for attribute in component.get("attributes") or []:
        if node_type(attribute) == "Attribute" and attribute.get("name") == name:
            return attribute
    return None


def attribute_value_parts(attribute: Node) -> Union[bool, Sequence[Node]]:
    """Return ``True`` for a bare attribute, otherwise the list of value parts.

    Newer compiler versions emit a single ``ExpressionTag`` instead of a
    one-element list for ``name={expression}``.
    """
    value = attribute.get("value")
    if value is True:
        return True
    if isinstance(value, Mapping):
        return [value]
    if isinstance(value, list):
        return value
    return []


def read_attribute_node(attribute: Optional[Node]) -> AttributeValue:
    if attribute is None:
        return ABSENT
    parts = attribute_value_parts(attribute)
    if parts is True:
        return AttributeValue(ValueKind.BOOLEAN, True, attribute)
    if not parts:
        return AttributeValue(ValueKind.STRING, "", attribute)
    if len(parts) == 1:
        part = parts[0]
        if node_type(part) == "Text":
            return AttributeValue(ValueKind.STRING, part.get("data", ""), part)
        if node_type(part) == "ExpressionTag":
            return read_expression(part.get("expression"))
    return AttributeValue(ValueKind.DYNAMIC, None, attribute)


def read_attribute(component: Node, name: str) -> AttributeValue:
    return read_attribute_node(lookup_attribute(component, name))


def _fail(component: Node, name: str, expected: str, filename: Optional[str]) -> InvalidAttributeValueError:
    return InvalidAttributeValueError(
        name, expected, component=str(component.get("name") or "Story"), filename=filename
    )


def get_string_from_attribute(
    component: Node, name: str, *, filename: Optional[str] = None
) -> Optional[str]:
    value = read_attribute(component, name)
    if value.is_absent:
        return None
    if value.kind is ValueKind.STRING:
        return value.value
    raise _fail(component, name, "a static string", filename)


def get_boolean_from_attribute(
    component: Node, name: str, *, filename: Optional[str] = None
) -> Optional[bool]:
    value = read_attribute(component, name)
    if value.is_absent:
        return None
    if value.kind is ValueKind.BOOLEAN:
        return value.value
    raise _fail(component, name, "a static boolean", filename)


def strings_from_array(value: AttributeValue) -> Optional[List[str]]:
    """Return the strings of a literal array, or ``None`` if any element is not one."""
    if value.kind is not ValueKind.ARRAY:
        return None
    strings: List[str] = []
    for element in value.value:
        if element.kind is not ValueKind.STRING:
            return None
        strings.append(element.value)
    return strings


def get_array_of_strings_from_attribute(
    component: Node, name: str, *, filename: Optional[str] = None
) -> Optional[List[str]]:
    value = read_attribute(component, name)
    if value.is_absent:
        return None
    strings = strings_from_array(value)
    if strings is None:
        raise _fail(component, name, "a static array of strings", filename)
    return strings


def get_source_attribute(component: Node, *, filename: Optional[str] = None) -> Union[bool, str, None]:
    """Read ``source`` as a static boolean, else a static string."""
    value = read_attribute(component, "source")
    if value.is_absent:
        return None
    if value.kind in (ValueKind.BOOLEAN, ValueKind.STRING):
        return value.value
    raise _fail(component, "source", "a static boolean or string", filename)


def get_children_identifier(component: Node, *, filename: Optional[str] = None) -> Optional[str]:
    """Return the snippet name referenced by ``children={name}``, if any."""
    attribute = lookup_attribute(component, "children")
    if attribute is None:
        return None
    parts = attribute_value_parts(attribute)
    if parts is True or len(parts) != 1 or node_type(parts[0]) != "ExpressionTag":
        raise InvalidStoryChildrenAttributeError(filename=filename)
    expression = parts[0].get("expression") or {}
    if node_type(expression) != "Identifier":
        raise InvalidStoryChildrenAttributeError(filename=filename)
    return expression["name"]


__all__ = [
    "ABSENT",
    "AttributeValue",
    "ValueKind",
    "attribute_value_parts",
    "get_array_of_strings_from_attribute",
    "get_boolean_from_attribute",
    "get_children_identifier",
    "get_source_attribute",
    "get_string_from_attribute",
    "lookup_attribute",
    "read_attribute",
    "read_attribute_node",
    "read_expression",
    "strings_from_array",
]
