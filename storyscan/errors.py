"""Exception hierarchy raised while extracting stories metadata.

Every fatal condition carries the offending stories file so that the calling
build or index step can report it. Extraction never degrades to a partial
result: once one of these is raised the traversal state must be discarded.
"""

from __future__ import annotations

from typing import Optional


class StoryScanError(RuntimeError):
    """Base class for fatal extraction errors."""

    def __init__(self, message: str, *, filename: Optional[str] = None) -> None:
        self.filename = filename
        self.reason = message
        if filename:
            message = f"{message} Stories file: {filename}"
        super().__init__(message)


class DocumentError(StoryScanError):
    """Raised when a document or its syntax tree cannot be loaded."""


# Schema errors


class SchemaError(StoryScanError):
    """A required construct is missing or a value has an unsupported shape."""


class MissingModuleTagError(SchemaError):
    def __init__(self, filename: Optional[str] = None) -> None:
        super().__init__(
            "The stories file must have a module tag ('<script module>' or "
            "'<script context=\"module\">').",
            filename=filename,
        )


class DefaultOrNamespaceImportUsedError(SchemaError):
    def __init__(self, package_name: str, filename: Optional[str] = None) -> None:
        self.package_name = package_name
        super().__init__(
            f"Don't use the default/namespace import from \"{package_name}\".",
            filename=filename,
        )


class MissingImportedDefineMetaError(SchemaError):
    def __init__(self, package_name: str, filename: Optional[str] = None) -> None:
        self.package_name = package_name
        super().__init__(
            f"Could not find 'defineMeta' imported from \"{package_name}\".",
            filename=filename,
        )


class MissingDefineMetaVariableDeclarationError(SchemaError):
    def __init__(self, callee: str, filename: Optional[str] = None) -> None:
        super().__init__(
            f"Could not find variable declaration 'const {{ Story }} = {callee}({{ ... }})'.",
            filename=filename,
        )


class NoStoryComponentDestructuredError(SchemaError):
    def __init__(self, callee: str, filename: Optional[str] = None) -> None:
        super().__init__(
            f"Component 'Story' was not destructured from the '{callee}({{ ... }})' call.",
            filename=filename,
        )


class GetDefineMetaFirstArgumentError(SchemaError):
    def __init__(self, filename: Optional[str] = None) -> None:
        super().__init__(
            "The first argument of 'defineMeta' (or the legacy 'export const meta') "
            "must be an object expression.",
            filename=filename,
        )


class InvalidSetTemplateFirstArgumentError(SchemaError):
    def __init__(self, filename: Optional[str] = None) -> None:
        super().__init__(
            "The first argument of 'setTemplate' must be an identifier referencing a snippet block.",
            filename=filename,
        )


class InvalidComponentValueError(SchemaError):
    def __init__(self, filename: Optional[str] = None) -> None:
        super().__init__(
            "The 'component' property of 'defineMeta' must be an identifier.",
            filename=filename,
        )


class InvalidStoryChildrenAttributeError(SchemaError):
    def __init__(self, filename: Optional[str] = None) -> None:
        super().__init__(
            "Expected the '<Story />' attribute 'children' to be an expression "
            "with an identifier referencing a snippet block.",
            filename=filename,
        )


class InvalidAttributeValueError(SchemaError):
    def __init__(
        self, name: str, expected: str, *, component: str = "Story", filename: Optional[str] = None
    ) -> None:
        self.attribute = name
        self.expected = expected
        super().__init__(
            f"Attribute '{name}' of <{component}> is not {expected}.",
            filename=filename,
        )


class InvalidPropertyValueError(SchemaError):
    def __init__(self, name: str, expected: str, *, filename: Optional[str] = None) -> None:
        self.property = name
        self.expected = expected
        super().__init__(
            f"Meta property '{name}' is not {expected}.",
            filename=filename,
        )


class InvalidStoryExportNameError(SchemaError):
    def __init__(self, value: str, filename: Optional[str] = None) -> None:
        self.value = value
        super().__init__(
            f"Story 'exportName' - {value!r} - is not a valid JavaScript identifier.",
            filename=filename,
        )


# Identity errors


class StoryIdentityError(StoryScanError):
    """A story cannot be identified uniquely within its document."""


class MissingStoryNameError(StoryIdentityError):
    def __init__(self, filename: Optional[str] = None) -> None:
        super().__init__("Missing prop 'name' in <Story> component.", filename=filename)


class DuplicateStoryNameError(StoryIdentityError):
    def __init__(self, name: str, filename: Optional[str] = None) -> None:
        self.name = name
        super().__init__(f"Story name - {name} - conflicts with another story.", filename=filename)


class NoStoryIdentifierFoundError(StoryIdentityError):
    def __init__(self, filename: Optional[str] = None) -> None:
        super().__init__(
            "Missing both 'name' and 'exportName' attributes in <Story> component.",
            filename=filename,
        )


# Lookup errors


class NodeNotFoundError(StoryScanError):
    """A node required by a later step could not be located."""


class SnippetBlockNotFoundError(NodeNotFoundError):
    def __init__(self, name: str, filename: Optional[str] = None) -> None:
        self.name = name
        super().__init__(
            f"Could not find the snippet block '{{#snippet {name}(...)}}' at the root of the fragment.",
            filename=filename,
        )


__all__ = [
    "DefaultOrNamespaceImportUsedError",
    "DocumentError",
    "DuplicateStoryNameError",
    "GetDefineMetaFirstArgumentError",
    "InvalidAttributeValueError",
    "InvalidComponentValueError",
    "InvalidPropertyValueError",
    "InvalidSetTemplateFirstArgumentError",
    "InvalidStoryChildrenAttributeError",
    "InvalidStoryExportNameError",
    "MissingDefineMetaVariableDeclarationError",
    "MissingImportedDefineMetaError",
    "MissingModuleTagError",
    "MissingStoryNameError",
    "NoStoryComponentDestructuredError",
    "NoStoryIdentifierFoundError",
    "NodeNotFoundError",
    "SchemaError",
    "SnippetBlockNotFoundError",
    "StoryIdentityError",
    "StoryScanError",
]
