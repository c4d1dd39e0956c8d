"""Names and defaults shared by the extraction passes."""

from __future__ import annotations

DEFAULT_PACKAGE_NAME = "@storybook/addon-svelte-csf"

DEFINE_META = "defineMeta"
SET_TEMPLATE = "setTemplate"
STORY_COMPONENT = "Story"
CHILDREN_SNIPPET = "children"

# Legacy dialect
LEGACY_META_COMPONENT = "Meta"
LEGACY_META_EXPORT = "meta"

# The compiler names the component function of ``Button.stories.svelte`` ``Button_stories``.
STORIES_FUNCTION_SUFFIX = "_stories"

UNSPECIFIED_COMPONENT = "!unspecified"
