"""Tests for the stories index parse."""

from __future__ import annotations

import textwrap

import pytest

from storyscan.errors import (
    DefaultOrNamespaceImportUsedError,
    GetDefineMetaFirstArgumentError,
    InvalidPropertyValueError,
    MissingModuleTagError,
    NoStoryComponentDestructuredError,
)
from storyscan.indexer import parse_for_indexer
from tests._fixtures.svelte_ast import (
    SvelteAstBuilder,
    array,
    attr_expr,
    attr_text,
    call,
    const,
    default_specifier,
    export_named,
    ident,
    import_decl,
    literal,
    modern_module,
    namespace_specifier,
    obj,
    object_pattern,
    script,
    specifier,
    story,
    template,
)

PACKAGE = "@storybook/addon-svelte-csf"

MARKUP = textwrap.dedent(
    """\
    <Story name="Primary" tags={["autodocs"]} />
    <Story exportName="withIcon">
      <Button icon="star" />
    </Story>
    """
)


def _stories(builder: SvelteAstBuilder, tag: str = "Story"):
    text = MARKUP.replace("<Story", f"<{tag}").replace("</Story>", f"</{tag}>")
    assert builder.source.endswith(text)
    opening = f'<{tag} exportName="withIcon">'
    closing = f"</{tag}>"
    second = story(
        builder,
        builder.source[builder.source.index(opening) : builder.source.index(closing) + len(closing)],
        attr_text("exportName", "withIcon"),
        name=tag,
    )
    second["fragment"]["nodes"] = builder.with_whitespace(
        builder.span(opening)[1],
        [builder.component('<Button icon="star" />', "Button")],
        builder.span(closing)[0],
    )
    first = story(
        builder,
        f'<{tag} name="Primary" tags={{["autodocs"]}} />',
        attr_text("name", "Primary"),
        attr_expr("tags", array(literal("autodocs"))),
        name=tag,
    )
    return [first, second]


def _modern_document(**module_options):
    builder = SvelteAstBuilder(MARKUP)
    meta = obj(title=literal("Atoms/Button"), tags=array(literal("autodocs"), literal("!dev")))
    module_options.setdefault("meta", meta)
    return builder.document(_stories(builder), module=modern_module(**module_options))


def test_modern_dialect_meta_and_stories() -> None:
    result = parse_for_indexer(_modern_document())

    assert result.to_dict() == {
        "meta": {"title": "Atoms/Button", "tags": ["autodocs", "!dev"]},
        "stories": [
            {"exportName": "Primary", "name": "Primary", "tags": ["autodocs"]},
            {"exportName": "withIcon", "name": "With Icon", "tags": []},
        ],
    }


def test_template_literal_title() -> None:
    result = parse_for_indexer(_modern_document(meta=obj(title=template("Atoms/Button"))))

    assert result.meta.title == "Atoms/Button"
    assert result.meta.tags is None


def test_non_literal_meta_tag_is_fatal() -> None:
    document = _modern_document(meta=obj(tags=array(literal("autodocs"), ident("extra"))))

    with pytest.raises(InvalidPropertyValueError):
        parse_for_indexer(document)


def test_aliased_story_component() -> None:
    builder = SvelteAstBuilder(MARKUP.replace("Story", "Variant"))
    module = modern_module(story_local="Variant", define_meta_local="meta")

    result = parse_for_indexer(builder.document(_stories(builder, "Variant"), module=module))

    assert [entry.export_name for entry in result.stories] == ["Primary", "withIcon"]


def test_raw_source_is_opt_in_and_compact() -> None:
    document = _modern_document(meta=obj(component=ident("Button")))

    assert all(entry.raw_source is None for entry in parse_for_indexer(document).stories)

    stories = parse_for_indexer(document, include_raw_source=True).stories
    assert stories[0].raw_source == "<Button {...args} />"
    assert stories[1].raw_source == '<Button icon="star" />'
    assert stories[1].to_dict()["rawSource"] == '<Button icon="star" />'


def test_missing_module_script_is_fatal_unless_legacy() -> None:
    builder = SvelteAstBuilder(MARKUP)
    document = builder.document(_stories(builder))

    with pytest.raises(MissingModuleTagError) as excinfo:
        parse_for_indexer(document)
    assert "Button.stories.svelte" in str(excinfo.value)

    result = parse_for_indexer(document, legacy_template=True)
    assert [entry.name for entry in result.stories] == ["Primary", "With Icon"]


@pytest.mark.parametrize("make_specifier", [default_specifier, namespace_specifier])
def test_default_or_namespace_import_is_fatal(make_specifier) -> None:
    builder = SvelteAstBuilder(MARKUP)
    module = script(import_decl(PACKAGE, make_specifier("csf")))

    with pytest.raises(DefaultOrNamespaceImportUsedError) as excinfo:
        parse_for_indexer(builder.document(_stories(builder), module=module))
    assert "Button.stories.svelte" in str(excinfo.value)


def test_imports_from_other_packages_are_ignored() -> None:
    builder = SvelteAstBuilder(MARKUP)
    module = modern_module(extra=[import_decl("./Button.svelte", default_specifier("Button"))])

    result = parse_for_indexer(builder.document(_stories(builder), module=module))

    assert len(result.stories) == 2


def test_define_meta_shape_errors() -> None:
    builder = SvelteAstBuilder(MARKUP)
    not_destructured = script(
        import_decl(PACKAGE, specifier("defineMeta")),
        const("meta", call("defineMeta", obj())),
    )
    with pytest.raises(NoStoryComponentDestructuredError):
        parse_for_indexer(builder.document(_stories(builder), module=not_destructured))

    not_object = script(
        import_decl(PACKAGE, specifier("defineMeta")),
        const(object_pattern(Story="Story"), call("defineMeta", ident("meta"))),
    )
    with pytest.raises(GetDefineMetaFirstArgumentError):
        parse_for_indexer(builder.document(_stories(builder), module=not_object))


LEGACY_MARKUP = textwrap.dedent(
    """\
    <Meta title="Legacy/Button" tags={["legacy"]} />
    <Story name="Primary" tags={["autodocs"]} />
    <Story exportName="withIcon">
      <Button icon="star" />
    </Story>
    """
)


def _legacy_nodes(builder: SvelteAstBuilder):
    meta = builder.component(
        '<Meta title="Legacy/Button" tags={["legacy"]} />',
        "Meta",
        attributes=[attr_text("title", "Legacy/Button"), attr_expr("tags", array(literal("legacy")))],
    )
    return [meta, *_stories(builder)]


def test_legacy_meta_export() -> None:
    builder = SvelteAstBuilder(LEGACY_MARKUP)
    module = script(
        import_decl(PACKAGE, specifier("Meta"), specifier("Story")),
        export_named(const("meta", obj(title=literal("Exported/Button")))),
    )

    result = parse_for_indexer(builder.document(_legacy_nodes(builder), module=module), legacy_template=True)

    # The exported object wins over the <Meta> attributes.
    assert result.meta.title == "Exported/Button"
    assert result.meta.tags is None
    assert len(result.stories) == 2


def test_legacy_meta_component_attributes() -> None:
    builder = SvelteAstBuilder(LEGACY_MARKUP)

    result = parse_for_indexer(builder.document(_legacy_nodes(builder)), legacy_template=True)

    assert result.meta.to_dict() == {"title": "Legacy/Button", "tags": ["legacy"]}


def test_legacy_aliases() -> None:
    source = LEGACY_MARKUP.replace("<Meta", "<M").replace("Story", "S")
    builder = SvelteAstBuilder(source)
    meta = builder.component(
        '<M title="Legacy/Button" tags={["legacy"]} />',
        "M",
        attributes=[attr_text("title", "Legacy/Button")],
    )
    module = script(import_decl(PACKAGE, specifier("Meta", "M"), specifier("Story", "S")))

    result = parse_for_indexer(
        builder.document([meta, *_stories(builder, "S")], module=module), legacy_template=True
    )

    assert result.meta.title == "Legacy/Button"
    assert [entry.export_name for entry in result.stories] == ["Primary", "withIcon"]


def test_legacy_export_is_ignored_without_the_flag() -> None:
    builder = SvelteAstBuilder(LEGACY_MARKUP)
    module = script(export_named(const("meta", obj(title=literal("Exported/Button")))))

    result = parse_for_indexer(builder.document(_legacy_nodes(builder), module=module))

    assert result.meta.title is None
    assert len(result.stories) == 2
