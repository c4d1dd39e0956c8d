"""Tests for full story extraction from the markup fragment."""

from __future__ import annotations

import logging
import textwrap

import pytest

from storyscan.analyse.identity import hash_code
from storyscan.errors import (
    DuplicateStoryNameError,
    InvalidAttributeValueError,
    MissingStoryNameError,
    SnippetBlockNotFoundError,
)
from storyscan.extract.fragment import extract_stories
from storyscan.models import catalog_to_dict
from tests._fixtures.svelte_ast import (
    SvelteAstBuilder,
    attr_bare,
    attr_expr,
    attr_text,
    call,
    expr_stmt,
    ident,
    import_decl,
    modern_module,
    obj,
    script,
    specifier,
    story,
)

SOURCE = textwrap.dedent(
    """\
    <!-- Primary button -->
    <Story name="Primary" source />

    <!-- Detached -->

    <Story name="Secondary" id="custom-id" source="<Button />">
      <Button label="Hi" />
    </Story>
    <Story name="Primary CTA!!" />
    <Story name="Primary CTA??" />
    """
)


def _catalog_document():
    builder = SvelteAstBuilder(SOURCE)
    secondary_open = '<Story name="Secondary" id="custom-id" source="<Button />">'
    secondary = story(
        builder,
        SOURCE[SOURCE.index(secondary_open) : SOURCE.index("</Story>") + len("</Story>")],
        attr_text("name", "Secondary"),
        attr_text("id", "custom-id"),
        attr_text("source", "<Button />"),
    )
    secondary["fragment"]["nodes"] = builder.with_whitespace(
        builder.span(secondary_open)[1],
        [builder.component('<Button label="Hi" />', "Button")],
        builder.span("</Story>")[0],
    )
    nodes = [
        builder.comment("<!-- Primary button -->"),
        story(builder, '<Story name="Primary" source />', attr_text("name", "Primary"), attr_bare("source")),
        builder.comment("<!-- Detached -->"),
        secondary,
        story(builder, '<Story name="Primary CTA!!" />', attr_text("name", "Primary CTA!!")),
        story(builder, '<Story name="Primary CTA??" />', attr_text("name", "Primary CTA??")),
    ]
    return builder.document(nodes, module=modern_module())


def test_catalog_is_keyed_by_declared_name_in_document_order() -> None:
    catalog = extract_stories(_catalog_document())

    assert list(catalog) == ["Primary", "Secondary", "Primary CTA!!", "Primary CTA??"]
    assert all(meta.name == name for name, meta in catalog.items())


def test_story_metadata() -> None:
    catalog = extract_stories(_catalog_document())

    primary = catalog["Primary"]
    assert primary.id == "Primary"
    assert primary.description == "Primary button"
    assert primary.source is True
    assert primary.raw_source is None

    secondary = catalog["Secondary"]
    assert secondary.id == "custom-id"
    assert secondary.description is None
    assert secondary.source == "<Button />"
    assert secondary.raw_source == '<Button label="Hi" />'


def test_generated_id_collision_is_suffixed_with_warning(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="storyscan"):
        catalog = extract_stories(_catalog_document())

    assert catalog["Primary CTA!!"].id == "PrimaryCTA"
    assert catalog["Primary CTA??"].id == "PrimaryCTA" + hash_code("Primary CTA??")
    warnings = [record for record in caplog.records if record.levelno == logging.WARNING]
    assert len(warnings) == 1
    assert "Button.stories.svelte" in warnings[0].getMessage()


def test_catalog_serialises_with_camel_case_keys() -> None:
    payload = catalog_to_dict(extract_stories(_catalog_document()))

    assert payload["Primary"] == {
        "id": "Primary",
        "name": "Primary",
        "description": "Primary button",
        "source": True,
    }
    assert payload["Secondary"]["rawSource"] == '<Button label="Hi" />'


def test_comment_does_not_leak_past_a_story() -> None:
    source = '<!-- First -->\n<Story name="One" />\n<Story name="Two" />\n'
    builder = SvelteAstBuilder(source)
    nodes = [
        builder.comment("<!-- First -->"),
        story(builder, '<Story name="One" />', attr_text("name", "One")),
        story(builder, '<Story name="Two" />', attr_text("name", "Two")),
    ]

    catalog = extract_stories(builder.document(nodes, module=modern_module()))

    assert catalog["One"].description == "First"
    assert catalog["Two"].description is None


def test_only_the_destructured_story_tag_is_recognised() -> None:
    source = '<Variant name="Aliased" />\n<Story name="Ignored" />\n'
    builder = SvelteAstBuilder(source)
    nodes = [
        story(builder, '<Variant name="Aliased" />', attr_text("name", "Aliased"), name="Variant"),
        story(builder, '<Story name="Ignored" />', attr_text("name", "Ignored")),
    ]

    catalog = extract_stories(builder.document(nodes, module=modern_module(story_local="Variant")))

    assert list(catalog) == ["Aliased"]


def test_set_template_and_children_reference() -> None:
    source = textwrap.dedent(
        """\
        {#snippet template(args)}<Button {...args} />{/snippet}
        {#snippet other(args)}<Other {...args} />{/snippet}

        <Story name="Default" />
        <Story name="Other" children={other} />
        """
    )
    builder = SvelteAstBuilder(source)
    template_block = builder.snippet(
        "{#snippet template(args)}<Button {...args} />{/snippet}",
        "template",
        nodes=[builder.component("<Button {...args} />", "Button")],
    )
    other_block = builder.snippet(
        "{#snippet other(args)}<Other {...args} />{/snippet}",
        "other",
        nodes=[builder.component("<Other {...args} />", "Other")],
    )
    nodes = [
        template_block,
        other_block,
        story(builder, '<Story name="Default" />', attr_text("name", "Default")),
        story(
            builder,
            '<Story name="Other" children={other} />',
            attr_text("name", "Other"),
            attr_expr("children", ident("other")),
        ),
    ]
    instance = script(
        import_decl("@storybook/addon-svelte-csf", specifier("setTemplate")),
        expr_stmt(call("setTemplate", ident("template"))),
        context="default",
    )
    module = modern_module(meta=obj(component=ident("Button")))

    catalog = extract_stories(builder.document(nodes, module=module, instance=instance))

    assert catalog["Default"].raw_source == "<Button {...args} />"
    assert catalog["Other"].raw_source == "<Other {...args} />"


def test_missing_children_snippet_is_reported() -> None:
    source = '<Story name="Broken" children={missing} />\n'
    builder = SvelteAstBuilder(source)
    nodes = [
        story(
            builder,
            '<Story name="Broken" children={missing} />',
            attr_text("name", "Broken"),
            attr_expr("children", ident("missing")),
        )
    ]

    with pytest.raises(SnippetBlockNotFoundError) as excinfo:
        extract_stories(builder.document(nodes, module=modern_module()))
    assert "missing" in str(excinfo.value)
    assert "Button.stories.svelte" in str(excinfo.value)


def test_duplicate_and_missing_names_are_fatal() -> None:
    source = '<Story name="Same" />\n<Story name="Same" />\n<Story />\n'
    builder = SvelteAstBuilder(source)
    duplicate = [
        story(builder, '<Story name="Same" />', attr_text("name", "Same")),
        story(builder, '<Story name="Same" />', attr_text("name", "Same"), occurrence=1),
    ]
    with pytest.raises(DuplicateStoryNameError):
        extract_stories(builder.document(duplicate, module=modern_module()))

    unnamed = [story(builder, "<Story />")]
    with pytest.raises(MissingStoryNameError):
        extract_stories(builder.document(unnamed, module=modern_module()))


def test_dynamic_source_attribute_is_fatal() -> None:
    source = '<Story name="Dynamic" source={code} />\n'
    builder = SvelteAstBuilder(source)
    nodes = [
        story(
            builder,
            '<Story name="Dynamic" source={code} />',
            attr_text("name", "Dynamic"),
            attr_expr("source", ident("code")),
        )
    ]

    with pytest.raises(InvalidAttributeValueError):
        extract_stories(builder.document(nodes, module=modern_module()))


def test_member_expression_component_does_not_block_extraction() -> None:
    source = '<Story name="Inline"><Button /></Story>\n<Story name="Bare" />\n'
    builder = SvelteAstBuilder(source)
    inline = story(
        builder,
        '<Story name="Inline"><Button /></Story>',
        attr_text("name", "Inline"),
        nodes=[builder.component("<Button />", "Button")],
    )
    bare = story(builder, '<Story name="Bare" />', attr_text("name", "Bare"))
    member = {
        "type": "MemberExpression",
        "start": 0,
        "end": 0,
        "object": ident("UI"),
        "property": ident("Button"),
        "computed": False,
        "optional": False,
    }
    module = modern_module(meta=obj(component=member))

    catalog = extract_stories(builder.document([inline, bare], module=module))

    assert catalog["Inline"].raw_source == "<Button />"
    assert catalog["Bare"].raw_source is None
