"""Tests for locating defineMeta, the Story tag and templates in scripts."""

from __future__ import annotations

import pytest

from storyscan.errors import (
    DefaultOrNamespaceImportUsedError,
    GetDefineMetaFirstArgumentError,
    InvalidComponentValueError,
    InvalidSetTemplateFirstArgumentError,
    MissingDefineMetaVariableDeclarationError,
    MissingImportedDefineMetaError,
    MissingModuleTagError,
    NoStoryComponentDestructuredError,
)
from storyscan.extract.svelte_nodes import collect_template_context, extract_svelte_ast_nodes
from tests._fixtures.svelte_ast import (
    SvelteAstBuilder,
    call,
    const,
    default_specifier,
    export_named,
    expr_stmt,
    ident,
    import_decl,
    literal,
    modern_module,
    namespace_specifier,
    obj,
    object_pattern,
    script,
    specifier,
)

PACKAGE = "@storybook/addon-svelte-csf"
SOURCE = "{#snippet template(args)}<Button {...args} />{/snippet}\n"


def _document(module=None, instance=None):
    builder = SvelteAstBuilder(SOURCE)
    block = builder.snippet(SOURCE.rstrip("\n"), "template")
    return builder.document([block], module=module, instance=instance)


def test_resolves_define_meta_and_story_identifier() -> None:
    meta = obj(title=literal("Atoms/Button"), component=ident("Button"))
    nodes = extract_svelte_ast_nodes(_document(modern_module(meta=meta)))

    assert nodes.story_tag == "Story"
    assert nodes.define_meta_import["imported"]["name"] == "defineMeta"
    assert nodes.define_meta_object is meta
    assert nodes.define_meta_variable_declaration["kind"] == "const"
    assert list(nodes.snippet_blocks) == ["template"]
    assert nodes.set_template_call is None

    templates = nodes.templates()
    assert templates.component_name() == "Button"
    assert templates.template_name() is None


def test_aliases_become_the_story_tag() -> None:
    module = modern_module(story_local="Variant", define_meta_local="meta")
    nodes = extract_svelte_ast_nodes(_document(module))

    assert nodes.story_tag == "Variant"


def test_exported_define_meta_declaration_is_found() -> None:
    module = script(
        import_decl(PACKAGE, specifier("defineMeta")),
        export_named(const(object_pattern(Story="Story"), call("defineMeta", obj()))),
    )

    assert extract_svelte_ast_nodes(_document(module)).story_tag == "Story"


def test_set_template_call_in_instance_script() -> None:
    instance = script(
        import_decl(PACKAGE, specifier("setTemplate")),
        expr_stmt(call("setTemplate", ident("template"))),
        context="default",
    )
    nodes = extract_svelte_ast_nodes(_document(modern_module(), instance))

    assert nodes.set_template_call is not None
    assert nodes.templates().template_name() == "template"


def test_set_template_requires_an_identifier() -> None:
    instance = script(
        import_decl(PACKAGE, specifier("setTemplate")),
        expr_stmt(call("setTemplate", literal("template"))),
        context="default",
    )
    nodes = extract_svelte_ast_nodes(_document(modern_module(), instance))

    templates = nodes.templates()
    with pytest.raises(InvalidSetTemplateFirstArgumentError):
        templates.template_name()


def test_component_must_be_an_identifier() -> None:
    nodes = extract_svelte_ast_nodes(_document(modern_module(meta=obj(component=literal("Button")))))

    templates = nodes.templates()
    with pytest.raises(InvalidComponentValueError):
        templates.component_name()


def test_custom_package_name() -> None:
    module = modern_module(package_name="my-stories")

    assert extract_svelte_ast_nodes(_document(module), package_name="my-stories").story_tag == "Story"
    with pytest.raises(MissingImportedDefineMetaError):
        extract_svelte_ast_nodes(_document(module))


def test_missing_module_script() -> None:
    with pytest.raises(MissingModuleTagError) as excinfo:
        extract_svelte_ast_nodes(_document())
    assert "Button.stories.svelte" in str(excinfo.value)


@pytest.mark.parametrize("make_specifier", [default_specifier, namespace_specifier])
def test_default_or_namespace_import_is_fatal(make_specifier) -> None:
    module = script(import_decl(PACKAGE, make_specifier("csf")))

    with pytest.raises(DefaultOrNamespaceImportUsedError) as excinfo:
        extract_svelte_ast_nodes(_document(module))
    assert "Button.stories.svelte" in str(excinfo.value)


def test_missing_define_meta_declaration() -> None:
    module = script(import_decl(PACKAGE, specifier("defineMeta")))

    with pytest.raises(MissingDefineMetaVariableDeclarationError):
        extract_svelte_ast_nodes(_document(module))


def test_story_must_be_destructured() -> None:
    module = script(
        import_decl(PACKAGE, specifier("defineMeta")),
        const("meta", call("defineMeta", obj())),
    )

    with pytest.raises(NoStoryComponentDestructuredError):
        extract_svelte_ast_nodes(_document(module))


def test_define_meta_requires_object_argument() -> None:
    module = script(
        import_decl(PACKAGE, specifier("defineMeta")),
        const(object_pattern(Story="Story"), call("defineMeta", ident("meta"))),
    )

    with pytest.raises(GetDefineMetaFirstArgumentError):
        extract_svelte_ast_nodes(_document(module))


def test_collect_template_context_is_lenient() -> None:
    templates = collect_template_context(_document())

    assert list(templates.snippet_blocks) == ["template"]
    assert templates.template_name() is None
    assert templates.component_name() is None
