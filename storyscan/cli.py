"""CLI entrypoints for storyscan commands."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from .config import ConfigError, StoryScanConfig, load_config
from .document import load_document, parse_ast_json
from .errors import DocumentError, StoryScanError
from .extract import extract_compiled_ast_nodes, extract_stories
from .indexer import parse_for_indexer
from .logging import configure_logging, get_logger
from .models import catalog_to_dict

_LOGGER = get_logger("cli")


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_document_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("path", help="Path to the *.stories.svelte file.")
    parser.add_argument(
        "--ast",
        default=None,
        help="JSON syntax tree of the file (defaults to <path>.json or the configured parser command).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="storyscan",
        description="Extract story metadata from Svelte CSF stories files.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--config",
        default=".",
        help="Path to .storyscan.yml or the directory holding it (defaults to current directory).",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    extract_parser = subparsers.add_parser(
        "extract",
        help="Print the story catalog (name, id, description, source) of a stories file.",
    )
    _add_verbose_option(extract_parser, suppress_default=True)
    _add_document_arguments(extract_parser)

    index_parser = subparsers.add_parser(
        "index",
        help="Print the meta title/tags and story summaries used by the stories index.",
    )
    _add_verbose_option(index_parser, suppress_default=True)
    _add_document_arguments(index_parser)
    index_parser.add_argument(
        "--legacy-template",
        action="store_true",
        default=None,
        help="Accept the legacy <Meta>/<Story> dialect.",
    )
    index_parser.add_argument(
        "--include-raw-source",
        action="store_true",
        default=None,
        help="Add the one-line source of every story body.",
    )

    locate_parser = subparsers.add_parser(
        "locate",
        help="Locate the story nodes in the compiled output (ESTree JSON) of a stories file.",
    )
    _add_verbose_option(locate_parser, suppress_default=True)
    locate_parser.add_argument("compiled", help="Path to the compiled program as ESTree JSON.")
    locate_parser.add_argument(
        "--filename",
        default=None,
        help="Stories file the program was compiled from, used in error messages.",
    )

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP extraction service.")
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    return parser


def _emit(payload: Any) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False))


def _run_extract(args: argparse.Namespace, config: StoryScanConfig) -> None:
    document = load_document(
        Path(args.path),
        ast_path=Path(args.ast) if args.ast else None,
        parser_command=config.parser.command,
    )
    catalog = extract_stories(document, package_name=config.package_name)
    _emit(catalog_to_dict(catalog))


def _run_index(args: argparse.Namespace, config: StoryScanConfig) -> None:
    document = load_document(
        Path(args.path),
        ast_path=Path(args.ast) if args.ast else None,
        parser_command=config.parser.command,
    )
    legacy = config.legacy_template if args.legacy_template is None else args.legacy_template
    include_raw = (
        config.indexer.include_raw_source
        if args.include_raw_source is None
        else args.include_raw_source
    )
    result = parse_for_indexer(
        document,
        legacy_template=legacy,
        package_name=config.package_name,
        include_raw_source=include_raw,
    )
    _emit(result.to_dict())


def _run_locate(args: argparse.Namespace, config: StoryScanConfig) -> None:
    path = Path(args.compiled)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise DocumentError(f"Unable to read compiled program: {exc}", filename=str(path)) from exc
    program = parse_ast_json(text, filename=str(path))
    nodes = extract_compiled_ast_nodes(
        program,
        filename=args.filename or str(path),
        package_name=config.package_name,
    )
    _emit(nodes.summary())


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for storyscan commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose))

    try:
        config = load_config(Path(args.config))
    except ConfigError as exc:
        parser.exit(1, f"Invalid configuration: {exc}\n")

    if args.command == "serve":
        from .service import run_service

        run_service(host=args.host, port=args.port, config=config)
        return

    handlers = {
        "extract": _run_extract,
        "index": _run_index,
        "locate": _run_locate,
    }
    handler = handlers.get(args.command)
    if handler is None:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")

    try:
        handler(args, config)
    except StoryScanError as exc:
        _LOGGER.debug("storyscan %s failed", args.command, exc_info=True)
        parser.exit(1, f"storyscan {args.command} failed: {exc}\n")


if __name__ == "__main__":
    main(sys.argv[1:])
