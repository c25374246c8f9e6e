"""CLI entrypoints for schemascope commands."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict

from .config import ConfigError, SchemascopeConfig, load_config
from .diagram import build_graph
from .logging import configure_logging
from .models import ScanResult
from .pipeline import SUPPORTED_ORM, ScanPipeline
from .sources import GitHubRepositorySource, LocalRepositorySource, RepositorySource, SourceError
from .stores import DiagramStore


def _add_logging_options(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    # Sub-parsers suppress their defaults so options given before the command survive.
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=argparse.SUPPRESS if suppress_default else False,
        help="Increase log verbosity for troubleshooting.",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=argparse.SUPPRESS if suppress_default else None,
        help="Also write debug-level logs to this file.",
    )


def _add_scan_options(parser: argparse.ArgumentParser) -> None:
    _add_logging_options(parser, suppress_default=True)
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to a .schemascope.yml file (defaults to the repository or current directory).",
    )
    parser.add_argument(
        "--orm",
        default=SUPPORTED_ORM,
        help="ORM used by the repository; only 'mongoose' is scanned.",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Seconds to wait for file fetches before continuing with partial results.",
    )
    parser.add_argument(
        "--graph",
        action="store_true",
        help="Include renderer nodes and edges in the output.",
    )
    parser.add_argument(
        "--store",
        type=Path,
        default=None,
        help="JSON store to upsert the extracted models into.",
    )
    parser.add_argument(
        "--user",
        default="local",
        help="Owner key used with --store.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="schemascope",
        description="Infer Mongoose model diagrams from repository sources.",
    )
    _add_logging_options(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    scan_parser = subparsers.add_parser(
        "scan",
        help="Scan a local checkout for schema declarations.",
    )
    _add_scan_options(scan_parser)
    scan_parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the repository root (defaults to current directory).",
    )

    github_parser = subparsers.add_parser(
        "github",
        help="Scan a GitHub repository through the REST API.",
    )
    _add_scan_options(github_parser)
    github_parser.add_argument("repository", help="Repository as OWNER/REPO.")
    github_parser.add_argument("--branch", default="main", help="Branch or ref to read.")
    github_parser.add_argument(
        "--token",
        default=None,
        help="GitHub token (defaults to SCHEMASCOPE_GITHUB_TOKEN or GITHUB_TOKEN).",
    )

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP service.")
    _add_logging_options(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)
    serve_parser.add_argument(
        "--store",
        type=Path,
        default=None,
        help="JSON store for generated diagrams (kept in memory when omitted).",
    )

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for schemascope commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)

    if args.command == "serve":
        from .service import run_service

        run_service(host=args.host, port=args.port, store_path=args.store)
        return

    try:
        config = _load_config(args)
        source = _build_source(args, config)
    except (ConfigError, ValueError) as exc:
        parser.exit(1, f"{exc}\n")

    pipeline = ScanPipeline(config)
    try:
        result = pipeline.run(source, orm=args.orm, timeout=args.timeout)
    except SourceError as exc:
        parser.exit(1, f"schemascope {args.command} failed: {exc}\n")

    if args.store is not None and result.found:
        store = DiagramStore(args.store)
        store.upsert(source.identity, args.user, result.models)
        store.persist()

    print(json.dumps(_render(result, graph=bool(args.graph)), indent=2))
    if result.message:
        print(result.message, file=sys.stderr)


def _load_config(args: argparse.Namespace) -> SchemascopeConfig:
    if args.config is not None:
        return load_config(args.config)
    if args.command == "scan":
        return load_config(Path(args.path))
    return load_config(Path.cwd())


def _build_source(args: argparse.Namespace, config: SchemascopeConfig) -> RepositorySource:
    if args.command == "scan":
        return LocalRepositorySource(args.path, exclude_paths=config.exclude_paths)
    return GitHubRepositorySource.from_slug(
        args.repository,
        branch=args.branch,
        token=args.token or config.github.token,
        api_url=config.github.api_url,
        request_timeout=config.github.request_timeout,
    )


def _render(result: ScanResult, *, graph: bool) -> Dict[str, Any]:
    payload = result.to_dict()
    if graph:
        payload["graph"] = build_graph(result.models)
    return payload


if __name__ == "__main__":
    main(sys.argv[1:])
