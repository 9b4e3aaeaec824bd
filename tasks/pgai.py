"""
``pgai`` command-line entry point.

Usage::

    pgai providers
    pgai status
    pgai init [--directory .] [--force]
    pgai generate-migration Post --provider openai --model text-embedding-3-small
    pgai generate-model Post title:string body:text --content-column body
"""

import argparse
import logging
import sys
from pathlib import Path

from sqlalchemy.exc import SQLAlchemyError

from core.config import PgaiConfig
from core.errors import PgaiError
from core.providers import DispatchKind, get_registry
from generators import templates
from generators.migration import generate_vectorizer_migration, write_file
from generators.model import generate_model
from generators.options import GeneratorOptions
from tasks.settings import DEFAULT_CONFIG_FILE, load_config

logger = logging.getLogger(__name__)


def print_providers() -> None:
    registry = get_registry()
    print("Supported Embedding Providers")
    print("=" * 60)
    for kind, title in (
        (DispatchKind.DIRECT, "Direct providers (native pgai functions)"),
        (DispatchKind.INDIRECT, "LiteLLM providers (ai.embedding_litellm)"),
    ):
        print()
        print(title)
        print("-" * 60)
        for desc in registry:
            if desc.dispatch_kind is not kind:
                continue
            print(f"  {desc.name:<14} {desc.description}")
            print(f"  {'':<14} function: {desc.invocation_function}", end="")
            if desc.namespace_prefix:
                print(f"  prefix: {desc.namespace_prefix}/", end="")
            print(f"  default dimensions: {desc.default_dimensions}")
            if desc.api_key_env_var:
                print(f"  {'':<14} api key: {desc.api_key_env_var}")
            if desc.credential_env_vars:
                print(f"  {'':<14} credentials: {', '.join(desc.credential_env_vars)}")
            models = ", ".join(
                f"{model} ({info.dimensions})" for model, info in desc.common_models.items()
            )
            print(f"  {'':<14} models: {models}")


def print_status(config: PgaiConfig) -> bool:
    """Print configuration and extension status. Returns True if pgai is usable."""
    from db.extensions import get_extension_checker

    print("pgai status")
    print("=" * 60)
    print(f"  default provider:   {config.default_provider}")
    print(f"  default model:      {config.default_model}")
    print(f"  default dimensions: {config.default_dimensions}")
    print(f"  ollama base url:    {config.ollama_base_url or '(not set)'}")
    print(f"  auto vectorize:     {config.auto_vectorize}")
    print(f"  fallback on error:  {config.fallback_on_error}")
    for provider, options in config.provider_configs.items():
        print(f"  {provider} options: {', '.join(sorted(options))}")
    print()
    checker = get_extension_checker()
    pgai_ok = checker.pgai_available()
    vector_ok = checker.pgvector_available()
    print(f"  pgai extension:     {'installed' if pgai_ok else 'NOT AVAILABLE'}")
    print(f"  pgvector extension: {'installed' if vector_ok else 'NOT AVAILABLE'}")
    if not pgai_ok:
        logger.warning("pgai extension missing; run CREATE EXTENSION IF NOT EXISTS ai CASCADE;")
    return pgai_ok


def init_project(directory: Path, *, force: bool = False) -> list[Path]:
    """Write ``pgai.yml`` and ``docker-compose.yml``; existing files are kept unless *force*."""
    written = []
    for name, content in (
        (DEFAULT_CONFIG_FILE, templates.CONFIG_FILE),
        ("docker-compose.yml", templates.DOCKER_COMPOSE_FILE),
    ):
        path = directory / name
        if path.exists() and not force:
            print(f"  skip    {path} (exists)")
            continue
        written.append(write_file(path, content, force=force))
        print(f"  create  {path}")
    return written


def _add_vectorizer_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("name", help="Model or table name, e.g. BlogPost.")
    parser.add_argument("--provider", default=None, help="Embedding provider (default: config).")
    parser.add_argument("--model", default=None, help="Embedding model (default: config).")
    parser.add_argument(
        "--dimensions",
        type=int,
        default=None,
        help="Vector dimensions (auto-detected if not specified).",
    )
    parser.add_argument("--content-column", default="content", help="Column to vectorize.")
    parser.add_argument("--chunk-size", type=int, default=512, help="Chunk size (default: 512).")
    parser.add_argument("--chunk-overlap", type=int, default=50, help="Chunk overlap (default: 50).")
    parser.add_argument(
        "--chunking-method",
        default="character",
        help="Chunking method: character or recursive (default: character).",
    )
    parser.add_argument(
        "--migrations-dir", default="db/migrations", help="Where migrations are written."
    )


def _options(args: argparse.Namespace, config: PgaiConfig) -> GeneratorOptions:
    return GeneratorOptions.from_config(
        config,
        provider=args.provider,
        model=args.model,
        dimensions=args.dimensions,
        content_column=args.content_column,
        chunking_method=args.chunking_method,
        chunk_size=args.chunk_size,
        chunk_overlap=args.chunk_overlap,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pgai",
        description="Provision pgai vectorizers: providers, status and code generators.",
    )
    parser.add_argument("--config", default=None, help=f"YAML config (default: {DEFAULT_CONFIG_FILE}).")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging.")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("providers", help="List supported embedding providers.")
    sub.add_parser("status", help="Show configuration and extension availability.")

    init = sub.add_parser("init", help="Write pgai.yml and docker-compose.yml.")
    init.add_argument("--directory", default=".", help="Target directory (default: .).")
    init.add_argument("--force", action="store_true", help="Overwrite existing files.")

    migration = sub.add_parser("generate-migration", help="Generate a vectorizer migration.")
    _add_vectorizer_options(migration)

    model = sub.add_parser("generate-model", help="Generate a model with a vectorizer.")
    _add_vectorizer_options(model)
    model.add_argument("attributes", nargs="*", help="field[:type] ...")
    model.add_argument("--model-package", default="models", help="Package for the model module.")
    model.add_argument("--skip-migration", action="store_true", help="No table migration.")
    model.add_argument("--skip-vectorizer", action="store_true", help="No vectorizer migration.")
    model.add_argument("--force", action="store_true", help="Overwrite an existing model.")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.command == "providers":
            print_providers()
            return 0
        if args.command == "init":
            init_project(Path(args.directory), force=args.force)
            return 0

        config = load_config(args.config)
        if args.command == "status":
            return 0 if print_status(config) else 1
        if args.command == "generate-migration":
            path = generate_vectorizer_migration(
                args.name, _options(args, config), Path(args.migrations_dir)
            )
            print(f"  create  {path}")
        elif args.command == "generate-model":
            paths = generate_model(
                args.name,
                args.attributes,
                _options(args, config),
                Path("."),
                model_package=args.model_package,
                migrations_dir=args.migrations_dir,
                skip_migration=args.skip_migration,
                skip_vectorizer=args.skip_vectorizer,
                force=args.force,
            )
            for path in paths:
                print(f"  create  {path}")
    except (PgaiError, ValueError, OSError, SQLAlchemyError) as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
