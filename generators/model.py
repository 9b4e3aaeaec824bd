"""
Model generator: SQLAlchemy model + table migration + vectorizer migration.

Attributes use ``field[:type]`` syntax, e.g. ``title:string body:text``.
The content column is added as ``text`` when it is not among the attributes,
since the vectorizer cannot load from a column that does not exist.
"""

import keyword
import logging
import re
from collections.abc import Sequence
from datetime import datetime, timedelta
from pathlib import Path

from core.errors import ConfigurationError
from core.naming import classify, tableize, underscore
from core.vectorizer import default_vectorizer_name
from generators import templates
from generators.migration import (
    generate_vectorizer_migration,
    migration_filename,
    migration_timestamp,
    next_migration_time,
    write_file,
)
from generators.options import GeneratorOptions
from generators.templates import ModelAttribute

logger = logging.getLogger(__name__)

# attribute type -> (SQLAlchemy column type, Python annotation)
ATTRIBUTE_TYPES: dict[str, tuple[str, str]] = {
    "string": ("String(255)", "str"),
    "text": ("Text", "str"),
    "integer": ("Integer", "int"),
    "float": ("Float", "float"),
    "boolean": ("Boolean", "bool"),
    "datetime": ("DateTime(timezone=True)", "datetime"),
}

_RESERVED = frozenset({"id", "created_at", "updated_at"})
# attribute names the declarative base claims for itself
_DECLARATIVE_NAMES = frozenset({"metadata", "registry"})
_IDENTIFIER = re.compile(r"^[a-z_][a-z0-9_]*$")


def parse_attribute(spec: str) -> ModelAttribute:
    """
    Parse ``name[:type]`` into a ``ModelAttribute`` (type defaults to string).

    Raises:
        ConfigurationError: On an invalid name, unknown type or reserved column.
    """
    name, _, type_name = spec.partition(":")
    type_name = type_name or "string"
    if not _IDENTIFIER.match(name) or keyword.iskeyword(name):
        raise ConfigurationError(f"Invalid attribute name: {name!r}")
    if name in _RESERVED:
        raise ConfigurationError(f"Attribute {name!r} is generated automatically")
    if name in _DECLARATIVE_NAMES:
        raise ConfigurationError(f"Attribute {name!r} is reserved by SQLAlchemy Declarative")
    if type_name not in ATTRIBUTE_TYPES:
        raise ConfigurationError(
            f"Unknown attribute type: {type_name}. "
            f"Supported types: {', '.join(ATTRIBUTE_TYPES)}"
        )
    column_type, python_type = ATTRIBUTE_TYPES[type_name]
    return ModelAttribute(name=name, column_type=column_type, python_type=python_type)


def parse_attributes(specs: Sequence[str], content_column: str) -> list[ModelAttribute]:
    attributes = [parse_attribute(spec) for spec in specs]
    names = [a.name for a in attributes]
    duplicates = sorted({n for n in names if names.count(n) > 1})
    if duplicates:
        raise ConfigurationError(f"Duplicate attributes: {', '.join(duplicates)}")
    if content_column not in names:
        logger.warning(
            "Content column %r not among attributes; adding it as text", content_column
        )
        attributes.append(parse_attribute(f"{content_column}:text"))
    return attributes


def generate_model(
    name: str,
    attributes: Sequence[str],
    options: GeneratorOptions,
    root: Path,
    *,
    model_package: str = "models",
    migrations_dir: str = "db/migrations",
    skip_migration: bool = False,
    skip_vectorizer: bool = False,
    force: bool = False,
    now: datetime | None = None,
) -> list[Path]:
    """
    Generate the model module and its migrations under *root*.

    Args:
        name: Model name (``BlogPost``).
        attributes: ``field[:type]`` specs.
        options: Vectorizer options (content column, provider...).
        root: Project root.
        model_package: Dotted package for the model module.
        migrations_dir: Migrations directory relative to *root*.
        skip_migration: Do not write the table migration.
        skip_vectorizer: Do not write the vectorizer migration.
        force: Overwrite an existing model module.
        now: Clock override for deterministic versions.

    Returns:
        Paths written, model first.
    """
    parsed = parse_attributes(attributes, options.content_column)
    class_name = classify(name)
    file_name = underscore(name)
    table_name = tableize(name)
    module = f"{model_package}.{file_name}"

    written = [
        write_file(
            root.joinpath(*model_package.split("."), f"{file_name}.py"),
            templates.model_module(
                class_name=class_name,
                table_name=table_name,
                vectorizer_name=default_vectorizer_name(table_name),
                attributes=parsed,
            ),
            force=force,
        )
    ]

    migrations = root / migrations_dir
    when = next_migration_time(migrations, now)
    if not skip_migration:
        content = templates.table_migration(
            class_name=class_name,
            table_name=table_name,
            model_module=module,
            generated_at=when.strftime("%Y-%m-%d %H:%M:%S UTC"),
        )
        filename = migration_filename(migration_timestamp(when), f"create_{table_name}")
        written.append(write_file(migrations / filename, content))
        when += timedelta(seconds=1)
    if not skip_vectorizer:
        written.append(generate_vectorizer_migration(name, options, migrations, now=when))
    return written
