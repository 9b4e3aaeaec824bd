"""
Vectorizer migration generator.

Writes a migration module that provisions a pgai vectorizer for one table::

    generate_vectorizer_migration("BlogPost", GeneratorOptions(), Path("db/migrations"))
    # -> db/migrations/m20261017120000_create_blog_post_vectorizer.py
"""

import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path

from core.naming import tableize, underscore
from core.vectorizer import default_vectorizer_name
from generators import templates
from generators.options import GeneratorOptions

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"


def migration_timestamp(now: datetime | None = None) -> str:
    """UTC timestamp used as the migration version."""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).strftime(TIMESTAMP_FORMAT)


def migration_filename(version: str, slug: str) -> str:
    # "m" prefix keeps the module importable (identifiers cannot start with a digit).
    return f"m{version}_{slug}.py"


def next_migration_time(directory: Path, now: datetime | None = None) -> datetime:
    """
    Return a migration time strictly later than any existing migration in
    *directory*, so versions sort in generation order.
    """
    now = (now or datetime.now(timezone.utc)).astimezone(timezone.utc).replace(microsecond=0)
    latest: datetime | None = None
    if directory.is_dir():
        for path in directory.glob("m*_*.py"):
            stamp = path.name[1:].split("_", 1)[0]
            try:
                found = datetime.strptime(stamp, TIMESTAMP_FORMAT).replace(tzinfo=timezone.utc)
            except ValueError:
                continue
            if latest is None or found > latest:
                latest = found
    if latest is not None and latest >= now:
        return latest + timedelta(seconds=1)
    return now


def write_file(path: Path, content: str, *, force: bool = False) -> Path:
    """Write *content* to *path*, creating parent directories.

    Raises:
        FileExistsError: If *path* exists and *force* is False.
    """
    if path.exists() and not force:
        raise FileExistsError(f"{path} already exists (use force to overwrite)")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    logger.info("Wrote %s", path)
    return path


def generate_vectorizer_migration(
    name: str,
    options: GeneratorOptions,
    directory: Path,
    *,
    now: datetime | None = None,
) -> Path:
    """
    Write ``m<version>_create_<file_name>_vectorizer.py`` into *directory*.

    Args:
        name: Model or table name (``BlogPost``, ``blog_post``...).
        options: Validated vectorizer options.
        directory: Migrations directory.
        now: Clock override for deterministic versions.

    Returns:
        Path of the written migration.
    """
    table_name = tableize(name)
    when = next_migration_time(directory, now)
    content = templates.vectorizer_migration(
        table_name=table_name,
        vectorizer_name=default_vectorizer_name(table_name),
        options=options,
        generated_at=when.strftime("%Y-%m-%d %H:%M:%S UTC"),
    )
    slug = f"create_{underscore(name)}_vectorizer"
    return write_file(directory / migration_filename(migration_timestamp(when), slug), content)
