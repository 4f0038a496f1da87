"""Migration loader: import a module by dotted path or file path."""

from __future__ import annotations

import importlib
import sys
from pathlib import Path

from astrastore.migration import MigrationSpec, load_migrations
from astrastore.types import SchemaTag


def load_cli_migrations(
    migrations: str | None = None,
    migrations_path: str | None = None,
) -> dict[SchemaTag, MigrationSpec]:
    """Load @migration-decorated transforms from a module.

    Args:
        migrations: Dotted Python import path (e.g. 'myapp.migrations')
        migrations_path: Filesystem path to a Python file

    Returns:
        Registered migrations keyed by source schema tag
    """
    if migrations_path:
        path = Path(migrations_path).resolve()
        if not path.exists():
            raise FileNotFoundError(f"Migrations path not found: {migrations_path}")
        parent = str(path.parent)
        if parent not in sys.path:
            sys.path.insert(0, parent)
        module_name = path.stem
        sys.modules.pop(module_name, None)
        importlib.invalidate_caches()
        return load_migrations(module_name)
    if migrations:
        return load_migrations(migrations)
    raise ValueError("One of --migrations or --migrations-path is required")
