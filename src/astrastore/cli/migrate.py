"""astra migrate: preview and apply registered schema migrations."""

from __future__ import annotations

from typing import Any, Optional

import typer

from astrastore.cli import _exitcodes as ec
from astrastore.cli._loader import load_cli_migrations
from astrastore.cli._output import print_error, print_json
from astrastore.cli._storage import open_cli_store
from astrastore.errors import AstraStoreError
from astrastore.migration import Migrator


def migrate_cmd(
    migrations: Optional[str] = typer.Option(
        None, "--migrations", help="Python import path for the migrations module"
    ),
    migrations_path: Optional[str] = typer.Option(
        None, "--migrations-path", help="Filesystem path to the migrations module"
    ),
    apply: bool = typer.Option(False, "--apply", help="Execute the migrations"),
) -> None:
    """Show how many records each registered migration would rewrite, or apply them."""
    from astrastore.cli import state

    json_mode = state.json_output

    if not migrations and not migrations_path:
        print_error("One of --migrations or --migrations-path is required")
        raise typer.Exit(ec.USAGE_ERROR)

    try:
        registry = load_cli_migrations(migrations, migrations_path)
    except Exception as e:
        print_error(f"Failed to load migrations: {e}")
        raise typer.Exit(ec.GENERAL_ERROR)

    if not registry:
        if json_mode:
            print_json({"migrations": []})
        else:
            print("No migrations registered.")
        return

    store = open_cli_store()
    migrator = Migrator(store)
    try:
        if not apply:
            plan: list[dict[str, Any]] = []
            for spec in sorted(registry.values(), key=lambda s: (s.source.name, s.source.version)):
                plan.append(
                    {
                        "source": str(spec.source),
                        "target": str(spec.target),
                        "transform": spec.transform.__qualname__,
                        "records": migrator.preview(spec.from_type),
                    }
                )
            if json_mode:
                print_json({"migrations": plan})
            else:
                print("Migration plan:")
                for step in plan:
                    print(
                        f"  {step['source']} -> {step['target']} "
                        f"via {step['transform']}: {step['records']} record(s)"
                    )
                print("\nTo apply: rerun with --apply")
            return

        results = migrator.run_all(registry)
        data = [
            {
                "source": str(r.source),
                "target": str(r.target),
                "selected": r.selected,
                "migrated": r.migrated,
                "retired": r.retired,
                "skipped": r.skipped,
                "failed": r.failed,
                "duration_s": round(r.duration_s, 3),
            }
            for r in results
        ]
        if json_mode:
            print_json({"results": data})
        else:
            for r in data:
                print(
                    f"  {r['source']} -> {r['target']}: {r['migrated']} migrated, "
                    f"{r['retired']} retired, {r['skipped']} skipped, {r['failed']} failed"
                )
        if any(r.failed for r in results):
            raise typer.Exit(ec.BACKEND_ERROR)
    except AstraStoreError as e:
        print_error(str(e))
        raise typer.Exit(ec.BACKEND_ERROR)
    finally:
        store.close()
