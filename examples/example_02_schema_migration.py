"""Example 02: Schema Migration - Rewriting Records Between Versions.

This example demonstrates schema migration:
- Declaring schema_version on record types
- @migration decorator for the transform
- Migrator.preview() for counting affected records
- Retiring records by returning None
- Chained upgrades with Migrator.run_all()

Scenario: Person schema evolution
  v1: id, name, age
  v2: id, forename, surname, age
  v3: id, display_name, age
"""

from __future__ import annotations

import uuid
from typing import ClassVar, Optional

from pydantic import BaseModel, Field

from astrastore import AstraConfig, Migrator, SchemaTag, load_migrations, migration, open_store


class PersonV1(BaseModel):
    schema_version: ClassVar[SchemaTag] = SchemaTag("Person", 1)

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    name: str
    age: Optional[int] = None


class PersonV2(BaseModel):
    schema_version: ClassVar[SchemaTag] = SchemaTag("Person", 2)

    id: uuid.UUID
    forename: str
    surname: Optional[str] = None
    age: Optional[int] = None


class PersonV3(BaseModel):
    schema_version: ClassVar[SchemaTag] = SchemaTag("Person", 3)

    id: uuid.UUID
    display_name: str
    age: Optional[int] = None


@migration(PersonV1, PersonV2)
def split_name(old: PersonV1) -> Optional[PersonV2]:
    if old.name == "Test User":
        return None  # retire
    forename, _, surname = old.name.partition(" ")
    return PersonV2(id=old.id, forename=forename, surname=surname or None, age=old.age)


@migration(PersonV2, PersonV3)
def join_name(old: PersonV2) -> PersonV3:
    display = f"{old.surname}, {old.forename}" if old.surname else old.forename
    return PersonV3(id=old.id, display_name=display, age=old.age)


def main():
    """Run the schema migration example."""
    print("=" * 80)
    print("ASTRASTORE SCHEMA MIGRATION EXAMPLE")
    print("=" * 80)

    store = open_store(AstraConfig.from_env(keyspace="examples"))
    store.ensure_table()

    for name in ["Adrian Herridge", "Neil Bostrom", "Test User"]:
        person = PersonV1(name=name, age=40)
        store.put("acme", person.id, "person", person)
    print("\n  Created 3 people with v1 schema")

    migrator = Migrator(store)
    print(f"\n1. Preview: {migrator.preview(PersonV1)} record(s) tagged {PersonV1.schema_version}")

    registry = load_migrations(__name__)

    print("\n2. Applying v1 -> v2 -> v3")
    for result in migrator.run_all(registry):
        print(
            f"   {result.source} -> {result.target}: {result.migrated} migrated, "
            f"{result.retired} retired, {result.skipped} skipped"
        )

    print("\n3. Current records")
    for person in store.all(PersonV3, "acme", "person"):
        print(f"   - {person.display_name}")

    print(f"\n4. Rerun preview: {migrator.preview(PersonV1)} record(s) left at v1")
    store.close()

    print("\n" + "=" * 80)
    print("EXAMPLE COMPLETE")
    print("=" * 80)


if __name__ == "__main__":
    main()
