"""Example 01: Basic Usage - Records, Filters and Queries.

This example demonstrates the fundamental operations:
- Opening an AstraProvider on the in-memory backend
- Writing pydantic models with put() under (partition, area, key)
- Tagging records with typed filters at write time
- Reading back with get(), all(), query() and ids()
- Composite keys and record expiry

Point ASTRA_DB_URL / ASTRA_DB_TOKEN at an Astra REST cql endpoint to run the
same code against a real table.
"""

from __future__ import annotations

import uuid
from typing import Optional

from pydantic import BaseModel, Field

from astrastore import AstraConfig, AstraProvider, Filter, composite_key


class Person(BaseModel):
    """A person record."""

    person_id: uuid.UUID = Field(default_factory=uuid.uuid4)
    name: str
    age: int
    city: Optional[str] = None

    def filter_predicates(self) -> list[Filter]:
        # Stored when put() is called without explicit filters
        return [Filter.int("age", self.age), Filter.string("city", self.city or "")]


def main():
    """Run the basic usage example."""
    print("=" * 80)
    print("ASTRASTORE BASIC USAGE EXAMPLE")
    print("=" * 80)

    config = AstraConfig.from_env(keyspace="examples")
    with AstraProvider(config) as db:
        # Step 1: Write records
        print("\n1. Writing people to partition 'acme', area 'person'")
        people = [
            Person(name="Adrian", age=41, city="London"),
            Person(name="Neil", age=38, city="Leeds"),
            Person(name="Sarah", age=28, city="London"),
        ]
        for person in people:
            db.put("acme", person.person_id, "person", person)
            print(f"   - {person.name} ({person.age})")

        # Step 2: Point read
        print("\n2. Reading one record back")
        adrian = db.get(Person, "acme", people[0].person_id, "person")
        print(f"   - {adrian}")

        # Step 3: Storage-side filters
        print("\n3. People in London (filter city=London)")
        for person in db.all(Person, "acme", "person", [Filter.string("city", "London")]):
            print(f"   - {person.name}")

        # Step 4: In-process predicate
        print("\n4. People over 30 (predicate)")
        for person in db.query(Person, "acme", "person", lambda p: p.age > 30):
            print(f"   - {person.name}")

        # Step 5: Explicit filters override the object's own
        print("\n5. Explicit filters and composite keys")
        key = composite_key(people[0].person_id, "manager")
        db.put("acme", key, "roles", people[0], filters={"role": "manager"})
        print(f"   - stored under {key}")
        print(f"   - managers: {db.ids('acme', 'roles', {'role': 'manager'})}")

        # Step 6: Expiry
        print("\n6. A record written with ttl=3600 expires after an hour")
        db.put("acme", "session-token", "sessions", {"user": "adrian"}, ttl=3600)
        print(f"   - sessions: {db.ids('acme', 'sessions')}")

        print("\nStatements executed:")
        for cql, count in sorted(db.statement_counts().items()):
            print(f"   {count:>3}  {cql}")

    print("\n" + "=" * 80)
    print("EXAMPLE COMPLETE")
    print("=" * 80)


if __name__ == "__main__":
    main()
