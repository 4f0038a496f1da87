"""Tests for the failure-absorbing AstraProvider."""

from __future__ import annotations

import httpx
import pytest

from astrastore import (
    AstraConfig,
    AstraProvider,
    DecodingError,
    EncodingError,
    MemoryTransport,
    TransportError,
)
from tests.conftest import KEYSPACE
from tests.models import Person, PersonV1, PersonV2, split_name

AREA = "person"


class TestHappyPath:
    def test_put_get_delete(self, provider, partition):
        person = Person(name="Adrian Herridge", age=40)
        assert provider.put(partition, person.person_id, AREA, person)
        assert provider.get(Person, partition, person.person_id, AREA) == person
        assert provider.delete(partition, person.person_id, AREA)
        assert provider.get(Person, partition, person.person_id, AREA) is None

    def test_scans(self, provider, partition):
        for name, age in [("Adrian", 41), ("Neil", 38), ("Sarah", 28)]:
            provider.put(partition, name, AREA, Person(name=name, age=age), filters={"team": "a"})

        assert len(provider.all(Person, partition, AREA)) == 3
        assert len(provider.all(Person, partition, AREA, {"team": "a"})) == 3
        assert provider.all(Person, partition, AREA, {"team": "b"}) == []
        over_30 = provider.query(Person, partition, AREA, lambda p: p.age > 30)
        assert sorted(p.name for p in over_30) == ["Adrian", "Neil"]
        assert sorted(provider.ids(partition, AREA)) == ["Adrian", "Neil", "Sarah"]

        seen: list[str] = []
        provider.iterate(Person, partition, AREA, lambda p: seen.append(p.name), {"team": "a"})
        assert len(seen) == 3

    def test_remove_all_and_truncate(self, provider, transport, partition):
        provider.put(partition, "a", AREA, Person(name="A"))
        provider.put(partition, "b", "staff", Person(name="B"))
        assert provider.remove_all_records(partition, AREA)
        assert provider.ids(partition, AREA) == []
        assert provider.truncate_table()
        assert transport.row_count(KEYSPACE) == 0

    def test_transact_is_accepted(self, provider):
        assert provider.transact() is True
        assert provider.transact("exclusive") is True

    def test_migrate(self, provider, partition):
        old = PersonV1(name="Adrian Herridge", age=40)
        provider.put(partition, old.id, AREA, old)
        result = provider.migrate(PersonV1, PersonV2, split_name)
        assert result.success
        assert result.migrated == 1
        assert provider.get(PersonV2, partition, old.id, AREA).surname == "Herridge"

    def test_statement_counts(self, provider, partition):
        provider.put(partition, "a", AREA, Person(name="A"))
        counts = provider.statement_counts()
        assert any(cql.startswith("CREATE TABLE") for cql in counts)
        assert sum(counts.values()) == 2


class TestLifecycle:
    def test_context_manager_opens_table(self, transport, partition):
        with AstraProvider(AstraConfig(keyspace=KEYSPACE), transport=transport) as provider:
            assert provider.put(partition, "a", AREA, Person(name="A"))

    def test_open_without_create_table(self, transport, partition):
        provider = AstraProvider(
            AstraConfig(keyspace=KEYSPACE, create_table=False), transport=transport
        )
        assert provider.open()
        assert not provider.put(partition, "a", AREA, Person(name="A"))

    def test_default_config_is_in_memory(self):
        provider = AstraProvider()
        assert isinstance(provider.store.transport, MemoryTransport)
        assert provider.open()

    def test_open_reports_backend_failure(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503, text="unavailable")

        from astrastore.storage import RecordStore
        from astrastore.transport import HttpTransport

        config = AstraConfig(url="https://db.example.test/cql", keyspace=KEYSPACE)
        client = httpx.Client(transport=httpx.MockTransport(handler))
        store = RecordStore(HttpTransport(config, client=client), keyspace=KEYSPACE)
        errors: list[tuple[str, Exception]] = []
        provider = AstraProvider(config, store=store, on_error=lambda op, e: errors.append((op, e)))

        assert provider.open() is False
        assert errors[0][0] == "open"
        assert isinstance(errors[0][1], TransportError)
        assert errors[0][1].status_code == 503


class TestAbsorbedFailures:
    @pytest.fixture
    def errors(self):
        return []

    @pytest.fixture
    def broken(self, errors):
        """Provider whose table was never created."""
        return AstraProvider(
            AstraConfig(keyspace=KEYSPACE, create_table=False),
            transport=MemoryTransport(),
            on_error=lambda op, e: errors.append((op, e)),
        )

    def test_writes_return_false(self, broken, errors, partition):
        assert broken.put(partition, "a", AREA, Person(name="A")) is False
        assert broken.delete(partition, "a", AREA) is False
        assert broken.remove_all_records(partition, AREA) is False
        assert [op for op, _ in errors] == ["put", "delete", "remove_all_records"]
        assert all(isinstance(e, TransportError) for _, e in errors)

    def test_reads_return_neutral_values(self, broken, errors, partition):
        assert broken.get(Person, partition, "a", AREA) is None
        assert broken.all(Person, partition, AREA) == []
        assert broken.query(Person, partition, AREA, lambda p: True) == []
        assert broken.ids(partition, AREA) == []
        assert [op for op, _ in errors] == ["get", "all", "all", "ids"]

    def test_iterate_never_calls_back(self, broken, partition):
        called: list[Person] = []
        broken.iterate(Person, partition, AREA, called.append)
        assert called == []

    def test_truncate_returns_false(self, broken, errors):
        assert broken.truncate_table() is False
        assert errors[0][0] == "truncate_table"

    def test_migrate_failure_is_a_result(self, broken, errors):
        result = broken.migrate(PersonV1, PersonV2, split_name)
        assert not result.success
        assert result.migrated == 0
        assert "unconfigured table" in result.errors[0]

    def test_misconfigured_migration_is_a_result(self, provider):
        result = provider.migrate(PersonV1, PersonV1, lambda old: old)
        assert not result.success
        assert "share schema tag" in result.errors[0]

    def test_encoding_failure(self, provider, errors, partition):
        provider.on_error = lambda op, e: errors.append((op, e))
        assert provider.put(partition, "a", AREA, object()) is False
        assert isinstance(errors[0][1], EncodingError)

    def test_unusable_inputs_are_absorbed(self, provider, errors, partition):
        provider.on_error = lambda op, e: errors.append((op, e))
        person = Person(name="A")
        assert provider.put(partition, "k", AREA, person, filters={"x": [1, 2]}) is False
        assert provider.put(partition, None, AREA, person) is False
        assert provider.put(partition, "k", AREA, person, ttl=0.5) is False
        assert provider.all(Person, partition, AREA, {"x": object()}) == []
        assert provider.ids(partition, AREA, [object()]) == []
        assert provider.get(Person, partition, True, AREA) is None
        assert provider.delete(partition, None, AREA) is False

        assert [op for op, _ in errors] == ["put", "put", "put", "all", "ids", "get", "delete"]
        assert all(isinstance(e, EncodingError) for _, e in errors)
        assert provider.ids(partition, AREA) == []

    def test_partial_migration_keeps_counts(self, provider, errors, partition):
        provider.on_error = lambda op, e: errors.append((op, e))
        for i, name in enumerate(["Adrian Herridge", "Neil Bostrom", "Sarah Jones"]):
            provider.put(partition, str(i), AREA, PersonV1(name=name))

        def upgrade(old: PersonV1):
            return "oops" if old.name == "Sarah Jones" else split_name(old)

        result = provider.migrate(PersonV1, PersonV2, upgrade)
        assert not result.success
        assert result.target == PersonV2.schema_version
        assert (result.selected, result.migrated, result.failed) == (3, 2, 1)
        assert errors[0][0] == "migrate"

    def test_corrupt_record_reads_as_none(self, provider, errors, partition):
        store = provider.store
        store.transport.execute(
            store.statements.insert(
                partition=partition, area=AREA, key="broken", value="{not json", filters={}
            )
        )
        provider.on_error = lambda op, e: errors.append((op, e))
        assert provider.get(Person, partition, "broken", AREA) is None
        assert isinstance(errors[0][1], DecodingError)

    def test_failures_are_logged(self, broken, partition, caplog):
        with caplog.at_level("WARNING", logger="astrastore.provider"):
            broken.get(Person, partition, "a", AREA)
        assert "get failed" in caplog.text


class TestDefaultPartition:
    def test_none_uses_configured_default(self, transport):
        config = AstraConfig(keyspace=KEYSPACE, default_partition="shared")
        with AstraProvider(config, transport=transport) as provider:
            assert provider.put(None, "a", AREA, Person(name="A"))
            assert provider.get(Person, "shared", "a", AREA).name == "A"
            assert provider.ids(None, AREA) == ["a"]
            assert provider.remove_all_records(None, AREA)
            assert provider.ids("shared", AREA) == []
