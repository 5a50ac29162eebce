"""KeyValueStore client."""

import asyncio
import json
from datetime import datetime, timezone

import pytest

from edgefn import KeyNotFoundError, KvsClient, KvsDecodeError, KvsError, KvsMetadata, NamespaceNotFoundError
from edgefn.transport.memory import MemoryStore


class RecordingStore(MemoryStore):
    """Memory store that records every lookup."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.lookups: list[str] = []

    async def lookup(self, key):
        self.lookups.append(key)
        return await super().lookup(key)


def make_store() -> RecordingStore:
    return RecordingStore(
        "a1b2c3d4-5678-90ab-cdef-EXAMPLE1",
        {
            "greeting": "héllo",
            "config": json.dumps({"ttl": 30, "paths": ["/a", "/b"]}),
            "broken": "{not json",
            "blob": b"\xff\x00\xfe",
        },
    )


class TestGet:
    @pytest.mark.asyncio
    async def test_string_default(self):
        client = KvsClient(make_store())
        assert await client.get("greeting") == "héllo"
        assert await client.get("greeting", "string") == "héllo"

    @pytest.mark.asyncio
    async def test_json(self):
        client = KvsClient(make_store())
        assert await client.get("config", format="json") == {"ttl": 30, "paths": ["/a", "/b"]}

    @pytest.mark.asyncio
    async def test_json_does_not_coerce_invalid_text(self):
        client = KvsClient(make_store())
        with pytest.raises(KvsDecodeError) as exc_info:
            await client.get("broken", format="json")
        assert exc_info.value.code == "kvs_decode_error"

    @pytest.mark.asyncio
    async def test_bytes_are_raw(self):
        client = KvsClient(make_store())
        assert await client.get("blob", format="bytes") == b"\xff\x00\xfe"
        assert await client.get("greeting", format="bytes") == "héllo".encode("utf-8")

    @pytest.mark.asyncio
    async def test_undecodable_text(self):
        client = KvsClient(make_store())
        with pytest.raises(KvsDecodeError):
            await client.get("blob")

    @pytest.mark.asyncio
    async def test_missing_key(self):
        client = KvsClient(make_store())
        with pytest.raises(KeyNotFoundError) as exc_info:
            await client.get("nope")
        assert exc_info.value.key == "nope"

    @pytest.mark.asyncio
    async def test_unknown_format(self):
        store = make_store()
        with pytest.raises(ValueError):
            await KvsClient(store).get("greeting", format="xml")
        assert store.lookups == []

    @pytest.mark.asyncio
    async def test_concurrent_gets(self):
        client = KvsClient(make_store())
        text, parsed, raw = await asyncio.gather(
            client.get("greeting"),
            client.get("config", format="json"),
            client.get("blob", format="bytes"),
        )
        assert text == "héllo"
        assert parsed["ttl"] == 30
        assert raw == b"\xff\x00\xfe"


class TestNamespace:
    @pytest.mark.asyncio
    async def test_no_store_bound(self):
        client = KvsClient()
        with pytest.raises(NamespaceNotFoundError):
            await client.get("greeting")
        with pytest.raises(NamespaceNotFoundError):
            await client.exists("greeting")
        with pytest.raises(NamespaceNotFoundError):
            await client.meta()

    @pytest.mark.asyncio
    async def test_id_mismatch_checked_before_lookup(self):
        store = make_store()
        client = KvsClient(store, kvs_id="some-other-store")
        with pytest.raises(NamespaceNotFoundError) as exc_info:
            await client.get("greeting")
        assert exc_info.value.kvs_id == "some-other-store"
        assert store.lookups == []

    @pytest.mark.asyncio
    async def test_matching_id(self):
        client = KvsClient(make_store(), kvs_id="a1b2c3d4-5678-90ab-cdef-EXAMPLE1")
        assert await client.exists("greeting")


class TestExistsAndMeta:
    @pytest.mark.asyncio
    async def test_exists(self):
        client = KvsClient(make_store())
        assert await client.exists("config") is True
        assert await client.exists("nope") is False

    @pytest.mark.asyncio
    async def test_meta_reflects_updates(self):
        created = datetime(2025, 3, 12, 19, 33, 19, tzinfo=timezone.utc)
        store = MemoryStore("kvs", {"a": "1"}, created_at=created)
        client = KvsClient(store)

        first = await client.meta()
        assert first.key_count == 1
        assert first.creation_date_time == created
        assert first.last_updated_date_time == created

        store.put("b", "2")
        second = await client.meta()
        assert second.key_count == 2
        assert second.last_updated_date_time > created

    @pytest.mark.asyncio
    async def test_meta_from_mapping(self):
        class DictStore:
            id = "kvs"

            async def lookup(self, key):
                return None

            async def describe(self):
                return {
                    "creationDateTime": "2025-03-12T19:33:19.776Z",
                    "lastUpdatedDateTime": "2025-03-13T08:00:00Z",
                    "keyCount": 7,
                }

        meta = await KvsClient(DictStore()).meta()
        assert isinstance(meta, KvsMetadata)
        assert meta.key_count == 7
        assert meta.to_wire()["keyCount"] == 7

    @pytest.mark.asyncio
    async def test_invalid_snapshot_is_kvs_error(self):
        class BadStore:
            id = "kvs"

            async def lookup(self, key):
                return None

            async def describe(self):
                return {"keyCount": -1}

        with pytest.raises(KvsError) as exc_info:
            await KvsClient(BadStore()).meta()
        assert exc_info.value.code == "kvs_error"
        fields = {tuple(err["loc"]) for err in exc_info.value.details["errors"]}
        assert ("keyCount",) in fields


class TestMemoryStore:
    @pytest.mark.asyncio
    async def test_from_flat_file(self, tmp_path):
        path = tmp_path / "redirects.json"
        path.write_text(json.dumps({"old": "new", "rules": {"max": 3}}))
        store = MemoryStore.from_file(path)
        assert store.id == "redirects"
        assert await store.lookup("old") == b"new"
        assert json.loads(await store.lookup("rules")) == {"max": 3}

    @pytest.mark.asyncio
    async def test_from_import_format(self, tmp_path):
        path = tmp_path / "kvs.json"
        path.write_text(json.dumps({"data": [{"key": "k1", "value": "v1"}, {"key": "k2", "value": "v2"}]}))
        store = MemoryStore.from_file(path, kvs_id="explicit")
        assert store.id == "explicit"
        assert (await store.describe()).key_count == 2

    def test_from_file_rejects_non_object(self, tmp_path):
        path = tmp_path / "kvs.json"
        path.write_text("[1, 2]")
        with pytest.raises(ValueError):
            MemoryStore.from_file(path)

    def test_from_file_rejects_incomplete_import_items(self, tmp_path):
        path = tmp_path / "kvs.json"
        path.write_text(json.dumps({"data": [{"key": "k1", "value": "v1"}, {"key": "k2"}]}))
        with pytest.raises(ValueError, match="data items need key and value"):
            MemoryStore.from_file(path)

    @pytest.mark.asyncio
    async def test_delete(self):
        store = MemoryStore("kvs", {"a": "1"})
        store.delete("a")
        store.delete("missing")
        assert await store.lookup("a") is None
        assert (await store.describe()).key_count == 0
