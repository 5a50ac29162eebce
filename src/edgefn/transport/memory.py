"""
In-memory backing store: local runs and tests.
"""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from edgefn.models.kvs import KvsMetadata


def _encode(value: Union[str, bytes]) -> bytes:
    return value if isinstance(value, bytes) else value.encode("utf-8")


class MemoryStore:
    def __init__(
        self,
        kvs_id: str,
        items: Optional[Mapping[str, Union[str, bytes]]] = None,
        created_at: Optional[datetime] = None,
    ):
        self.id = kvs_id
        self._items: dict[str, bytes] = {key: _encode(value) for key, value in (items or {}).items()}
        self._created_at = created_at or datetime.now(timezone.utc)
        self._updated_at = self._created_at

    @classmethod
    def from_file(cls, path: Union[str, Path], kvs_id: Optional[str] = None) -> "MemoryStore":
        """Load a JSON file: either a flat object or the import format `{"data": [{"key", "value"}]}`.

        String values are stored as their text; any other JSON value as its JSON encoding.
        """
        path = Path(path)
        raw = json.loads(path.read_text())
        if isinstance(raw, dict) and isinstance(raw.get("data"), list):
            if not all(isinstance(item, dict) and "key" in item and "value" in item for item in raw["data"]):
                raise ValueError(f"{path}: data items need key and value")
            raw = {item["key"]: item["value"] for item in raw["data"]}
        if not isinstance(raw, dict):
            raise ValueError(f"{path}: expected a JSON object of key/value pairs")
        items = {key: value if isinstance(value, str) else json.dumps(value) for key, value in raw.items()}
        return cls(kvs_id or path.stem, items)

    def put(self, key: str, value: Union[str, bytes]) -> None:
        self._items[key] = _encode(value)
        self._updated_at = datetime.now(timezone.utc)

    def delete(self, key: str) -> None:
        if self._items.pop(key, None) is not None:
            self._updated_at = datetime.now(timezone.utc)

    async def lookup(self, key: str) -> Optional[bytes]:
        return self._items.get(key)

    async def describe(self) -> KvsMetadata:
        return KvsMetadata(
            creation_date_time=self._created_at,
            last_updated_date_time=self._updated_at,
            key_count=len(self._items),
        )

    def __repr__(self) -> str:
        return f"MemoryStore(id={self.id!r}, keys={len(self._items)})"
