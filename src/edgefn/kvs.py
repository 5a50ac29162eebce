"""
KeyValueStore client used inside handlers.

The client keeps no state between calls: every get/exists/meta goes to the bound store,
and calls may be issued concurrently.
"""

import json
import logging
from typing import Any, Literal, Mapping, Optional, Protocol, Union, overload

from pydantic import ValidationError

from edgefn.errors import KeyNotFoundError, KvsDecodeError, KvsError, NamespaceNotFoundError
from edgefn.models.kvs import KvsMetadata

logger = logging.getLogger(__name__)

Format = Literal["string", "json", "bytes"]
FORMATS: tuple[str, ...] = ("string", "json", "bytes")


class KvsStore(Protocol):
    """Backing store collaborator. `lookup` returns None for an absent key."""

    id: str

    async def lookup(self, key: str) -> Optional[bytes]: ...

    async def describe(self) -> Union[KvsMetadata, Mapping[str, Any]]: ...


class KvsClient:
    def __init__(self, store: Optional[KvsStore] = None, kvs_id: Optional[str] = None):
        self._store = store
        self._kvs_id = kvs_id

    @property
    def kvs_id(self) -> Optional[str]:
        return self._store.id if self._store is not None else self._kvs_id

    def check_namespace(self) -> KvsStore:
        """Return the bound store, or raise NamespaceNotFoundError."""
        if self._store is None:
            raise NamespaceNotFoundError("No key value store is associated with the function", self._kvs_id)
        if self._kvs_id is not None and self._kvs_id != self._store.id:
            raise NamespaceNotFoundError(
                f"Key value store {self._kvs_id!r} is not associated with the function", self._kvs_id,
            )
        return self._store

    @overload
    async def get(self, key: str) -> str: ...

    @overload
    async def get(self, key: str, format: Literal["string"]) -> str: ...

    @overload
    async def get(self, key: str, format: Literal["json"]) -> Any: ...

    @overload
    async def get(self, key: str, format: Literal["bytes"]) -> bytes: ...

    async def get(self, key: str, format: Format = "string") -> Union[str, Any, bytes]:
        """Fetch `key` decoded per `format`: text as-is, parsed JSON, or raw bytes."""
        if format not in FORMATS:
            raise ValueError(f"Unknown format {format!r}, expected one of {', '.join(FORMATS)}")
        store = self.check_namespace()
        raw = await store.lookup(key)
        if raw is None:
            raise KeyNotFoundError(key)
        if format == "bytes":
            return raw

        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise KvsDecodeError(key, format, str(e)) from e
        if format == "string":
            return text
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise KvsDecodeError(key, format, e.msg) from e

    async def exists(self, key: str) -> bool:
        store = self.check_namespace()
        return await store.lookup(key) is not None

    async def meta(self) -> KvsMetadata:
        """Snapshot of the store at call time. Never cached."""
        store = self.check_namespace()
        described = await store.describe()
        if isinstance(described, KvsMetadata):
            return described
        try:
            return KvsMetadata.model_validate(described)
        except ValidationError as e:
            raise KvsError(
                f"Store {store.id!r} returned an invalid metadata snapshot",
                details={"errors": e.errors(include_url=False, include_context=False, include_input=False)},
            ) from e
