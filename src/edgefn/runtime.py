"""
Per-invocation runtime module.

Handler code reaches the KeyValueStore and the request origin through the runtime bound
to the running invocation:

    from edgefn import runtime

    async def handler(event):
        cf = runtime.current()
        target = await cf.kvs().get(event.request.uri.split("/")[1])
        cf.update_request_origin({"domainName": target})
        return event.request

The binding lives in a context variable, so concurrent invocations on one event loop
each see their own runtime.
"""

import logging
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Iterator, Mapping, Optional, Union

from edgefn.errors import InvalidOriginOverrideError
from edgefn.kvs import KvsClient, KvsStore
from edgefn.models.event import EventType
from edgefn.models.origin import Origin, OriginOverride
from edgefn.origin import merge, parse_override

logger = logging.getLogger(__name__)

_CURRENT: ContextVar[Optional["EdgeRuntime"]] = ContextVar("edgefn_runtime", default=None)


class EdgeRuntime:
    def __init__(
        self,
        store: Optional[KvsStore] = None,
        origin: Optional[Union[Origin, Mapping[str, Any]]] = None,
        phase: Optional[EventType] = None,
    ):
        self._store = store
        self._origin = origin if origin is None or isinstance(origin, Origin) else Origin.model_validate(origin)
        self.phase = phase

    def for_invocation(self, phase: EventType) -> "EdgeRuntime":
        """Fresh runtime for one invocation, sharing this runtime's store and base origin.

        Origin updates and the phase land on the copy, so a runtime reused across
        invocations never carries one invocation's state into another.
        """
        return EdgeRuntime(store=self._store, origin=self._origin, phase=phase)

    @property
    def origin(self) -> Optional[Origin]:
        """Effective origin after every update so far."""
        return self._origin

    def kvs(self, kvs_id: Optional[str] = None) -> KvsClient:
        """Handle for the associated store. Raises NamespaceNotFoundError when there is none,
        or when `kvs_id` names a different store."""
        client = KvsClient(self._store, kvs_id)
        client.check_namespace()
        return client

    def update_request_origin(self, props: Union[OriginOverride, Mapping[str, Any]]) -> Origin:
        """Apply an origin override. Successive calls compose."""
        if self.phase is EventType.VIEWER_RESPONSE:
            raise InvalidOriginOverrideError("eventType", "the origin can only be updated on viewer-request")
        if self._origin is None:
            patch = parse_override(props)
            if patch.domain_name is None:
                raise InvalidOriginOverrideError("domainName", "required when no origin is assigned")
            self._origin = merge(patch.model_dump(exclude_none=True), {})
        else:
            self._origin = merge(self._origin, props)
        logger.debug("Request origin is now %s", self._origin.domain_name)
        return self._origin


@contextmanager
def bind(runtime: EdgeRuntime) -> Iterator[EdgeRuntime]:
    token = _CURRENT.set(runtime)
    try:
        yield runtime
    finally:
        _CURRENT.reset(token)


def current() -> EdgeRuntime:
    runtime = _CURRENT.get()
    if runtime is None:
        raise RuntimeError("No edge function invocation is running")
    return runtime
