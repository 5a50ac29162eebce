"""
edgefn: contract layer for edge functions.

Validates viewer-request / viewer-response events, dispatches handlers under the
per-phase return rules, and gives handlers a typed KeyValueStore client and origin
override merging.
"""

from edgefn.dispatch import dispatch, dispatch_sync, run_invocation
from edgefn.errors import (
    EdgeFunctionError,
    MalformedEventError,
    InvalidHandlerReturnError,
    KvsError,
    KeyNotFoundError,
    NamespaceNotFoundError,
    KvsDecodeError,
    InvalidOriginOverrideError,
)
from edgefn.events import build_event, construct_event
from edgefn.kvs import KvsClient
from edgefn.models.event import Event, EventType, Request, Response
from edgefn.models.kvs import KvsMetadata
from edgefn.models.origin import Origin, OriginOverride
from edgefn.origin import merge
from edgefn.runtime import EdgeRuntime, current

__version__ = "0.1.0"
__all__ = [
    "dispatch",
    "dispatch_sync",
    "run_invocation",
    "construct_event",
    "build_event",
    "merge",
    "current",
    "EdgeRuntime",
    "KvsClient",
    "Event",
    "EventType",
    "Request",
    "Response",
    "KvsMetadata",
    "Origin",
    "OriginOverride",
    "EdgeFunctionError",
    "MalformedEventError",
    "InvalidHandlerReturnError",
    "KvsError",
    "KeyNotFoundError",
    "NamespaceNotFoundError",
    "KvsDecodeError",
    "InvalidOriginOverrideError",
]
