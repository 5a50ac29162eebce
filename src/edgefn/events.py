"""
Event envelope construction and parsing.
"""

import uuid
from typing import Any, Mapping, Optional, Union

from pydantic import ValidationError

from edgefn.errors import MalformedEventError
from edgefn.models.event import Event, EventType, Request, Response

EVENT_VERSION = "1.0"


def construct_event(raw: Union[Event, Mapping[str, Any], str, bytes]) -> Event:
    """Validate a raw event (mapping or JSON text). Raises MalformedEventError."""
    if isinstance(raw, Event):
        return raw
    try:
        if isinstance(raw, (str, bytes, bytearray)):
            return Event.model_validate_json(raw)
        return Event.model_validate(raw)
    except ValidationError as e:
        errors = e.errors(include_url=False, include_context=False, include_input=False)
        first = errors[0]
        where = ".".join(str(part) for part in first["loc"]) or "event"
        raise MalformedEventError(f"{where}: {first['msg']}", details={"errors": errors}) from e


def build_event(
    request: Union[Request, Mapping[str, Any]],
    response: Optional[Union[Response, Mapping[str, Any]]] = None,
    *,
    viewer_ip: str = "127.0.0.1",
    distribution_id: Optional[str] = None,
    distribution_domain_name: Optional[str] = None,
    request_id: Optional[str] = None,
) -> Event:
    """Build an event for a local invocation. The phase follows from whether a response is given."""
    request_phase = response is None
    raw: dict[str, Any] = {
        "version": EVENT_VERSION,
        "context": {
            key: value for key, value in {
                "distributionDomainName": distribution_domain_name,
                "distributionId": distribution_id,
                "eventType": (EventType.VIEWER_REQUEST if request_phase else EventType.VIEWER_RESPONSE).value,
                "requestId": request_id or str(uuid.uuid4()),
            }.items() if value is not None
        },
        "viewer": {"ip": viewer_ip},
        "request": request.to_wire() if isinstance(request, Request) else request,
    }
    if not request_phase:
        raw["response"] = response.to_wire() if isinstance(response, Response) else response
    return construct_event(raw)
