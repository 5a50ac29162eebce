"""
Event envelope: the JSON object a hosting runtime hands to an edge function.

A viewer-request event carries only the request. A viewer-response event carries the
request and the response returned by the cache or origin.
"""

from enum import Enum
from typing import Any, Literal, Optional, Union

from pydantic import field_validator, model_validator

from edgefn.models.wire import WireModel


class EventType(str, Enum):
    VIEWER_REQUEST = "viewer-request"
    VIEWER_RESPONSE = "viewer-response"


def lower_keys(value: Any) -> Any:
    """Lower-case header, cookie and query names. Names colliding after lower-casing are rejected."""
    if not isinstance(value, dict):
        return value
    lowered: dict[str, Any] = {}
    for name, entry in value.items():
        key = str(name).lower()
        if key in lowered:
            raise ValueError(f"duplicate name {name!r} after lower-casing")
        lowered[key] = entry
    return lowered


class MultiValue(WireModel):
    value: str


class HeaderValue(WireModel):
    value: str
    multi_value: Optional[list[MultiValue]] = None


# Query string entries share the header entry shape.
QueryValue = HeaderValue


class CookieMultiValue(WireModel):
    value: str
    attributes: Optional[str] = None


class CookieValue(WireModel):
    value: str
    attributes: Optional[str] = None
    multi_value: Optional[list[CookieMultiValue]] = None


class Context(WireModel):
    distribution_domain_name: Optional[str] = None
    distribution_id: Optional[str] = None
    event_type: EventType
    request_id: Optional[str] = None

    model_config = {"frozen": True}


class Viewer(WireModel):
    ip: str

    model_config = {"frozen": True}


class Request(WireModel):
    method: str  # read-only for handlers; the dispatcher restores it
    uri: str
    querystring: Optional[Union[str, dict[str, QueryValue]]] = None
    headers: Optional[dict[str, HeaderValue]] = None
    cookies: Optional[dict[str, CookieValue]] = None

    @field_validator("uri")
    @classmethod
    def _uri_is_absolute(cls, value: str) -> str:
        if not value.startswith("/"):
            raise ValueError("uri must start with '/'")
        return value

    @field_validator("querystring", "headers", "cookies", mode="before")
    @classmethod
    def _lower_names(cls, value: Any) -> Any:
        return lower_keys(value)


class ResponseBody(WireModel):
    encoding: Literal["text", "base64"]
    data: str


class Response(WireModel):
    status_code: int
    status_description: Optional[str] = None
    headers: Optional[dict[str, HeaderValue]] = None
    cookies: Optional[dict[str, CookieValue]] = None
    body: Optional[Union[str, ResponseBody]] = None

    @field_validator("headers", "cookies", mode="before")
    @classmethod
    def _lower_names(cls, value: Any) -> Any:
        return lower_keys(value)


class Event(WireModel):
    version: str
    context: Context
    viewer: Viewer
    request: Request
    response: Optional[Response] = None

    @model_validator(mode="after")
    def _check_phase(self) -> "Event":
        # Presence of the key matters, not its value.
        has_response = "response" in self.model_fields_set
        if self.context.event_type is EventType.VIEWER_REQUEST and has_response:
            raise ValueError("a viewer-request event must not carry a response")
        if self.context.event_type is EventType.VIEWER_RESPONSE and (not has_response or self.response is None):
            raise ValueError("a viewer-response event must carry a response")
        return self

    @property
    def phase(self) -> EventType:
        return self.context.event_type
