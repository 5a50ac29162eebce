"""
Handler dispatch.

A viewer-request handler may return the request (continue to cache/origin) or a response
(answer the viewer directly). A viewer-response handler must return a response. Results
are told apart by `statusCode`: present means response.
"""

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Mapping, Optional, Union

from pydantic import ValidationError

from edgefn.errors import InvalidHandlerReturnError
from edgefn.events import construct_event
from edgefn.models.event import Event, EventType, Request, Response
from edgefn.runtime import EdgeRuntime, bind

logger = logging.getLogger(__name__)

Result = Union[Request, Response, Mapping[str, Any]]
Handler = Callable[[Event], Union[Result, Awaitable[Result]]]


def _is_response(result: Any) -> bool:
    if isinstance(result, Response):
        return True
    if isinstance(result, Mapping):
        return "statusCode" in result or "status_code" in result
    return False


def _to_wire(result: Any) -> dict[str, Any]:
    if isinstance(result, (Request, Response)):
        return result.to_wire()
    if isinstance(result, Mapping):
        return dict(result)
    raise InvalidHandlerReturnError(
        f"Handler returned {type(result).__name__}, expected a request or response",
        details={"returned": type(result).__name__},
    )


def _validate(model: type, wire: dict[str, Any]) -> Any:
    try:
        return model.model_validate(wire)
    except ValidationError as e:
        raise InvalidHandlerReturnError(
            f"Handler returned an invalid {model.__name__.lower()}",
            details={"errors": e.errors(include_url=False, include_context=False, include_input=False)},
        ) from e


def check_result(event: Event, result: Any) -> Union[Request, Response]:
    """Validate a handler result against the event's phase."""
    if _is_response(result):
        response = _validate(Response, _to_wire(result))
        if event.phase is EventType.VIEWER_RESPONSE and response.status_code != event.response.status_code:
            logger.warning(
                "Discarding statusCode change %s -> %s on viewer-response",
                event.response.status_code, response.status_code,
            )
            response.status_code = event.response.status_code
        return response

    if event.phase is EventType.VIEWER_RESPONSE:
        raise InvalidHandlerReturnError(
            "A viewer-response handler must return a response",
            details={"returned": type(result).__name__},
        )
    request = _validate(Request, _to_wire(result))
    if request.method != event.request.method:
        logger.warning("Discarding method change %s -> %s", event.request.method, request.method)
        request.method = event.request.method
    return request


async def run_invocation(
    handler: Handler,
    event: Union[Event, Mapping[str, Any], str, bytes],
    runtime: Optional[EdgeRuntime] = None,
) -> tuple[Union[Request, Response], EdgeRuntime]:
    """Run `handler` against `event`; return its validated result and the invocation's runtime.

    `runtime` is a template: the handler is bound to `runtime.for_invocation(phase)`, and
    the returned runtime carries the effective origin after the handler's updates.
    """
    event = construct_event(event)
    invocation = (runtime or EdgeRuntime()).for_invocation(event.phase)
    logger.debug("Dispatching %s request_id=%s", event.phase.value, event.context.request_id)

    with bind(invocation):
        result = handler(event.model_copy(deep=True))
        if inspect.isawaitable(result):
            result = await result
    return check_result(event, result), invocation


async def dispatch(
    handler: Handler,
    event: Union[Event, Mapping[str, Any], str, bytes],
    runtime: Optional[EdgeRuntime] = None,
) -> Union[Request, Response]:
    """Run `handler` against `event` and return its validated result.

    The handler gets a deep copy of the event, so the caller's envelope is untouched.
    Sync and async handlers are both accepted; no timeout is applied here.
    """
    result, _ = await run_invocation(handler, event, runtime)
    return result


def dispatch_sync(
    handler: Handler,
    event: Union[Event, Mapping[str, Any], str, bytes],
    runtime: Optional[EdgeRuntime] = None,
) -> Union[Request, Response]:
    """Blocking dispatch on a private event loop, for hosts without one."""
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(dispatch(handler, event, runtime))
    finally:
        loop.close()
