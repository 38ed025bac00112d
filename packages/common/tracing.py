"""Tracing helpers for FastAPI.

Adds a request-level trace middleware that injects/propagates `X-Request-ID`
and an audit event helper for recording scoring decisions in the logs.
"""

from .logging import get_request_id, set_request_id
from fastapi import Request, Response
from typing import Any, Callable, Awaitable, Dict
import json
import logging
import time
import uuid

logger = logging.getLogger("quiz.audit")


async def trace_middleware(request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
    """ASGI middleware to attach a correlation id and echo it in the response.

    - Reads `X-Request-ID` from the incoming request or generates a UUIDv4.
    - Stores it in a ContextVar so logs include the same id.
    - Sets the same header on the outgoing response.

    Args:
        request: Incoming FastAPI request.
        call_next: The next ASGI callable that returns a `Response`.

    Returns:
        The downstream response with `X-Request-ID` header set.
    """
    rid = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    set_request_id(rid)
    try:
        response = await call_next(request)
    finally:
        set_request_id(None)
    response.headers["X-Request-ID"] = rid
    return response


def audit_event(actor_id: str, verb: str, obj: str, **extras: Any) -> Dict[str, Any]:
    """Emit an audit event and return its payload.

    Args:
        actor_id: Who triggered the action (e.g. "participant").
        verb: Action performed (e.g. "evaluated").
        obj: Object of the action (e.g. a quiz id).
        **extras: Additional key/value fields recorded with the event.

    Returns:
        A dictionary containing the event payload, with `request_id` when
        called inside a traced request.
    """
    event: Dict[str, Any] = {
        "actor": actor_id,
        "verb": verb,
        "object": obj,
        "ts": round(time.time(), 3),
        "extras": extras
    }
    rid = get_request_id()
    if rid:
        event["request_id"] = rid
    logger.info(f"EVENT {json.dumps(event, ensure_ascii=False)}")
    return event
