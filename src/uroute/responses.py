from inspect import isawaitable
from typing import Any

from attrs import evolve
from cattrs import Converter
from cattrs.preconf.orjson import make_converter

from .status import DEFAULT_RESPONSE, Response, ResponseDefaults, is_response_map

#: Structures response maps into `Response` instances, and unstructures
#: bodies for serialization.
converter: Converter = make_converter()


async def resolve_response(
    raw: Any, defaults: ResponseDefaults = DEFAULT_RESPONSE
) -> Response | None:
    """Turn whatever a route produced into a response.

    * `None` (also when awaited) is a pass, and stays `None`.
    * Awaitables are awaited, and the result is resolved again.
    * Responses and response maps keep their status and headers; an awaitable
      body is awaited in place.
    * Anything else becomes the body of a default response.

    Exceptions raised while awaiting propagate to the caller.
    """
    while isawaitable(raw):
        raw = await raw
    if raw is None:
        return None
    if isinstance(raw, Response):
        # Routes may hand out the same instance on every request.
        res = evolve(raw, headers=dict(raw.headers))
    elif is_response_map(raw):
        res = converter.structure(raw, Response)
    else:
        return defaults.make_response(raw)
    if isawaitable(res.body):
        res.body = await res.body
    return res
