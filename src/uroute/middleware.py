"""Middleware composition, and the middleware shipped with uroute.

A middleware takes the next handler and returns a handler with the same
signature::

    def timing(handler: Handler) -> Handler:
        async def timed(request: RequestMap) -> Any:
            start = monotonic()
            resp = await handler(request)
            if resp is not None:
                resp.headers["X-Time"] = f"{monotonic() - start:.3f}"
            return resp

        return timed

A `None` result from the next handler means nothing answered the request.
"""
from collections.abc import Iterable, Sequence
from typing import Any

from .responses import resolve_response
from .status import ResponseException
from .types import Handler, Middleware, RequestMap


def as_middleware_list(
    middleware: Middleware | Iterable[Middleware],
) -> tuple[Middleware, ...]:
    if callable(middleware):
        return (middleware,)
    res = tuple(middleware)
    for m in res:
        if not callable(m):
            raise TypeError(f"Middleware must be callable, got {m!r}.")
    return res


def compose(handler: Handler, middleware: Sequence[Middleware]) -> Handler:
    """Wrap `handler` so the first middleware is the outermost one.

    `compose(h, [m1, m2])` is `m1(m2(h))`.
    """
    for m in reversed(middleware):
        handler = m(handler)
    return handler


def handle_response_exceptions(handler: Handler) -> Handler:
    """Answer with the response carried by a `ResponseException`."""

    async def response_exception_handler(request: RequestMap) -> Any:
        try:
            return await handler(request)
        except ResponseException as exc:
            return await resolve_response(exc.response)

    return response_exception_handler

