from collections.abc import Callable, Iterable
from contextvars import ContextVar
from functools import partial
from inspect import isawaitable
from logging import getLogger
from typing import Any, Final

from attrs import Factory, field, frozen

from .middleware import as_middleware_list, compose
from .path import ANY, join_path, match_path
from .requests import resolve_fields
from .responses import resolve_response
from .status import DEFAULT_CONTENT_TYPE, DEFAULT_RESPONSE, Response, ResponseDefaults
from .types import Fields, Handler, Middleware, RequestMap

__all__ = [
    "Endpoint",
    "Fallback",
    "Route",
    "RouteDefinitionError",
    "RouteHandler",
    "Routes",
    "Wrapped",
    "any_",
    "define",
    "delete",
    "get",
    "head",
    "not_found",
    "options",
    "patch",
    "post",
    "put",
    "route",
    "wrap",
]

logger = getLogger(__name__)

_NO_BODY: Final = object()

# The prefix and path params of the attempt a `Wrapped` is running.
_attempt_scope: ContextVar[tuple[str, dict[str, str] | None]] = ContextVar(
    "uroute_attempt_scope"
)


class RouteDefinitionError(ValueError):
    """A route declaration is malformed."""


class RouteHandler:
    """The common base of everything that can answer a request.

    Every routing piece is also a top-level handler: await it with a request
    map to get a response, `None` if nothing answered, or whatever a
    middleware replaced the response with.
    """

    __slots__ = ()

    async def attempt(self, request: RequestMap, prefix: str = "") -> Any:
        raise NotImplementedError

    async def __call__(self, request: RequestMap) -> Any:
        return await self.attempt(request)


def _check_str(_, attribute, value) -> None:
    if not isinstance(value, str):
        raise RouteDefinitionError(
            f"Route {attribute.name} must be a string, got {value!r}."
        )


def _to_fields(fields: Fields | None) -> tuple[str, ...]:
    if fields is None:
        return ()
    if isinstance(fields, str) or not isinstance(fields, Iterable):
        raise RouteDefinitionError(
            f"Route fields must be a sequence of names, got {fields!r}."
        )
    res = tuple(fields)
    for f in res:
        if not isinstance(f, str):
            raise RouteDefinitionError(
                f"Route field names must be strings, got {f!r}."
            )
    return res


@frozen
class Route(RouteHandler):
    """A single route.

    The body is either returned as-is, or called with the request fields
    named by `fields`, in order.
    """

    method: str = field(validator=_check_str)
    pattern: str = field(validator=_check_str)
    fields: tuple[str, ...] = field(default=(), converter=_to_fields)
    body: Any = None
    defaults: ResponseDefaults = DEFAULT_RESPONSE

    def match(self, request: RequestMap, prefix: str = "") -> dict[str, str] | None:
        return match_path(
            self.method, self.pattern, request.get("method"), request.get("url"), prefix
        )

    async def respond(
        self, request: RequestMap, params: dict[str, str] | None = None
    ) -> Response | None:
        """Produce the response of a matched route."""
        args = resolve_fields(request, self.fields, params)
        try:
            raw = self.body(*args) if callable(self.body) else self.body
            res = await resolve_response(raw, self.defaults)
        except Exception:
            logger.debug(
                "Route %s %s failed", self.method, self.pattern, exc_info=True
            )
            raise
        if res is None:
            logger.debug("Route %s %s passed", self.method, self.pattern)
        return res

    async def attempt(self, request: RequestMap, prefix: str = "") -> Response | None:
        params = self.match(request, prefix)
        if params is None:
            return None
        logger.debug(
            "Matched %s %s to %s %s (prefix %r)",
            request.get("method"),
            request.get("url"),
            self.method,
            self.pattern,
            prefix,
        )
        return await self.respond(request, params)


@frozen
class Endpoint(RouteHandler):
    """A plain handler function used as a routing member.

    It gets the whole request map and is tried regardless of the prefix.
    """

    handler: Callable[[RequestMap], Any]

    async def attempt(self, request: RequestMap, prefix: str = "") -> Any:
        res = self.handler(request)
        if isawaitable(res):
            res = await res
        return res


@frozen
class Fallback(RouteHandler):
    """Answers every request it sees with the same response."""

    response: Response

    async def attempt(self, request: RequestMap, prefix: str = "") -> Response | None:
        return await resolve_response(self.response)


def as_handler(
    member: Any, defaults: ResponseDefaults = DEFAULT_RESPONSE
) -> RouteHandler:
    """Turn a routing member into a `RouteHandler`.

    Members can be route pieces, route declarations
    (`(method, pattern, fields, body)`) or plain handler functions.
    """
    if isinstance(member, RouteHandler):
        return member
    if isinstance(member, tuple | list):
        if len(member) != 4:
            raise RouteDefinitionError(
                "Route declarations are (method, pattern, fields, body), "
                f"got {member!r}."
            )
        method, pattern, fields, body = member
        return Route(method, pattern, fields, body, defaults)
    if callable(member):
        return Endpoint(member)
    raise RouteDefinitionError(f"Cannot route to {member!r}.")


def _to_members(members: Iterable[Any]) -> tuple[RouteHandler, ...]:
    return tuple(as_handler(m) for m in members)


@frozen
class Routes(RouteHandler):
    """An ordered group of routing members under a common path prefix.

    Members are tried in order; the first one not passing wins.
    """

    members: tuple[RouteHandler, ...] = field(converter=_to_members)
    prefix: str = field(default="", validator=_check_str)

    async def attempt(self, request: RequestMap, prefix: str = "") -> Any:
        prefix = join_path(prefix, self.prefix)
        for member in self.members:
            res = await member.attempt(request, prefix)
            if res is not None:
                return res
        return None


@frozen
class Wrapped(RouteHandler):
    """A routing member wrapped in middleware.

    The middleware chain is built once, when the wrapper is created. Each
    attempt hands the current prefix and path params to the innermost
    handler through `_attempt_scope`.

    A wrapped `Route` matches the request method and path before any of
    its middleware runs, and only runs the middleware on a match. A
    middleware rewriting `method` or `url` therefore changes what the
    route's fields resolve to, never whether it matches. Anything else
    runs its middleware on every attempt.
    """

    inner: RouteHandler = field(converter=as_handler)
    middleware: tuple[Middleware, ...] = field(converter=as_middleware_list)
    handler: Handler = field(
        init=False,
        default=Factory(
            lambda self: compose(self._call_inner, self.middleware), takes_self=True
        ),
        eq=False,
        repr=False,
    )

    async def _call_inner(self, request: RequestMap) -> Any:
        prefix, params = _attempt_scope.get()
        if isinstance(self.inner, Route):
            return await self.inner.respond(request, params)
        return await self.inner.attempt(request, prefix)

    async def attempt(self, request: RequestMap, prefix: str = "") -> Any:
        params = None
        if isinstance(self.inner, Route):
            params = self.inner.match(request, prefix)
            if params is None:
                return None
        token = _attempt_scope.set((prefix, params))
        try:
            res = self.handler(request)
            if isawaitable(res):
                res = await res
        finally:
            _attempt_scope.reset(token)
        return res


def define(
    prefix: str | Iterable[Any],
    members: Iterable[Any] | None = None,
    *,
    defaults: ResponseDefaults = DEFAULT_RESPONSE,
) -> Routes:
    """Define a group of routes.

    Call either as `define(members)` or `define(prefix, members)`.

    :param prefix: The path prefix for all members of the group.
    :param members: Route declarations (`(method, pattern, fields, body)`),
        routes, groups, wrapped handlers and plain handler functions.
    :param defaults: The response defaults for routes built from declarations.
    """
    if members is None:
        if isinstance(prefix, str):
            members = ()
        else:
            prefix, members = "", prefix
    return Routes(tuple(as_handler(m, defaults) for m in members), prefix)


def wrap(
    handler: Any,
    middleware: Middleware | Iterable[Middleware],
    *,
    defaults: ResponseDefaults = DEFAULT_RESPONSE,
) -> Wrapped:
    """Wrap a routing member in one or more middleware.

    The first middleware is the outermost one: it sees the request first and
    the response last.
    """
    return Wrapped(as_handler(handler, defaults), middleware)


def route(
    method: str,
    pattern: str,
    fields_or_body: Any = None,
    body: Any = _NO_BODY,
    *,
    defaults: ResponseDefaults = DEFAULT_RESPONSE,
) -> Route:
    """Create a route.

    `route("GET", "/")` never answers, `route("GET", "/", body)` has no fields
    and `route("GET", "/", ["url"], body)` gets the request URL.
    """
    if body is _NO_BODY:
        return Route(method, pattern, (), fields_or_body, defaults)
    return Route(method, pattern, fields_or_body, body, defaults)


get = partial(route, "GET")
post = partial(route, "POST")
put = partial(route, "PUT")
patch = partial(route, "PATCH")
delete = partial(route, "DELETE")
head = partial(route, "HEAD")
options = partial(route, "OPTIONS")
any_ = partial(route, ANY)


def not_found(
    body: Any = "Not Found", headers: dict[str, str] | None = None
) -> Fallback:
    """A member answering every request with a 404.

    Put it last in a group to answer requests nothing else did.
    """
    if headers is None:
        headers = {"Content-Type": DEFAULT_CONTENT_TYPE}
    return Fallback(Response(404, headers, body))
