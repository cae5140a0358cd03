from .base import (
    Route,
    RouteDefinitionError,
    RouteHandler,
    Routes,
    Wrapped,
    any_,
    define,
    delete,
    get,
    head,
    not_found,
    options,
    patch,
    post,
    put,
    route,
    wrap,
)
from .path import ANY
from .responses import resolve_response
from .status import Headers, Response, ResponseDefaults, ResponseException
from .types import Handler, Method, Middleware, RequestMap

__all__ = [
    "ANY",
    "Handler",
    "Headers",
    "Method",
    "Middleware",
    "RequestMap",
    "Response",
    "ResponseDefaults",
    "ResponseException",
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
    "redirect",
    "resolve_response",
    "route",
    "wrap",
]


def redirect(location: str, status: int = 302, headers: Headers = {}) -> Response:
    return Response(status, {**headers, "Location": location}, None)
