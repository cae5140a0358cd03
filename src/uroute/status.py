from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, TypeAlias

from attrs import Factory, define, frozen

Headers: TypeAlias = Mapping[str, str]

DEFAULT_CONTENT_TYPE = "text/html; charset=utf-8"


@frozen
class ResponseDefaults:
    """What a route gets when it only produces a body."""

    status: int = 200
    headers: Headers = MappingProxyType({"Content-Type": DEFAULT_CONTENT_TYPE})

    def make_response(self, body: Any) -> "Response":
        return Response(self.status, dict(self.headers), body)


DEFAULT_RESPONSE = ResponseDefaults()


@define(order=False)
class Response:
    """The response map.

    Mutable, so middleware can adjust it on the way out.
    """

    status: int = 200
    headers: dict[str, Any] = Factory(dict)
    body: Any = None


class ResponseException(Exception):
    """An exception carrying a response.

    Routing propagates it like any other failure; install
    `uroute.middleware.handle_response_exceptions` to answer with the
    carried response instead.
    """

    def __init__(self, response: Response):
        super().__init__(response)
        self.response = response


def is_response_map(value: Any) -> bool:
    """Does this mapping look like a response map?"""
    return (
        isinstance(value, Mapping)
        and isinstance(value.get("status"), int)
        and isinstance(value.get("headers"), Mapping)
    )
