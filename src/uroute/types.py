from collections.abc import Awaitable, Callable, MutableMapping, Sequence
from typing import Any, Literal, TypeAlias

#: The request map: `method`, `url` and whatever else the caller puts in.
RequestMap: TypeAlias = MutableMapping[str, Any]

#: A handler takes a request map and returns an awaitable result.
Handler: TypeAlias = Callable[[RequestMap], Awaitable[Any]]

#: A middleware turns a handler into another handler.
Middleware: TypeAlias = Callable[[Handler], Handler]

#: The HTTP request method. `*` matches any method.
Method: TypeAlias = Literal[
    "GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS", "*"
]

Fields: TypeAlias = Sequence[str]
