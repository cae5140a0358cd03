from collections import ChainMap
from collections.abc import Mapping
from typing import Any

from .types import Fields, RequestMap

#: Asking for this field gets the whole request map.
REQUEST_FIELD = "request"


def resolve_field(lookup: Mapping[str, Any], request: RequestMap, name: str) -> Any:
    if name in lookup:
        return lookup[name]
    if name == REQUEST_FIELD:
        return request
    return None


def resolve_fields(
    request: RequestMap, fields: Fields, params: dict[str, str] | None = None
) -> list[Any]:
    """Produce the positional arguments for a route body.

    Path parameters captured for this attempt shadow request fields of the
    same name, without being written into the request map. Missing fields
    resolve to `None`.
    """
    lookup: Mapping[str, Any] = ChainMap(params, request) if params else request
    return [resolve_field(lookup, request, name) for name in fields]
