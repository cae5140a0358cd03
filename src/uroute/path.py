"""For path matching."""
from re import compile

ANY = "*"

_url_suffix_pattern = compile(r"[?#].*$")


def split_path(path: str) -> list[str]:
    """Split a path into its non-empty segments.

    The query string and fragment, if any, are dropped first.
    """
    return [s for s in _url_suffix_pattern.sub("", path).split("/") if s]


def join_path(prefix: str, path: str) -> str:
    return "/" + "/".join(split_path(prefix) + split_path(path))


def method_matches(route_method: str, request_method: str | None) -> bool:
    if route_method == ANY:
        return True
    return (
        isinstance(request_method, str)
        and route_method.upper() == request_method.upper()
    )


def match_path(
    route_method: str,
    route_pattern: str,
    request_method: str | None,
    request_path: str | None,
    prefix: str = "",
) -> dict[str, str] | None:
    """Match a request against `prefix + route_pattern`.

    :return: The captured path parameters, or `None` if the request doesn't match.
    """
    if not isinstance(request_path, str) or not method_matches(
        route_method, request_method
    ):
        return None
    pattern = split_path(prefix) + split_path(route_pattern)
    segments = split_path(request_path)
    if len(pattern) != len(segments):
        return None
    params: dict[str, str] = {}
    for expected, actual in zip(pattern, segments):
        if expected[:1] == ":":
            params[expected[1:]] = actual
        elif expected != actual:
            return None
    return params
