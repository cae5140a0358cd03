"""Serve a uroute handler with Starlette."""
from asyncio import CancelledError, create_task, shield
from collections.abc import Iterator
from contextlib import contextmanager
from logging import getLogger
from typing import Any, TypeAlias

from attrs import Factory, define
from cattrs import Converter
from orjson import dumps
from starlette.applications import Starlette
from starlette.requests import Request as FrameworkRequest
from starlette.responses import Response as FrameworkResponse
from starlette.routing import Route as FrameworkRoute
from uvicorn import Config, Server

from .responses import converter as default_converter
from .responses import resolve_response
from .status import Response
from .types import Handler, RequestMap

__all__ = ["App", "StarletteApp"]

logger = getLogger(__name__)

METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]


def _make_not_found() -> Response:
    return Response(404, {"Content-Type": "text/plain; charset=utf-8"}, "Not Found")


class _NoSignalsServer(Server):
    """A uvicorn server leaving the process signal handlers alone."""

    @contextmanager
    def capture_signals(self) -> Iterator[None]:
        yield


async def make_request_map(request: FrameworkRequest) -> RequestMap:
    """Build the request map for a Starlette request."""
    return {
        "method": request.method,
        "url": request.url.path,
        "query": dict(request.query_params),
        "headers": dict(request.headers),
        "body": await request.body(),
    }


@define
class StarletteApp:
    handler: Handler
    #: Sent when nothing answered the request.
    not_found_response: Response = Factory(_make_not_found)
    converter: Converter = default_converter

    def _serialize_body(self, body: Any) -> tuple[bytes, str | None]:
        if body is None:
            return b"", None
        if isinstance(body, bytes):
            return body, None
        if isinstance(body, str):
            return body.encode(), None
        return dumps(self.converter.unstructure(body)), "application/json"

    def _framework_return_adapter(self, resp: Response) -> FrameworkResponse:
        content, content_type = self._serialize_body(resp.body)
        headers = {k: str(v) for k, v in resp.headers.items()}
        if content_type is not None and not any(
            k.lower() == "content-type" for k in headers
        ):
            headers["Content-Type"] = content_type
        return FrameworkResponse(content, resp.status, headers)

    def to_framework_app(self) -> Starlette:
        async def adapted(request: FrameworkRequest) -> FrameworkResponse:
            res = await self.handler(await make_request_map(request))
            # Middleware may replace the response with anything.
            resp = await resolve_response(res)
            if resp is None:
                logger.debug("Nothing answered %s %s", request.method, request.url.path)
                resp = self.not_found_response
            return self._framework_return_adapter(resp)

        return Starlette(
            routes=[FrameworkRoute("/{path:path}", adapted, methods=METHODS)]
        )

    async def run(
        self,
        port: int = 8000,
        host: str = "127.0.0.1",
        handle_signals: bool = True,
        log_level: str | int | None = None,
    ) -> None:
        """Serve the handler on uvicorn until cancelled.

        Cancelling the task running this asks uvicorn to finish in-flight
        requests and close its sockets before the cancellation propagates.

        :param handle_signals: Whether uvicorn installs its own SIGINT and
            SIGTERM handlers. Turn this off when serving from a task inside
            a larger program.
        """
        config = Config(
            self.to_framework_app(),
            host=host,
            port=port,
            access_log=False,
            log_level=log_level,
        )
        server = Server(config) if handle_signals else _NoSignalsServer(config)
        serving = create_task(server.serve())
        try:
            await shield(serving)
        except CancelledError:
            logger.debug("Shutting down the server on %s:%s", host, port)
            server.should_exit = True
            await serving
            raise


App: TypeAlias = StarletteApp
