from asyncio import CancelledError, create_task, sleep
from collections.abc import AsyncIterator
from contextlib import suppress

import pytest
from httpx import ASGITransport, AsyncClient, ConnectError

from uroute.starlette import App

from .apps import make_app


@pytest.fixture
async def client() -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=App(make_app()).to_framework_app())
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
async def server(unused_tcp_port: int) -> AsyncIterator[int]:
    """Serve the test app on uvicorn, yielding the port once it's up."""
    t = create_task(App(make_app()).run(unused_tcp_port, handle_signals=False))
    async with AsyncClient() as client:
        for _ in range(100):
            with suppress(ConnectError):
                await client.get(f"http://127.0.0.1:{unused_tcp_port}/")
                break
            await sleep(0.05)
    yield unused_tcp_port
    t.cancel()
    with suppress(CancelledError):
        await t
