"""Tests for serving handlers on uvicorn."""
from asyncio import CancelledError, create_task, sleep

import pytest
from httpx import AsyncClient, ConnectError

from uroute import define, get
from uroute.starlette import App


async def test_run(server: int):
    async with AsyncClient() as client:
        resp = await client.get(f"http://127.0.0.1:{server}/")
        assert resp.status_code == 200
        assert resp.text == "Hello, world"

        resp = await client.get(f"http://127.0.0.1:{server}/path/15")
        assert resp.text == "16"

        resp = await client.get(f"http://127.0.0.1:{server}/missing")
        assert resp.status_code == 404


async def test_cancelling_stops_the_server(unused_tcp_port: int):
    url = f"http://127.0.0.1:{unused_tcp_port}/"
    t = create_task(
        App(define([get("/", "up")])).run(unused_tcp_port, handle_signals=False)
    )
    async with AsyncClient() as client:
        for _ in range(100):
            try:
                resp = await client.get(url)
                break
            except ConnectError:
                await sleep(0.05)
        assert resp.text == "up"

        t.cancel()
        with pytest.raises(CancelledError):
            await t

    async with AsyncClient() as client:
        with pytest.raises(ConnectError):
            await client.get(url)
