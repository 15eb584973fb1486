"""Tests for the request logging middleware."""

import logging

import pytest
from fastapi import FastAPI, HTTPException
from httpx import ASGITransport, AsyncClient

from src.bk_gateway.middleware.request_log import RequestLogMiddleware, _level_for


def _app() -> FastAPI:
    app = FastAPI()
    app.add_middleware(RequestLogMiddleware)

    @app.get("/ok")
    async def ok() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/missing")
    async def missing() -> None:
        raise HTTPException(status_code=404)

    return app


@pytest.mark.parametrize(
    ("status", "level"),
    [(200, logging.INFO), (302, logging.INFO), (404, logging.WARNING), (503, logging.ERROR)],
)
def test_level_follows_status(status: int, level: int) -> None:
    assert _level_for(status) == level


async def test_generates_and_echoes_request_id(caplog: pytest.LogCaptureFixture) -> None:
    transport = ASGITransport(app=_app())
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        with caplog.at_level(logging.INFO, logger="bk.request"):
            resp = await client.get("/ok")
    request_id = resp.headers["X-Request-ID"]
    assert request_id.startswith("req_")
    assert "[GET] /ok → 200" in caplog.text
    assert request_id in caplog.text


async def test_client_errors_logged_as_warning(caplog: pytest.LogCaptureFixture) -> None:
    transport = ASGITransport(app=_app())
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        with caplog.at_level(logging.INFO, logger="bk.request"):
            await client.get("/missing", headers={"X-Request-ID": "req_given"})
    record = next(r for r in caplog.records if r.name == "bk.request")
    assert record.levelno == logging.WARNING
    assert "req_given" in record.getMessage()
