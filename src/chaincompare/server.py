"""HTTP API: live comparison stream plus request/response variants."""

from __future__ import annotations

import json
from typing import Any

from fastapi import APIRouter, FastAPI, Request, Response
from fastapi.responses import JSONResponse, StreamingResponse
from loguru import logger

from chaincompare import __version__
from chaincompare.config import Settings, get_settings
from chaincompare.emitter import LoggingSink
from chaincompare.errors import InvalidNetworkError, describe_error
from chaincompare.estimate import estimate_all
from chaincompare.multiplexer import StreamMultiplexer, collect_outcomes
from chaincompare.networks import ALL_SELECTOR, RESULT_ORDER, Network
from chaincompare.probes.factory import ProbeFactory, build_probes

STREAM_HEADERS = {"Cache-Control": "no-cache", "Connection": "keep-alive"}
USAGE_MESSAGE = "Use POST to test transactions"
INVALID_NETWORK = "Invalid network specified"
INVALID_JSON = "Invalid JSON in request body."

router = APIRouter(prefix="/api")


class BadRequest(Exception):
    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


def _error(message: str, status_code: int, details: str | None = None) -> JSONResponse:
    body: dict[str, Any] = {"error": message}
    if details is not None:
        body["details"] = details
    return JSONResponse(body, status_code=status_code)


async def _read_selector(request: Request) -> str:
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise BadRequest(INVALID_JSON) from exc
    if not isinstance(body, dict) or not isinstance(body.get("network"), str):
        raise BadRequest(INVALID_NETWORK)
    return body["network"].strip().lower()


def _resolve(selector: str) -> tuple[Network, ...]:
    if selector == ALL_SELECTOR:
        return RESULT_ORDER
    network = Network.from_selector(selector)
    if network is None:
        raise InvalidNetworkError(selector)
    return (network,)


@router.post("/test-transaction-stream")
async def test_transaction_stream(request: Request) -> Response:
    """Run all probes and relay their narration as an event stream."""
    settings: Settings = request.app.state.settings
    factory: ProbeFactory = request.app.state.probe_factory
    try:
        probes = factory(settings, RESULT_ORDER)
    except Exception as exc:
        logger.opt(exception=exc).error("session.setup.error")
        return _error("Failed to start test session", 500, describe_error(exc))

    multiplexer = StreamMultiplexer(probes)
    logger.bind(session=multiplexer.session_id).info(
        "session.requested client={}", request.client.host if request.client else "-"
    )
    return StreamingResponse(
        multiplexer.relay(request.is_disconnected),
        media_type="text/event-stream",
        headers=STREAM_HEADERS,
    )


@router.get("/test-transaction-stream")
async def describe_transaction_stream() -> dict[str, Any]:
    return {"message": USAGE_MESSAGE, "availableNetworks": [ALL_SELECTOR]}


@router.post("/test-transaction")
async def test_transaction(request: Request) -> JSONResponse:
    """Run one or all probes and answer with their outcomes in one payload."""
    try:
        selector = await _read_selector(request)
        networks = _resolve(selector)
    except BadRequest as exc:
        return _error(exc.message, 400)
    except InvalidNetworkError:
        return _error(INVALID_NETWORK, 400)

    settings: Settings = request.app.state.settings
    factory: ProbeFactory = request.app.state.probe_factory
    try:
        outcomes = await collect_outcomes(factory(settings, networks), LoggingSink())
    except Exception as exc:
        logger.opt(exception=exc).error("transaction.test.error selector={}", selector)
        return _error("Failed to execute test transaction", 500, describe_error(exc))

    if selector == ALL_SELECTOR:
        return JSONResponse({"success": True, "results": [outcome.to_wire() for outcome in outcomes]})
    return JSONResponse({"success": True, "result": outcomes[0].to_wire()})


@router.get("/test-transaction")
async def describe_transaction() -> dict[str, Any]:
    return {
        "message": USAGE_MESSAGE,
        "availableNetworks": [Network.XRPL.selector, Network.ETHEREUM.selector, Network.TRON.selector, ALL_SELECTOR],
    }


@router.post("/test-transaction-simple")
async def test_transaction_simple(request: Request) -> JSONResponse:
    """Estimate every network from one round trip each, without transacting."""
    try:
        selector = await _read_selector(request)
    except BadRequest as exc:
        return _error(exc.message, 400)
    if selector != ALL_SELECTOR:
        return _error(INVALID_NETWORK, 400)

    try:
        outcomes = await estimate_all(request.app.state.settings)
    except Exception as exc:
        logger.opt(exception=exc).error("transaction.estimate.error")
        return _error("Failed to execute test", 500, describe_error(exc))
    return JSONResponse({"success": True, "results": [outcome.to_wire() for outcome in outcomes]})


@router.get("/test-transaction-simple")
async def describe_transaction_simple() -> dict[str, Any]:
    return {"message": USAGE_MESSAGE, "availableNetworks": [ALL_SELECTOR]}


def create_app(settings: Settings | None = None, probe_factory: ProbeFactory | None = None) -> FastAPI:
    """Build the application; tests pass their own probe factory."""
    app = FastAPI(title="chaincompare", version=__version__)
    app.state.settings = settings or get_settings()
    app.state.probe_factory = probe_factory or build_probes
    app.include_router(router)

    @app.get("/")
    async def root() -> dict[str, Any]:
        return {"name": "chaincompare", "version": __version__, "stream": "/api/test-transaction-stream"}

    return app
