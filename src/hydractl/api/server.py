"""REST API server for the closure control service.

Authenticates callers with a bearer token and forwards their commands
to the actuator serving the requested environment:

    GET  /{env}/status
    POST /{env}/open          <- {"time": "2024-05-01T12:00:00Z"}
    POST /{env}/close         <- {"time": ...}
    POST /{env}/open-to-end   <- {"time": ...}
    POST /{env}/close-to-end  <- {"time": ...}
    POST /{env}/stop          <- {"time": ...}
    POST /{env}/sim-error
    POST /{env}/sim-no-error

Only the "sim" environment exists. Failures are answered with a
plain-text body; unclassified failures are logged and answered with an
empty 500.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Collection

import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse, PlainTextResponse

from hydractl.actuator.sim import SimulatedActuator
from hydractl.api.dispatch import (
    SIM_ENVIRONMENT,
    authenticate,
    parse_client_time,
    resolve_command,
    resolve_environment,
)
from hydractl.api.errors import ErrorCode, classify, http_status_for
from hydractl.config.settings import ServerConfig, SimulatorConfig
from hydractl.domain.models import StatusSnapshot

logger = logging.getLogger(__name__)

# All standard methods are routed to the handler; only pairs in the command
# table succeed.
ROUTED_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "TRACE", "CONNECT"]


# ---------------------------------------------------------------------------
# Application factory
# ---------------------------------------------------------------------------

def create_app(
    known_tokens: Collection[str],
    actuator: SimulatedActuator | None = None,
    simulator: SimulatorConfig | None = None,
    route_prefix: str = "",
    start_worker: bool = True,
) -> FastAPI:
    """Create the control API application.

    Args:
        known_tokens: Bearer tokens allowed to issue commands.
        actuator: Optional pre-built simulated actuator (for testing).
        simulator: Simulation timing used when no actuator is given.
        route_prefix: Path prefix for the command routes, e.g. "/ctl".
        start_worker: Whether the lifespan starts the tick worker.
    """
    if actuator is None:
        simulator = simulator or SimulatorConfig()
        actuator = SimulatedActuator(
            tick_interval=simulator.tick_interval,
            hold_timeout=simulator.hold_timeout,
            error_message=simulator.error_message,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        sim: SimulatedActuator = app.state.environments[SIM_ENVIRONMENT]
        if start_worker:
            sim.start()
        logger.info("Control server started (%d known token(s))", len(app.state.known_tokens))
        yield
        sim.stop_worker()
        logger.info("Control server stopped")

    app = FastAPI(
        title="hydractl",
        description="Remote control for a motorized closure",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.known_tokens = frozenset(known_tokens)
    app.state.environments = {SIM_ENVIRONMENT: actuator}

    @app.api_route(route_prefix.rstrip("/") + "/{env}/{cmd}", methods=ROUTED_METHODS)
    async def handle_command(env: str, cmd: str, request: Request) -> Response:
        try:
            authenticate(
                request.headers.getlist("authorization"), app.state.known_tokens
            )
            target = resolve_environment(env, app.state.environments)

            logger.info("%s %s", request.method, request.url.path)
            command = resolve_command(request.method, cmd)
            client_time = None
            if command.needs_client_time:
                client_time = parse_client_time(await request.body())

            result = command.invoke(target, client_time)
            return _render(result)
        except Exception as e:
            return _error_response(e)

    return app


def _render(result: StatusSnapshot | str) -> JSONResponse:
    content = result.to_json_dict() if isinstance(result, StatusSnapshot) else result
    response = JSONResponse(content=content)
    logger.info("  %d %s", response.status_code, response.body.decode())
    return response


def _error_response(error: Exception) -> Response:
    code = classify(error)
    status_code = http_status_for(code)
    if code is ErrorCode.UNKNOWN:
        # Detail stays in the log, the caller gets an empty body
        logger.error("unknown err: %s", error, exc_info=error)
        logger.info("  %d", status_code)
        return Response(status_code=status_code)

    logger.info("  %d %s", status_code, str(error))
    return PlainTextResponse(str(error), status_code=status_code)


# ---------------------------------------------------------------------------
# Standalone entry point
# ---------------------------------------------------------------------------

def serve(
    config: ServerConfig,
    known_tokens: Collection[str],
    simulator: SimulatorConfig | None = None,
) -> None:
    """Run the control server with uvicorn, over TLS unless plain_http is set."""
    app = create_app(
        known_tokens=known_tokens,
        simulator=simulator,
        route_prefix=config.route_prefix,
    )
    ssl_kwargs = {}
    if config.plain_http:
        logger.info("Listening plain HTTP on %s:%d", config.host, config.port)
    else:
        if not config.cert_file or not config.key_file:
            raise ValueError("TLS needs both cert_file and key_file (or use plain_http)")
        ssl_kwargs = {"ssl_certfile": config.cert_file, "ssl_keyfile": config.key_file}
        logger.info("Listening HTTPS on %s:%d", config.host, config.port)
    uvicorn.run(app, host=config.host, port=config.port, **ssl_kwargs)
