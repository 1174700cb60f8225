"""Request decoding and command dispatch for the control API.

Everything here is independent of the web framework: authentication
works on raw header values, payload decoding on raw body bytes, and
command lookup is a table keyed by (HTTP method, command name). The
FastAPI server only glues these together.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Collection, Mapping

from pydantic import BaseModel, ValidationError

from hydractl.actuator.base import Actuator
from hydractl.api.errors import ControlError, ErrorCode

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "

SIM_ENVIRONMENT = "sim"

SIM_ERROR_CONFIRMATION = "ok, configured error"
SIM_NO_ERROR_CONFIRMATION = "ok, configured no error"

_RFC3339_RE = re.compile(
    r"(?P<year>[0-9]{4})-(?P<month>[0-9]{2})-(?P<day>[0-9]{2})"
    r"T(?P<hour>[0-9]{2}):(?P<minute>[0-9]{2}):(?P<second>[0-9]{2})"
    r"(?:\.(?P<fraction>[0-9]+))?"
    r"(?P<offset>Z|[+-][0-9]{2}:[0-9]{2})"
)


class ClientTimeRequest(BaseModel):
    """Body of every command that carries the caller's clock."""

    time: str = ""


# ---------------------------------------------------------------------------
# Authentication / environment
# ---------------------------------------------------------------------------


def authenticate(authorization: list[str], known_tokens: Collection[str]) -> str:
    """Check the Authorization header values against the known tokens.

    Args:
        authorization: Every value of the Authorization header.
        known_tokens: Tokens that are allowed to issue commands.

    Returns:
        The accepted bearer token.

    Raises:
        ControlError: UNAUTHENTICATED when the header is missing,
            repeated or not a bearer credential; PERMISSION_DENIED when
            the token is not known.
    """
    if len(authorization) != 1:
        raise ControlError(
            ErrorCode.UNAUTHENTICATED, "need Authorization header (exactly 1)"
        )

    value = authorization[0]
    if not value.startswith(BEARER_PREFIX):
        raise ControlError(
            ErrorCode.UNAUTHENTICATED, "need Authorization: Bearer ... header"
        )

    token = value[len(BEARER_PREFIX):]
    if token not in known_tokens:
        raise ControlError(ErrorCode.PERMISSION_DENIED, "auth failed")
    return token


def resolve_environment(env: str, environments: Mapping[str, Actuator]) -> Actuator:
    """Return the actuator serving ``env``."""
    actuator = environments.get(env)
    if actuator is None:
        raise ControlError(
            ErrorCode.UNIMPLEMENTED,
            "only simulated environment is available at the moment",
        )
    return actuator


# ---------------------------------------------------------------------------
# Payload decoding
# ---------------------------------------------------------------------------


def parse_rfc3339(value: str) -> datetime:
    """Parse a strict RFC 3339 timestamp into an aware datetime.

    Accepts ``YYYY-MM-DDTHH:MM:SS`` with an optional fraction of a
    second and either ``Z`` or a ``+hh:mm``/``-hh:mm`` offset.

    Raises:
        ValueError: If the value does not match or is out of range.
    """
    m = _RFC3339_RE.fullmatch(value)
    if m is None:
        raise ValueError("expected YYYY-MM-DDTHH:MM:SS[.frac](Z|+hh:mm)")

    offset = m.group("offset")
    if offset == "Z":
        tz = timezone.utc
    else:
        sign = -1 if offset[0] == "-" else 1
        hours, minutes = int(offset[1:3]), int(offset[4:6])
        if hours > 23 or minutes > 59:
            raise ValueError(f"offset {offset} out of range")
        tz = timezone(sign * timedelta(hours=hours, minutes=minutes))

    fraction = (m.group("fraction") or "").ljust(6, "0")[:6]
    return datetime(
        int(m.group("year")),
        int(m.group("month")),
        int(m.group("day")),
        int(m.group("hour")),
        int(m.group("minute")),
        int(m.group("second")),
        int(fraction),
        tzinfo=tz,
    )


def parse_client_time(body: bytes) -> datetime:
    """Decode ``{"time": "<RFC3339>"}`` from a request body.

    Raises:
        ControlError: INVALID_ARGUMENT for malformed JSON or time.
    """
    try:
        request = ClientTimeRequest.model_validate_json(body)
    except ValidationError as e:
        raise ControlError(
            ErrorCode.INVALID_ARGUMENT, f"can not parse request as JSON: {e}"
        ) from e

    try:
        return parse_rfc3339(request.time)
    except ValueError as e:
        raise ControlError(
            ErrorCode.INVALID_ARGUMENT,
            f"can not parse request-given time '{request.time}' as RFC3339: {e}",
        ) from e


# ---------------------------------------------------------------------------
# Command table
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Command:
    """One entry of the dispatch table."""

    name: str
    needs_client_time: bool
    invoke: Callable[[Actuator, datetime | None], Any]


def _sim_error(actuator: Actuator, _: datetime | None) -> str:
    actuator.set_simulated_error(True)
    return SIM_ERROR_CONFIRMATION


def _sim_no_error(actuator: Actuator, _: datetime | None) -> str:
    actuator.set_simulated_error(False)
    return SIM_NO_ERROR_CONFIRMATION


COMMANDS: dict[tuple[str, str], Command] = {
    ("GET", "status"): Command("status", False, lambda a, _: a.status()),
    ("POST", "open"): Command("open", True, lambda a, t: a.open(t)),
    ("POST", "close"): Command("close", True, lambda a, t: a.close(t)),
    ("POST", "open-to-end"): Command("open-to-end", True, lambda a, t: a.open_to_end(t)),
    ("POST", "close-to-end"): Command("close-to-end", True, lambda a, t: a.close_to_end(t)),
    ("POST", "stop"): Command("stop", True, lambda a, t: a.stop(t)),
    ("POST", "sim-error"): Command("sim-error", False, _sim_error),
    ("POST", "sim-no-error"): Command("sim-no-error", False, _sim_no_error),
}


def resolve_command(method: str, cmd: str) -> Command:
    """Look up the command for an HTTP method and command name."""
    method = method.upper()
    command = COMMANDS.get((method, cmd))
    if command is None:
        raise ControlError(ErrorCode.UNIMPLEMENTED, f"unknown command {method} {cmd}")
    return command
