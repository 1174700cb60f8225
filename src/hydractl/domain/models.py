"""Core domain models for hydractl.

The status and position vocabularies are closed enumerations so an
actuator can never report a state outside of them. StatusSnapshot is
the only view of the actuator that ever leaves the engine.
"""

from __future__ import annotations

import enum

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class DrivingMode(enum.Enum):
    """What the actuator motor is currently being asked to do."""

    NONE = "none"
    OPEN_HOLD = "open_hold"  # Expires unless refreshed by the caller
    OPEN_TO_END = "open_to_end"
    CLOSE_HOLD = "close_hold"  # Expires unless refreshed by the caller
    CLOSE_TO_END = "close_to_end"

    @property
    def is_hold(self) -> bool:
        return self in (DrivingMode.OPEN_HOLD, DrivingMode.CLOSE_HOLD)

    @property
    def is_opening(self) -> bool:
        return self in (DrivingMode.OPEN_HOLD, DrivingMode.OPEN_TO_END)

    @property
    def is_closing(self) -> bool:
        return self in (DrivingMode.CLOSE_HOLD, DrivingMode.CLOSE_TO_END)


class ActuatorStatus(str, enum.Enum):
    """Coarse activity reported to callers."""

    IDLE = "idle"
    DRIVING = "driving"
    ERROR = "error"


class PositionState(str, enum.Enum):
    """Coarse position reported to callers."""

    CLOSED = "closed"
    OPEN = "open"
    INBETWEEN = "inbetween"


# ---------------------------------------------------------------------------
# Snapshot
# ---------------------------------------------------------------------------


class StatusSnapshot(BaseModel):
    """Immutable view of an actuator at one point in time.

    Serialized with ``error`` omitted when no error is active.
    """

    model_config = ConfigDict(frozen=True)

    status: ActuatorStatus = Field(description="Error wins over driving/idle")
    position: PositionState = Field(description="Coarse position of the closure")
    error: str | None = Field(default=None, description="Simulated error message, if any")

    def to_json_dict(self) -> dict[str, str]:
        """Return the wire representation with empty fields left out."""
        return self.model_dump(mode="json", exclude_none=True)
