"""Domain models for hydractl.

Closed enumerations for driving mode, status and position, plus the
immutable StatusSnapshot returned by every actuator operation.
"""

from hydractl.domain.models import (
    ActuatorStatus,
    DrivingMode,
    PositionState,
    StatusSnapshot,
)

__all__ = [
    "ActuatorStatus",
    "DrivingMode",
    "PositionState",
    "StatusSnapshot",
]
