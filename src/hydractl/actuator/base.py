"""Abstract command interface for a closure actuator.

Every actuator environment (today only the simulator) implements this
interface, so the HTTP layer can dispatch commands without knowing
whether a real motor or a simulation sits behind it.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import datetime

from hydractl.domain.models import StatusSnapshot

logger = logging.getLogger(__name__)


class Actuator(ABC):
    """Operations a caller may issue against one actuator instance.

    All operations return a StatusSnapshot taken while the actuator's
    state is locked, never a live reference to that state.

    Example usage::

        actuator.open_to_end(datetime.now(timezone.utc))
        snapshot = actuator.status()
        print(snapshot.position)
    """

    @abstractmethod
    def status(self) -> StatusSnapshot:
        """Return the current status without changing anything."""
        ...

    @abstractmethod
    def open(self, client_time: datetime) -> StatusSnapshot:
        """Start opening in hold mode.

        Hold mode expires unless the caller repeats the command before
        the hold timeout elapses. A no-op when already fully open.

        Args:
            client_time: Timestamp supplied by the caller with the command.
        """
        ...

    @abstractmethod
    def close(self, client_time: datetime) -> StatusSnapshot:
        """Start closing in hold mode. A no-op when already fully closed."""
        ...

    @abstractmethod
    def open_to_end(self, client_time: datetime) -> StatusSnapshot:
        """Open until the end position is reached, without expiry."""
        ...

    @abstractmethod
    def close_to_end(self, client_time: datetime) -> StatusSnapshot:
        """Close until the end position is reached, without expiry."""
        ...

    @abstractmethod
    def stop(self, client_time: datetime) -> StatusSnapshot:
        """Stop driving, whatever the current mode."""
        ...

    @abstractmethod
    def set_simulated_error(self, active: bool) -> None:
        """Enter or leave the simulated error state.

        Entering the error state halts any driving immediately. Leaving
        it only clears the error; driving is not resumed.
        """
        ...
