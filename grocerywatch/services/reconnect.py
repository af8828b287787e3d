"""Reconnect policy for clients of the change notification stream."""

import enum
import logging
from dataclasses import dataclass

from grocerywatch.core.config import Settings

LOGGER: logging.Logger = logging.getLogger(__name__)


class ConnectionState(str, enum.Enum):
    """Connection lifecycle states."""

    CONNECTING = "connecting"
    OPEN = "open"
    BACKOFF = "backoff"
    CLOSED = "closed"


@dataclass(frozen=True)
class ReconnectPolicy:
    """Backoff parameters."""

    interval_seconds: float = 5.0
    multiplier: float = 2.0
    max_interval_seconds: float = 60.0
    max_attempts: int = 5

    @classmethod
    def from_settings(cls, settings: Settings) -> "ReconnectPolicy":
        """Build the policy from application settings."""
        return cls(
            interval_seconds=settings.reconnect_interval_seconds,
            multiplier=settings.reconnect_backoff_multiplier,
            max_interval_seconds=settings.reconnect_max_interval_seconds,
            max_attempts=settings.reconnect_max_attempts,
        )

    def delay(self, attempt: int) -> float:
        """Delay before the given (1-based) reconnect attempt."""
        return min(
            self.interval_seconds * self.multiplier ** (attempt - 1),
            self.max_interval_seconds,
        )


class ReconnectStateMachine:
    """Track a single connection and decide when to retry.

    The machine performs no I/O: the caller opens sockets and arms timers,
    and reports back through the ``on_*`` methods.

    States and transitions::

        closed/backoff --connect()--------> connecting
        connecting ----on_open()----------> open
        connecting/open --on_close/error--> backoff | closed
        backoff -------on_timer_expired()-> connecting
        any -----------disconnect()-------> closed
    """

    policy: ReconnectPolicy
    state: ConnectionState
    attempts: int
    next_delay: float | None
    _manual_close: bool

    def __init__(self, policy: ReconnectPolicy | None = None) -> None:
        """Initialize ReconnectStateMachine.

        Args:
            policy (ReconnectPolicy | None): Backoff parameters.
        """
        self.policy = policy or ReconnectPolicy()
        self.state = ConnectionState.CLOSED
        self.attempts = 0
        self.next_delay = None
        self._manual_close = False

    @property
    def is_connected(self) -> bool:
        """Whether the connection is currently open."""
        return self.state == ConnectionState.OPEN

    def connect(self) -> bool:
        """Request a connection.

        Returns:
            bool: True if the caller should open a socket now; False when
                one is already connecting or open.
        """
        if self.state in (ConnectionState.CONNECTING, ConnectionState.OPEN):
            return False
        self._manual_close = False
        self.next_delay = None
        self.state = ConnectionState.CONNECTING
        return True

    def on_open(self) -> None:
        """Record a successful open; the attempt counter resets."""
        if self.state != ConnectionState.CONNECTING:
            return
        self.state = ConnectionState.OPEN
        self.attempts = 0
        self.next_delay = None
        LOGGER.info("Notification stream connected")

    def on_close(self) -> float | None:
        """Record that the connection closed.

        Returns:
            float | None: Seconds to wait before ``on_timer_expired``, or
                None when no retry will happen.
        """
        return self._lost("closed")

    def on_error(self) -> float | None:
        """Record a connection error; same outcome as ``on_close``."""
        return self._lost("errored")

    def on_timer_expired(self) -> bool:
        """The backoff timer fired.

        Returns:
            bool: True if the caller should open a socket now.
        """
        if self.state != ConnectionState.BACKOFF:
            return False
        self.state = ConnectionState.CONNECTING
        self.next_delay = None
        return True

    def disconnect(self) -> None:
        """Close deliberately; no reconnect is scheduled.

        The retry budget starts over with the next ``connect``.
        """
        self._manual_close = True
        self.state = ConnectionState.CLOSED
        self.attempts = 0
        self.next_delay = None

    def _lost(self, how: str) -> float | None:
        if self._manual_close or self.state not in (
            ConnectionState.CONNECTING,
            ConnectionState.OPEN,
        ):
            return None

        if self.attempts >= self.policy.max_attempts:
            LOGGER.warning(
                "Notification stream %s; giving up after %d attempts",
                how,
                self.attempts,
            )
            self.state = ConnectionState.CLOSED
            self.next_delay = None
            return None

        self.attempts += 1
        self.next_delay = self.policy.delay(self.attempts)
        self.state = ConnectionState.BACKOFF
        LOGGER.info(
            "Notification stream %s; reconnect attempt %d/%d in %.1fs",
            how,
            self.attempts,
            self.policy.max_attempts,
            self.next_delay,
        )
        return self.next_delay

