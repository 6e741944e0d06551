"""Location source protocol.

Defines the interface that every geolocation backend must follow.
"""

from collections.abc import Callable
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from .errors import LocationUnavailable
    from .models import PositionFix

# Defaults used by the mobile client
LOCATION_UPDATE_INTERVAL_MS = 5000
FASTEST_LOCATION_UPDATE_INTERVAL_MS = 2000

FixCallback = Callable[["PositionFix"], None]
ErrorCallback = Callable[["LocationUnavailable"], None]


class LocationSource(Protocol):
    """Interface for a stream of position fixes.

    Implementations deliver fixes asynchronously by calling on_fix from
    their own thread or event loop. Delivery cadence and deduplication are
    the source's responsibility.
    """

    def subscribe(
        self,
        interval_ms: int,
        fastest_interval_ms: int,
        on_fix: FixCallback,
        on_error: ErrorCallback,
    ) -> None:
        """Start delivering fixes.

        Args:
            interval_ms: Desired interval between fixes
            fastest_interval_ms: Fastest interval the consumer can handle
            on_fix: Called once per delivered fix
            on_error: Called when fixes become unavailable

        Raises:
            LocationUnavailable: If the subscription cannot be made
        """
        ...

    def unsubscribe(self) -> None:
        """Stop delivering fixes. Safe to call when not subscribed."""
        ...


__all__ = [
    "ErrorCallback",
    "FASTEST_LOCATION_UPDATE_INTERVAL_MS",
    "FixCallback",
    "LOCATION_UPDATE_INTERVAL_MS",
    "LocationSource",
]
