"""Thread-safe sequential IPv4 address cursor."""

import threading
from collections.abc import Iterator
from ipaddress import IPv4Address

from .models import Direction

ZERO_ADDRESS = IPv4Address("0.0.0.0")
MAX_ADDRESS = IPv4Address("255.255.255.255")


class AddressCursor:
    """Walks the IPv4 space one address at a time.

    The start address is the seed: the first ``advance`` returns its
    neighbour. ``0.0.0.0`` and ``255.255.255.255`` are never handed out;
    reaching either one reports exhaustion and leaves the cursor in place.
    """

    def __init__(self, start: IPv4Address | str):
        self._current = int(IPv4Address(start))
        self._lock = threading.Lock()

    @property
    def current(self) -> IPv4Address:
        with self._lock:
            return IPv4Address(self._current)

    def advance(self, direction: Direction = Direction.FORWARD) -> IPv4Address | None:
        """Move one step and return the new address, or None when exhausted."""
        with self._lock:
            value = self._current + direction.value
            if value <= int(ZERO_ADDRESS) or value >= int(MAX_ADDRESS):
                return None
            self._current = value
            return IPv4Address(value.to_bytes(4, "big"))

    def take(self, count: int, direction: Direction = Direction.FORWARD) -> Iterator[IPv4Address]:
        """Yield up to ``count`` addresses, stopping early at exhaustion."""
        for _ in range(count):
            address = self.advance(direction)
            if address is None:
                return
            yield address
