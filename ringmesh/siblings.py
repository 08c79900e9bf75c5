"""Broadcast link between the devices of one node."""

from __future__ import annotations

from typing import Callable, Optional

SiblingCallback = Callable[[bytes], None]
Transport = Callable[[bytes], bool]


class Siblings:
    """Sends broadcasts to sibling devices and hands incoming ones to a callback."""

    def __init__(self, transport: Transport) -> None:
        self._transport = transport
        self._callback: Optional[SiblingCallback] = None

    def register_callback(self, callback: Optional[SiblingCallback]) -> None:
        """Set the function called for every broadcast received."""
        self._callback = callback

    def broadcast(self, msg: bytes) -> bool:
        """Send ``msg`` to all siblings; return whether it succeeded."""
        return bool(self._transport(bytes(msg)))

    def deliver(self, msg: bytes) -> None:
        """Hand a message received from a sibling to the registered callback."""
        if self._callback is not None:
            self._callback(bytes(msg))