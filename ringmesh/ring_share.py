"""Multiplexes sibling broadcasts between several components."""

from __future__ import annotations

import enum
import threading
from typing import Callable, Optional

from ringmesh.runtime import panic
from ringmesh.siblings import Siblings

MAX_BROADCAST_LEN = 512
MAX_COMPONENTS = 4

ComponentCallback = Callable[[bytes], None]


class ComponentId(enum.IntEnum):
    """Components that share the sibling ring."""

    SYNC = 0
    ROUTING = 1
    SHARED_STATE = 2


class RingShare:
    """Routes sibling broadcasts to the component named in their first byte."""

    def __init__(self, siblings: Siblings) -> None:
        self._siblings: Optional[Siblings] = siblings
        self._lock = threading.Lock()
        self._components: list[Optional[ComponentCallback]] = [None] * MAX_COMPONENTS
        siblings.register_callback(self._on_sibling_message)

    def _on_sibling_message(self, msg: bytes) -> None:
        if not msg:
            panic("[bug] Got sibling message of length = 0")
        component_id = msg[0]
        if component_id >= MAX_COMPONENTS:
            panic(f"[bug] Received a sibling message for a component out of range ({component_id})")
        callback = self._components[component_id]
        if callback is not None:
            callback(msg[1:])

    def register_component(self, component: int, callback: Optional[ComponentCallback]) -> None:
        """Set (or clear, with ``None``) the receiver for ``component``."""
        if not 0 <= int(component) < MAX_COMPONENTS:
            panic(f"Component id out of range ({int(component)})")
        self._components[int(component)] = callback

    def broadcast(self, component: int, msg: bytes) -> bool:
        """Send ``msg`` to the same component on every sibling."""
        payload = bytes(msg)
        if len(payload) > MAX_BROADCAST_LEN:
            panic(f"rs_broadcast message too long ({len(payload)})")
        if self._siblings is None:
            panic("ring share has been shut down")
        with self._lock:
            return self._siblings.broadcast(bytes([int(component)]) + payload)

    def shutdown(self) -> None:
        """Drop all registrations and detach from the siblings link."""
        if self._siblings is not None:
            self._siblings.register_callback(None)
        self._siblings = None
        self._components = [None] * MAX_COMPONENTS