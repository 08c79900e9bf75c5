"""Keeps component data identical on every device of a node."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Callable

from ringmesh.config import Orientation
from ringmesh.ring_share import ComponentId, RingShare
from ringmesh.runtime import panic


@dataclass
class SharedData:
    """Watched data: its fixed byte length, how to read and write it, and its lock."""

    length: int
    read: Callable[[], bytes]
    write: Callable[[bytes], None]
    lock: Any = field(default_factory=threading.Lock)


class SharedState:
    """Broadcasts watched data to siblings and applies their updates locally."""

    def __init__(self, sync: Any, ring_share: RingShare, orientation: int) -> None:
        self.sync = sync
        self.ring_share = ring_share
        self.orientation = Orientation(orientation)
        self._broadcast_lock = threading.Lock()
        self._data: dict[int, SharedData] = {}
        ring_share.register_component(ComponentId.SHARED_STATE, self._on_sibling_message)

    def _on_sibling_message(self, msg: bytes) -> None:
        if not msg:
            panic("[shared_state] Empty message")
        component = msg[0]
        if component >= len(ComponentId):
            panic(f"[shared_state] Invalid component id {component}")
        data = self._data.get(component)
        if data is None:
            panic(f"[shared_state] Component {component} has no data to refresh")
        if data.length != len(msg) - 1:
            panic(f"[shared_state] Data length does not match ({data.length} != {len(msg) - 1})")
        with data.lock:
            data.write(bytes(msg[1:]))

    def watch(self, component: int, data: SharedData) -> None:
        """Register the data that ``component`` keeps in sync across devices."""
        self._data[int(ComponentId(component))] = data

    def refresh(self, component: int) -> None:
        """Send the current data of ``component`` to every sibling.

        Must be called from inside the component's critical section.
        """
        if not self.sync.is_inside_critical_section(component):
            panic("[shared_state] Not inside critical section -- aborting")
        data = self._data.get(int(component))
        if data is None:
            panic(f"[shared_state] Component {int(component)} has no data to refresh")
        with data.lock, self._broadcast_lock:
            payload = bytes(data.read())
            if len(payload) != data.length:
                panic(f"[shared_state] Data length does not match ({data.length} != {len(payload)})")
            self.ring_share.broadcast(ComponentId.SHARED_STATE, bytes([int(component)]) + payload)

    def destroy(self) -> None:
        """Stop receiving updates from siblings."""
        self.ring_share.register_component(ComponentId.SHARED_STATE, None)