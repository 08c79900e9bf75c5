"""Distributed lock over the sibling ring using the token ring algorithm.

Each component has its own token. When the token reaches a device, the
component's critical-section callback runs there and the token moves on to
the next device around the ring.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Callable, Optional, Protocol, Union

from ringmesh.config import Orientation, next_orientation
from ringmesh.ring_share import ComponentId, RingShare
from ringmesh.runtime import LogLevel, log, panic

_TAG = "sync"

SYNC_MESSAGE_SIZE = 3

CriticalSectionCallback = Callable[[], None]


class SyncMessageKind(enum.IntEnum):
    """Messages exchanged by the sync component."""

    TOKEN_REQUEST = 1
    TOKEN_GRANT = 2


@dataclass(frozen=True)
class TokenGrant:
    """Hands the token of ``cs_id`` to the device at ``destination``."""

    destination: int
    cs_id: int


@dataclass(frozen=True)
class TokenRequest:
    """Asks the leader to put the token of ``cs_id`` on the ring."""

    cs_id: int


def _encode(message: Union[TokenGrant, TokenRequest]) -> bytes:
    if isinstance(message, TokenGrant):
        return bytes([SyncMessageKind.TOKEN_GRANT, int(message.destination), int(message.cs_id)])
    return bytes([SyncMessageKind.TOKEN_REQUEST, int(message.cs_id), 0])


class SyncStrategy(Protocol):
    """Behaviour of a device in the token ring (leader or follower)."""

    def on_token_grant(self, sync: "Sync", grant: TokenGrant) -> None: ...

    def request_critical_section(self, sync: "Sync", cs_id: int) -> None: ...


class Follower:
    """Token ring behaviour of every device except the leader."""

    def on_token_grant(self, sync: "Sync", grant: TokenGrant) -> None:
        """Run the critical section if the token is ours, then pass it on."""
        if grant.destination != sync.orientation:
            return
        sync._run_critical_section(grant.cs_id)
        forward = TokenGrant(destination=next_orientation(sync.orientation), cs_id=grant.cs_id)
        sync.ring_share.broadcast(ComponentId.SYNC, _encode(forward))

    def request_critical_section(self, sync: "Sync", cs_id: int) -> None:
        """Ask the leader for the token of ``cs_id``."""
        sync.ring_share.broadcast(ComponentId.SYNC, _encode(TokenRequest(cs_id=int(cs_id))))


@dataclass
class _CriticalSection:
    callback: CriticalSectionCallback
    is_inside: bool = False


class Sync:
    """Per-component critical sections shared by all devices of a node."""

    def __init__(
        self,
        ring_share: RingShare,
        orientation: int,
        strategy: Optional[SyncStrategy] = None,
    ) -> None:
        self.orientation = Orientation(orientation)
        self.is_leader = self.orientation == Orientation.CENTER
        if strategy is None:
            if self.is_leader:
                raise ValueError("the leader device needs an explicit strategy")
            strategy = Follower()
        self.ring_share = ring_share
        self.strategy = strategy
        self._critical_sections: dict[int, _CriticalSection] = {}
        ring_share.register_component(ComponentId.SYNC, self._on_sibling_message)

    def _on_sibling_message(self, msg: bytes) -> None:
        if len(msg) != SYNC_MESSAGE_SIZE:
            panic(f"Invalid sibling message received: len = {len(msg)}")
        kind, first, second = msg
        if kind == SyncMessageKind.TOKEN_GRANT:
            self.strategy.on_token_grant(self, TokenGrant(destination=first, cs_id=second))
        elif kind == SyncMessageKind.TOKEN_REQUEST:
            handler = getattr(self.strategy, "on_token_request", None)
            if handler is not None:
                handler(self, TokenRequest(cs_id=first))
        else:
            log(LogLevel.WARNING, _TAG, f"Unknown message id: {kind}")

    def _run_critical_section(self, cs_id: int) -> bool:
        """Run the callback of ``cs_id`` marked as inside; return whether one ran."""
        section = self._critical_sections.get(int(cs_id))
        if section is None:
            return False
        section.is_inside = True
        try:
            section.callback()
        finally:
            section.is_inside = False
        return True

    def register_critical_section(self, cs_id: int, callback: CriticalSectionCallback) -> None:
        """Set the function run whenever this device holds the token of ``cs_id``."""
        self._critical_sections[int(ComponentId(cs_id))] = _CriticalSection(callback)

    def request_critical_section(self, cs_id: int) -> None:
        """Ask for the token of ``cs_id`` to be sent around the ring."""
        self.strategy.request_critical_section(self, ComponentId(cs_id))

    def is_inside_critical_section(self, cs_id: int) -> bool:
        """Whether this device is currently running the critical section of ``cs_id``."""
        section = self._critical_sections.get(int(cs_id))
        return section is not None and section.is_inside

    def destroy(self) -> None:
        """Stop receiving sync messages."""
        self.ring_share.register_component(ComponentId.SYNC, None)