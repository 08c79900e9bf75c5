"""Base class for the behaviour a device takes in the routing protocol."""

from __future__ import annotations

from typing import Any, Optional

from ringmesh.events import (
    PeerEvent,
    PeerEventKind,
    SiblingEvent,
    SiblingEventKind,
    encode_peer_event,
    encode_sibling_event,
)
from ringmesh.ring_share import ComponentId


class Role:
    """A routing role. Every event hook does nothing unless a subclass overrides it.

    ``router`` is the routing component that owns the role. It provides
    ``orientation``, ``ring_share``, ``wireless``, ``shared_state``,
    ``add_global_route(route, output)`` and ``remove_routes_by_output(output)``.
    """

    def on_start(self, router: Any) -> None:
        """Called once, in the first critical section after start-up."""

    def on_tick(self, router: Any, dt_ms: int) -> None:
        """Called periodically with the milliseconds since the last tick."""

    def on_peer_connected(self, router: Any, connection: Any) -> None:
        """A wireless peer connected over ``connection``."""

    def on_peer_handshake(self, router: Any, event: Any) -> None:
        """The wireless peer sent its handshake."""

    def on_peer_update_dtr(self, router: Any, event: Any) -> None:
        """The wireless peer reported a new distance to root."""

    def on_peer_new_gateway_request(self, router: Any, event: Any) -> None:
        """The wireless peer asked for a new gateway."""

    def on_peer_new_gateway_response(self, router: Any, event: Any) -> None:
        """The wireless peer answered a gateway request."""

    def on_peer_lost(self, router: Any, connection: Any) -> None:
        """The link with the wireless peer was lost."""

    def on_sibling_update_dtr(self, router: Any, event: Any) -> None:
        """A sibling reported a new distance to root."""

    def on_sibling_provision(self, router: Any, event: Any) -> None:
        """A sibling handed out the node network."""

    def on_sibling_send_new_gateway_request(self, router: Any, event: Any) -> None:
        """A sibling asked for a gateway request to be forwarded."""

    def on_sibling_new_gateway_winner(self, router: Any, event: Any) -> None:
        """A sibling announced the new gateway."""

    def _broadcast(self, router: Any, kind: SiblingEventKind, payload: Optional[Any] = None) -> bool:
        """Send a routing event to every sibling."""
        frame = encode_sibling_event(SiblingEvent(kind, payload))
        return bool(router.ring_share.broadcast(ComponentId.ROUTING, frame))

    def _send_peer(self, router: Any, kind: PeerEventKind, payload: Any) -> bool:
        """Send a routing event to the wireless peer."""
        frame = encode_peer_event(PeerEvent(kind, payload))
        return bool(router.wireless.send_peer_message(frame))