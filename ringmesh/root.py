"""Role of the device that owns the uplink and hands out the root network."""

from __future__ import annotations

from dataclasses import dataclass, field

from ringmesh.config import Orientation
from ringmesh.events import SiblingEventKind, SiblingNewGatewayWinner, SiblingProvision
from ringmesh.netutils import Network
from ringmesh.role import Role
from ringmesh.runtime import LogLevel, log, panic

_TAG = "root"

GATEWAY_REQUEST_TIMEOUT = 10000


@dataclass
class RootRole(Role):
    """Distributes ``network`` to its siblings and answers gateway requests."""

    network: Network
    gateway_requested: bool = field(default=False, init=False)
    gateway_requested_timeout: int = field(default=0, init=False)

    def on_start(self, router) -> None:
        """Route everything out of this device and provision the siblings."""
        log(LogLevel.INFO, _TAG, "on_start")
        router.add_global_route(Network(0, 0), router.orientation)
        sent = self._broadcast(
            router,
            SiblingEventKind.PROVISION,
            SiblingProvision(provider_id=Orientation.CENTER, dtr=1, network=self.network),
        )
        if not sent:
            panic("Failed to broadcast provision -- aborting")

    def on_sibling_send_new_gateway_request(self, router, event) -> None:
        """Start the wait after which gateway requests are answered."""
        self.gateway_requested = True
        self.gateway_requested_timeout = GATEWAY_REQUEST_TIMEOUT

    def on_tick(self, router, dt_ms: int) -> None:
        """Count down the gateway request wait and announce the winner when it ends."""
        if not self.gateway_requested:
            return
        if dt_ms < self.gateway_requested_timeout:
            self.gateway_requested_timeout -= dt_ms
            return
        self.gateway_requested = False
        self.gateway_requested_timeout = 0
        log(LogLevel.INFO, _TAG, "[on_tick] Wait finished -- responding NGRs")
        self._broadcast(
            router,
            SiblingEventKind.NEW_GATEWAY_WINNER,
            SiblingNewGatewayWinner(network=self.network, dtr=1),
        )