"""Role of a device that relays traffic between its wireless peer and the node."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any

from ringmesh.events import (
    PeerEventKind,
    PeerHandshake,
    PeerNewGatewayRequest,
    PeerNewGatewayResponse,
    PeerUpdateDtr,
    SiblingEventKind,
    SiblingNewGatewayWinner,
    SiblingProvision,
    SiblingSendNewGatewayRequest,
    SiblingUpdateDtr,
)
from ringmesh.netutils import Network, find_free_spot, get_node_subnet, mask_size
from ringmesh.role import Role
from ringmesh.runtime import LogLevel, log

_TAG = "forwarder"


class LocalState(enum.IntEnum):
    """Whether the device has a wireless peer."""

    NOT_CONNECTED = 0
    CONNECTED = 1


class GlobalState(enum.IntEnum):
    """Relation of the node with the network."""

    WITH_NETWORK = 1
    WITHOUT_NETWORK = 2
    READY = 3
    ON_GW_REQUEST = 4


@dataclass
class ForwarderRole(Role):
    """Joins the node to the mesh and keeps its distance to root (dtr) up to date."""

    node_network: Network = Network()
    device_network: Network = Network()
    is_local_root: bool = False
    local_state: LocalState = LocalState.NOT_CONNECTED
    global_state: GlobalState = GlobalState.WITHOUT_NETWORK
    dtr: int = 0

    # Peer events

    def on_peer_connected(self, router: Any, connection: Any) -> None:
        """Mark the peer as connected and send it our handshake."""
        self.local_state = LocalState.CONNECTED
        handshake = PeerHandshake(
            external_network=self.node_network,
            provided_network=self.device_network,
            dtr=self.dtr,
        )
        self._send_peer(router, PeerEventKind.HANDSHAKE, handshake)

    def on_peer_handshake(self, router: Any, event: PeerHandshake) -> None:
        """Join the peer's network, or add it as a redundant route if we have one."""
        if self.global_state == GlobalState.WITHOUT_NETWORK:
            self.dtr = event.dtr
            self.device_network = get_node_subnet(event.provided_network, router.orientation)
            self.node_network = event.provided_network
            self.global_state = GlobalState.WITH_NETWORK
            self.is_local_root = True

            router.add_global_route(Network(0, 0), router.orientation)

            provision = SiblingProvision(
                provider_id=int(router.orientation),
                dtr=self.dtr + 1,
                network=self.node_network,
            )
            self._broadcast(router, SiblingEventKind.PROVISION, provision)
        else:
            router.add_global_route(event.external_network, router.orientation)

    def on_peer_update_dtr(self, router: Any, event: PeerUpdateDtr) -> None:
        """Take the peer as gateway if it brings us closer to root."""
        peer_dtr = event.dtr
        if peer_dtr == 0:
            return
        if self.dtr == 0 or peer_dtr + 1 < self.dtr:
            self.dtr = peer_dtr + 1
            self.is_local_root = True
            router.add_global_route(Network(0, 0), router.orientation)
            self._broadcast(router, SiblingEventKind.UPDATE_DTR, SiblingUpdateDtr(dtr=self.dtr))

    def on_peer_new_gateway_request(self, router: Any, event: PeerNewGatewayRequest) -> None:
        """Route the requesting networks to the peer and pass the request to the siblings."""
        if event.hag_networks[0].addr != 0:
            for network in event.hag_networks:
                router.add_global_route(network, router.orientation)

        request = SiblingSendNewGatewayRequest(event.hag_networks)

        if self.dtr == 1:
            self._broadcast(router, SiblingEventKind.SEND_NEW_GATEWAY_REQUEST, request)
            return

        if self.global_state == GlobalState.ON_GW_REQUEST:
            return

        self.global_state = GlobalState.ON_GW_REQUEST
        self.dtr = 0
        self._broadcast(router, SiblingEventKind.SEND_NEW_GATEWAY_REQUEST, request)

    def on_peer_new_gateway_response(self, router: Any, event: PeerNewGatewayResponse) -> None:
        """Take the peer as gateway unless our own distance is already as good."""
        peer_dtr = event.dtr
        if self.dtr != 0 and self.dtr <= peer_dtr:
            return

        self.global_state = GlobalState.WITH_NETWORK
        self.is_local_root = True
        self.dtr = peer_dtr + 1

        router.add_global_route(Network(0, 0), router.orientation)
        winner = SiblingNewGatewayWinner(network=event.external_network, dtr=self.dtr)
        self._broadcast(router, SiblingEventKind.NEW_GATEWAY_WINNER, winner)

    def on_peer_lost(self, router: Any, connection: Any) -> None:
        """Drop the peer's routes and look for a new gateway if it was ours."""
        self.local_state = LocalState.NOT_CONNECTED
        router.remove_routes_by_output(router.orientation)

        if self.is_local_root:
            log(LogLevel.INFO, _TAG, "[peer_lost] Connection to ROOT node has been lost")
            self.is_local_root = False
            self.dtr = 0
            self.global_state = GlobalState.ON_GW_REQUEST
            self._broadcast(router, SiblingEventKind.SEND_NEW_GATEWAY_REQUEST, SiblingSendNewGatewayRequest())

    # Sibling events

    def on_sibling_update_dtr(self, router: Any, event: SiblingUpdateDtr) -> None:
        """Adopt a sibling's shorter distance to root and tell the peer."""
        peer_dtr = event.dtr
        if peer_dtr == 0:
            log(LogLevel.ERROR, _TAG, "[sibl_dtr_update] wrong dtr received")
        elif self.dtr == 0 or peer_dtr < self.dtr:
            self.dtr = peer_dtr
            self.is_local_root = False
            if self.local_state == LocalState.CONNECTED:
                self._send_peer(router, PeerEventKind.UPDATE_DTR, PeerUpdateDtr(dtr=self.dtr))
        else:
            log(LogLevel.ERROR, _TAG, f"[sibl_dtr_update] Worse DTR received ({peer_dtr} > {self.dtr})")

    def on_sibling_provision(self, router: Any, event: SiblingProvision) -> None:
        """Take this device's block of the node network and serve it."""
        if self.global_state == GlobalState.WITH_NETWORK:
            log(LogLevel.INFO, _TAG, "[on_provision] Device already provisioned -- skipping new provision")
            return

        log(
            LogLevel.INFO,
            _TAG,
            f"[on_provision] Provisioned: {event.network.addr:08X}/{mask_size(event.network.mask)} "
            f"by {event.provider_id} [dtr={event.dtr}]",
        )

        self.dtr = event.dtr
        self.device_network = get_node_subnet(event.network, router.orientation)
        self.node_network = event.network
        self.global_state = GlobalState.WITH_NETWORK
        self.is_local_root = False

        router.wireless.enable_ap_mode(self.device_network.addr, self.device_network.mask)

    def on_sibling_send_new_gateway_request(self, router: Any, event: SiblingSendNewGatewayRequest) -> None:
        """Forward a gateway request to the peer, adding our node network to it."""
        if self.dtr == 1:
            return
        if self.global_state == GlobalState.ON_GW_REQUEST:
            return
        if self.local_state == LocalState.NOT_CONNECTED:
            return

        networks = list(event.hag_networks)
        spot = find_free_spot(networks)
        if spot is None:
            log(LogLevel.ERROR, _TAG, "[on_send_gw_req] Too many networks in message -- dropping")
            return

        self.global_state = GlobalState.ON_GW_REQUEST
        self.dtr = 0
        networks[spot] = self.node_network

        self._send_peer(router, PeerEventKind.NEW_GATEWAY_REQUEST, PeerNewGatewayRequest(tuple(networks)))

    def on_sibling_new_gateway_winner(self, router: Any, event: SiblingNewGatewayWinner) -> None:
        """Answer the peer's gateway request with the winning distance."""
        if self.dtr != 1:
            self.global_state = GlobalState.WITH_NETWORK
            self.is_local_root = False
            self.dtr = event.dtr + 1

        response = PeerNewGatewayResponse(external_network=self.node_network, dtr=self.dtr)
        self._send_peer(router, PeerEventKind.NEW_GATEWAY_RESPONSE, response)