"""Link between the routing logic and the device's wireless peer."""

from __future__ import annotations

import ipaddress
from dataclasses import dataclass
from typing import Callable, Optional

MAX_PEER_MESSAGE_LEN = 0xFFFF

PeerLinkCallback = Callable[[int, int], None]
PeerMessageCallback = Callable[[bytes], None]
ApConfigurator = Callable[[str, str, str], None]
PeerSender = Callable[[bytes], bool]


@dataclass
class PeerCallbacks:
    """Functions called on wireless peer events.

    ``on_peer_connected`` and ``on_peer_lost`` receive the network and mask
    of the link (as 32-bit integers); both ends get the same values.
    ``on_peer_message`` receives the raw bytes sent by the peer.
    """

    on_peer_connected: Optional[PeerLinkCallback] = None
    on_peer_message: Optional[PeerMessageCallback] = None
    on_peer_lost: Optional[PeerLinkCallback] = None


def _dotted(value: int) -> str:
    return str(ipaddress.IPv4Address(value & 0xFFFFFFFF))


class Wireless:
    """Sends peer messages and sets up the access point for a device."""

    def __init__(self, configure_ap: ApConfigurator, send: PeerSender) -> None:
        self._configure_ap = configure_ap
        self._send = send
        self.callbacks = PeerCallbacks()

    def register_peer_callbacks(self, callbacks: PeerCallbacks) -> None:
        """Set the functions called on wireless peer events."""
        self.callbacks = callbacks

    def send_peer_message(self, msg: bytes) -> bool:
        """Send ``msg`` to the wireless peer; return whether it was delivered."""
        payload = bytes(msg)
        if len(payload) > MAX_PEER_MESSAGE_LEN:
            raise ValueError(f"peer message too long ({len(payload)} bytes)")
        return bool(self._send(payload))

    def enable_ap_mode(self, network: int, mask: int) -> None:
        """Serve ``network``/``mask``: the first host address becomes the gateway."""
        self._configure_ap(_dotted(network), _dotted(network + 1), _dotted(mask))