"""Routing events exchanged between siblings and between wireless peers."""

from __future__ import annotations

import enum
import struct
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Mapping, Optional

from ringmesh.netutils import Network

HAG_NETWORKS = 16

_KIND = struct.Struct("<I")
_U32 = struct.Struct("<I")
_NETWORK = struct.Struct("<II")
_NET_DTR = struct.Struct("<III")
_HANDSHAKE = struct.Struct("<IIIII")
_PROVISION = struct.Struct("<HHII")
_NETWORK_LIST = struct.Struct(f"<{2 * HAG_NETWORKS}I")

_PAYLOAD_SIZE = _NETWORK_LIST.size
SIBLING_EVENT_SIZE = _KIND.size + _PAYLOAD_SIZE
PEER_EVENT_SIZE = _KIND.size + _PAYLOAD_SIZE


class SiblingEventKind(enum.IntEnum):
    """Events sent between the devices of one node."""

    ON_START = 1
    UPDATE_DTR = 2
    PROVISION = 3
    SEND_NEW_GATEWAY_REQUEST = 4
    NEW_GATEWAY_WINNER = 5


class PeerEventKind(enum.IntEnum):
    """Events exchanged with the wireless peer of a device."""

    HANDSHAKE = 1
    UPDATE_DTR = 2
    NEW_GATEWAY_REQUEST = 3
    NEW_GATEWAY_RESPONSE = 4
    CONNECTED = 5
    LOST = 6


def _normalize_hag(networks: Iterable[Network]) -> tuple[Network, ...]:
    networks = tuple(networks)
    if len(networks) > HAG_NETWORKS:
        raise ValueError(f"at most {HAG_NETWORKS} networks fit in a gateway request, got {len(networks)}")
    return networks + (Network(),) * (HAG_NETWORKS - len(networks))


@dataclass(frozen=True)
class PeerHandshake:
    """Sent to a newly connected peer: our networks and distance to root."""

    external_network: Network = Network()
    provided_network: Network = Network()
    dtr: int = 0


@dataclass(frozen=True)
class PeerUpdateDtr:
    """Tells the peer about a new distance to root."""

    dtr: int = 0


@dataclass(frozen=True)
class PeerNewGatewayRequest:
    """Asks the peer for a new gateway; carries the networks already asked."""

    hag_networks: tuple[Network, ...] = field(default=())

    def __post_init__(self) -> None:
        object.__setattr__(self, "hag_networks", _normalize_hag(self.hag_networks))


@dataclass(frozen=True)
class PeerNewGatewayResponse:
    """Answers a gateway request with a network and distance to root."""

    external_network: Network = Network()
    dtr: int = 0


@dataclass(frozen=True)
class SiblingUpdateDtr:
    """Tells siblings about a new distance to root."""

    dtr: int = 0


@dataclass(frozen=True)
class SiblingProvision:
    """Hands the node network to the siblings."""

    provider_id: int = 0
    dtr: int = 0
    network: Network = Network()


@dataclass(frozen=True)
class SiblingSendNewGatewayRequest:
    """Asks siblings to forward a gateway request to their peers."""

    hag_networks: tuple[Network, ...] = field(default=())

    def __post_init__(self) -> None:
        object.__setattr__(self, "hag_networks", _normalize_hag(self.hag_networks))


@dataclass(frozen=True)
class SiblingNewGatewayWinner:
    """Announces the gateway chosen after a gateway request."""

    network: Network = Network()
    dtr: int = 0


@dataclass(frozen=True)
class _Codec:
    payload_type: type
    pack: Callable[[Any], bytes]
    unpack: Callable[[bytes], Any]


def _struct_codec(payload_type: type, layout: struct.Struct, to_values, from_values) -> _Codec:
    return _Codec(
        payload_type,
        lambda payload: layout.pack(*to_values(payload)),
        lambda data: from_values(*layout.unpack_from(data)),
    )


def _pack_hag(networks: Iterable[Network]) -> bytes:
    return _NETWORK_LIST.pack(*(value for net in networks for value in (net.addr, net.mask)))


def _unpack_hag(data: bytes) -> tuple[Network, ...]:
    values = _NETWORK_LIST.unpack_from(data)
    return tuple(Network(addr, mask) for addr, mask in zip(values[0::2], values[1::2]))


_SIBLING_CODECS: Mapping[SiblingEventKind, _Codec] = {
    SiblingEventKind.ON_START: _Codec(type(None), lambda payload: b"", lambda data: None),
    SiblingEventKind.UPDATE_DTR: _struct_codec(
        SiblingUpdateDtr, _U32, lambda p: (p.dtr,), SiblingUpdateDtr
    ),
    SiblingEventKind.PROVISION: _struct_codec(
        SiblingProvision,
        _PROVISION,
        lambda p: (p.provider_id, p.dtr, p.network.addr, p.network.mask),
        lambda provider, dtr, addr, mask: SiblingProvision(provider, dtr, Network(addr, mask)),
    ),
    SiblingEventKind.SEND_NEW_GATEWAY_REQUEST: _Codec(
        SiblingSendNewGatewayRequest,
        lambda p: _pack_hag(p.hag_networks),
        lambda data: SiblingSendNewGatewayRequest(_unpack_hag(data)),
    ),
    SiblingEventKind.NEW_GATEWAY_WINNER: _struct_codec(
        SiblingNewGatewayWinner,
        _NET_DTR,
        lambda p: (p.network.addr, p.network.mask, p.dtr),
        lambda addr, mask, dtr: SiblingNewGatewayWinner(Network(addr, mask), dtr),
    ),
}

_PEER_CODECS: Mapping[PeerEventKind, _Codec] = {
    PeerEventKind.HANDSHAKE: _struct_codec(
        PeerHandshake,
        _HANDSHAKE,
        lambda p: (
            p.external_network.addr,
            p.external_network.mask,
            p.provided_network.addr,
            p.provided_network.mask,
            p.dtr,
        ),
        lambda ea, em, pa, pm, dtr: PeerHandshake(Network(ea, em), Network(pa, pm), dtr),
    ),
    PeerEventKind.UPDATE_DTR: _struct_codec(PeerUpdateDtr, _U32, lambda p: (p.dtr,), PeerUpdateDtr),
    PeerEventKind.NEW_GATEWAY_REQUEST: _Codec(
        PeerNewGatewayRequest,
        lambda p: _pack_hag(p.hag_networks),
        lambda data: PeerNewGatewayRequest(_unpack_hag(data)),
    ),
    PeerEventKind.NEW_GATEWAY_RESPONSE: _struct_codec(
        PeerNewGatewayResponse,
        _NET_DTR,
        lambda p: (p.external_network.addr, p.external_network.mask, p.dtr),
        lambda addr, mask, dtr: PeerNewGatewayResponse(Network(addr, mask), dtr),
    ),
    PeerEventKind.CONNECTED: _struct_codec(Network, _NETWORK, lambda p: (p.addr, p.mask), Network),
    PeerEventKind.LOST: _struct_codec(Network, _NETWORK, lambda p: (p.addr, p.mask), Network),
}


def _check_payload(kind: enum.IntEnum, payload: Any, codecs: Mapping) -> None:
    expected = codecs[kind].payload_type
    if not isinstance(payload, expected):
        wanted = "no payload" if expected is type(None) else expected.__name__
        raise TypeError(f"{kind.name} event takes {wanted}, got {type(payload).__name__}")


@dataclass(frozen=True)
class SiblingEvent:
    """A sibling event and its payload (``None`` for ON_START)."""

    kind: SiblingEventKind
    payload: Optional[Any] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", SiblingEventKind(self.kind))
        _check_payload(self.kind, self.payload, _SIBLING_CODECS)


@dataclass(frozen=True)
class PeerEvent:
    """A peer event and its payload (a :class:`Network` for CONNECTED/LOST)."""

    kind: PeerEventKind
    payload: Any = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", PeerEventKind(self.kind))
        _check_payload(self.kind, self.payload, _PEER_CODECS)


def _encode(kind: int, payload: Any, codecs: Mapping) -> bytes:
    try:
        body = codecs[kind].pack(payload)
    except struct.error as exc:
        raise ValueError(f"payload field out of range: {exc}") from exc
    return _KIND.pack(int(kind)) + body.ljust(_PAYLOAD_SIZE, b"\0")


def _decode(data: bytes, size: int, kinds: type, codecs: Mapping, name: str):
    data = bytes(data)
    if len(data) != size:
        raise ValueError(f"invalid {name} event (len = {len(data)}, expected = {size})")
    (raw_kind,) = _KIND.unpack_from(data)
    try:
        kind = kinds(raw_kind)
    except ValueError:
        raise ValueError(f"unknown {name} event (id = {raw_kind})") from None
    return kind, codecs[kind].unpack(data[_KIND.size:])


def encode_sibling_event(event: SiblingEvent) -> bytes:
    """Serialise a sibling event into its fixed-size wire form."""
    return _encode(event.kind, event.payload, _SIBLING_CODECS)


def decode_sibling_event(data: bytes) -> SiblingEvent:
    """Parse bytes produced by :func:`encode_sibling_event`."""
    kind, payload = _decode(data, SIBLING_EVENT_SIZE, SiblingEventKind, _SIBLING_CODECS, "sibling")
    return SiblingEvent(kind, payload)


def encode_peer_event(event: PeerEvent) -> bytes:
    """Serialise a peer event into its fixed-size wire form."""
    return _encode(event.kind, event.payload, _PEER_CODECS)


def decode_peer_event(data: bytes) -> PeerEvent:
    """Parse bytes produced by :func:`encode_peer_event`."""
    kind, payload = _decode(data, PEER_EVENT_SIZE, PeerEventKind, _PEER_CODECS, "peer")
    return PeerEvent(kind, payload)