import pytest

from ringmesh.events import (
    HAG_NETWORKS,
    PEER_EVENT_SIZE,
    SIBLING_EVENT_SIZE,
    PeerEvent,
    PeerEventKind,
    PeerHandshake,
    PeerNewGatewayRequest,
    PeerNewGatewayResponse,
    PeerUpdateDtr,
    SiblingEvent,
    SiblingEventKind,
    SiblingNewGatewayWinner,
    SiblingProvision,
    SiblingSendNewGatewayRequest,
    SiblingUpdateDtr,
    decode_peer_event,
    decode_sibling_event,
    encode_peer_event,
    encode_sibling_event,
)
from ringmesh.netutils import Network

ROOT_NET = Network(0x0A000000, 0xFF000000)
SUBNET = Network(0x0AA00000, 0xFFE00000)

SIBLING_EVENTS = [
    SiblingEvent(SiblingEventKind.ON_START),
    SiblingEvent(SiblingEventKind.UPDATE_DTR, SiblingUpdateDtr(3)),
    SiblingEvent(SiblingEventKind.PROVISION, SiblingProvision(provider_id=5, dtr=1, network=ROOT_NET)),
    SiblingEvent(
        SiblingEventKind.SEND_NEW_GATEWAY_REQUEST,
        SiblingSendNewGatewayRequest((ROOT_NET, SUBNET)),
    ),
    SiblingEvent(SiblingEventKind.NEW_GATEWAY_WINNER, SiblingNewGatewayWinner(SUBNET, 2)),
]

PEER_EVENTS = [
    PeerEvent(PeerEventKind.HANDSHAKE, PeerHandshake(ROOT_NET, SUBNET, 4)),
    PeerEvent(PeerEventKind.UPDATE_DTR, PeerUpdateDtr(7)),
    PeerEvent(PeerEventKind.NEW_GATEWAY_REQUEST, PeerNewGatewayRequest((SUBNET,))),
    PeerEvent(PeerEventKind.NEW_GATEWAY_RESPONSE, PeerNewGatewayResponse(ROOT_NET, 1)),
    PeerEvent(PeerEventKind.CONNECTED, SUBNET),
    PeerEvent(PeerEventKind.LOST, SUBNET),
]


@pytest.mark.parametrize("event", SIBLING_EVENTS)
def test_sibling_round_trip(event):
    data = encode_sibling_event(event)
    assert len(data) == SIBLING_EVENT_SIZE
    assert decode_sibling_event(data) == event


@pytest.mark.parametrize("event", PEER_EVENTS)
def test_peer_round_trip(event):
    data = encode_peer_event(event)
    assert len(data) == PEER_EVENT_SIZE
    assert decode_peer_event(data) == event


def test_kind_is_little_endian_word():
    data = encode_sibling_event(SiblingEvent(SiblingEventKind.ON_START))
    assert data[:4] == b"\x01\x00\x00\x00"
    assert data[4:] == bytes(SIBLING_EVENT_SIZE - 4)


def test_provision_wire_layout():
    data = encode_sibling_event(SIBLING_EVENTS[2])
    assert data[4:16] == bytes.fromhex("05000100" "0000000a" "000000ff")


def test_gateway_request_pads_networks():
    request = SiblingSendNewGatewayRequest((ROOT_NET,))
    assert len(request.hag_networks) == HAG_NETWORKS
    assert request.hag_networks[0] == ROOT_NET
    assert all(net == Network() for net in request.hag_networks[1:])


def test_gateway_request_too_many_networks():
    with pytest.raises(ValueError):
        PeerNewGatewayRequest([SUBNET] * (HAG_NETWORKS + 1))


def test_decode_wrong_length():
    data = encode_peer_event(PEER_EVENTS[1])
    with pytest.raises(ValueError):
        decode_peer_event(data[:-1])


def test_decode_unknown_kind():
    data = bytearray(encode_sibling_event(SIBLING_EVENTS[0]))
    data[0] = 0x7F
    with pytest.raises(ValueError):
        decode_sibling_event(bytes(data))


def test_payload_type_is_checked():
    with pytest.raises(TypeError):
        SiblingEvent(SiblingEventKind.UPDATE_DTR, PeerUpdateDtr(1))
    with pytest.raises(TypeError):
        SiblingEvent(SiblingEventKind.ON_START, SiblingUpdateDtr(1))


def test_unknown_kind_in_constructor():
    with pytest.raises(ValueError):
        PeerEvent(42, SUBNET)


def test_out_of_range_field():
    event = SiblingEvent(SiblingEventKind.PROVISION, SiblingProvision(provider_id=1 << 20))
    with pytest.raises(ValueError):
        encode_sibling_event(event)


def test_kinds_given_as_ints_become_enums():
    event = PeerEvent(int(PeerEventKind.LOST), SUBNET)
    assert event.kind is PeerEventKind.LOST