import pytest

from ringmesh.config import Orientation
from ringmesh.ring_share import ComponentId, RingShare
from ringmesh.routing_table import PACKED_SIZE, RoutingTable
from ringmesh.runtime import PanicError
from ringmesh.shared_state import SharedData, SharedState
from ringmesh.siblings import Siblings
from ringmesh.sync import Sync, SyncMessageKind

UPDATE = bytes([ComponentId.SHARED_STATE, ComponentId.ROUTING])


class Gate:
    def __init__(self, inside=True):
        self.inside = inside

    def is_inside_critical_section(self, component):
        return self.inside


class Box:
    def __init__(self, value):
        self.value = value

    def read(self):
        return self.value

    def write(self, value):
        self.value = value


def make_state(inside=True, content=None, length=4):
    frames = []
    link = Siblings(lambda frame: frames.append(frame) or True)
    state = SharedState(Gate(inside), RingShare(link), Orientation.NORTH)
    box = None
    if content is not None:
        box = Box(content)
        state.watch(ComponentId.ROUTING, SharedData(length, box.read, box.write))
    return state, link, frames, box


def test_refresh_broadcasts_data():
    state, _, frames, _ = make_state(content=b"abcd")
    state.refresh(ComponentId.ROUTING)
    assert frames == [UPDATE + b"abcd"]


@pytest.mark.parametrize(
    "inside,content",
    [(False, b"abcd"), (True, None), (True, b"abc")],
)
def test_refresh_panics(inside, content):
    state, _, frames, _ = make_state(inside=inside, content=content)
    with pytest.raises(PanicError):
        state.refresh(ComponentId.ROUTING)
    assert frames == []


def test_incoming_update_is_written():
    _, link, _, box = make_state(content=b"....")
    link.deliver(UPDATE + b"wxyz")
    assert box.value == b"wxyz"


@pytest.mark.parametrize(
    "incoming",
    [
        UPDATE + b"xy",
        bytes([ComponentId.SHARED_STATE, len(ComponentId)]) + b"x",
        bytes([ComponentId.SHARED_STATE, ComponentId.SYNC]) + b"x",
    ],
)
def test_bad_incoming_update_panics(incoming):
    _, link, _, box = make_state(content=b"....")
    with pytest.raises(PanicError):
        link.deliver(incoming)
    assert box.value == b"...."


def test_destroy_stops_updates():
    state, link, _, box = make_state(content=b"....")
    state.destroy()
    link.deliver(UPDATE + b"wxyz")
    assert box.value == b"...."


def test_routing_table_replicates_between_devices():
    link_b = Siblings(lambda frame: True)
    link_a = Siblings(lambda frame: link_b.deliver(frame) or True)
    state_a = SharedState(Gate(), RingShare(link_a), Orientation.NORTH)
    state_b = SharedState(Gate(), RingShare(link_b), Orientation.SOUTH)

    table_a = RoutingTable(Orientation.CENTER)
    table_a.add(0x0A000000, 0xFF000000, Orientation.NORTH)
    table_a.add(0x0AA00000, 0xFFE00000, Orientation.EAST)
    holder = {"table": RoutingTable(0)}

    state_a.watch(ComponentId.ROUTING, SharedData(PACKED_SIZE, table_a.pack, lambda data: None))
    state_b.watch(
        ComponentId.ROUTING,
        SharedData(
            PACKED_SIZE,
            lambda: holder["table"].pack(),
            lambda data: holder.__setitem__("table", RoutingTable.unpack(data)),
        ),
    )
    state_a.refresh(ComponentId.ROUTING)
    assert holder["table"] == table_a


def test_refresh_from_real_critical_section():
    frames = []
    link = Siblings(lambda frame: frames.append(frame) or True)
    ring = RingShare(link)
    sync = Sync(ring, Orientation.NORTH)
    state = SharedState(sync, ring, Orientation.NORTH)
    box = Box(b"data")
    state.watch(ComponentId.ROUTING, SharedData(4, box.read, box.write))

    with pytest.raises(PanicError):
        state.refresh(ComponentId.ROUTING)

    sync.register_critical_section(ComponentId.ROUTING, lambda: state.refresh(ComponentId.ROUTING))
    link.deliver(bytes([ComponentId.SYNC, SyncMessageKind.TOKEN_GRANT, Orientation.NORTH, ComponentId.ROUTING]))
    assert frames[0] == UPDATE + b"data"
    assert frames[1][0] == ComponentId.SYNC