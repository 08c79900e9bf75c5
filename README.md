# ringmesh

`ringmesh` models a node of a wireless mesh built from five devices arranged
in a ring: four outer devices (north, east, south, west) and one at the centre.
The devices of a node talk to each other over a sibling link. Each outer device
also talks to one device of a neighbouring node over a peer link.

The package has no dependencies outside the standard library.

## What is in it

- `ringmesh.config`: `Orientation` and `next_orientation`, the order of the
  devices around the ring.
- `ringmesh.runtime`: `log`, `LogLevel`, and `panic`, which logs and raises
  `PanicError`.
- `ringmesh.routing_table`: `RoutingTable` and `RoutingEntry`, a
  longest-prefix-match table with a default gateway, at most 16 entries, that
  can be packed to bytes and unpacked again.
- `ringmesh.netutils`: `Network`, `mask_size`, `get_node_subnet` and
  `find_free_spot`, the helpers that split address space between devices.
- `ringmesh.siblings.Siblings`: the sibling link over a transport function you
  supply; `deliver` hands received bytes to the registered callback.
- `ringmesh.ring_share.RingShare`: sibling broadcast multiplexed by
  `ComponentId` (`SYNC`, `ROUTING`, `SHARED_STATE`).
- `ringmesh.sync`: `Sync`, a token-ring lock with one critical section per
  component, and `Follower`, the behaviour of the outer devices.
- `ringmesh.shared_state`: `SharedState` and `SharedData`, which copy watched
  data to every sibling from inside a critical section.
- `ringmesh.wireless`: `Wireless` and `PeerCallbacks`, the link to the
  wireless peer over functions you supply.
- `ringmesh.events`: the sibling and peer routing events and their fixed-size
  encodings (`encode_sibling_event`, `decode_sibling_event`,
  `encode_peer_event`, `decode_peer_event`).
- `ringmesh.role.Role` and the roles `ringmesh.root.RootRole`,
  `ringmesh.home.HomeRole` and `ringmesh.forwarder.ForwarderRole`.
- `ringmesh.server.PeerServer` and `ringmesh.client.PeerClient`: the TCP peer
  link (port 3999 by default).
- `ringmesh.shared_memory.SharedMemory`: a store of up to ten text values
  indexed by 16-bit keys.
- `ringmesh.netselect`: `ApRecord`, `is_network_allowed` and
  `select_best_ap`, which picks the strongest mesh access point that is not
  the device's own.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## A routing table

```python
from ringmesh.routing_table import RoutingTable

table = RoutingTable(default_gateway=5)
table.add(0x0A000000, 0xFF000000, 1)   # 10.0.0.0/8 -> output 1
table.add(0x0A200000, 0xFFE00000, 2)   # 10.32.0.0/11 -> output 2

table.route(0x0A200001)   # 2: the longest prefix wins
table.route(0x0B000001)   # 5: no entry matches, so the default gateway is used

copy = RoutingTable.unpack(table.pack())
```

Adding a route for `0`/`0` replaces the default gateway. Adding a seventeenth
entry raises `PanicError`.

## Subnets

```python
from ringmesh.config import Orientation
from ringmesh.netutils import Network, get_node_subnet, mask_size

node = Network(0x0A000000, 0xFF000000)
get_node_subnet(node, Orientation.NORTH)   # Network(0x0A200000, 0xFFE00000)
mask_size(0xFFE00000)                      # 11
```

## Sibling link and critical sections

```python
from ringmesh.config import Orientation
from ringmesh.ring_share import ComponentId, RingShare
from ringmesh.siblings import Siblings
from ringmesh.sync import Sync

sent = []
siblings = Siblings(transport=lambda frame: sent.append(frame) or True)
ring = RingShare(siblings)
sync = Sync(ring, Orientation.NORTH)

sync.register_critical_section(ComponentId.ROUTING, lambda: print("inside"))
sync.request_critical_section(ComponentId.ROUTING)   # broadcasts a token request
```

When a token grant for this device arrives through `Siblings.deliver`, the
callback runs with `is_inside_critical_section` true, and the token is passed
on to the next orientation.

## Roles

A role reacts to routing events. Its hooks take a `router` object that you
supply, which must provide `orientation`, `ring_share`, `wireless`,
`shared_state`, `add_global_route(route, output)` and
`remove_routes_by_output(output)`. The roles broadcast sibling events through
`ring_share` and send peer events through `wireless`.

## What the package does not do

- There is no component that owns a role, queues incoming sibling and peer
  events, runs them inside the routing critical section, keeps the node's
  routing table and answers which interface a packet should leave by. You
  call the role hooks yourself, with your own `router` object.
- There is no leader behaviour for the token ring: a `Sync` for
  `Orientation.CENTER` needs a strategy passed in, otherwise it raises
  `ValueError`.
- Nothing here drives a radio. Access-point set-up, scanning and sending to the
  peer are functions you pass to `Wireless`; `PeerServer` and `PeerClient` work
  over ordinary TCP sockets.

## Errors

Conditions that the devices treat as fatal, such as a full routing table or a
malformed sibling message, raise `ringmesh.runtime.PanicError`. A full
`SharedMemory` raises `SharedMemoryFullError`.