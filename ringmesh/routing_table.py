"""Fixed-size routing table with longest-prefix-match lookup."""

from __future__ import annotations

import ipaddress
import struct
from dataclasses import dataclass

from ringmesh.netutils import mask_size
from ringmesh.runtime import LogLevel, log, panic

MAX_ROUTING_ENTRIES = 16

_TAG = "routing"
_HEADER = struct.Struct("<B3xI")
_ENTRY = struct.Struct("<IIB3x")
PACKED_SIZE = _HEADER.size + _ENTRY.size * MAX_ROUTING_ENTRIES


@dataclass
class RoutingEntry:
    """A route: packets whose address matches ``network``/``mask`` go to ``output``."""

    network: int
    mask: int
    output: int


class RoutingTable:
    """Routes ordered from the longest mask to the shortest, plus a default gateway."""

    def __init__(self, default_gateway: int) -> None:
        self.default_gateway = int(default_gateway)
        self.entries: list[RoutingEntry] = []

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RoutingTable):
            return NotImplemented
        return self.default_gateway == other.default_gateway and self.entries == other.entries

    def __repr__(self) -> str:
        return f"RoutingTable(default_gateway={self.default_gateway}, entries={self.entries!r})"

    def add(self, network: int, mask: int, output: int) -> None:
        """Add a route, or update the output of an identical one.

        A 0/0 route replaces the default gateway.
        """
        output = int(output)
        if network == 0 and mask == 0:
            self.default_gateway = output
            return

        position = len(self.entries)
        for index, entry in enumerate(self.entries):
            if entry.network == network and entry.mask == mask:
                entry.output = output
                return
            if entry.mask < mask:
                position = index
                break

        if len(self.entries) >= MAX_ROUTING_ENTRIES:
            panic(f"Routing table is full (used entries = {MAX_ROUTING_ENTRIES}) -- aborting")

        self.entries.insert(position, RoutingEntry(network, mask, output))

    def remove_by_output(self, output: int) -> None:
        """Remove every non-default route going to ``output``."""
        self.entries = [entry for entry in self.entries if entry.output != output]

    def route(self, ip: int) -> int:
        """Return the output for ``ip``, or the default gateway if nothing matches."""
        for entry in self.entries:
            if ip & entry.mask == entry.network:
                return entry.output
        return self.default_gateway

    def show(self) -> list[str]:
        """Log the table and return the logged lines."""
        lines = [
            "========= ROUTING TABLE ==========",
            f"                default gateway: {self.default_gateway}",
        ]
        for entry in self.entries:
            address = ipaddress.IPv4Address(entry.network & 0xFFFFFFFF)
            lines.append(f" {address}/{mask_size(entry.mask)} -> {entry.output}")
        lines.append("==================================")
        for line in lines:
            log(LogLevel.INFO, _TAG, line)
        return lines

    def pack(self) -> bytes:
        """Serialise the table into its fixed-size wire layout."""
        parts = [_HEADER.pack(self.default_gateway, len(self.entries))]
        parts.extend(_ENTRY.pack(e.network, e.mask, e.output) for e in self.entries)
        parts.append(bytes(_ENTRY.size * (MAX_ROUTING_ENTRIES - len(self.entries))))
        return b"".join(parts)

    @classmethod
    def unpack(cls, data: bytes) -> "RoutingTable":
        """Build a table from bytes produced by :meth:`pack`."""
        data = bytes(data)
        if len(data) != PACKED_SIZE:
            raise ValueError(f"expected {PACKED_SIZE} bytes, got {len(data)}")
        default_gateway, count = _HEADER.unpack_from(data)
        if count > MAX_ROUTING_ENTRIES:
            raise ValueError(f"entry count {count} exceeds {MAX_ROUTING_ENTRIES}")
        table = cls(default_gateway)
        table.entries = [
            RoutingEntry(*_ENTRY.unpack_from(data, _HEADER.size + i * _ENTRY.size))
            for i in range(count)
        ]
        return table