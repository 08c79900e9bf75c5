"""IPv4 network helpers used by the routing roles."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

_U32 = 0xFFFFFFFF
_SUBNET_BITS = 3


@dataclass(frozen=True)
class Network:
    """Subnet given by an address and a mask, both as 32-bit integers."""

    addr: int = 0
    mask: int = 0

    def __str__(self) -> str:
        return f"{self.addr:08X}/{mask_size(self.mask)}"


def mask_size(n: int) -> int:
    """Return the prefix length of mask ``n`` (bits up to its lowest set bit)."""
    n &= _U32
    if n == 0:
        return 0
    lowest_bit = (n & -n).bit_length() - 1
    return 32 - lowest_bit


def get_node_subnet(network: Network, orientation: int) -> Network:
    """Carve the block of ``network`` assigned to the device at ``orientation``.

    The prefix grows by three bits and the orientation fills them.
    """
    prefix_len = mask_size(network.mask) + _SUBNET_BITS
    if prefix_len > 32:
        raise ValueError(f"network {network} is too small to split")
    new_mask = (((1 << prefix_len) - 1) << (32 - prefix_len)) & _U32
    new_addr = (network.addr | (int(orientation) << (32 - prefix_len))) & _U32
    return Network(new_addr, new_mask)


def find_free_spot(networks: Sequence[Network]) -> Optional[int]:
    """Return the index of the first unused (zero address) network, or ``None``."""
    return next((i for i, net in enumerate(networks) if net.addr == 0), None)