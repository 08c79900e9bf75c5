"""Node layout: the devices that make up one node and their orientations."""

from __future__ import annotations

import enum

N_DEVICES = 5


class Orientation(enum.IntEnum):
    """Position of a device inside a node."""

    NORTH = 1
    EAST = 2
    SOUTH = 3
    WEST = 4
    CENTER = 5


def next_orientation(orientation: int) -> Orientation:
    """Return the orientation that follows ``orientation`` around the ring."""
    return Orientation((int(orientation) % N_DEVICES) + 1)