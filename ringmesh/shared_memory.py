"""Small fixed-capacity store of text values indexed by 16-bit keys."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional

TABLE_SIZE = 10
VALUE_SIZE = 128

_MAX_KEY = 0xFFFF


class SharedMemoryFullError(RuntimeError):
    """Raised when a value is saved into a store that has no free slot."""


@dataclass
class Node:
    """A stored value and the key it was saved under."""

    value: str
    key: int


class SharedMemory:
    """Holds up to ``TABLE_SIZE`` values in insertion order."""

    def __init__(self) -> None:
        self._nodes: list[Node] = []

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[Node]:
        return iter(self._nodes)

    def save(self, msg: str, key: int) -> Node:
        """Store ``msg`` under ``key``, cut to ``VALUE_SIZE - 1`` characters."""
        if not 0 <= key <= _MAX_KEY:
            raise ValueError(f"key out of range ({key})")
        if len(self._nodes) >= TABLE_SIZE:
            raise SharedMemoryFullError("No more space in shared memory")
        node = Node(value=msg[: VALUE_SIZE - 1], key=key)
        self._nodes.append(node)
        return node

    def get(self, key: int) -> Optional[Node]:
        """Return the first node saved under ``key``, or ``None``."""
        return next((node for node in self._nodes if node.key == key), None)