"""
schelling/lattice.py - Circular Lattice of Binary Agents

Fixed-size ring of agent types in {0, 1}. Positional mutation only,
no internal randomness beyond the random() constructor.
"""

import random
from typing import Iterable, List

from receipts import emit_receipt, StopRule

from .constants import AGENT_TYPES, AGENT_SYMBOLS


class Lattice:
    """Ring of agent types. Offsets are normalized modulo the current length."""

    def __init__(self, cells: Iterable[int]):
        self._cells: List[int] = list(cells)
        for position, value in enumerate(self._cells):
            if value not in AGENT_TYPES:
                stoprule_representation(value, position)

    @classmethod
    def random(cls, size: int, rng: random.Random) -> "Lattice":
        """Each position independently and uniformly type 0 or 1."""
        return cls(rng.randrange(2) for _ in range(size))

    def __len__(self) -> int:
        return len(self._cells)

    def __iter__(self):
        return iter(self._cells)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Lattice):
            return NotImplemented
        return self._cells == other._cells

    def __repr__(self) -> str:
        return f"Lattice({self._cells!r})"

    def __str__(self) -> str:
        return self.render()

    @property
    def cells(self) -> List[int]:
        return list(self._cells)

    def wrap(self, offset: int) -> int:
        """Map any offset, negative or past the end, into [0, len)."""
        # Python's % already takes the sign of the divisor
        return offset % len(self._cells)

    def type_at(self, position: int) -> int:
        return self._cells[self.wrap(position)]

    def remove(self, position: int) -> int:
        """Delete the agent at position, shifting the tail left. Returns its type."""
        return self._cells.pop(position)

    def insert_at(self, position: int, value: int) -> None:
        """Insert an agent at position, shifting the tail right."""
        self._cells.insert(position, value)

    def render(self) -> str:
        """X for type 0, O for type 1."""
        symbols = []
        for position, value in enumerate(self._cells):
            if value not in AGENT_SYMBOLS:
                stoprule_representation(value, position)
            symbols.append(AGENT_SYMBOLS[value])
        return "".join(symbols)


def stoprule_representation(value, position: int) -> None:
    """An agent type outside {0, 1} means the engine corrupted the ring."""
    emit_receipt("anomaly", {
        "metric": "agent_type",
        "position": position,
        "value": repr(value),
        "classification": "violation",
        "action": "halt"
    })
    raise StopRule(f"Unexpected model element {value!r} at position {position}")
