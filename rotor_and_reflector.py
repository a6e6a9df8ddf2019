# rotor_and_reflector.py
from __future__ import annotations

from enum import Enum
from typing import Sequence

from debug import Debug
from errors import InvalidPosition, InvalidReflector
from specs import ReflectorSpec, RotorSpec

debug = Debug()
debug.disable("stepping")


class Direction(Enum):
    FORWARD = "forward"      # keyboard → reflector
    BACKWARD = "backward"    # reflector → keyboard


class Rotor:
    def __init__(self, spec: RotorSpec, letters: str) -> None:
        window = spec.window if spec.window is not None else letters
        if len(window) != spec.size:
            raise ValueError(
                f"Rotor {spec.id} has {spec.size} contacts but the window column has {len(window)} letters"
            )
        if not (0 <= spec.notch_index < spec.size):
            raise ValueError(f"Rotor {spec.id} notch index {spec.notch_index} out of range 0–{spec.size - 1}")

        self.id = spec.id
        self.size = spec.size
        self.window_letters = window

        # integer lookup tables
        self._fwd = spec.forward_mapping
        self._rev = spec.backward_mapping

        self.notch = spec.notch_index
        self.offset = 0

    # ── position & notch helpers ──────────────────────────────────
    @property
    def position(self) -> str:
        """Letter currently visible in the window."""
        return self.window_letters[self.offset]

    def set_position(self, letter: str) -> "Rotor":
        idx = self.window_letters.find(letter)
        if idx == -1:
            raise InvalidPosition(f"Unable to reach position {letter!r} on rotor {self.id}")
        self.offset = idx
        return self

    def notch_distance(self) -> int:
        """Steps left until the notch sits in the window (0 when it does)."""
        return (self.notch - self.offset) % self.size

    # ── stepping --------------------------------------------------
    def _rotate(self, steps: int = 1) -> None:
        self.offset = (self.offset + steps) % self.size

    def advance(self) -> bool:
        """Advance one and return True when the new position is the notch."""
        self._rotate(1)
        hit = self.offset == self.notch
        debug.log("stepping", f"Rotor {self.id} pos {self.position}, notch_hit={hit}")
        return hit

    # ── signal paths ---------------------------------------------
    def process(self, sig: int, direction: Direction) -> int:
        table = self._fwd if direction is Direction.FORWARD else self._rev
        shift = (sig + self.offset) % self.size
        out = (table[shift] - self.offset) % self.size
        debug.log("rotor", f"Rotor {self.id} {direction.value}: {sig}->{out}")
        return out

    # ── niceties --------------------------------------------------
    def __repr__(self) -> str:
        return f"<Rotor id={self.id} pos={self.position} notch_dist={self.notch_distance()}>"


class Reflector:
    def __init__(self, reflector_id: str, mapping: Sequence[int]) -> None:
        size = len(mapping)
        if size == 0:
            raise InvalidReflector(f"Reflector {reflector_id} has no wiring")

        # ensure involution property (w[i] = j ⇒ w[j] = i) and no self-maps
        for i, j in enumerate(mapping):
            if not (0 <= j < size):
                raise InvalidReflector(f"Reflector {reflector_id} maps {i} outside 0–{size - 1}")
            if i == j:
                raise InvalidReflector(f"Reflector {reflector_id} maps contact {i} to itself")
            if mapping[j] != i:
                raise InvalidReflector(
                    f"Reflector {reflector_id} wiring must be an involution: {i}->{j} but {j}->{mapping[j]}"
                )

        self.id = reflector_id
        self.size = size
        self._map = tuple(mapping)

    @classmethod
    def from_spec(cls, spec: ReflectorSpec) -> "Reflector":
        return cls(spec.id, spec.mapping)

    def process(self, sig: int) -> int:
        mapped = self._map[sig]
        debug.log("reflector", f"{sig}->{mapped}")
        return mapped

    def __repr__(self) -> str:
        return f"<Reflector {self.id}>"
