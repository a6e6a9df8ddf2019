# specs.py
"""Immutable value types shared by the machine, the engine and the snapshot.

Rotor order is always left→right, exactly as the operator reads the window.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, Sequence, Tuple

from errors import InvalidConfiguration
from keyboard_and_plugboard import Alphabet


# ────────────────────────────────────────────────────────────────────────
#  1. Wheel specifications
# ────────────────────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class RotorSpec:
    """Static wiring table for one rotor type.

    ``forward_mapping[i]`` is the exit contact for entry contact ``i`` with the
    rotor at its origin; ``backward_mapping`` is its inverse. ``window`` is the
    column of letters seen through the machine window, top row first; ``None``
    means the alphabet in order.
    """

    id: int
    notch_index: int
    forward_mapping: Tuple[int, ...]
    backward_mapping: Tuple[int, ...]
    window: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "forward_mapping", tuple(self.forward_mapping))
        object.__setattr__(self, "backward_mapping", tuple(self.backward_mapping))

    @classmethod
    def from_wiring(cls, rotor_id: int, wiring: str, notch: str, alphabet: Alphabet) -> "RotorSpec":
        """Historical notation: ``wiring[i]`` is where contact ``alphabet[i]`` leads.

        ``notch`` is the window letter that, once reached by stepping, carries
        the neighbour on the left along.
        """
        if sorted(wiring) != sorted(alphabet.letters):
            raise ValueError("wiring must be a permutation of alphabet")
        fwd = [alphabet.index_of(c) for c in wiring]
        rev = [wiring.index(c) for c in alphabet.letters]
        return cls(rotor_id, alphabet.index_of(notch), tuple(fwd), tuple(rev))

    @classmethod
    def from_columns(cls, rotor_id: int, notch_index: int, right: str, left: str) -> "RotorSpec":
        """Two-column notation: the signal enters on a row of the right
        column and leaves on the row where the same letter sits in the left
        column. ``notch_index`` is 0-based into the rows.
        """
        if sorted(right) != sorted(left) or len(set(right)) != len(right):
            raise ValueError("right and left columns must be permutations of the same letters")
        left_row = {ch: row for row, ch in enumerate(left)}
        right_row = {ch: row for row, ch in enumerate(right)}
        fwd = [left_row[ch] for ch in right]
        rev = [right_row[ch] for ch in left]
        return cls(rotor_id, notch_index, tuple(fwd), tuple(rev), window=right)

    @property
    def size(self) -> int:
        return len(self.forward_mapping)


@dataclass(frozen=True, slots=True)
class ReflectorSpec:
    id: str
    mapping: Tuple[int, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "mapping", tuple(self.mapping))

    @classmethod
    def from_wiring(cls, reflector_id: str, wiring: str, alphabet: Alphabet) -> "ReflectorSpec":
        return cls(reflector_id, tuple(alphabet.index_of(c) for c in wiring))


@dataclass(frozen=True, slots=True)
class MachineSpec:
    """Catalog of wheels plus the number of rotors a code must use.

    Produced by a loader that already guarantees contiguous rotor ids
    (1..K), involutive reflectors and an even alphabet.
    """

    alphabet: Alphabet
    rotors: Dict[int, RotorSpec]
    reflectors: Dict[str, ReflectorSpec]
    rotors_in_use: int

    def rotor(self, rotor_id: int) -> RotorSpec | None:
        return self.rotors.get(rotor_id)

    def reflector(self, reflector_id: str) -> ReflectorSpec | None:
        return self.reflectors.get(reflector_id)

    @property
    def rotor_count(self) -> int:
        return len(self.rotors)

    @property
    def reflector_count(self) -> int:
        return len(self.reflectors)

    def __str__(self) -> str:
        lines = [
            "MachineSpec:",
            f"  Alphabet: {self.alphabet.letters}",
            f"  Alphabet size: {self.alphabet.size()}",
            f"  Rotors-in-use: {self.rotors_in_use}",
            f"  Rotors (count={self.rotor_count}): {sorted(self.rotors)}",
            f"  Reflectors (count={self.reflector_count}): {list(self.reflectors)}",
        ]
        return "\n".join(lines)


# ────────────────────────────────────────────────────────────────────────
#  2. Compact wire format helpers
# ────────────────────────────────────────────────────────────────────────

_compact_re = re.compile(r"^<([^<>]*)><(.*?)><([^<>]+)>(?:<(.*)>)?$")


def _format_ids(rotor_ids: Sequence[int]) -> str:
    return ",".join(str(i) for i in rotor_ids)


def format_plugboard(plug_str: str) -> str:
    """``"ABCD"`` → ``"A|B,C|D"``."""
    return ",".join(f"{a}|{b}" for a, b in zip(plug_str[::2], plug_str[1::2]))


def parse_plugboard(text: str) -> str:
    """``"A|B,C|D"`` → ``"ABCD"``."""
    if not text:
        return ""
    out = []
    for pair in text.split(","):
        a, sep, b = pair.partition("|")
        if not sep or len(a) != 1 or len(b) != 1:
            raise InvalidConfiguration(
                f"Plugboard pair {pair!r} must look like 'A|B' (full group: {text!r})"
            )
        out.append(a + b)
    return "".join(out)


# ────────────────────────────────────────────────────────────────────────
#  3. Configuration & state
# ────────────────────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class CodeConfig:
    """Operator-chosen code before validation (left→right)."""

    rotor_ids: Tuple[int, ...]
    positions: Tuple[str, ...]
    reflector_id: str
    plugboard: str = ""

    def __post_init__(self) -> None:
        if self.rotor_ids is not None:
            object.__setattr__(self, "rotor_ids", tuple(self.rotor_ids))
        if self.positions is not None:
            object.__setattr__(self, "positions", tuple(self.positions))
        if self.plugboard is None:
            object.__setattr__(self, "plugboard", "")

    @classmethod
    def parse(cls, text: str) -> "CodeConfig":
        """Read ``<1,2,3><ODX><I>`` or ``<1,2,3><ODX><I><A|B,C|D>``."""
        m = _compact_re.match(text.strip())
        if not m:
            raise InvalidConfiguration(
                f"Code {text!r} is not in the form <1,2,3><ODX><I> or <1,2,3><ODX><I><A|B,C|D>"
            )
        ids_raw, positions, reflector_id, plugs = m.groups()
        try:
            rotor_ids = tuple(int(part) for part in ids_raw.split(",")) if ids_raw else ()
        except ValueError:
            raise InvalidConfiguration(f"Rotor ids {ids_raw!r} must be comma-separated integers") from None
        return cls(rotor_ids, tuple(positions), reflector_id, parse_plugboard(plugs or ""))

    def __str__(self) -> str:
        text = f"<{_format_ids(self.rotor_ids)}><{''.join(self.positions)}><{self.reflector_id}>"
        if self.plugboard:
            text += f"<{format_plugboard(self.plugboard)}>"
        return text


@dataclass(frozen=True, slots=True)
class CodeState:
    """Point-in-time view of a code: identity plus the rotor window."""

    rotor_ids: Tuple[int, ...]
    positions: str
    notch_dist: Tuple[int, ...]
    reflector_id: str
    plugboard: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "rotor_ids", tuple(self.rotor_ids))
        object.__setattr__(self, "notch_dist", tuple(self.notch_dist))

    @property
    def is_configured(self) -> bool:
        return self != NOT_CONFIGURED

    def to_config(self) -> CodeConfig:
        if not self.is_configured:
            raise InvalidConfiguration("Cannot convert a not-configured state to a code configuration")
        return CodeConfig(self.rotor_ids, tuple(self.positions), self.reflector_id, self.plugboard)

    def __str__(self) -> str:
        if not self.is_configured:
            return "<not configured>"
        window = ",".join(f"{ch}({dist})" for ch, dist in zip(self.positions, self.notch_dist))
        text = f"<{_format_ids(self.rotor_ids)}><{window}><{self.reflector_id}>"
        if self.plugboard:
            text += f"<{format_plugboard(self.plugboard)}>"
        return text


NOT_CONFIGURED = CodeState((), "", (), "", "")


@dataclass(frozen=True, slots=True)
class MachineState:
    rotor_count: int
    reflector_count: int
    strings_processed: int
    original: CodeState = field(default=NOT_CONFIGURED)
    current: CodeState = field(default=NOT_CONFIGURED)

    def __str__(self) -> str:
        return (
            f"Rotors Defined         : {self.rotor_count}\n"
            f"Reflectors Defined     : {self.reflector_count}\n"
            f"Strings Processed      : {self.strings_processed}\n"
            f"Original Configuration : {self.original}\n"
            f"Current Configuration  : {self.current}"
        )


@dataclass(frozen=True, slots=True)
class MessageRecord:
    input: str
    output: str
    duration_nanos: int

    def __str__(self) -> str:
        return f"<{self.input}> --> <{self.output}> ({self.duration_nanos} nano-seconds)"
