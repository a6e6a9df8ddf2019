# keyboard_and_plugboard.py
from __future__ import annotations

from debug import Debug
from errors import InvalidAlphabet, InvalidPlug

debug = Debug()
debug.disable("plugboard")


# ── Alphabet (keyboard / lampboard) ──────────────────────────────
class Alphabet:
    """Ordered, duplicate-free character set shared by every wheel."""

    __slots__ = ("_letters", "_alpha_to_index")

    def __init__(self, letters: str) -> None:
        if not letters:
            raise InvalidAlphabet("Alphabet must contain at least one character")
        seen: set[str] = set()
        for ch in letters:
            if ch in seen:
                raise InvalidAlphabet(f"Character {ch!r} appears more than once in alphabet {letters!r}")
            seen.add(ch)

        self._letters: str = letters
        self._alpha_to_index: dict[str, int] = {
            ch: i for i, ch in enumerate(letters)
        }

    @property
    def letters(self) -> str:
        return self._letters

    def size(self) -> int:
        return len(self._letters)

    # letter → integer signal
    def index_of(self, letter: str) -> int:
        try:
            return self._alpha_to_index[letter]
        except KeyError:
            raise ValueError(
                f"Invalid character {letter!r} for current alphabet."
            ) from None

    # integer signal → letter
    def char_at(self, signal: int) -> str:
        if not (0 <= signal < len(self._letters)):
            hi = len(self._letters) - 1
            raise IndexError(f"Signal {signal} out of range 0–{hi}")
        return self._letters[signal]

    def contains(self, letter: str) -> bool:
        return letter in self._alpha_to_index

    __contains__ = contains

    def __len__(self) -> int:
        return len(self._letters)

    def __iter__(self):
        return iter(self._letters)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Alphabet):
            return NotImplemented
        return self._letters == other._letters

    def __hash__(self) -> int:
        return hash(self._letters)

    def __repr__(self) -> str:
        return f"<Alphabet {self._letters!r}>"


# ── Plugboard ─────────────────────────────────────────────────────
class Plugboard:
    """Symmetric index swap applied on the way in and on the way out."""

    def __init__(self, size: int) -> None:
        self.size = size
        self._mapping: list[int] = list(range(size))

    @classmethod
    def from_string(cls, alphabet: Alphabet, plug_str: str = "") -> "Plugboard":
        """Build from the compact form: ``"ABCD"`` plugs A↔B and C↔D."""
        board = cls(alphabet.size())
        if len(plug_str) % 2:
            raise InvalidPlug(f"Plugboard string {plug_str!r} must have an even length")

        for a, b in zip(plug_str[::2], plug_str[1::2]):
            if a not in alphabet or b not in alphabet:
                bad = a if a not in alphabet else b
                raise InvalidPlug(f"Symbol {bad!r} not in alphabet")
            board.plug(alphabet.index_of(a), alphabet.index_of(b))
        return board

    def plug(self, a: int, b: int) -> None:
        if a == b:
            raise InvalidPlug(f"Plugboard cannot map a contact to itself: {a}")
        if self._mapping[a] != a:
            raise InvalidPlug(f"Contact {a} is already plugged to {self._mapping[a]}")
        if self._mapping[b] != b:
            raise InvalidPlug(f"Contact {b} is already plugged to {self._mapping[b]}")

        # passed validation → commit swap
        self._mapping[a], self._mapping[b] = b, a

    # the swap is its own inverse, so one lookup serves both directions
    def process(self, signal: int) -> int:
        mapped = self._mapping[signal]
        debug.log("plugboard", f"{signal}->{mapped}")
        return mapped

    def pairs(self) -> list[tuple[int, int]]:
        return [(a, b) for a, b in enumerate(self._mapping) if a < b]

    # nicety for debugging
    def __repr__(self) -> str:
        swaps = [f"{a}-{b}" for a, b in self.pairs()]
        return f"<Plugboard {' '.join(swaps)}>"
