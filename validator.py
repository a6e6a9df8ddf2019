# validator.py
"""Side-effect free checks of a code configuration and of input text.

Every function raises on the first rule it finds broken; the messages say
what is wrong, where, and which values would be accepted.
"""
from __future__ import annotations

from typing import Sequence

from errors import InvalidConfiguration, InvalidMessage
from keyboard_and_plugboard import Alphabet
from specs import CodeConfig, MachineSpec

CONTROL_NAMES = {
    0: "NULL",
    9: "TAB",
    10: "NEWLINE (\\n)",
    13: "CARRIAGE RETURN (\\r)",
    27: "ESC",
}


def _is_control(ch: str) -> bool:
    code = ord(ch)
    return code < 32 or 127 <= code <= 159


# ────────────────────────────────────────────────────────────────────────
#  1. Code configuration
# ────────────────────────────────────────────────────────────────────────


def validate_code_config(spec: MachineSpec | None, config: CodeConfig | None) -> None:
    if spec is None:
        raise InvalidConfiguration("Machine specification is missing")
    if config is None:
        raise InvalidConfiguration("Configuration details are missing")
    if config.rotor_ids is None:
        raise InvalidConfiguration("Rotor IDs are missing")
    if config.positions is None:
        raise InvalidConfiguration("Initial positions are missing")
    if config.reflector_id is None:
        raise InvalidConfiguration("Reflector ID is missing")

    validate_counts(spec, config.rotor_ids, config.positions)
    validate_rotor_ids(spec, config.rotor_ids)
    validate_reflector(spec, config.reflector_id)
    validate_positions(spec, config.positions)
    validate_plugboard(spec.alphabet, config.plugboard)


def validate_counts(spec: MachineSpec, rotor_ids: Sequence[int], positions: Sequence[str]) -> None:
    required = spec.rotors_in_use
    if len(rotor_ids) != required:
        raise InvalidConfiguration(
            f"Expected exactly {required} rotors, but got {len(rotor_ids)} "
            f"(provided rotor IDs: {list(rotor_ids)})"
        )
    if len(positions) != required:
        raise InvalidConfiguration(
            f"Expected exactly {required} initial positions, but got {len(positions)} "
            f"(provided positions: {''.join(positions)!r})"
        )


def validate_rotor_ids(spec: MachineSpec, rotor_ids: Sequence[int]) -> None:
    seen: set[int] = set()
    for rotor_id in rotor_ids:
        if rotor_id in seen:
            raise InvalidConfiguration(f"Rotor {rotor_id} appears more than once in the configuration")
        seen.add(rotor_id)
        if spec.rotor(rotor_id) is None:
            raise InvalidConfiguration(
                f"Rotor {rotor_id} does not exist in the machine specification "
                f"(available rotors: {sorted(spec.rotors)})"
            )


def validate_reflector(spec: MachineSpec, reflector_id: str) -> None:
    if not reflector_id.strip():
        raise InvalidConfiguration("Reflector ID must be non-empty")
    if spec.reflector(reflector_id) is None:
        raise InvalidConfiguration(
            f"Reflector {reflector_id!r} does not exist in the machine specification "
            f"(available reflectors: {list(spec.reflectors)})"
        )


def validate_positions(spec: MachineSpec, positions: Sequence[str]) -> None:
    for i, ch in enumerate(positions):
        if ch not in spec.alphabet:
            raise InvalidConfiguration(
                f"Position {ch!r} (rotor #{i + 1} from the left) is not in the alphabet "
                f"{spec.alphabet.letters!r}"
            )


def validate_plugboard(alphabet: Alphabet, plug_str: str | None) -> None:
    """Empty is valid; otherwise pairs of distinct, unused alphabet letters."""
    if not plug_str:
        return

    if len(plug_str) % 2:
        raise InvalidConfiguration(
            f"Plugboard length must be even (pairs of characters), got length {len(plug_str)}. "
            f"Plugboard: {plug_str!r}"
        )

    used: set[str] = set()
    for i in range(0, len(plug_str), 2):
        a, b = plug_str[i], plug_str[i + 1]
        pair = a + b
        if a == b:
            raise InvalidConfiguration(
                f"Plugboard letter {a!r} cannot map to itself (pair {pair!r} at position {i}). "
                f"Plugboard: {plug_str!r}"
            )
        for ch in pair:
            if ch in used:
                raise InvalidConfiguration(
                    f"Plugboard letter {ch!r} appears more than once (pair {pair!r} at position {i}). "
                    f"Plugboard: {plug_str!r}"
                )
            used.add(ch)
            if ch not in alphabet:
                raise InvalidConfiguration(
                    f"Plugboard character {ch!r} (in pair {pair!r} at position {i}) is not in the "
                    f"machine alphabet {alphabet.letters!r}. Plugboard: {plug_str!r}"
                )


# ────────────────────────────────────────────────────────────────────────
#  2. Input text
# ────────────────────────────────────────────────────────────────────────


def validate_input(spec: MachineSpec | None, text: str | None) -> None:
    if spec is None:
        raise InvalidConfiguration("Machine specification is missing")
    if text is None:
        raise InvalidMessage("Input message is missing")

    for i, ch in enumerate(text):
        if _is_control(ch):
            name = CONTROL_NAMES.get(ord(ch), f"CONTROL (U+{ord(ch):04X})")
            raise InvalidMessage(f"Control character {name} detected at position {i}")
        if ch not in spec.alphabet:
            raise InvalidMessage(
                f"Character {ch!r} at position {i} is not in the machine alphabet: {spec.alphabet.letters}"
            )


def normalize_input(spec: MachineSpec | None, text: str | None) -> str:
    """Upper-case letters the alphabet only knows in upper case, then validate."""
    if spec is None or text is None:
        validate_input(spec, text)
    alphabet = spec.alphabet
    normalized = "".join(
        ch.upper() if ch not in alphabet and ch.upper() in alphabet else ch
        for ch in text
    )
    validate_input(spec, normalized)
    return normalized
