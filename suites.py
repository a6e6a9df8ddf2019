# suites.py
from __future__ import annotations

from typing import Dict

from keyboard_and_plugboard import Alphabet
from specs import MachineSpec, ReflectorSpec, RotorSpec

Alpha26 = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"

# Historical Enigma I wheels. The notch letter is the window letter the rotor
# steps *onto* when it carries its left neighbour, i.e. one past the
# historical turnover letter (Q→R, E→F, V→W, J→K, Z→A).
LEGACY_ROTORS: Dict[int, tuple[str, str]] = {
    1: ("EKMFLGDQVZNTOWYHXUSPAIBRCJ", "R"),   # I
    2: ("AJDKSIRUXBLHWTMCQGZNPYFVOE", "F"),   # II
    3: ("BDFHJLCPRTXVZNYEIWGAKMUSQO", "W"),   # III
    4: ("ESOVPZJAYQUIRHXLNFTGKDCMWB", "K"),   # IV
    5: ("VZBRGITYUPSDNHLXAWMJQOFECK", "A"),   # V
}

LEGACY_REFLECTORS: Dict[str, str] = {
    "I": "YRUHQSLDPXNGOKMIEBFZCWVJAT",    # UKW-B
    "II": "FVPJIAOYEDRZXWGCTKUQSBNMHL",   # UKW-C
}


def legacy_spec(rotors_in_use: int = 3) -> MachineSpec:
    """Enigma I catalog: rotors 1–5 (I–V), reflectors I (B) and II (C)."""
    alphabet = Alphabet(Alpha26)
    rotors = {
        rid: RotorSpec.from_wiring(rid, wiring, notch, alphabet)
        for rid, (wiring, notch) in LEGACY_ROTORS.items()
    }
    reflectors = {
        rid: ReflectorSpec.from_wiring(rid, wiring, alphabet)
        for rid, wiring in LEGACY_REFLECTORS.items()
    }
    if not (1 <= rotors_in_use <= len(rotors)):
        raise ValueError(f"rotors_in_use must be 1–{len(rotors)}, got {rotors_in_use}")
    return MachineSpec(alphabet, rotors, reflectors, rotors_in_use)


SUITES = {
    "legacy": legacy_spec,
}
