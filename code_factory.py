# code_factory.py
from __future__ import annotations

from random import Random, SystemRandom
from typing import List

from debug import Debug
from keyboard_and_plugboard import Alphabet, Plugboard
from rotor_and_reflector import Reflector, Rotor
from specs import CodeConfig, MachineSpec
from validator import validate_code_config

debug = Debug()


def build_rng(seed: int | None) -> Random | SystemRandom:
    """Deterministic RNG when *seed* given; CSPRNG otherwise."""
    return Random(seed) if seed is not None else SystemRandom()


# ────────────────────────────────────────────────────────────────────────
#  Code – the assembled wheels for one configuration
# ────────────────────────────────────────────────────────────────────────


class Code:
    """Runtime wheels for one configuration, rotors stored left→right.

    The set of components never changes once built; only the rotor offsets
    move. A new configuration means a new Code.
    """

    def __init__(
        self,
        alphabet: Alphabet,
        rotors: List[Rotor],
        reflector: Reflector,
        plugboard: Plugboard,
        config: CodeConfig,
    ) -> None:
        if not (len(rotors) == len(config.rotor_ids) == len(config.positions)):
            raise ValueError("rotor, id and position counts must match")

        self.alphabet = alphabet
        self.rotors = rotors
        self.reflector = reflector
        self.plugboard = plugboard
        self.rotor_ids = tuple(config.rotor_ids)
        self.positions = tuple(config.positions)
        self.reflector_id = config.reflector_id
        self.plug_str = config.plugboard

    def config(self) -> CodeConfig:
        """Configuration this code was built from (starting positions)."""
        return CodeConfig(self.rotor_ids, self.positions, self.reflector_id, self.plug_str)

    def window(self) -> str:
        return "".join(r.position for r in self.rotors)

    def notch_distances(self) -> tuple[int, ...]:
        return tuple(r.notch_distance() for r in self.rotors)

    def set_window(self, positions: str) -> None:
        """Move the rotors to *positions* without changing the reset target."""
        if len(positions) != len(self.rotors):
            raise ValueError(f"Expected {len(self.rotors)} window letters, got {positions!r}")
        for rotor, letter in zip(self.rotors, positions):
            rotor.set_position(letter)

    def reset(self) -> None:
        for rotor, letter in zip(self.rotors, self.positions):
            rotor.set_position(letter)

    def __repr__(self) -> str:
        return f"<Code {self.config()} window={self.window()}>"


# ────────────────────────────────────────────────────────────────────────
#  CodeFactory
# ────────────────────────────────────────────────────────────────────────


class CodeFactory:
    def __init__(self, max_plugs: int = 5) -> None:
        self.max_plugs = max_plugs

    def create(self, spec: MachineSpec, config: CodeConfig) -> Code:
        """Assemble a Code from an already validated *config*."""
        alphabet = spec.alphabet

        rotors: List[Rotor] = []
        for rotor_id, letter in zip(config.rotor_ids, config.positions):
            rotor = Rotor(spec.rotors[rotor_id], alphabet.letters)
            rotor.set_position(letter)
            rotors.append(rotor)

        reflector = Reflector.from_spec(spec.reflectors[config.reflector_id])
        plugboard = Plugboard.from_string(alphabet, config.plugboard)

        code = Code(alphabet, rotors, reflector, plugboard, config)
        debug.log("engine", f"built code {config}")
        return code

    def random_config(self, spec: MachineSpec, rng: Random | SystemRandom) -> CodeConfig:
        """Sample rotors (no repeats), reflector, positions and plug pairs."""
        needed = spec.rotors_in_use
        letters = spec.alphabet.letters

        rotor_ids = rng.sample(sorted(spec.rotors), needed)
        positions = [rng.choice(letters) for _ in range(needed)]
        reflector_id = rng.choice(list(spec.reflectors))
        plugs = self.random_plugboard(letters, rng)
        return CodeConfig(tuple(rotor_ids), tuple(positions), reflector_id, plugs)

    def random_plugboard(self, letters: str, rng: Random | SystemRandom) -> str:
        """Return 0..max_plugs disjoint pairs as a compact plug string."""
        max_possible = min(len(letters) // 2, self.max_plugs)
        if max_possible <= 0:
            return ""
        k = rng.randint(0, max_possible)
        pool = list(letters)
        rng.shuffle(pool)
        return "".join(pool[: 2 * k])

    def create_random(self, spec: MachineSpec, rng: Random | SystemRandom | None = None) -> Code:
        config = self.random_config(spec, rng or build_rng(None))
        validate_code_config(spec, config)
        return self.create(spec, config)
