# machine.py  ─────────────────────────────────────────────────────────
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple

from code_factory import Code
from debug import Debug
from errors import MachineNotConfigured
from rotor_and_reflector import Direction
from specs import NOT_CONFIGURED, CodeConfig, CodeState

debug = Debug()
debug.disable("encipher")


# ── traces ──────────────────────────────────────────────────────
@dataclass(frozen=True, slots=True)
class RotorTrace:
    rotor_id: int
    rotor_index: int          # position in the left→right stack
    entry_index: int
    exit_index: int
    entry_char: str
    exit_char: str


@dataclass(frozen=True, slots=True)
class ReflectorTrace:
    entry_index: int
    exit_index: int
    entry_char: str
    exit_char: str


@dataclass(frozen=True, slots=True)
class SignalTrace:
    input_char: str
    output_char: str
    window_before: str
    window_after: str
    advanced_indices: Tuple[int, ...]         # stack indices, in stepping order
    keyboard_index: int
    plugboard_in: int
    forward_steps: Tuple[RotorTrace, ...]     # right → left
    reflector_step: ReflectorTrace
    backward_steps: Tuple[RotorTrace, ...]    # left → right
    plugboard_out: int

    def __str__(self) -> str:
        lines = [
            f"Input:  {self.input_char}",
            f"Output: {self.output_char}",
            f"Window: before={self.window_before} after={self.window_after}",
            f"Stepped: {list(self.advanced_indices)}",
            f"Plugboard in: {self.keyboard_index} -> {self.plugboard_in}",
            "",
            "Forward path (right → left):",
        ]
        lines += [_hop(r) for r in self.forward_steps]
        ref = self.reflector_step
        lines += [
            "",
            "Reflector:",
            f"  {ref.entry_char}({ref.entry_index}) -> {ref.exit_char}({ref.exit_index})",
            "",
            "Backward path (left → right):",
        ]
        lines += [_hop(r) for r in self.backward_steps]
        lines.append(f"Plugboard out: {self.plugboard_out}")
        return "\n".join(lines)


def _hop(r: RotorTrace) -> str:
    return f"  rotor {r.rotor_index}: {r.entry_char}({r.entry_index}) -> {r.exit_char}({r.exit_index})"


@dataclass(frozen=True, slots=True)
class ProcessTrace:
    output: str
    traces: Tuple[SignalTrace, ...]


# ── machine ─────────────────────────────────────────────────────
class Machine:
    def __init__(self) -> None:
        self.code: Code | None = None

    def set_code(self, code: Code) -> None:
        self.code = code

    def clear(self) -> None:
        self.code = None

    @property
    def is_configured(self) -> bool:
        return self.code is not None

    def _require_code(self) -> Code:
        if self.code is None:
            raise MachineNotConfigured()
        return self.code

    # ── state helpers ───────────────────────────────────────────

    def window(self) -> str:
        return self._require_code().window()

    def config(self) -> CodeConfig:
        return self._require_code().config()

    def code_state(self) -> CodeState:
        if self.code is None:
            return NOT_CONFIGURED
        code = self.code
        return CodeState(
            code.rotor_ids,
            code.window(),
            code.notch_distances(),
            code.reflector_id,
            code.plug_str,
        )

    def reset(self) -> None:
        self._require_code().reset()

    # ── stepping logic  ─────────────────────────────────────────

    def _step_rotors(self) -> List[int]:
        """Advance the rightmost rotor and carry leftwards on every notch hit."""
        rotors = self._require_code().rotors
        advanced: List[int] = []
        carry = True
        for index in reversed(range(len(rotors))):
            if not carry:
                break
            carry = rotors[index].advance()        # .advance() returns bool notch hit
            advanced.append(index)
        return advanced

    # ── encipher one symbol  ────────────────────────────────────

    def process(self, letter: str) -> SignalTrace:
        code = self._require_code()
        alphabet = code.alphabet
        rotors = code.rotors

        key_index = alphabet.index_of(letter)
        debug.log("keyboard", f"{letter} -> {key_index}")

        window_before = code.window()
        advanced = self._step_rotors()
        debug.log("stepping", f"Window {window_before} -> {code.window()} stepped={advanced}")

        signal = plug_in = code.plugboard.process(key_index)

        forward: List[RotorTrace] = []
        for index in reversed(range(len(rotors))):
            rotor = rotors[index]
            out = rotor.process(signal, Direction.FORWARD)
            forward.append(RotorTrace(
                rotor.id, index, signal, out, alphabet.char_at(signal), alphabet.char_at(out)
            ))
            signal = out

        reflected = code.reflector.process(signal)
        reflector_step = ReflectorTrace(
            signal, reflected, alphabet.char_at(signal), alphabet.char_at(reflected)
        )
        signal = reflected

        backward: List[RotorTrace] = []
        for index, rotor in enumerate(rotors):
            out = rotor.process(signal, Direction.BACKWARD)
            backward.append(RotorTrace(
                rotor.id, index, signal, out, alphabet.char_at(signal), alphabet.char_at(out)
            ))
            signal = out

        signal = code.plugboard.process(signal)
        out_ch = alphabet.char_at(signal)
        debug.log("encipher", f"{letter} -> {out_ch}")

        return SignalTrace(
            input_char=letter,
            output_char=out_ch,
            window_before=window_before,
            window_after=code.window(),
            advanced_indices=tuple(advanced),
            keyboard_index=key_index,
            plugboard_in=plug_in,
            forward_steps=tuple(forward),
            reflector_step=reflector_step,
            backward_steps=tuple(backward),
            plugboard_out=signal,
        )

    def __repr__(self) -> str:
        if self.code is None:
            return "<Machine not configured>"
        return f"<Machine {self.code_state()}>"
