# engine.py
from __future__ import annotations

import time
from dataclasses import dataclass
from pathlib import Path
from random import Random, SystemRandom
from typing import List

import snapshot
from code_factory import CodeFactory, build_rng
from debug import Debug
from errors import EnigmaError, MachineNotConfigured, MachineNotLoaded, SnapshotError
from history import MachineHistory
from machine import Machine, ProcessTrace, SignalTrace
from specs import NOT_CONFIGURED, CodeConfig, CodeState, MachineSpec, MachineState
from validator import normalize_input, validate_code_config, validate_input

# ────────────────────────────────────────────────────────────────────────
#  0. Configuration & logging
# ────────────────────────────────────────────────────────────────────────

debug = Debug()


@dataclass(slots=True)
class Config:
    """Runtime switches for the engine."""

    max_random_plugs: int = 5               # upper bound of plug pairs for a random code
    normalize_case: bool = True             # accept lower-case input for an upper-case alphabet
    snapshot_suffix: str = snapshot.SUFFIX  # appended to snapshot file names


# ────────────────────────────────────────────────────────────────────────
#  1. Engine
# ────────────────────────────────────────────────────────────────────────


class Engine:
    """Loads a machine, configures codes, processes text and keeps history.

    Lifecycle: unloaded → loaded → configured, and back to unloaded on
    ``terminate()``. A new ``load_machine`` starts over from loaded.
    """

    def __init__(self, config: Config | None = None, factory: CodeFactory | None = None) -> None:
        self.cfg = config or Config()
        self.factory = factory or CodeFactory(self.cfg.max_random_plugs)
        self.machine = Machine()
        self._history = MachineHistory()
        self._spec: MachineSpec | None = None
        self._original: CodeState = NOT_CONFIGURED
        self._processed = 0

    # ── lifecycle queries ───────────────────────────────────────

    @property
    def is_loaded(self) -> bool:
        return self._spec is not None

    @property
    def is_configured(self) -> bool:
        return self.is_loaded and self.machine.is_configured

    def _require_spec(self) -> MachineSpec:
        if self._spec is None:
            raise MachineNotLoaded()
        return self._spec

    def _require_configured(self) -> MachineSpec:
        spec = self._require_spec()
        if not self.machine.is_configured:
            raise MachineNotConfigured()
        return spec

    def machine_spec(self) -> MachineSpec:
        return self._require_spec()

    def current_config(self) -> CodeConfig:
        """Code currently installed, with its starting positions."""
        self._require_configured()
        return self.machine.config()

    # ── load / configure ────────────────────────────────────────

    def load_machine(self, spec: MachineSpec) -> None:
        if spec is None:
            raise MachineNotLoaded("Cannot load machine: specification is missing")
        self._spec = spec
        self.machine.clear()
        self._history.clear()
        self._original = NOT_CONFIGURED
        self._processed = 0
        debug.log("engine", f"loaded machine: {spec.rotor_count} rotors, {spec.reflector_count} reflectors")

    def config_manual(self, config: CodeConfig) -> CodeState:
        return self._configure(config, capture_original=True)

    def config_random(self, rng: Random | SystemRandom | None = None) -> CodeState:
        spec = self._require_spec()
        config = self.factory.random_config(spec, rng or build_rng(None))
        debug.log("engine", f"random code {config}")
        return self.config_manual(config)

    def _configure(self, config: CodeConfig, *, capture_original: bool) -> CodeState:
        """Validate, build and install *config*; nothing changes on failure."""
        spec = self._require_spec()
        validate_code_config(spec, config)
        code = self.factory.create(spec, config)

        self.machine.set_code(code)
        state = self.machine.code_state()
        if capture_original:
            self._original = state
            self._history.record_config(state)
        debug.log("engine", f"configured {state} (original captured: {capture_original})")
        return state

    # ── processing ──────────────────────────────────────────────

    def process(self, text: str) -> ProcessTrace:
        spec = self._require_configured()
        if self.cfg.normalize_case:
            text = normalize_input(spec, text)
        else:
            validate_input(spec, text)

        start = time.perf_counter_ns()
        traces: List[SignalTrace] = [self.machine.process(ch) for ch in text]
        output = "".join(t.output_char for t in traces)
        elapsed = time.perf_counter_ns() - start

        self._processed += 1
        self._history.record_message(text, output, elapsed)
        debug.log("engine", f"processed {text!r} -> {output!r} in {elapsed} ns")
        return ProcessTrace(output, tuple(traces))

    def reset(self) -> None:
        self._require_configured()
        self.machine.reset()
        debug.log("engine", f"reset to {self.machine.window()}")

    # ── reporting ───────────────────────────────────────────────

    def history(self) -> str:
        self._require_spec()
        return self._history.render()

    def machine_data(self) -> MachineState:
        spec = self._require_spec()
        return MachineState(
            spec.rotor_count,
            spec.reflector_count,
            self._processed,
            self._original,
            self.machine.code_state(),
        )

    def terminate(self) -> None:
        self._spec = None
        self.machine.clear()
        self._history.clear()
        self._original = NOT_CONFIGURED
        self._processed = 0
        debug.log("engine", "terminated")

    # ── snapshots ───────────────────────────────────────────────

    def save_snapshot(self, path: str | Path) -> Path:
        spec = self._require_spec()
        return snapshot.save(
            path, spec, self.machine_data(), self._history.entries(), suffix=self.cfg.snapshot_suffix
        )

    def load_snapshot(self, path: str | Path) -> None:
        """Replace the whole engine state with the snapshot at *path*.

        The document is parsed and its code rebuilt on a scratch engine
        first, so a broken snapshot leaves this engine untouched.
        """
        snap = snapshot.load(path, suffix=self.cfg.snapshot_suffix)
        restored = Engine(self.cfg, self.factory)
        restored.load_machine(snap.spec)

        for code_state, records in snap.history:
            restored._history.record_config(code_state)
            for record in records:
                restored._history.record_message(record.input, record.output, record.duration_nanos)

        state = snap.state
        if state.original.is_configured:
            if state.current.rotor_ids != state.original.rotor_ids \
                    or state.current.reflector_id != state.original.reflector_id \
                    or state.current.plugboard != state.original.plugboard:
                raise SnapshotError("Snapshot 'current' and 'original' describe different codes")
            try:
                rebuilt = restored._configure(state.original.to_config(), capture_original=False)
                restored.machine.code.set_window(state.current.positions)
            except (EnigmaError, ValueError) as exc:
                raise SnapshotError(f"Snapshot machine state does not fit its spec: {exc}") from exc
            if rebuilt != state.original or restored.machine.code_state() != state.current:
                raise SnapshotError("Snapshot notch distances do not match the rotors they describe")
            restored._original = state.original
            restored._history.record_config(state.original)
        else:
            restored._history.current_original = None
        restored._processed = state.strings_processed

        self._spec = restored._spec
        self.machine = restored.machine
        self._history = restored._history
        self._original = restored._original
        self._processed = restored._processed
        debug.log("engine", f"restored snapshot {path}: {self.machine.code_state()}")
