# snapshot.py
"""JSON snapshot documents: ``{"spec": ..., "machineState": ..., "history": ...}``.

Each section is read on its own. A missing ``spec`` is fatal, a missing
``machineState`` means an unconfigured machine and a missing or empty
``history`` means an empty history. Everything else that is absent or of
the wrong shape raises :class:`SnapshotError` naming the section and key.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Tuple

from debug import Debug
from errors import EnigmaError, SnapshotError
from keyboard_and_plugboard import Alphabet
from rotor_and_reflector import Reflector
from specs import (
    NOT_CONFIGURED,
    CodeState,
    MachineSpec,
    MachineState,
    MessageRecord,
    ReflectorSpec,
    RotorSpec,
)

debug = Debug()

SUFFIX = ".enigma.json"

HistoryEntries = List[Tuple[CodeState, Tuple[MessageRecord, ...]]]


@dataclass(slots=True)
class Snapshot:
    spec: MachineSpec
    state: MachineState
    history: HistoryEntries = field(default_factory=list)


# ────────────────────────────────────────────────────────────────────────
#  1. Paths
# ────────────────────────────────────────────────────────────────────────


def with_suffix(path: str | Path, suffix: str = SUFFIX) -> Path:
    """Append *suffix* unless the file name already ends with it."""
    path = Path(path)
    return path if path.name.endswith(suffix) else path.with_name(path.name + suffix)


# ────────────────────────────────────────────────────────────────────────
#  2. To plain data
# ────────────────────────────────────────────────────────────────────────


def spec_to_dict(spec: MachineSpec) -> Dict[str, Any]:
    rotors = []
    for rotor_id in sorted(spec.rotors):
        r = spec.rotors[rotor_id]
        entry: Dict[str, Any] = {
            "id": r.id,
            "notchIndex": r.notch_index,
            "forward": list(r.forward_mapping),
            "backward": list(r.backward_mapping),
        }
        if r.window is not None:
            entry["window"] = r.window
        rotors.append(entry)

    return {
        "alphabet": spec.alphabet.letters,
        "rotorsInUse": spec.rotors_in_use,
        "rotors": rotors,
        "reflectors": [
            {"id": ref.id, "mapping": list(ref.mapping)} for ref in spec.reflectors.values()
        ],
    }


def code_state_to_dict(state: CodeState) -> Dict[str, Any] | None:
    if not state.is_configured:
        return None
    return {
        "rotorIds": list(state.rotor_ids),
        "positions": state.positions,
        "notchDist": list(state.notch_dist),
        "reflectorId": state.reflector_id,
        "plugboard": state.plugboard,
    }


def state_to_dict(state: MachineState) -> Dict[str, Any]:
    return {
        "rotorCount": state.rotor_count,
        "reflectorCount": state.reflector_count,
        "stringsProcessed": state.strings_processed,
        "original": code_state_to_dict(state.original),
        "current": code_state_to_dict(state.current),
    }


def history_to_list(entries: HistoryEntries) -> List[Dict[str, Any]]:
    return [
        {
            "original": code_state_to_dict(code_state),
            "messages": [
                {"input": m.input, "output": m.output, "durationNanos": m.duration_nanos}
                for m in records
            ],
        }
        for code_state, records in entries
    ]


def save(path: str | Path, spec: MachineSpec, state: MachineState, history: HistoryEntries,
         *, suffix: str = SUFFIX) -> Path:
    target = with_suffix(path, suffix)
    if not target.parent.is_dir():
        raise SnapshotError(f"Cannot save snapshot: folder {str(target.parent)!r} does not exist")

    doc = {
        "spec": spec_to_dict(spec),
        "machineState": state_to_dict(state),
        "history": history_to_list(history),
    }
    try:
        target.write_text(json.dumps(doc, indent=2, ensure_ascii=False), encoding="utf-8")
    except OSError as exc:
        raise SnapshotError(f"Cannot write snapshot {str(target)!r}: {exc}") from exc

    debug.log("snapshot", f"saved {target} ({len(history)} history buckets)")
    return target


# ────────────────────────────────────────────────────────────────────────
#  3. From plain data
# ────────────────────────────────────────────────────────────────────────


def _get(section: str, data: Dict[str, Any], key: str, kind: type | tuple) -> Any:
    if key not in data:
        raise SnapshotError(f"Section {section!r} is missing key {key!r}")
    value = data[key]
    # bool is an int subclass, never accept it for numeric fields
    if isinstance(value, bool) and kind is not bool or not isinstance(value, kind):
        raise SnapshotError(f"Section {section!r} key {key!r} has the wrong type ({type(value).__name__})")
    return value


def _int_list(section: str, data: Dict[str, Any], key: str) -> Tuple[int, ...]:
    values = _get(section, data, key, list)
    if not all(isinstance(v, int) and not isinstance(v, bool) for v in values):
        raise SnapshotError(f"Section {section!r} key {key!r} must be a list of integers")
    return tuple(values)


def _check_permutation(section: str, key: str, values: Tuple[int, ...], size: int) -> None:
    if sorted(values) != list(range(size)):
        raise SnapshotError(f"Section {section!r} key {key!r} is not a permutation of 0..{size - 1}")


def _rotor_from_dict(alphabet: Alphabet, data: Dict[str, Any], where: str) -> RotorSpec:
    rotor_id = _get(where, data, "id", int)

    # hand-written spec files may use the historical letter notation
    if "wiring" in data:
        wiring = _get(where, data, "wiring", str)
        notch = _get(where, data, "notch", str)
        try:
            return RotorSpec.from_wiring(rotor_id, wiring, notch, alphabet)
        except ValueError as exc:
            raise SnapshotError(f"Section {where!r}: {exc}") from exc

    # two-column notation: right column is the window, left is where the signal leaves
    if "right" in data or "left" in data:
        right = _get(where, data, "right", str)
        left = _get(where, data, "left", str)
        notch_index = _get(where, data, "notchIndex", int)
        if sorted(right) != sorted(alphabet.letters):
            raise SnapshotError(f"Section {where!r}: 'right' must list every alphabet letter once")
        if not 0 <= notch_index < len(right):
            raise SnapshotError(f"Section {where!r}: 'notchIndex' {notch_index} out of range 0..{len(right) - 1}")
        try:
            return RotorSpec.from_columns(rotor_id, notch_index, right, left)
        except ValueError as exc:
            raise SnapshotError(f"Section {where!r}: {exc}") from exc

    size = alphabet.size()
    notch_index = _get(where, data, "notchIndex", int)
    forward = _int_list(where, data, "forward")
    backward = _int_list(where, data, "backward")
    _check_permutation(where, "forward", forward, size)
    _check_permutation(where, "backward", backward, size)
    if any(backward[f] != i for i, f in enumerate(forward)):
        raise SnapshotError(f"Section {where!r}: 'backward' is not the inverse of 'forward'")
    if not 0 <= notch_index < size:
        raise SnapshotError(f"Section {where!r}: 'notchIndex' {notch_index} out of range 0..{size - 1}")

    window = data.get("window")
    if window is not None and (not isinstance(window, str) or sorted(window) != sorted(alphabet.letters)):
        raise SnapshotError(f"Section {where!r}: 'window' must list every alphabet letter once")
    return RotorSpec(rotor_id, notch_index, forward, backward, window)


def _reflector_from_dict(alphabet: Alphabet, data: Dict[str, Any], where: str) -> ReflectorSpec:
    reflector_id = _get(where, data, "id", str)
    if "wiring" in data:
        wiring = _get(where, data, "wiring", str)
        try:
            spec = ReflectorSpec.from_wiring(reflector_id, wiring, alphabet)
        except ValueError as exc:
            raise SnapshotError(f"Section {where!r}: {exc}") from exc
    else:
        spec = ReflectorSpec(reflector_id, _int_list(where, data, "mapping"))

    if len(spec.mapping) != alphabet.size():
        raise SnapshotError(
            f"Section {where!r}: reflector maps {len(spec.mapping)} contacts, alphabet has {alphabet.size()}"
        )
    try:
        Reflector.from_spec(spec)
    except EnigmaError as exc:
        raise SnapshotError(f"Section {where!r}: {exc}") from exc
    return spec


def spec_from_dict(data: Any) -> MachineSpec:
    if not isinstance(data, dict):
        raise SnapshotError("Section 'spec' must be an object")

    try:
        alphabet = Alphabet(_get("spec", data, "alphabet", str))
    except EnigmaError as exc:
        if isinstance(exc, SnapshotError):
            raise
        raise SnapshotError(f"Section 'spec' key 'alphabet': {exc}") from exc

    rotors: Dict[int, RotorSpec] = {}
    for i, entry in enumerate(_get("spec", data, "rotors", list)):
        where = f"spec.rotors[{i}]"
        if not isinstance(entry, dict):
            raise SnapshotError(f"Section {where!r} must be an object")
        rotor = _rotor_from_dict(alphabet, entry, where)
        if rotor.id in rotors:
            raise SnapshotError(f"Section {where!r}: rotor id {rotor.id} defined twice")
        rotors[rotor.id] = rotor

    if sorted(rotors) != list(range(1, len(rotors) + 1)):
        raise SnapshotError(f"Section 'spec': rotor ids must be 1..{len(rotors)}, got {sorted(rotors)}")

    reflectors: Dict[str, ReflectorSpec] = {}
    for i, entry in enumerate(_get("spec", data, "reflectors", list)):
        where = f"spec.reflectors[{i}]"
        if not isinstance(entry, dict):
            raise SnapshotError(f"Section {where!r} must be an object")
        reflector = _reflector_from_dict(alphabet, entry, where)
        if reflector.id in reflectors:
            raise SnapshotError(f"Section {where!r}: reflector id {reflector.id!r} defined twice")
        reflectors[reflector.id] = reflector

    if not rotors or not reflectors:
        raise SnapshotError("Section 'spec' must define at least one rotor and one reflector")

    rotors_in_use = _get("spec", data, "rotorsInUse", int)
    if not 1 <= rotors_in_use <= len(rotors):
        raise SnapshotError(f"Section 'spec' key 'rotorsInUse' must be 1..{len(rotors)}, got {rotors_in_use}")

    return MachineSpec(alphabet, rotors, reflectors, rotors_in_use)


def code_state_from_dict(data: Any, where: str) -> CodeState:
    if data is None:
        return NOT_CONFIGURED
    if not isinstance(data, dict):
        raise SnapshotError(f"Section {where!r} must be an object or null")
    plugboard = "" if data.get("plugboard") is None else _get(where, data, "plugboard", str)
    return CodeState(
        _int_list(where, data, "rotorIds"),
        _get(where, data, "positions", str),
        _int_list(where, data, "notchDist"),
        _get(where, data, "reflectorId", str),
        plugboard,
    )


def state_from_dict(data: Any, spec: MachineSpec) -> MachineState:
    if data is None:
        return MachineState(spec.rotor_count, spec.reflector_count, 0)
    if not isinstance(data, dict):
        raise SnapshotError("Section 'machineState' must be an object")

    processed = _get("machineState", data, "stringsProcessed", int)
    if processed < 0:
        raise SnapshotError("Section 'machineState' key 'stringsProcessed' must not be negative")
    original = code_state_from_dict(data.get("original"), "machineState.original")
    current = code_state_from_dict(data.get("current"), "machineState.current")
    if original.is_configured != current.is_configured:
        raise SnapshotError("Section 'machineState': 'original' and 'current' must both be set or both be null")

    return MachineState(spec.rotor_count, spec.reflector_count, processed, original, current)


def history_from_list(data: Any) -> HistoryEntries:
    if not data:
        return []
    if not isinstance(data, list):
        raise SnapshotError("Section 'history' must be a list")

    entries: HistoryEntries = []
    for i, bucket in enumerate(data):
        where = f"history[{i}]"
        if not isinstance(bucket, dict):
            raise SnapshotError(f"Section {where!r} must be an object")
        code_state = code_state_from_dict(bucket.get("original"), f"{where}.original")
        if not code_state.is_configured:
            raise SnapshotError(f"Section {where!r} is missing key 'original'")

        records = []
        for j, msg in enumerate(_get(where, bucket, "messages", list)):
            msg_where = f"{where}.messages[{j}]"
            if not isinstance(msg, dict):
                raise SnapshotError(f"Section {msg_where!r} must be an object")
            records.append(MessageRecord(
                _get(msg_where, msg, "input", str),
                _get(msg_where, msg, "output", str),
                _get(msg_where, msg, "durationNanos", int),
            ))
        entries.append((code_state, tuple(records)))
    return entries


def _read_document(path: str | Path) -> Dict[str, Any]:
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise SnapshotError(f"Snapshot file {str(path)!r} does not exist") from exc
    except OSError as exc:
        raise SnapshotError(f"Cannot read snapshot file {str(path)!r}: {exc}") from exc

    if not text.strip():
        raise SnapshotError(f"Snapshot file {str(path)!r} is empty")
    try:
        doc = json.loads(text)
    except json.JSONDecodeError as exc:
        raise SnapshotError(f"Snapshot file {str(path)!r} is not valid JSON: {exc}") from exc
    if not isinstance(doc, dict):
        raise SnapshotError(f"Snapshot file {str(path)!r} must hold a JSON object")
    return doc


def load(path: str | Path, *, suffix: str = SUFFIX) -> Snapshot:
    path = Path(path)
    if not path.exists():
        path = with_suffix(path, suffix)
    doc = _read_document(path)

    if "spec" not in doc or doc["spec"] is None:
        raise SnapshotError(f"Snapshot file {str(path)!r} has no 'spec' section")
    spec = spec_from_dict(doc["spec"])
    state = state_from_dict(doc.get("machineState"), spec)
    history = history_from_list(doc.get("history"))

    debug.log("snapshot", f"loaded {path} ({len(history)} history buckets)")
    return Snapshot(spec, state, history)


def load_spec_file(path: str | Path) -> MachineSpec:
    """Read a stand-alone machine spec (the ``spec`` section on its own)."""
    doc = _read_document(path)
    return spec_from_dict(doc.get("spec", doc))
