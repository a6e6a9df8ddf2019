# history.py
from __future__ import annotations

from typing import Dict, List, Tuple

from debug import Debug
from errors import MachineNotConfigured
from specs import CodeState, MessageRecord

debug = Debug()

NO_HISTORY = "No history available. No messages were processed."
NO_MESSAGES = "  No messages processed under this configuration."


class MachineHistory:
    """Messages grouped by the original code that was in effect.

    Buckets keep insertion order; recording an equal code state again
    re-activates its existing bucket instead of opening a new one.
    """

    def __init__(self) -> None:
        self._history: Dict[CodeState, List[MessageRecord]] = {}
        self.current_original: CodeState | None = None

    def record_config(self, code_state: CodeState) -> None:
        if code_state is None:
            raise ValueError("Cannot record configuration: code state is missing")
        self.current_original = code_state
        self._history.setdefault(code_state, [])
        debug.log("history", f"config {code_state} (buckets={len(self._history)})")

    def record_message(self, text: str, output: str, duration_nanos: int) -> MessageRecord:
        if self.current_original is None:
            raise MachineNotConfigured(
                "Cannot record message: no original code has been configured yet"
            )
        record = MessageRecord(text, output, duration_nanos)
        self._history.setdefault(self.current_original, []).append(record)
        debug.log("history", f"message {record}")
        return record

    def entries(self) -> List[Tuple[CodeState, Tuple[MessageRecord, ...]]]:
        return [(state, tuple(records)) for state, records in self._history.items()]

    def message_count(self) -> int:
        return sum(len(records) for records in self._history.values())

    def is_empty(self) -> bool:
        return not self._history

    def clear(self) -> None:
        self._history.clear()
        self.current_original = None

    def render(self) -> str:
        if not self._history:
            return NO_HISTORY

        lines: List[str] = []
        for state, records in self._history.items():
            lines.append(f"=== Original Code: {state} ===")
            if not records:
                lines.append(NO_MESSAGES)
            for record in records:
                lines.append(f"  • {record}")
            lines.append("")
        return "\n".join(lines)

    __str__ = render

    def __len__(self) -> int:
        return len(self._history)
