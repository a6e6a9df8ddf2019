# errors.py
from __future__ import annotations


class EnigmaError(Exception):
    """Base class for every error raised by the machine and the engine."""


# ── component construction ───────────────────────────────────────
class InvalidAlphabet(EnigmaError, ValueError):
    pass


class InvalidReflector(EnigmaError, ValueError):
    pass


class InvalidPlug(EnigmaError, ValueError):
    pass


class InvalidPosition(EnigmaError, ValueError):
    pass


# ── validation ───────────────────────────────────────────────────
class InvalidConfiguration(EnigmaError, ValueError):
    """A code configuration does not fit the loaded machine."""


class InvalidMessage(EnigmaError, ValueError):
    """Input text cannot be typed on the loaded machine."""


# ── lifecycle ────────────────────────────────────────────────────
class MachineNotLoaded(EnigmaError, RuntimeError):
    def __init__(self, message: str = "No machine loaded. Load a machine specification first.") -> None:
        super().__init__(message)


class MachineNotConfigured(EnigmaError, RuntimeError):
    def __init__(self, message: str = "Machine is not configured. Apply a manual or random code first.") -> None:
        super().__init__(message)


# ── persistence ──────────────────────────────────────────────────
class SnapshotError(EnigmaError):
    """Reading, parsing or restoring a snapshot document failed."""
