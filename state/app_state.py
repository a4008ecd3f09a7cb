"""Application state management helpers.

The dataclass centralises the defaults of every user-adjustable input plus
the single "current curve" value.  It can be consumed both by the Streamlit
UI (merged into ``st.session_state``) and by standalone unit tests.
"""
from __future__ import annotations

from dataclasses import MISSING, dataclass, field, fields
from typing import Any, Dict, Mapping, MutableMapping

from features.curve import ThroughputCurve
from features.hardware import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_COMPUTE_TFLOPS,
    DEFAULT_MAX_SEQ_LEN,
    DEFAULT_MEMORY_BANDWIDTH_GBS,
    HardwareProfile,
)

HARDWARE_KEYS = ("memory_bandwidth_GBs", "compute_tflops", "batch_size", "max_seq_len")


@dataclass
class AppState:
    """Container for the dashboard session state.

    ``cfg_text`` is what the editor currently holds; ``debounced_cfg_text`` is
    the last value that survived the debounce window and fed a recompute.
    """

    refresh_token: int = 0
    cfg_text: str = ""
    debounced_cfg_text: str = ""
    memory_bandwidth_GBs: float = DEFAULT_MEMORY_BANDWIDTH_GBS
    compute_tflops: float = DEFAULT_COMPUTE_TFLOPS
    batch_size: int = DEFAULT_BATCH_SIZE
    max_seq_len: int = DEFAULT_MAX_SEQ_LEN
    curve: ThroughputCurve = field(default_factory=ThroughputCurve.empty)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "AppState":
        """Create an instance merging ``mapping`` with the default values."""

        payload: Dict[str, Any] = {}
        for f in fields(cls):
            payload[f.name] = mapping.get(f.name, _field_default(f))
        return cls(**payload)

    def hardware_profile(self) -> HardwareProfile:
        return HardwareProfile(
            memory_bandwidth_GBs=float(self.memory_bandwidth_GBs),
            compute_tflops=float(self.compute_tflops),
            batch_size=int(self.batch_size),
            max_seq_len=int(self.max_seq_len),
        )


class AppStateManager:
    """Light-weight session state manager.

    ``AppState`` only models the keys that need deterministic defaults.  UI
    code may still create ad-hoc keys, so extra keys are stored alongside the
    dataclass-backed attributes.
    """

    def __init__(self, initial: AppState | None = None) -> None:
        self._state: AppState = initial or AppState()
        self._extras: Dict[str, Any] = {}

    @property
    def state(self) -> AppState:
        return self._state

    def get(self, key: str, default: Any | None = None) -> Any:
        if hasattr(self._state, key):
            return getattr(self._state, key)
        return self._extras.get(key, default)

    def set(self, key: str, value: Any) -> AppState:
        if hasattr(self._state, key):
            setattr(self._state, key, value)
        else:
            self._extras[key] = value
        return self._state

    def update(self, updates: Mapping[str, Any] | None = None, **kwargs: Any) -> AppState:
        payload: Dict[str, Any] = dict(updates or {})
        payload.update(kwargs)
        for key, value in payload.items():
            self.set(key, value)
        return self._state

    def bump_refresh_token(self) -> int:
        current = int(self.get("refresh_token", 0)) + 1
        self.set("refresh_token", current)
        return current

    def as_dict(self) -> Dict[str, Any]:
        data = {f.name: getattr(self._state, f.name) for f in fields(AppState)}
        data.update(self._extras)
        return data


def _field_default(f) -> Any:
    if f.default is not MISSING:
        return f.default
    if f.default_factory is not MISSING:  # type: ignore[attr-defined]
        return f.default_factory()  # type: ignore[misc]
    raise AttributeError(f"Field {f.name} has no default")


def _build_defaults() -> Dict[str, Any]:
    return {f.name: _field_default(f) for f in fields(AppState)}


APP_STATE_DEFAULTS: Dict[str, Any] = _build_defaults()


def ensure_session_state_defaults(store: MutableMapping[str, Any]) -> AppStateManager:
    """Populate ``store`` with defaults where keys are missing.

    The returned manager wraps an :class:`AppState` initialised from
    ``store`` so that tests can inspect and mutate it deterministically.
    """

    state = AppState.from_mapping(store)
    for f in fields(AppState):
        store.setdefault(f.name, getattr(state, f.name))
    return AppStateManager(state)


__all__ = [
    "APP_STATE_DEFAULTS",
    "AppState",
    "AppStateManager",
    "HARDWARE_KEYS",
    "ensure_session_state_defaults",
]
