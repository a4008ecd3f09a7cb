"""Reactive updates of :class:`~state.app_state.AppState`.

Config text edits are debounced before they trigger a recompute; hardware
edits are clamped at the boundary and recompute the curve immediately.  The
curve stored on the state is always replaced wholesale, never mutated.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

from actions.debounce import DEFAULT_DEBOUNCE_S, Debouncer
from features.curve import ThroughputCurve, generate_curve
from features.hardware import HARDWARE_RANGES, coerce_input
from state.app_state import AppState, AppStateManager

logger = logging.getLogger(__name__)

_HARDWARE_INPUTS: Dict[str, tuple] = {
    "memory_bandwidth_GBs": ("mem", False),
    "compute_tflops": ("flops", False),
    "batch_size": ("batch", True),
    "max_seq_len": ("seq", True),
}


def set_hardware_value(manager: AppStateManager, key: str, raw: Any) -> AppState:
    """Clamp a raw hardware edit into its range and store it."""

    try:
        range_key, integer = _HARDWARE_INPUTS[key]
    except KeyError:
        raise KeyError(f"Unknown hardware parameter: {key}") from None
    manager.set(key, coerce_input(raw, HARDWARE_RANGES[range_key], integer=integer))
    return manager.state


class CurvePipeline:
    """Keep ``AppState.curve`` in sync with the config text and hardware."""

    def __init__(
        self,
        manager: AppStateManager,
        *,
        debounce_s: float = DEFAULT_DEBOUNCE_S,
        loop: Any = None,
    ) -> None:
        self.manager = manager
        self._debouncer = Debouncer(debounce_s, loop=loop)
        self._subscribers: List[Callable[[ThroughputCurve], None]] = []

    @property
    def pending(self) -> bool:
        return self._debouncer.pending

    def subscribe(self, callback: Callable[[ThroughputCurve], None]) -> None:
        self._subscribers.append(callback)

    def set_config_text(self, text: str, *, immediate: bool = False) -> None:
        """Record an editor change and schedule (or run) the recompute."""

        self.manager.set("cfg_text", text)
        if immediate:
            self._debouncer.cancel()
            self._commit_config_text(text)
        else:
            self._debouncer.schedule(self._commit_config_text, text)

    def set_hardware(self, **values: Any) -> None:
        """Apply hardware edits and recompute without waiting."""

        for key, raw in values.items():
            set_hardware_value(self.manager, key, raw)
        self.recompute()

    def flush(self) -> bool:
        return self._debouncer.flush()

    def cancel(self) -> bool:
        return self._debouncer.cancel()

    def _commit_config_text(self, text: str) -> None:
        self.manager.set("debounced_cfg_text", text)
        self.recompute()

    def recompute(self) -> Optional[ThroughputCurve]:
        """Regenerate and publish the curve; ``None`` keeps the old one."""

        state = self.manager.state
        curve = generate_curve(state.debounced_cfg_text, state.hardware_profile())
        if curve is None:
            logger.debug("Config text not usable; keeping the current curve")
            return None
        self.manager.set("curve", curve)
        token = self.manager.bump_refresh_token()
        logger.info("Published throughput curve #%d with %d points", token, len(curve))
        for callback in list(self._subscribers):
            callback(curve)
        return curve


__all__ = ["CurvePipeline", "set_hardware_value"]
