"""Streamlit front end for the throughput visualiser."""

from __future__ import annotations

from typing import Any

__all__ = ["main"]


def main(*args: Any, **kwargs: Any) -> Any:
    """Deferred import so the core stays importable without Streamlit."""

    from .app import main as _main

    return _main(*args, **kwargs)
