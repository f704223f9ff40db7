# src/larhits/io/canonicalize.py
from __future__ import annotations
from typing import Dict, Iterable, Optional

import pandas as pd

_CANON_KEYS = {
    # canonical_key: tuple of fallback source keys
    "event": ("event", "event_id", "evt", "entry"),
    "x": ("x", "CellX", "x_mm", "x_cm"),
    "y": ("y", "CellY", "y_mm", "y_cm"),
    "z": ("z", "CellZ", "z_mm", "z_cm"),
    "energy": ("energy", "CellEnergy", "edep", "Edep_MeV"),
}

_REQUIRED = ("x", "y", "z", "energy")


def _first(columns: Iterable[str], names: Iterable[str]) -> Optional[str]:
    cols = set(columns)
    for k in names:
        if k in cols:
            return k
    return None


def canonicalize_columns(df: pd.DataFrame, overrides: Optional[Dict[str, str]] = None) -> pd.DataFrame:
    """
    Return a copy of a deposit table with canonical column names
    (event, x, y, z, energy). ``overrides`` maps canonical key -> source
    column and takes precedence over the built-in fallbacks.

    'event' is optional; a missing position or energy column raises KeyError.
    """
    overrides = overrides or {}
    rename: Dict[str, str] = {}
    for key, fallbacks in _CANON_KEYS.items():
        src = overrides.get(key) or _first(df.columns, fallbacks)
        if src is None:
            if key in _REQUIRED:
                raise KeyError(
                    f"No column for '{key}' in deposit table; tried {fallbacks}. "
                    f"Found columns: {list(df.columns)}"
                )
            continue
        rename[src] = key
    return df[list(rename)].rename(columns=rename)
