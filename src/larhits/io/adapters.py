"""
larhits.io.adapters

Readers that turn simulated energy-deposit files into per-event lists of
larhits.physics.hits.RawDeposit for the downsampling stage.

Design goals
------------
- Keep I/O concerns isolated from the projection/merging code.
- Normalize units on ingest: distances -> cm.
- Drop cells with non-positive energy; they cannot form a hit.
- Stream events one at a time; skipping and limits are the driver's job.

Entry points
------------
- class ROOTAdapter: reads Geant4 TPC trees (per-entry vector branches).
- class TableAdapter: reads tabular deposit lists (CSV/Parquet/HDF5).
- function make_adapter(cfg): factory from the [io.adapter] TOML section.

Config (example)
----------------
[io]
input_path = ["data/muons_*.root", "data/extra.root"]   # or a single path/glob

[io.adapter]
type = "root"                      # "root" | "table"
tree = "G4TPC"
unit_pos_is_mm = true

[io.adapter.branches]              # optional; canonical -> branch name
x = "CellX"

"""
from __future__ import annotations
from glob import glob
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

# Optional imports (guarded)
try:
    import uproot  # type: ignore
except Exception:  # pragma: no cover
    uproot = None  # type: ignore

from larhits.physics.hits import DepositEvent, RawDeposit
from larhits.io.canonicalize import canonicalize_columns

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_CM_PER_MM = 0.1

PathSpec = Union[str, Path, Sequence[str]]


def _deposits_from_arrays(x, y, z, energy, scale: float) -> Tuple[List[RawDeposit], int]:
    """Deposits with energy > 0 (positions scaled to cm) and the number of cells dropped."""
    energy = np.asarray(energy, dtype=np.float64)
    keep = energy > 0.0
    x = np.asarray(x, dtype=np.float64)[keep] * scale
    y = np.asarray(y, dtype=np.float64)[keep] * scale
    z = np.asarray(z, dtype=np.float64)[keep] * scale
    deposits = [
        RawDeposit(float(xi), float(yi), float(zi), float(ei))
        for xi, yi, zi, ei in zip(x, y, z, energy[keep])
    ]
    return deposits, int(keep.size - np.count_nonzero(keep))


def _expand_paths(path: PathSpec) -> List[str]:
    """Expand one path or glob (or a sequence of them) into files, keeping order."""
    parts = [path] if isinstance(path, (str, Path)) else list(path)
    out: List[str] = []
    for part in map(str, parts):
        matches = sorted(glob(part))
        out.extend(matches if matches else [part])
    return out


# ---------------------------------------------------------------------------
# Base adapter API
# ---------------------------------------------------------------------------

class BaseAdapter:
    """
    Abstract adapter interface.

    Yields DepositEvent objects with positions in cm, numbered from 0 in
    source order across all input files.
    """

    def iter_events(self, path: PathSpec) -> Iterator[DepositEvent]:
        raise NotImplementedError


# ---------------------------------------------------------------------------
# ROOT adapter
# ---------------------------------------------------------------------------

class ROOTAdapter(BaseAdapter):
    """
    Read Geant4 TPC ROOT trees with one entry per event and one vector
    element per deposit.

    Parameters
    ----------
    tree : str
        Tree name (default 'G4TPC').
    branches : dict, optional
        Canonical key ('x','y','z','energy') -> branch name overrides.
    unit_pos_is_mm : bool
        If True (default), convert positions from mm -> cm.
    step_size : str
        uproot chunk size for streaming.
    """

    _DEFAULT_BRANCHES = {
        "x": "CellX",
        "y": "CellY",
        "z": "CellZ",
        "energy": "CellEnergy",
    }

    def __init__(
        self,
        tree: str = "G4TPC",
        branches: Optional[Dict[str, str]] = None,
        unit_pos_is_mm: bool = True,
        step_size: str = "100 MB",
    ) -> None:
        if uproot is None:  # pragma: no cover
            raise RuntimeError("uproot is required for ROOTAdapter but is not installed.")
        self.tree = tree
        self.branches = {**self._DEFAULT_BRANCHES, **(branches or {})}
        self.scale = _CM_PER_MM if unit_pos_is_mm else 1.0
        self.step_size = step_size

    def iter_events(self, path: PathSpec) -> Iterator[DepositEvent]:
        index = 0
        names = [self.branches[k] for k in ("x", "y", "z", "energy")]
        for file_path in _expand_paths(path):
            with uproot.open(file_path) as f:
                tree = f[self.tree]
                entry = 0
                for arrays in tree.iterate(names, step_size=self.step_size, library="np"):
                    bx, by, bz, be = (arrays[n] for n in names)
                    for i in range(len(be)):
                        deposits, n_dropped = _deposits_from_arrays(bx[i], by[i], bz[i], be[i], self.scale)
                        yield DepositEvent(
                            index=index,
                            deposits=deposits,
                            meta={
                                "source": "ROOT",
                                "file": file_path,
                                "tree": self.tree,
                                "entry_index": entry,
                                "n_dropped": n_dropped,
                            },
                        )
                        index += 1
                        entry += 1


# ---------------------------------------------------------------------------
# Table adapter
# ---------------------------------------------------------------------------

class TableAdapter(BaseAdapter):
    """
    Read tabular deposit lists, one row per deposit.

    Supported inputs: CSV (.csv), Parquet (.parquet/.pq), HDF (.h5/.hdf5).

    Canonical columns: event, x, y, z, energy (see io.canonicalize for the
    accepted aliases). Without an event column the whole table is a single
    event. Within a file, events are yielded in ascending event-id order.
    """

    def __init__(
        self,
        unit_pos_is_mm: bool = True,
        columns: Optional[Dict[str, str]] = None,
        hdf_key: Optional[str] = None,
    ) -> None:
        self.scale = _CM_PER_MM if unit_pos_is_mm else 1.0
        self.columns = dict(columns or {})
        self.hdf_key = hdf_key

    def _read_table(self, path: str) -> pd.DataFrame:
        p = Path(path)
        suffix = p.suffix.lower()
        if suffix == ".csv":
            return pd.read_csv(p)
        if suffix in {".parquet", ".pq"}:
            return pd.read_parquet(p)
        if suffix in {".h5", ".hdf5"}:
            return pd.read_hdf(p, key=self.hdf_key)
        raise ValueError(f"Unrecognized TableAdapter input: {p.name} (expected .csv/.parquet/.h5)")

    def _event(self, index: int, grp: pd.DataFrame, meta: Dict) -> DepositEvent:
        deposits, n_dropped = _deposits_from_arrays(
            grp["x"], grp["y"], grp["z"], grp["energy"], self.scale
        )
        return DepositEvent(index=index, deposits=deposits, meta={**meta, "n_dropped": n_dropped})

    def iter_events(self, path: PathSpec) -> Iterator[DepositEvent]:
        index = 0
        for file_path in _expand_paths(path):
            df = canonicalize_columns(self._read_table(file_path), self.columns)
            meta_base = {"source": "table", "file": file_path}

            if "event" not in df.columns:
                yield self._event(index, df, {**meta_base, "event_id": 0})
                index += 1
                continue

            for event_id, grp in df.groupby("event", sort=True):
                yield self._event(index, grp, {**meta_base, "event_id": int(event_id)})
                index += 1


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------

def make_adapter(cfg: Dict) -> BaseAdapter:
    """
    Create an adapter from a config dict (from TOML/CLI).

    Expected keys under [io.adapter]:
      type: "root" | "table"
      tree: str                         (ROOT-only)
      branches: dict                    (ROOT-only)
      columns: dict                     (table-only)
      hdf_key: str                      (table-only)
      unit_pos_is_mm: bool
    """
    typ = (cfg.get("type") or "root").lower()

    if typ == "root":
        return ROOTAdapter(
            tree=cfg.get("tree", "G4TPC"),
            branches=cfg.get("branches"),
            unit_pos_is_mm=bool(cfg.get("unit_pos_is_mm", True)),
            step_size=cfg.get("step_size", "100 MB"),
        )

    if typ == "table":
        return TableAdapter(
            unit_pos_is_mm=bool(cfg.get("unit_pos_is_mm", True)),
            columns=cfg.get("columns"),
            hdf_key=cfg.get("hdf_key"),
        )

    raise ValueError(f"Unknown adapter type: {typ}")


# ---------------------------------------------------------------------------
# Simple smoke test (manual): run python -m larhits.io.adapters root file.root
# ---------------------------------------------------------------------------

if __name__ == "__main__":  # pragma: no cover
    import sys
    if len(sys.argv) < 3:
        print("Usage: python -m larhits.io.adapters <root|table> <path> [<path> ...]")
        sys.exit(1)
    kind, paths = sys.argv[1], sys.argv[2:]
    ad = make_adapter({"type": kind})
    for j, ev in zip(range(5), ad.iter_events(paths)):
        print(f"[{j:03d}] {len(ev.deposits)} deposits {ev.meta}")
