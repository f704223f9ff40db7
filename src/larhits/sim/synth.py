from __future__ import annotations
import numpy as np
from typing import Sequence

from ..physics.hits import RawDeposit


def synth_track_deposits(
    n_steps: int,
    start_cm: Sequence[float],
    direction: Sequence[float],
    step_cm: float = 0.1,
    energy_mean: float = 0.2,
    rng: np.random.Generator | None = None,
) -> list[RawDeposit]:
    """
    Deposits along a straight track, like a MIP sampled by Geant4 steps:
      - positions start_cm + k*step_cm*dir for k = 0..n_steps-1
      - energies drawn from a gamma distribution with the given mean
        (strictly positive)
    """
    rng = rng or np.random.default_rng()
    d = np.asarray(direction, dtype=np.float64)
    norm = np.linalg.norm(d)
    if norm == 0:
        raise ValueError("Zero-length direction")
    d = d / norm
    r0 = np.asarray(start_cm, dtype=np.float64)

    shape = 4.0
    energies = rng.gamma(shape, energy_mean / shape, size=n_steps)
    energies = np.maximum(energies, 1e-6)

    deposits: list[RawDeposit] = []
    for k in range(n_steps):
        x, y, z = r0 + k * step_cm * d
        deposits.append(RawDeposit(float(x), float(y), float(z), float(energies[k])))
    return deposits
