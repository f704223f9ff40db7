from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, List, Tuple

from .hits import ProtoHit, ViewTag

HIT_SIZE_CM = 0.5


@dataclass(frozen=True, slots=True)
class CaloHit:
    """
    Calorimeter-hit record handed to the reconstruction engine.

    Only position, energy and hit type carry information; the remaining
    fields are fixed placeholders expected by the engine's hit model.
    position_cm is (drift, 0, wire) in the view's 2D frame.
    """
    position_cm: Tuple[float, float, float]
    input_energy: float
    hit_type: ViewTag
    expected_direction: Tuple[float, float, float] = (0.0, 0.0, 1.0)
    cell_normal: Tuple[float, float, float] = (0.0, 0.0, 1.0)
    cell_size0_cm: float = HIT_SIZE_CM
    cell_size1_cm: float = HIT_SIZE_CM
    cell_thickness_cm: float = HIT_SIZE_CM
    time_ns: float = 0.0
    mip_equivalent_energy: float = 1.0

    @property
    def electromagnetic_energy(self) -> float:
        return self.input_energy

    @property
    def hadronic_energy(self) -> float:
        return self.input_energy


def to_calo_hits(hits: Iterable[ProtoHit]) -> List[CaloHit]:
    return [
        CaloHit(position_cm=(h.drift, 0.0, h.wire), input_energy=h.energy, hit_type=h.view)
        for h in hits
    ]
