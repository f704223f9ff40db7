from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List

from larhits.errors import InvalidDepositError


class ViewTag(Enum):
    """Wire-plane view. Values are the integer codes used on disk."""
    U = 0
    V = 1
    W = 2


@dataclass(frozen=True, slots=True)
class RawDeposit:
    """
    Simulated energy deposit (physics layer).

    x, y, z: position [cm]; x is the drift axis
    energy: deposited energy (> 0)
    """
    x: float
    y: float
    z: float
    energy: float

    def __post_init__(self) -> None:
        if not self.energy > 0.0:
            raise InvalidDepositError(
                f"Non-positive deposit energy {self.energy} at ({self.x}, {self.y}, {self.z})"
            )


@dataclass(slots=True)
class DepositEvent:
    """All deposits of one simulated event plus source bookkeeping."""
    index: int
    deposits: List[RawDeposit]
    meta: Dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class ProtoHit:
    """
    Working 2D hit for one (deposit, view) projection.

    drift: drift coordinate [cm], never modified after projection
    wire: wire coordinate [cm], snapped to the pitch and set on merge
    energy: summed when hits are merged
    view: fixed for the lifetime of the hit
    """
    drift: float
    wire: float
    energy: float
    view: ViewTag
