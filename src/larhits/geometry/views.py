from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Optional

import numpy as np

from larhits.config.schemas import FLOAT32_EPS, GeometryCfg
from larhits.errors import ConfigurationError
from larhits.physics.hits import ViewTag


@dataclass(frozen=True)
class ViewGeometry:
    """
    Readout description of one wire-plane view.

    wire_angle_rad is None for W, whose wire coordinate is the raw z axis.
    """
    view: ViewTag
    wire_pitch_cm: float
    wire_angle_rad: Optional[float] = None

    def wire_coordinate(self, y: float, z: float) -> float:
        if self.wire_angle_rad is None:
            return z
        return float(z * np.cos(self.wire_angle_rad) - y * np.sin(self.wire_angle_rad))


def views_from_geometry(
    geometry: GeometryCfg,
    epsilon: float = FLOAT32_EPS,
) -> Dict[ViewTag, ViewGeometry]:
    """
    Build the U, V, W view descriptions (in that order) from the run geometry.

    Raises ConfigurationError if any pitch is not above epsilon.
    """
    views = {
        ViewTag.U: ViewGeometry(ViewTag.U, geometry.wire_pitch_u_cm, geometry.wire_angle_u_rad),
        ViewTag.V: ViewGeometry(ViewTag.V, geometry.wire_pitch_v_cm, geometry.wire_angle_v_rad),
        ViewTag.W: ViewGeometry(ViewTag.W, geometry.wire_pitch_w_cm),
    }
    for view in views.values():
        if view.wire_pitch_cm <= epsilon:
            raise ConfigurationError(
                f"Unfeasible wire pitch requested: {view.wire_pitch_cm} ({view.view.name} view)"
            )
    return views
