"""
larhits.physics.downsample

Reduce projected hits to detector-like readout resolution, one view at a time:

1. quantize: snap every wire coordinate to the nearest wire of the view's pitch
2. order:    sort by (wire, drift, energy) with an epsilon tolerance
3. merge:    collapse the first adjacent pair on the same wire and within the
             drift resolution into an energy-weighted composite; repeat from 2
             until no pair qualifies

Each merge removes one hit, so n hits need at most n-1 rounds.
"""
from __future__ import annotations
from dataclasses import dataclass
from functools import cmp_to_key
import math
from typing import Iterable, List, Literal, Mapping, Optional

from larhits.config.schemas import DownsampleCfg, FLOAT32_EPS
from larhits.errors import ConfigurationError, DegenerateMergeError, EmptyHitsError, MixedViewError
from larhits.geometry.views import ViewGeometry
from .hits import ProtoHit, RawDeposit, ViewTag
from .projection import VIEW_ORDER, project_event


@dataclass(frozen=True)
class DownsampleSettings:
    drift_resolution_cm: float = 0.5
    epsilon: float = FLOAT32_EPS
    drift_window: Literal["absolute", "directional"] = "absolute"

    @classmethod
    def from_cfg(cls, cfg: DownsampleCfg) -> "DownsampleSettings":
        return cls(
            drift_resolution_cm=cfg.drift_resolution_cm,
            epsilon=cfg.epsilon,
            drift_window=cfg.drift_window,
        )


def quantize_wire(wire: float, pitch: float, epsilon: float = FLOAT32_EPS) -> float:
    """Round a wire coordinate to the nearest multiple of pitch (ties go up)."""
    if pitch <= epsilon:
        raise ConfigurationError(f"Unfeasible wire pitch requested: {pitch}")
    return math.floor((wire + 0.5 * pitch) / pitch) * pitch


def compare_proto_hits(h1: ProtoHit, h2: ProtoHit, epsilon: float = FLOAT32_EPS) -> int:
    """
    Three-way comparison: wire, then drift (both with epsilon tolerance),
    then energy.
    """
    if abs(h2.wire - h1.wire) > epsilon:
        return -1 if h1.wire < h2.wire else 1
    if abs(h2.drift - h1.drift) > epsilon:
        return -1 if h1.drift < h2.drift else 1
    if h1.energy < h2.energy:
        return -1
    if h1.energy > h2.energy:
        return 1
    return 0


def sort_proto_hits(hits: List[ProtoHit], epsilon: float = FLOAT32_EPS) -> None:
    """Stable in-place sort by :func:`compare_proto_hits`."""
    hits.sort(key=cmp_to_key(lambda a, b: compare_proto_hits(a, b, epsilon)))


def is_merge_candidate(h1: ProtoHit, h2: ProtoHit, settings: DownsampleSettings) -> bool:
    if abs(h1.wire - h2.wire) >= settings.epsilon:
        return False
    if settings.drift_window == "directional":
        return h1.drift - h2.drift < settings.drift_resolution_cm
    return abs(h1.drift - h2.drift) < settings.drift_resolution_cm


def find_merge(hits: List[ProtoHit], settings: DownsampleSettings) -> Optional[int]:
    """Index i of the first adjacent pair (hits[i], hits[i+1]) that should merge, else None."""
    for i in range(len(hits) - 1):
        if is_merge_candidate(hits[i], hits[i + 1], settings):
            return i
    return None


def merge_pair(h1: ProtoHit, h2: ProtoHit) -> ProtoHit:
    """
    Composite of two hits on the same wire: h1's wire, energy-weighted
    mean drift, summed energy.
    """
    energy = h1.energy + h2.energy
    if energy <= 0.0:
        raise DegenerateMergeError(
            f"Non-positive energy sum {energy} merging hits at wire={h1.wire}"
        )
    drift = (h1.drift * h1.energy + h2.drift * h2.energy) / energy
    return ProtoHit(drift=drift, wire=h1.wire, energy=energy, view=h1.view)


def downsample_hits(
    hits: List[ProtoHit],
    view: ViewGeometry,
    settings: DownsampleSettings | None = None,
) -> List[ProtoHit]:
    """
    Quantize then merge one view's hits until no merge is possible.

    Hits are quantized in place, and only after every hit has passed the
    view check. The returned list holds the survivors in the
    (wire, drift, energy) order of the final round.

    Raises
    ------
    EmptyHitsError
        if ``hits`` is empty.
    MixedViewError
        if any hit is not of ``view.view``.
    ConfigurationError
        if the view's pitch is not above epsilon.
    """
    if settings is None:
        settings = DownsampleSettings()
    if not hits:
        raise EmptyHitsError(f"No hits supplied for view {view.view.name}")

    for hit in hits:
        if hit.view is not view.view:
            raise MixedViewError(
                f"Multiple hit types: found {hit.view.name} hit in {view.view.name} sequence"
            )
    for hit in hits:
        hit.wire = quantize_wire(hit.wire, view.wire_pitch_cm, settings.epsilon)

    work = list(hits)
    while True:
        sort_proto_hits(work, settings.epsilon)
        i = find_merge(work, settings)
        if i is None:
            return work
        work[i:i + 2] = [merge_pair(work[i], work[i + 1])]


def downsample_event(
    deposits: Iterable[RawDeposit],
    views: Mapping[ViewTag, ViewGeometry],
    settings: DownsampleSettings | None = None,
) -> List[ProtoHit]:
    """
    Project an event's deposits and downsample each view.

    Returns U hits, then V hits, then W hits. A view with no hits
    contributes nothing.
    """
    per_view = project_event(deposits, views)
    out: List[ProtoHit] = []
    for tag in VIEW_ORDER:
        if per_view[tag]:
            out.extend(downsample_hits(per_view[tag], views[tag], settings))
    return out
