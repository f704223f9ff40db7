from __future__ import annotations
from typing import Dict, Iterable, List, Mapping, Tuple

from .hits import ProtoHit, RawDeposit, ViewTag
from ..geometry.views import ViewGeometry

VIEW_ORDER: Tuple[ViewTag, ...] = (ViewTag.U, ViewTag.V, ViewTag.W)


def project_deposit(
    deposit: RawDeposit,
    views: Mapping[ViewTag, ViewGeometry],
) -> Tuple[ProtoHit, ProtoHit, ProtoHit]:
    """
    Project one 3D deposit into its U, V and W hits.

    All three share the drift coordinate (x); the wire coordinate is the
    rotated (y, z) position for U/V and z itself for W.
    """
    return tuple(
        ProtoHit(
            drift=deposit.x,
            wire=views[tag].wire_coordinate(deposit.y, deposit.z),
            energy=deposit.energy,
            view=tag,
        )
        for tag in VIEW_ORDER
    )


def project_event(
    deposits: Iterable[RawDeposit],
    views: Mapping[ViewTag, ViewGeometry],
) -> Dict[ViewTag, List[ProtoHit]]:
    """Project every deposit of an event; one hit list per view, input order kept."""
    per_view: Dict[ViewTag, List[ProtoHit]] = {tag: [] for tag in VIEW_ORDER}
    for deposit in deposits:
        for hit in project_deposit(deposit, views):
            per_view[hit.view].append(hit)
    return per_view
