from __future__ import annotations
from typing import List, Mapping, Sequence, Tuple
import h5py
import numpy as np
from datetime import datetime, timezone
from larhits.config.schemas import Config
from larhits.config.load import snapshot_config_toml, json_dumps
from larhits.config.reco import RecoSteering
from larhits.geometry.views import ViewGeometry
from larhits.physics.calo_hits import CaloHit
from larhits.physics.hits import DepositEvent, ProtoHit, ViewTag

FORMAT_VERSION = "1.0"


def write_init(
    path: str,
    cfg_path: str,
    cfg: Config,
    views: Mapping[ViewTag, ViewGeometry],
    steering: RecoSteering,
) -> h5py.File:
    f = h5py.File(path, "w")
    # Root attrs
    f.attrs["format_version"] = FORMAT_VERSION
    f.attrs["created_utc"] = datetime.now(timezone.utc).isoformat()
    f.attrs["software"] = "larhits 0.1.0"
    f.attrs["config_text"] = snapshot_config_toml(cfg_path)

    # /meta
    geo = cfg.geometry
    meta = f.create_group("meta")
    meta.attrs["tpc.center_cm"] = np.array([geo.center_x_cm, geo.center_y_cm, geo.center_z_cm])
    meta.attrs["tpc.width_cm"] = np.array([geo.width_x_cm, geo.width_y_cm, geo.width_z_cm])
    meta.attrs["tpc.sigma_uvw"] = geo.sigma_uvw
    meta.attrs["tpc.drift_in_positive_x"] = geo.drift_in_positive_x
    meta.attrs["wire.angle_w_rad"] = geo.wire_angle_w_rad
    for tag, view in views.items():
        meta.attrs[f"wire.pitch_{tag.name.lower()}_cm"] = view.wire_pitch_cm
        if view.wire_angle_rad is not None:
            meta.attrs[f"wire.angle_{tag.name.lower()}_rad"] = view.wire_angle_rad
    meta.attrs["downsample.drift_resolution_cm"] = cfg.downsample.drift_resolution_cm
    meta.attrs["downsample.epsilon"] = cfg.downsample.epsilon
    meta.attrs["downsample.drift_window"] = cfg.downsample.drift_window
    meta.attrs["reco.option"] = cfg.reco.option
    meta.attrs["reco.steering"] = json_dumps(steering.as_dict())
    return f


def write_event_hits(
    f: h5py.File,
    results: Sequence[Tuple[DepositEvent, List[CaloHit]]],
) -> None:
    """
    Store the finished hits of every processed event as ragged columns.

    Layout:

    /hits/event_ptr   (N_events+1,) int64    CSR pointers into the flat hit arrays
    /hits/drift_cm    (M,) float64
    /hits/wire_cm     (M,) float64
    /hits/energy      (M,) float64
    /hits/view        (M,) uint8           0=U, 1=V, 2=W

    /events/index       (N_events,) int64  event number in the source
    /events/n_deposits  (N_events,) int64  deposits before projection
    """
    n_events = len(results)
    ptr = np.zeros(n_events + 1, dtype=np.int64)
    for i, (_, hits) in enumerate(results):
        ptr[i + 1] = ptr[i] + len(hits)

    M = int(ptr[-1])
    drift = np.empty(M, dtype=np.float64)
    wire = np.empty(M, dtype=np.float64)
    energy = np.empty(M, dtype=np.float64)
    view = np.empty(M, dtype=np.uint8)

    ev_index = np.zeros(n_events, dtype=np.int64)
    ev_ndep = np.zeros(n_events, dtype=np.int64)

    w = 0
    for i, (ev, hits) in enumerate(results):
        ev_index[i] = ev.index
        ev_ndep[i] = len(ev.deposits)
        for h in hits:
            drift[w] = h.position_cm[0]
            wire[w] = h.position_cm[2]
            energy[w] = h.input_energy
            view[w] = h.hit_type.value
            w += 1

    g_hits = f.require_group("hits")
    g_ev = f.require_group("events")

    def _replace_or_create(grp: h5py.Group, name: str, data: np.ndarray):
        if name in grp:
            del grp[name]
        grp.create_dataset(name, data=data)

    _replace_or_create(g_hits, "event_ptr", ptr)
    _replace_or_create(g_hits, "drift_cm", drift)
    _replace_or_create(g_hits, "wire_cm", wire)
    _replace_or_create(g_hits, "energy", energy)
    _replace_or_create(g_hits, "view", view)
    _replace_or_create(g_ev, "index", ev_index)
    _replace_or_create(g_ev, "n_deposits", ev_ndep)


def read_event_hits(path: str, event: int) -> List[ProtoHit]:
    """Read back the hits of the event stored at position ``event``."""
    path = str(path)
    with h5py.File(path, "r") as f:
        g = f["hits"]
        ptr = g["event_ptr"][...]
        if not 0 <= event < len(ptr) - 1:
            raise KeyError(f"event {event} not found in {path} ({len(ptr) - 1} events stored)")
        lo, hi = int(ptr[event]), int(ptr[event + 1])
        drift = g["drift_cm"][lo:hi]
        wire = g["wire_cm"][lo:hi]
        energy = g["energy"][lo:hi]
        view = g["view"][lo:hi]
    return [
        ProtoHit(drift=float(d), wire=float(w), energy=float(e), view=ViewTag(int(v)))
        for d, w, e, v in zip(drift, wire, energy, view)
    ]
