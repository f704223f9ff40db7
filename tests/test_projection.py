import math

import pytest

from larhits.geometry.views import ViewGeometry, views_from_geometry
from larhits.config.schemas import GeometryCfg
from larhits.errors import ConfigurationError, InvalidDepositError, StopProcessingError
from larhits.physics.calo_hits import to_calo_hits
from larhits.physics.hits import RawDeposit, ViewTag
from larhits.physics.projection import project_deposit, project_event

GEO = GeometryCfg(
    wire_angle_u_rad=0.6,
    wire_angle_v_rad=-0.6,
    wire_pitch_u_cm=0.3,
    wire_pitch_v_cm=0.3,
    wire_pitch_w_cm=0.5,
)


def test_views_from_geometry():
    views = views_from_geometry(GEO)
    assert list(views) == [ViewTag.U, ViewTag.V, ViewTag.W]
    assert views[ViewTag.U] == ViewGeometry(ViewTag.U, 0.3, 0.6)
    assert views[ViewTag.W].wire_angle_rad is None
    assert views[ViewTag.W].wire_pitch_cm == 0.5

@pytest.mark.parametrize("field", ["wire_pitch_u_cm", "wire_pitch_v_cm", "wire_pitch_w_cm"])
def test_views_from_geometry_rejects_unfeasible_pitch(field):
    geo = GEO.model_copy(update={field: 0.0})
    with pytest.raises(ConfigurationError, match="Unfeasible wire pitch"):
        views_from_geometry(geo)

@pytest.mark.parametrize("energy", [0.0, -1.0, float("nan")])
def test_raw_deposit_requires_positive_energy(energy):
    with pytest.raises(InvalidDepositError) as exc:
        RawDeposit(0.0, 0.0, 1.0, energy)
    assert isinstance(exc.value, StopProcessingError)

def test_project_deposit_rotates_u_and_v_only():
    dep = RawDeposit(x=1.0, y=2.0, z=3.0, energy=0.5)
    hu, hv, hw = project_deposit(dep, views_from_geometry(GEO))
    assert (hu.view, hv.view, hw.view) == (ViewTag.U, ViewTag.V, ViewTag.W)
    assert hu.drift == hv.drift == hw.drift == 1.0
    assert hu.energy == hv.energy == hw.energy == 0.5
    assert math.isclose(hu.wire, 3.0 * math.cos(0.6) - 2.0 * math.sin(0.6))
    assert math.isclose(hv.wire, 3.0 * math.cos(-0.6) - 2.0 * math.sin(-0.6))
    assert hw.wire == 3.0

def test_project_event_keeps_input_order_per_view():
    deps = [RawDeposit(float(i), 0.0, float(10 - i), 1.0 + i) for i in range(4)]
    per_view = project_event(deps, views_from_geometry(GEO))
    for tag in ViewTag:
        assert [h.energy for h in per_view[tag]] == [1.0, 2.0, 3.0, 4.0]
        assert all(h.view is tag for h in per_view[tag])

def test_project_event_returns_independent_hits():
    deps = [RawDeposit(0.0, 0.0, 1.0, 1.0)]
    per_view = project_event(deps, views_from_geometry(GEO))
    per_view[ViewTag.U][0].wire = 99.0
    assert per_view[ViewTag.V][0].wire != 99.0
    assert per_view[ViewTag.W][0].wire == 1.0

def test_calo_hits_carry_position_energy_and_view():
    deps = [RawDeposit(4.0, 0.0, 2.0, 0.7)]
    hits = project_event(deps, views_from_geometry(GEO))[ViewTag.W]
    (calo,) = to_calo_hits(hits)
    assert calo.position_cm == (4.0, 0.0, 2.0)
    assert calo.input_energy == calo.electromagnetic_energy == calo.hadronic_energy == 0.7
    assert calo.hit_type is ViewTag.W
    assert calo.cell_size0_cm == calo.cell_size1_cm == calo.cell_thickness_cm == 0.5
