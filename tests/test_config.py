from pathlib import Path

import pytest
from pydantic import ValidationError

from larhits.config.load import load_config, load_geometry_xml
from larhits.config.reco import steering_for_option
from larhits.config.schemas import Config, FLOAT32_EPS
from larhits.errors import ConfigurationError

GEOMETRY_TOML = """
[geometry]
wire_angle_u_rad = 0.623
wire_angle_v_rad = -0.623
wire_pitch_u_cm = 0.4669
wire_pitch_v_cm = 0.4669
wire_pitch_w_cm = 0.4792
"""

GEOMETRY_XML = """<?xml version="1.0"?>
<Geometry>
    <CenterX>0.0</CenterX>
    <CenterY>0.0</CenterY>
    <CenterZ>250.0</CenterZ>
    <WidthX>360.0</WidthX>
    <WidthY>600.0</WidthY>
    <WidthZ>500.0</WidthZ>
    <WireAngleU>0.623</WireAngleU>
    <WireAngleV>-0.623</WireAngleV>
    <WireAngleW>0.0</WireAngleW>
    <WirePitchU>0.4669</WirePitchU>
    <WirePitchV>0.4669</WirePitchV>
    <WirePitchW>0.4792</WirePitchW>
</Geometry>
"""


def _write(tmp_path: Path, name: str, text: str) -> Path:
    p = tmp_path / name
    p.write_text(text)
    return p


def test_load_config_defaults(tmp_path):
    cfg_path = _write(tmp_path, "run.toml", '[io]\ninput_path = "in.root"\noutput_path = "out.h5"\n' + GEOMETRY_TOML)
    cfg = load_config(cfg_path)
    assert cfg.run.n_events == -1
    assert cfg.run.skip_events == 0
    assert cfg.downsample.drift_resolution_cm == 0.5
    assert cfg.downsample.epsilon == FLOAT32_EPS
    assert cfg.downsample.drift_window == "absolute"
    assert cfg.reco.option == "full"
    assert cfg.geometry.wire_pitch_w_cm == pytest.approx(0.4792)
    assert cfg.geometry.sigma_uvw == pytest.approx(1.513)
    assert cfg.geometry.drift_in_positive_x is True


def test_input_path_accepts_file_list(tmp_path):
    cfg_path = _write(
        tmp_path, "run.toml",
        '[io]\ninput_path = ["root://eos/a.root", "b.root"]\noutput_path = "out.h5"\n' + GEOMETRY_TOML,
    )
    assert load_config(cfg_path).io.input_path == ["root://eos/a.root", "b.root"]

def test_geometry_xml_replaces_geometry_table(tmp_path):
    _write(tmp_path, "geo.xml", GEOMETRY_XML)
    cfg_path = _write(
        tmp_path, "run.toml",
        '[io]\ninput_path = "in.root"\noutput_path = "out.h5"\ngeometry_xml = "geo.xml"\n',
    )
    cfg = load_config(cfg_path)
    assert cfg.geometry.center_z_cm == 250.0
    assert cfg.geometry.width_y_cm == 600.0
    assert cfg.geometry.wire_angle_v_rad == pytest.approx(-0.623)

def test_geometry_xml_missing_element(tmp_path):
    p = _write(tmp_path, "geo.xml", GEOMETRY_XML.replace("<WirePitchW>0.4792</WirePitchW>", ""))
    with pytest.raises(ConfigurationError, match="WirePitchW"):
        load_geometry_xml(p)

def test_geometry_xml_unreadable(tmp_path):
    p = _write(tmp_path, "geo.xml", "<Geometry><CenterX>")
    with pytest.raises(ConfigurationError):
        load_geometry_xml(p)
    with pytest.raises(ConfigurationError):
        load_geometry_xml(tmp_path / "missing.xml")

def test_geometry_xml_non_numeric(tmp_path):
    p = _write(tmp_path, "geo.xml", GEOMETRY_XML.replace(">0.4669<", ">wide<", 1))
    with pytest.raises(ConfigurationError, match="WirePitchU"):
        load_geometry_xml(p)

def test_config_requires_a_geometry_source():
    with pytest.raises(ValidationError):
        Config(io={"input_path": "a", "output_path": "b"})

def test_config_validates_run_and_reco():
    base = {
        "io": {"input_path": "a", "output_path": "b"},
        "geometry": {
            "wire_angle_u_rad": 0.6, "wire_angle_v_rad": -0.6,
            "wire_pitch_u_cm": 0.3, "wire_pitch_v_cm": 0.3, "wire_pitch_w_cm": 0.3,
        },
    }
    assert Config(**base, reco={"option": "AllHitsNu"}).reco.option == "allhitsnu"
    with pytest.raises(ValidationError):
        Config(**base, reco={"option": "everything"})
    with pytest.raises(ValidationError):
        Config(**base, run={"diagnostics_level": 3})
    with pytest.raises(ValidationError):
        Config(**base, run={"skip_events": -1})
    with pytest.raises(ValidationError):
        Config(**base, downsample={"drift_window": "sideways"})


@pytest.mark.parametrize("option, expected", [
    ("full", (True, True, True, True, True, True, True)),
    ("AllHitsCR", (True, True, False, False, False, False, False)),
    ("nostitchingcr", (False, False, False, False, False, True, False)),
    ("allhitsnu", (False, False, False, False, True, False, False)),
    ("crremhitsslicecr", (True, True, True, True, False, True, False)),
    ("crremhitsslicenu", (True, True, True, True, True, False, False)),
    ("allhitsslicecr", (False, False, False, True, False, True, False)),
    ("allhitsslicenu", (False, False, False, True, True, False, False)),
])
def test_steering_for_option(option, expected):
    assert tuple(steering_for_option(option).as_dict().values()) == expected

def test_steering_unknown_option():
    with pytest.raises(ConfigurationError):
        steering_for_option("bogus")
