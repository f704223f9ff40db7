from __future__ import annotations
from .schemas import Config, GeometryCfg
from pathlib import Path
from xml.etree import ElementTree
import json

from larhits.errors import ConfigurationError

try:
    import tomllib  # py311+
except ModuleNotFoundError:  # pragma: no cover
    import tomli as tomllib  # py<=310

# XML element name -> GeometryCfg field
_XML_GEOMETRY_FIELDS = {
    "CenterX": "center_x_cm",
    "CenterY": "center_y_cm",
    "CenterZ": "center_z_cm",
    "WidthX": "width_x_cm",
    "WidthY": "width_y_cm",
    "WidthZ": "width_z_cm",
    "WireAngleU": "wire_angle_u_rad",
    "WireAngleV": "wire_angle_v_rad",
    "WireAngleW": "wire_angle_w_rad",
    "WirePitchU": "wire_pitch_u_cm",
    "WirePitchV": "wire_pitch_v_cm",
    "WirePitchW": "wire_pitch_w_cm",
}


def load_config(path: str | Path) -> Config:
    """
    Load and validate a TOML config.

    If [io].geometry_xml is set, the XML geometry replaces any [geometry]
    table; relative XML paths resolve against the config file's directory.
    """
    p = Path(path)
    data = tomllib.loads(p.read_text())
    cfg = Config(**data)
    if cfg.io.geometry_xml is not None:
        xml_path = Path(cfg.io.geometry_xml)
        if not xml_path.is_absolute():
            xml_path = p.parent / xml_path
        cfg.geometry = load_geometry_xml(xml_path)
    return cfg


def load_geometry_xml(path: str | Path) -> GeometryCfg:
    """
    Read the detector geometry from an XML file whose root element holds
    one child element per parameter, e.g. ``<WirePitchU>0.3</WirePitchU>``.
    """
    p = Path(path)
    try:
        root = ElementTree.parse(p).getroot()
    except (OSError, ElementTree.ParseError) as exc:
        raise ConfigurationError(f"Invalid geometry xml file: {p} ({exc})") from exc

    values = {}
    for tag, field_name in _XML_GEOMETRY_FIELDS.items():
        elem = root.find(tag)
        if elem is None or elem.text is None:
            raise ConfigurationError(f"Missing geometry parameter {tag}")
        try:
            values[field_name] = float(elem.text.strip())
        except ValueError as exc:
            raise ConfigurationError(f"Unable to read geometry component {tag}: {elem.text!r}") from exc
    return GeometryCfg(**values)


def snapshot_config_toml(path: str | Path) -> str:
    """Return the raw TOML text for embedding in HDF5 metadata."""
    return Path(path).read_text()


def json_dumps(obj) -> str:
    return json.dumps(obj, separators=(",", ":"), ensure_ascii=False)
