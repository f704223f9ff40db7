from __future__ import annotations
from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Literal, List, Optional, Dict, Any, Union

import numpy as np

# float32 machine epsilon, the tolerance used for wire/drift comparisons
FLOAT32_EPS = float(np.finfo(np.float32).eps)

RECO_OPTIONS = (
    "full",
    "allhitscr",
    "nostitchingcr",
    "allhitsnu",
    "crremhitsslicecr",
    "crremhitsslicenu",
    "allhitsslicecr",
    "allhitsslicenu",
)


class RunCfg(BaseModel):
    """
    Global run controls.

    TOML:

    [run]
    n_events = -1               # -1 processes every event in the source
    skip_events = 0
    display_event_number = false
    print_status = false
    diagnostics_level = 1       # 0=off, 1=minimal, 2=verbose
    """

    n_events: int = -1
    skip_events: int = 0
    display_event_number: bool = False
    print_status: bool = False
    diagnostics_level: int = 1

    @field_validator("diagnostics_level")
    def _diag_range(cls, v: int) -> int:
        if v not in (0, 1, 2):
            raise ValueError("diagnostics_level must be 0, 1, or 2")
        return v

    @field_validator("skip_events")
    def _skip_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("skip_events must be >= 0")
        return v


class IOCfg(BaseModel):
    """
    I/O paths and event source description.

    TOML:

    [io]
    input_path   = "events.root"    # path or glob, or a list of them
    output_path  = "out/hits.h5"
    geometry_xml = "geometry.xml"   # optional, replaces [geometry]

    [io.adapter]
    type = "root"                   # "root" | "table"
    """

    input_path: Union[str, List[str]]
    output_path: str
    geometry_xml: Optional[str] = None

    # Adapter-specific sub-config, e.g. [io.adapter]
    adapter: Dict[str, Any] = Field(default_factory=dict)


class GeometryCfg(BaseModel):
    """
    Single-volume LArTPC geometry. Angles in radians, lengths in cm.
    """

    center_x_cm: float = 0.0
    center_y_cm: float = 0.0
    center_z_cm: float = 0.0
    width_x_cm: float = 0.0
    width_y_cm: float = 0.0
    width_z_cm: float = 0.0

    wire_angle_u_rad: float
    wire_angle_v_rad: float
    wire_angle_w_rad: float = 0.0

    wire_pitch_u_cm: float
    wire_pitch_v_cm: float
    wire_pitch_w_cm: float

    sigma_uvw: float = 1.51300001144
    drift_in_positive_x: bool = True


class DownsampleCfg(BaseModel):
    """
    Hit merging controls.

    drift_window = "absolute" merges same-wire neighbours when
    |drift1 - drift2| < drift_resolution_cm; "directional" uses the legacy
    drift1 - drift2 < drift_resolution_cm.
    """

    drift_resolution_cm: float = 0.5
    epsilon: float = FLOAT32_EPS
    drift_window: Literal["absolute", "directional"] = "absolute"

    @field_validator("drift_resolution_cm", "epsilon")
    def _positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("must be > 0")
        return v


class RecoCfg(BaseModel):
    """Reconstruction steering option handed to the downstream engine."""

    option: str = "full"

    @field_validator("option")
    def _known_option(cls, v: str) -> str:
        v = v.lower()
        if v not in RECO_OPTIONS:
            raise ValueError(f"Unrecognized reconstruction option: {v!r} (expected one of {RECO_OPTIONS})")
        return v


class VisCfg(BaseModel):
    export_png_on_write: bool = False
    # Event index (position in the output store) rendered to PNG
    event: int = 0


class Config(BaseModel):
    """
    Top-level TOML configuration.
    """

    run: RunCfg = Field(default_factory=RunCfg)
    io: IOCfg
    geometry: Optional[GeometryCfg] = None
    downsample: DownsampleCfg = Field(default_factory=DownsampleCfg)
    reco: RecoCfg = Field(default_factory=RecoCfg)
    vis: VisCfg = Field(default_factory=VisCfg)

    @model_validator(mode="after")
    def _geometry_source(self) -> "Config":
        if self.geometry is None and self.io.geometry_xml is None:
            raise ValueError("Either a [geometry] section or io.geometry_xml is required")
        return self
