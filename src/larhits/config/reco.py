# src/larhits/config/reco.py
from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import Dict

from larhits.config.schemas import RECO_OPTIONS
from larhits.errors import ConfigurationError


@dataclass(frozen=True)
class RecoSteering:
    """
    Steering flags passed to the downstream reconstruction engine.
    """
    run_all_hits_cosmic_reco: bool
    run_stitching: bool
    run_cosmic_hit_removal: bool
    run_slicing: bool
    run_neutrino_reco: bool
    run_cosmic_reco: bool
    perform_slice_id: bool

    def as_dict(self) -> Dict[str, bool]:
        return asdict(self)


# option -> (all-hits CR, stitching, CR hit removal, slicing, nu reco, CR reco, slice id)
_STEERING_TABLE = {
    "full":             (True,  True,  True,  True,  True,  True,  True),
    "allhitscr":        (True,  True,  False, False, False, False, False),
    "nostitchingcr":    (False, False, False, False, False, True,  False),
    "allhitsnu":        (False, False, False, False, True,  False, False),
    "crremhitsslicecr": (True,  True,  True,  True,  False, True,  False),
    "crremhitsslicenu": (True,  True,  True,  True,  True,  False, False),
    "allhitsslicecr":   (False, False, False, True,  False, True,  False),
    "allhitsslicenu":   (False, False, False, True,  True,  False, False),
}
assert set(_STEERING_TABLE) == set(RECO_OPTIONS)


def steering_for_option(option: str) -> RecoSteering:
    """Map a (case-insensitive) reconstruction option to steering flags."""
    flags = _STEERING_TABLE.get(option.lower())
    if flags is None:
        raise ConfigurationError(f"Unrecognized reconstruction option: {option}")
    return RecoSteering(*flags)
