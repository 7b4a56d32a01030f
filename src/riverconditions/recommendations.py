"""
Static fly and species recommendations keyed by river and calendar month.
"""

from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from .rivers import normalize_river_id

DEFAULT_METHOD = "Dry/Dropper"

# (first_month, last_month, flies); months are 1-12, inclusive.
MCKENZIE_SEASONAL_FLIES: Tuple[Tuple[int, int, Tuple[str, ...]], ...] = (
    (
        1,
        3,
        (
            "Blue-winged Olive Parachute",
            "Pheasant Tail Nymph",
            "Black Elk Hair Caddis",
            "Sparkle Dun",
        ),
    ),
    (
        4,
        7,
        ("Yellow Stimulators", "Turck's Tarantula", "Sofa Pillows", "Hairwing Drake"),
    ),
    (
        8,
        11,
        ("Blue-winged Olive Parachute", "Pheasant Tail Nymph", "Humpy's", "Adams"),
    ),
)
MCKENZIE_OFF_SEASON_FLIES = ("Pheasant Tail Nymph", "Adams")

DEFAULT_FLIES = ("Woolly Bugger", "Beadhead Prince", "Zebra Midge")

RIVER_TIPS = {
    "mckenzie_hayden": "Fish riffles and tailouts during warmer parts of the day.",
}
DEFAULT_TIP = "Focus on deep seams and slow eddies."

TARGET_SPECIES = {
    "mckenzie_hayden": ("Rainbow Trout", "Cutthroat Trout", "Whitefish"),
    "willamette_eugene": ("Rainbow Trout", "Cutthroat Trout", "Steelhead"),
}
DEFAULT_SPECIES = ("Trout",)


@dataclass
class FlyRecommendation:
    method: str
    flies: List[str] = field(default_factory=list)
    tip: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def seasonal_flies_for_mckenzie(month: int) -> List[str]:
    """Fly patterns for the McKenzie in a given month (1-12)."""
    for first, last, flies in MCKENZIE_SEASONAL_FLIES:
        if first <= month <= last:
            return list(flies)
    return list(MCKENZIE_OFF_SEASON_FLIES)


def recommend_fly_setup(
    river_id: str, on_date: Optional[date] = None
) -> FlyRecommendation:
    """Recommend a rig, flies and a tip for a river, defaulting to today."""
    key = normalize_river_id(river_id)
    month = (on_date or date.today()).month

    if key == "mckenzie_hayden":
        flies = seasonal_flies_for_mckenzie(month)
    else:
        flies = list(DEFAULT_FLIES)

    return FlyRecommendation(
        method=DEFAULT_METHOD,
        flies=flies,
        tip=RIVER_TIPS.get(key, DEFAULT_TIP),
    )


def get_target_species(river_id: str) -> List[str]:
    """Species worth targeting on a river; generic trout if unknown."""
    return list(TARGET_SPECIES.get(normalize_river_id(river_id), DEFAULT_SPECIES))
