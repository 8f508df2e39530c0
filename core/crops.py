# =============================================================================
# core/crops.py  —  Crop profile table
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Holds the agronomic thresholds for every supported crop as one lookup
#   table.  core/advisory.py runs a single generic evaluator over these
#   profiles; crop-specific quirks are flags on the profile:
#
#     excess_rain_blocks    →  beans: too much rain forces WAIT
#     irrigation_dependent  →  rice: low rain means "only with irrigation"
#     standing_water        →  rice: paddy caveat in the irrigation advisory
#     min_humidity          →  tea/coffee: humidity bonus line
#     RainRule.BELOW        →  sorghum/millet: low rainfall is preferred
#
# THRESHOLD SEMANTICS:
#   temp_min/temp_max are compared with the MEAN DAILY MAX temperature.
#   rain_min/rain_max are mm summed over the 7-day planting window.
# =============================================================================

from typing import Optional, Union

from core.errors import ValidationError
from core.models import Crop, CropProfile, RainRule


def _profile(crop: Crop, group: str, temp: tuple[float, float], **kwargs) -> CropProfile:
    return CropProfile(name=crop.label, group=group, temp_min=temp[0], temp_max=temp[1], **kwargs)


_CEREAL_TIPS = {
    Crop.MAIZE: (
        "Maize grows best at 18-30°C and needs 30-100 mm of rain in the first weeks.",
        "Plant at the onset of reliable rains; use certified hybrid seed.",
        "Apply DAP at planting and top-dress with CAN when knee-high.",
    ),
    Crop.WHEAT: (
        "Wheat prefers cool conditions of 15-25°C.",
        "Needs 20-60 mm during establishment; avoid waterlogged fields.",
        "Watch for rust during humid spells.",
    ),
    Crop.RICE: (
        "Rice thrives at 20-35°C with plenty of water (50 mm+ per week).",
        "Without reliable rain, plant only where irrigation is available.",
        "Keep paddies level so standing water stays even.",
    ),
    Crop.SORGHUM: (
        "Sorghum tolerates heat (22-35°C) and drought well.",
        "Prefers modest rainfall; below 50 mm a week is fine.",
        "Scare birds near maturity to protect the grain.",
    ),
    Crop.MILLET: (
        "Millet is drought hardy and grows at 22-35°C.",
        "Light rainfall (under 50 mm a week) suits it best.",
        "Thin seedlings early to reduce competition.",
    ),
}

_LEGUME_TIPS = {
    Crop.BEANS: (
        "Beans grow best at 16-28°C.",
        "Need 20-70 mm of rain; heavy rain causes root rot and flower drop.",
        "Plant on well-drained soil and avoid working wet fields.",
    ),
    Crop.COWPEA: (
        "Cowpea prefers warm weather (20-32°C) and is fairly drought tolerant.",
        "25-70 mm of rain is ideal at establishment.",
        "Scout for aphids and pod borers after flowering.",
    ),
    Crop.PIGEON_PEA: (
        "Pigeon pea grows at 20-32°C and tolerates dry spells once established.",
        "25-70 mm of rain gives good germination.",
        "Intercropping with maize or sorghum works well.",
    ),
    Crop.GROUNDNUT: (
        "Groundnut needs warm conditions (20-32°C) and light, sandy soils.",
        "25-70 mm of rain at planting; dry weather is needed at harvest.",
        "Apply gypsum at flowering for better pod filling.",
    ),
}

_ROOT_TIPS = {
    Crop.CASSAVA: (
        "Cassava grows at 20-32°C and needs 40 mm+ of rain to establish cuttings.",
        "Once established it tolerates long dry periods.",
        "Use disease-free cuttings to avoid mosaic virus.",
    ),
    Crop.SWEET_POTATO: (
        "Sweet potato prefers 15-27°C.",
        "30-80 mm of rain helps vines root; avoid waterlogging.",
        "Plant vines on ridges or mounds.",
    ),
    Crop.POTATO: (
        "Potato does best in cool weather (15-27°C).",
        "30-80 mm of rain at planting; too much rain raises blight risk.",
        "Use certified seed tubers and hill soil around stems.",
    ),
}

_VEGETABLE_TIPS = {
    Crop.VEGETABLES: (
        "Most vegetables grow well at 15-32°C.",
        "Need at least 15 mm of water a week; irrigate if rain falls short.",
        "Mulch beds to keep soil moist and cool.",
    ),
    Crop.TOMATO: (
        "Tomato grows best at 15-28°C.",
        "20-60 mm of water a week; wet foliage raises blight risk.",
        "Stake plants and water at the base, not on the leaves.",
    ),
    Crop.CABBAGE: (
        "Cabbage prefers cool weather (15-28°C).",
        "20-60 mm of water a week keeps heads forming.",
        "Check for diamondback moth under the leaves.",
    ),
    Crop.KALE: (
        "Kale (sukuma wiki) grows at 15-28°C.",
        "20-60 mm of water a week; harvest lower leaves regularly.",
        "Top-dress with nitrogen every few weeks.",
    ),
    Crop.ONION: (
        "Onion grows at 15-28°C.",
        "20-60 mm of water a week; reduce watering as bulbs mature.",
        "Keep beds weed free; onions compete poorly.",
    ),
}

_CASH_TIPS = {
    Crop.TEA: (
        "Tea grows best at 18-26°C with high humidity (60%+).",
        "Needs well-distributed rainfall through the year.",
        "Pluck two leaves and a bud every 7-14 days.",
    ),
    Crop.COFFEE: (
        "Coffee prefers 18-26°C and humid conditions (60%+).",
        "Shade trees help in hot, dry spells.",
        "Watch for coffee berry disease in wet weather.",
    ),
    Crop.SUGARCANE: (
        "Sugarcane grows at 20-32°C and needs 40 mm+ of water a week.",
        "Plant setts in moist soil; irrigate in dry months.",
        "Keep fields weed free for the first three months.",
    ),
    Crop.COTTON: (
        "Cotton needs warm weather (20-30°C).",
        "25-70 mm of rain at sowing; dry weather at boll opening.",
        "Scout for bollworms from flowering onward.",
    ),
    Crop.SUNFLOWER: (
        "Sunflower grows at 18-28°C.",
        "20-60 mm of rain at establishment; drought tolerant later.",
        "Protect heads from birds as seeds mature.",
    ),
    Crop.BANANA: (
        "Banana needs warm conditions (22-32°C) and plenty of water (50 mm+ a week).",
        "Mulch heavily and irrigate during dry spells.",
        "Remove extra suckers, keeping one mother, daughter and granddaughter.",
    ),
}


CROP_PROFILES: dict[Crop, CropProfile] = {
    # --- Cereals ---
    Crop.MAIZE: _profile(Crop.MAIZE, "cereal", (18, 30), rain_rule=RainRule.RANGE,
                         rain_min=30, rain_max=100, guidance=_CEREAL_TIPS[Crop.MAIZE]),
    Crop.WHEAT: _profile(Crop.WHEAT, "cereal", (15, 25), rain_rule=RainRule.RANGE,
                         rain_min=20, rain_max=60, guidance=_CEREAL_TIPS[Crop.WHEAT]),
    Crop.RICE: _profile(Crop.RICE, "cereal", (20, 35), rain_rule=RainRule.MINIMUM,
                        rain_min=50, irrigation_dependent=True, standing_water=True,
                        guidance=_CEREAL_TIPS[Crop.RICE]),
    Crop.SORGHUM: _profile(Crop.SORGHUM, "cereal", (22, 35), rain_rule=RainRule.BELOW,
                           rain_max=50, guidance=_CEREAL_TIPS[Crop.SORGHUM]),
    Crop.MILLET: _profile(Crop.MILLET, "cereal", (22, 35), rain_rule=RainRule.BELOW,
                          rain_max=50, guidance=_CEREAL_TIPS[Crop.MILLET]),

    # --- Legumes ---
    Crop.BEANS: _profile(Crop.BEANS, "legume", (16, 28), rain_rule=RainRule.RANGE,
                         rain_min=20, rain_max=70, excess_rain_blocks=True,
                         guidance=_LEGUME_TIPS[Crop.BEANS]),
    Crop.COWPEA: _profile(Crop.COWPEA, "legume", (20, 32), rain_rule=RainRule.RANGE,
                          rain_min=25, rain_max=70, guidance=_LEGUME_TIPS[Crop.COWPEA]),
    Crop.PIGEON_PEA: _profile(Crop.PIGEON_PEA, "legume", (20, 32), rain_rule=RainRule.RANGE,
                              rain_min=25, rain_max=70, guidance=_LEGUME_TIPS[Crop.PIGEON_PEA]),
    Crop.GROUNDNUT: _profile(Crop.GROUNDNUT, "legume", (20, 32), rain_rule=RainRule.RANGE,
                             rain_min=25, rain_max=70, guidance=_LEGUME_TIPS[Crop.GROUNDNUT]),

    # --- Roots and tubers ---
    Crop.CASSAVA: _profile(Crop.CASSAVA, "root", (20, 32), rain_rule=RainRule.MINIMUM,
                           rain_min=40, guidance=_ROOT_TIPS[Crop.CASSAVA]),
    Crop.SWEET_POTATO: _profile(Crop.SWEET_POTATO, "root", (15, 27), rain_rule=RainRule.RANGE,
                                rain_min=30, rain_max=80, guidance=_ROOT_TIPS[Crop.SWEET_POTATO]),
    Crop.POTATO: _profile(Crop.POTATO, "root", (15, 27), rain_rule=RainRule.RANGE,
                          rain_min=30, rain_max=80, guidance=_ROOT_TIPS[Crop.POTATO]),

    # --- Vegetables ---
    Crop.VEGETABLES: _profile(Crop.VEGETABLES, "vegetable", (15, 32), rain_rule=RainRule.MINIMUM,
                              rain_min=15, guidance=_VEGETABLE_TIPS[Crop.VEGETABLES]),
    Crop.TOMATO: _profile(Crop.TOMATO, "vegetable", (15, 28), rain_rule=RainRule.RANGE,
                          rain_min=20, rain_max=60, guidance=_VEGETABLE_TIPS[Crop.TOMATO]),
    Crop.CABBAGE: _profile(Crop.CABBAGE, "vegetable", (15, 28), rain_rule=RainRule.RANGE,
                           rain_min=20, rain_max=60, guidance=_VEGETABLE_TIPS[Crop.CABBAGE]),
    Crop.KALE: _profile(Crop.KALE, "vegetable", (15, 28), rain_rule=RainRule.RANGE,
                        rain_min=20, rain_max=60, guidance=_VEGETABLE_TIPS[Crop.KALE]),
    Crop.ONION: _profile(Crop.ONION, "vegetable", (15, 28), rain_rule=RainRule.RANGE,
                         rain_min=20, rain_max=60, guidance=_VEGETABLE_TIPS[Crop.ONION]),

    # --- Cash crops ---
    Crop.TEA: _profile(Crop.TEA, "cash crop", (18, 26), rain_rule=RainRule.NONE,
                       min_humidity=0.60, guidance=_CASH_TIPS[Crop.TEA]),
    Crop.COFFEE: _profile(Crop.COFFEE, "cash crop", (18, 26), rain_rule=RainRule.NONE,
                          min_humidity=0.60, guidance=_CASH_TIPS[Crop.COFFEE]),
    Crop.SUGARCANE: _profile(Crop.SUGARCANE, "cash crop", (20, 32), rain_rule=RainRule.MINIMUM,
                             rain_min=40, guidance=_CASH_TIPS[Crop.SUGARCANE]),
    Crop.COTTON: _profile(Crop.COTTON, "cash crop", (20, 30), rain_rule=RainRule.RANGE,
                          rain_min=25, rain_max=70, guidance=_CASH_TIPS[Crop.COTTON]),
    Crop.SUNFLOWER: _profile(Crop.SUNFLOWER, "cash crop", (18, 28), rain_rule=RainRule.RANGE,
                             rain_min=20, rain_max=60, guidance=_CASH_TIPS[Crop.SUNFLOWER]),
    Crop.BANANA: _profile(Crop.BANANA, "cash crop", (22, 32), rain_rule=RainRule.MINIMUM,
                          rain_min=50, guidance=_CASH_TIPS[Crop.BANANA]),
}

# Used when a rule needs thresholds but no crop was named
DEFAULT_PROFILE = CropProfile(
    name="your crop",
    group="general",
    temp_min=18,
    temp_max=30,
    rain_rule=RainRule.MINIMUM,
    rain_min=20,
)

CROP_GROUPS: dict[str, list[Crop]] = {}
for _crop, _p in CROP_PROFILES.items():
    CROP_GROUPS.setdefault(_p.group, []).append(_crop)


def supported_crops() -> list[str]:
    return [c.value for c in Crop]


def parse_crop(value: Union[str, Crop, None]) -> Optional[Crop]:
    """Normalise a caller-supplied crop name ("Sweet Potato" → Crop.SWEET_POTATO).

    Returns None for a missing/blank value.

    Raises:
        ValidationError: if the name is not a supported crop.
    """
    if value is None or isinstance(value, Crop):
        return value
    key = str(value).strip().lower().replace("-", "_").replace(" ", "_")
    if not key:
        return None
    try:
        return Crop(key)
    except ValueError:
        raise ValidationError(
            f"Unknown crop '{value}'. Supported crops: {', '.join(supported_crops())}."
        ) from None


def get_profile(crop: Optional[Crop]) -> CropProfile:
    if crop is None:
        return DEFAULT_PROFILE
    return CROP_PROFILES[crop]
