# src/carton_loader/containers.py
from __future__ import annotations

from carton_loader.models import ContainerType

# Interior usable dims (mm), gross weight limit (kg) and relative cost weight.
# Lower cost weight = more cost efficient, e.g. 1x 40HC (1.5) beats 2x 20 (2.0).
CONTAINER_PRESETS_MM: dict[str, dict[str, float]] = {
    "20":   {"length": 5895,  "width": 2350, "height": 2392, "weight_limit": 28230, "cost_weight": 1.0},
    "40":   {"length": 12029, "width": 2350, "height": 2392, "weight_limit": 26700, "cost_weight": 1.4},
    "40HC": {"length": 12024, "width": 2350, "height": 2697, "weight_limit": 26460, "cost_weight": 1.5},
    "45HC": {"length": 13556, "width": 2352, "height": 2700, "weight_limit": 27700, "cost_weight": 1.8},
}

PRESET_LABELS: dict[str, str] = {
    "20": "20' Standard",
    "40": "40' Standard",
    "40HC": "40' High Cube",
    "45HC": "45' High Cube",
}

# Catalog searched by the recommender when the caller does not supply one
DEFAULT_RECOMMENDATION_KEYS: tuple[str, ...] = ("20", "40HC")


def get_container_type(preset: str) -> ContainerType:
    key = preset.strip().upper()
    if key not in CONTAINER_PRESETS_MM:
        raise ValueError(f"Unknown container preset '{preset}'. Valid: {sorted(CONTAINER_PRESETS_MM.keys())}")
    return ContainerType(label=PRESET_LABELS[key], **CONTAINER_PRESETS_MM[key])


def default_catalog() -> list[ContainerType]:
    return [get_container_type(key) for key in DEFAULT_RECOMMENDATION_KEYS]
