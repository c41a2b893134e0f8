"""Engine configuration; loads overrides from the environment (and a local .env via python-dotenv)."""

from __future__ import annotations

import os
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

ENV_PREFIX = "CARTON_LOADER_"


class PackingConfig(BaseModel):
    """Constants shared by the packer, analyzers and recommender."""

    model_config = ConfigDict(frozen=True)

    stability_threshold: float = Field(default=0.7, ge=0, le=1, description="Support below this is an issue")
    weight_distribution_tolerance: float = Field(default=0.15, ge=0, description="Allowed deviation as a share of the floor diagonal")
    height_map_resolution: float = Field(default=50.0, gt=0, description="Height-map cell size (mm)")
    epsilon: float = Field(default=0.001, gt=0, description="Tolerance for floating point comparisons")
    max_iterations: int = Field(default=50_000, gt=0, description="Placement loop ceiling per container")
    orientation_height_factor: float = Field(default=0.5, ge=0, description="Height penalty for side-laid orientations")
    enable_stability_check: bool = True
    enable_weight_optimization: bool = True
    max_containers_per_type: int = Field(default=4, ge=1, description="Recommender search bound per type")
    carton_gross_max: Optional[float] = Field(default=None, gt=0, description="Per-carton weight limit (kg)")


DEFAULT_CONFIG = PackingConfig()


def load_config(env_file: str | None = None) -> PackingConfig:
    """
    Build a PackingConfig from CARTON_LOADER_* environment variables.

    A .env file is loaded first when present; it never overrides variables
    already set in the process environment.
    """
    load_dotenv(env_file)

    overrides: dict[str, Any] = {}
    for name in PackingConfig.model_fields:
        value = os.getenv(ENV_PREFIX + name.upper())
        if value is not None and value != "":
            overrides[name] = value

    # pydantic coerces the raw strings ("0.8", "true", "1000") and rejects bad values
    return PackingConfig.model_validate(overrides)
