import json
import os
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULTS_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'defaults.json')


class ThiessenConfig(BaseModel):
    """Run parameters, validated once before the pipeline starts."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    random_seed: int = Field(default=42, description="Seed for the triangulation insertion order")
    extension_factor: float = Field(
        default=4.0,
        ge=4.0,
        description="Ray length for hull cells, as a multiple of the radius covering the clip extent",
    )
    max_workers: int = Field(
        default=1,
        ge=1,
        description=(
            "Worker threads for per-site clipping. Clipping is pure Python and holds "
            "the GIL, so extra workers overlap sites but do not add throughput"
        ),
    )
    deadline_seconds: Optional[float] = Field(
        default=None, gt=0, description="Wall-clock budget checked between pipeline stages"
    )
    contained_sites_only: bool = Field(
        default=False, description="Drop sites that are not strictly inside the clip boundary"
    )
    allow_single_site: bool = Field(
        default=True, description="Accept a single site, which then owns the whole boundary"
    )
    spatial_reference: Optional[Any] = Field(
        default=None, description="Overrides the spatial reference passed through from the sites"
    )


def load_config(path: Optional[str] = None, **overrides) -> ThiessenConfig:
    """Load JSON defaults (packaged ones when path is None) and apply overrides."""
    with open(path or DEFAULTS_PATH, 'r') as f:
        values = json.load(f)
    values.update(overrides)
    return ThiessenConfig(**values)
