from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class Group(BaseModel):
    """A box type plus the quantity requested of it."""

    id: str = Field(description="Opaque group identifier")
    name: str = Field(default="", description="Display name")
    # Dimensions are deliberately not sign-constrained: a non-positive edge
    # leaves the group without valid orientations instead of failing validation.
    length: float = Field(allow_inf_nan=False, description="Box length (mm)")
    width: float = Field(allow_inf_nan=False, description="Box width (mm)")
    height: float = Field(allow_inf_nan=False, description="Box height (mm)")
    weight: float = Field(default=0.0, ge=0, allow_inf_nan=False, description="Unit weight (kg)")
    quantity: int = Field(default=0, ge=0, description="Requested quantity")
    color: str = Field(default="#4a9eff", description="Display color, cosmetic only")
    inners_per_box: int = Field(default=0, ge=0, description="Inner packs per box, cosmetic only")
    allow_side_laying: Optional[bool] = Field(
        default=None,
        description="Permit non-upright orientations; None inherits the global flag",
    )

    @property
    def volume(self) -> float:
        return self.length * self.width * self.height


class Container(BaseModel):
    """One container instance with interior dimensions (mm)."""

    id: str = Field(default="container", description="Container instance identifier")
    label: str = Field(default="", description="Container type label")
    length: float = Field(allow_inf_nan=False, description="Interior length (mm)")
    width: float = Field(allow_inf_nan=False, description="Interior width (mm)")
    height: float = Field(allow_inf_nan=False, description="Interior height (mm)")
    weight_limit: Optional[float] = Field(default=None, description="Maximum gross weight (kg)")
    cost_weight: float = Field(default=1.0, ge=0, description="Relative procurement/shipping cost")
    allowed_groups: list[str] = Field(
        default_factory=list,
        description="Group ids this container may hold; empty means unrestricted",
    )

    @property
    def volume(self) -> float:
        return self.length * self.width * self.height

    def is_valid(self) -> bool:
        return self.length > 0 and self.width > 0 and self.height > 0


class ContainerType(BaseModel):
    """Catalog entry the recommender can instantiate any number of times."""

    label: str = Field(description="Type label, e.g. 20' Standard")
    length: Optional[float] = Field(default=None, description="Interior length (mm)")
    width: Optional[float] = Field(default=None, description="Interior width (mm)")
    height: Optional[float] = Field(default=None, description="Interior height (mm)")
    weight_limit: Optional[float] = Field(default=None, description="Maximum gross weight (kg)")
    cost_weight: float = Field(default=1.0, ge=0, description="Relative cost weight")

    def is_complete(self) -> bool:
        return bool(self.length and self.width and self.height and self.weight_limit)

    def instantiate(self, index: int) -> Container:
        return Container(
            id=f"{self.label}#{index + 1}",
            label=self.label,
            length=float(self.length or 0.0),
            width=float(self.width or 0.0),
            height=float(self.height or 0.0),
            weight_limit=self.weight_limit,
            cost_weight=self.cost_weight,
        )


class Orientation(BaseModel):
    """Assignment of a box's edges to the container's length, width and height axes."""

    length: float
    width: float
    height: float
    label: str
    stability_score: float = Field(default=1.0, ge=0)

    @property
    def dims(self) -> tuple[float, float, float]:
        return (self.length, self.width, self.height)


class Placement(BaseModel):
    """One packed box instance."""

    group_id: str = Field(description="Owning group id")
    orientation: str = Field(description="Orientation label, e.g. LWH")
    length: float = Field(description="Effective length along the container length axis")
    width: float = Field(description="Effective width along the container width axis")
    height: float = Field(description="Effective height")
    pos_l: float = Field(ge=0, description="Footprint origin along the length axis")
    pos_w: float = Field(ge=0, description="Footprint origin along the width axis")
    floor_height: float = Field(ge=0, description="Z at which the base rests")
    x: float = Field(description="Center along the length axis")
    y: float = Field(description="Center along the width axis")
    z: float = Field(description="Center height")
    volume: float = 0.0
    weight: float = 0.0
    support: float = Field(default=0.0, ge=0, le=1, description="Supported fraction of the base")

    @property
    def top(self) -> float:
        return self.floor_height + self.height

    def bounds(self) -> tuple[float, float, float, float, float, float]:
        return (
            self.pos_l,
            self.pos_w,
            self.floor_height,
            self.pos_l + self.length,
            self.pos_w + self.width,
            self.floor_height + self.height,
        )


class GroupResult(BaseModel):
    """Per-group breakdown inside a PackingResult."""

    id: str
    name: str = ""
    color: str = ""
    length: float
    width: float
    height: float
    unit_weight: float = 0.0
    requested_quantity: int = 0
    placed_quantity: int = 0
    overweight_carton: bool = False
    preferred_orientation: Optional[str] = Field(default=None, description="Best whole-grid orientation label for this container")
    orientation_stability: Optional[float] = Field(default=None, description="Stability score of the preferred orientation")
    placements: list[Placement] = Field(default_factory=list)


class Point3D(BaseModel):
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0


class StabilityIssue(BaseModel):
    group_id: str
    position: Point3D
    support: float
    recommendation: str


class StabilityReport(BaseModel):
    score: float = 1.0
    issues: list[StabilityIssue] = Field(default_factory=list)
    is_stable: bool = True
    recommendation: str = ""


class WeightDistribution(BaseModel):
    center_of_mass: Point3D = Field(default_factory=Point3D)
    is_balanced: bool = True
    deviation: float = 0.0
    total_weight: float = 0.0
    weight_limit: Optional[float] = None
    overweight: bool = False
    weight_utilization: Optional[float] = Field(default=None, description="Percent of the weight limit")


class FreeRect(BaseModel):
    pos_l: float
    pos_w: float
    length: float
    width: float


class PackingResult(BaseModel):
    """Aggregate result for one container."""

    container_length: float
    container_width: float
    container_height: float
    total_boxes: int = 0
    total_layers: int = 0
    total_volume: float = 0.0
    used_length: float = 0.0
    used_width: float = 0.0
    used_height: float = 0.0
    groups: list[GroupResult] = Field(default_factory=list)
    placements: list[Placement] = Field(default_factory=list)
    stability: StabilityReport = Field(default_factory=StabilityReport)
    weight_distribution: WeightDistribution = Field(default_factory=WeightDistribution)
    volume_utilization: float = Field(default=0.0, description="Percent of container volume")
    packing_density: float = 0.0
    free_floor_area: float = 0.0
    free_floor_rects: list[FreeRect] = Field(default_factory=list)
    iterations: int = 0
    truncated: bool = False


class ContainerPackingResult(PackingResult):
    container_id: str
    container_label: str = ""
    container_index: int
    total_weight: float = 0.0


class RecommendationCandidate(BaseModel):
    containers: list[Container] = Field(default_factory=list)
    total_cost: float = 0.0
    total_placed: int = 0
    fallback: bool = False

    @property
    def labels(self) -> list[str]:
        return [c.label for c in self.containers]


class TileRow(BaseModel):
    rotated: bool
    count_l: int
    box_length: float
    box_width: float


class TileResult(BaseModel):
    """Best uniform or interlocked arrangement of a single box type."""

    pattern: str = "none"
    count_l: Optional[int] = 0
    count_w: Optional[int] = 0
    layers: int = 0
    per_layer: int = 0
    total: int = 0
    box_length: float = 0.0
    box_width: float = 0.0
    box_height: float = 0.0
    used_length: float = 0.0
    used_width: float = 0.0
    used_height: float = 0.0
    pattern_rows: Optional[list[TileRow]] = None
    container_swapped: bool = False
    stability_score: float = 0.0
    volume_efficiency: float = 0.0
    effective_total: int = 0
    desired_too_high: bool = False
