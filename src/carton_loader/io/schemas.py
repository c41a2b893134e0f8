"""JSON configuration document (export/import) and its mapping to engine models."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

from carton_loader.models import Container, Group

DOCUMENT_VERSION = "1.0"

GROUP_COLORS = ["#4a9eff", "#f59e0b", "#10b981", "#ef4444", "#8b5cf6"]

# Defaults applied to missing (or zero) fields on import
DEFAULT_GROUP_DIMS = (300.0, 300.0, 200.0)
DEFAULT_CONTAINER_TYPE = "20' Standard (5895 × 2350 mm x 2392mm)"
DEFAULT_CONTAINER_DIMS = (5895.0, 2350.0, 2392.0)
DEFAULT_WEIGHT_LIMIT = 28000.0


def group_color(index: int) -> str:
    return GROUP_COLORS[index % len(GROUP_COLORS)]


class _Document(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class DimensionsSchema(_Document):
    length: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None


class GroupEntry(_Document):
    name: Optional[str] = None
    dimensions: Optional[DimensionsSchema] = None
    quantity: Optional[int] = Field(default=None, ge=0)
    weight: Optional[float] = Field(default=None, ge=0)
    inners_per_box: Optional[int] = Field(default=None, alias="innersPerBox", ge=0)
    color: Optional[str] = None
    allow_vertical_flip: Optional[bool] = Field(default=None, alias="allowVerticalFlip")


class ContainerEntry(_Document):
    type: Optional[str] = None
    dimensions: Optional[DimensionsSchema] = None
    weight_limit: Optional[float] = Field(default=None, alias="weightLimit")
    restricted_to_groups: list[str] = Field(default_factory=list, alias="restrictedToGroups")


class SettingsSchema(_Document):
    allow_vertical_flip: bool = Field(default=True, alias="allowVerticalFlip")
    spread_across_containers: bool = Field(default=False, alias="spreadAcrossContainers")


class ConfigDocument(_Document):
    """Persisted configuration: groups, containers and global settings."""

    export_date: Optional[str] = Field(default=None, alias="exportDate")
    version: str = DOCUMENT_VERSION
    groups: list[GroupEntry]
    containers: list[ContainerEntry]
    settings: SettingsSchema = Field(default_factory=SettingsSchema)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, indent=2)


def export_document(
    groups: Sequence[Group],
    containers: Sequence[Container],
    settings: SettingsSchema | None = None,
) -> ConfigDocument:
    """Document view of the engine input; allow-lists are written as group names."""
    names_by_id = {g.id: g.name for g in groups}
    return ConfigDocument(
        export_date=datetime.now(timezone.utc).isoformat(),
        groups=[
            GroupEntry(
                name=g.name,
                dimensions=DimensionsSchema(length=g.length, width=g.width, height=g.height),
                quantity=g.quantity,
                weight=g.weight,
                inners_per_box=g.inners_per_box,
                color=g.color,
                allow_vertical_flip=g.allow_side_laying is not False,
            )
            for g in groups
        ],
        containers=[
            ContainerEntry(
                type=c.label,
                dimensions=DimensionsSchema(length=c.length, width=c.width, height=c.height),
                weight_limit=c.weight_limit,
                restricted_to_groups=[names_by_id[gid] for gid in c.allowed_groups if gid in names_by_id],
            )
            for c in containers
        ],
        settings=settings or SettingsSchema(),
    )


def import_document(data: dict[str, Any] | str) -> tuple[list[Group], list[Container], SettingsSchema]:
    """
    Engine models from a document (dict or JSON text).

    Raises pydantic.ValidationError when the groups or containers arrays are missing.
    """
    if isinstance(data, str):
        doc = ConfigDocument.model_validate_json(data)
    else:
        doc = ConfigDocument.model_validate(data)

    groups = []
    for index, entry in enumerate(doc.groups):
        dims = entry.dimensions or DimensionsSchema()
        groups.append(
            Group(
                id=f"group-{index + 1}",
                name=entry.name or f"Group {index + 1}",
                length=dims.length or DEFAULT_GROUP_DIMS[0],
                width=dims.width or DEFAULT_GROUP_DIMS[1],
                height=dims.height or DEFAULT_GROUP_DIMS[2],
                quantity=entry.quantity or 0,
                weight=entry.weight or 0.0,
                inners_per_box=entry.inners_per_box or 0,
                color=entry.color or group_color(index),
                allow_side_laying=entry.allow_vertical_flip is not False,
            )
        )

    ids_by_name: dict[str, str] = {}
    for g in groups:
        ids_by_name.setdefault(g.name, g.id)

    containers = []
    for index, entry in enumerate(doc.containers):
        dims = entry.dimensions or DimensionsSchema()
        containers.append(
            Container(
                id=f"container-{index + 1}",
                label=entry.type or DEFAULT_CONTAINER_TYPE,
                length=dims.length or DEFAULT_CONTAINER_DIMS[0],
                width=dims.width or DEFAULT_CONTAINER_DIMS[1],
                height=dims.height or DEFAULT_CONTAINER_DIMS[2],
                weight_limit=entry.weight_limit or DEFAULT_WEIGHT_LIMIT,
                allowed_groups=[ids_by_name[name] for name in entry.restricted_to_groups if name in ids_by_name],
            )
        )

    return groups, containers, doc.settings
