"""FastAPI endpoints for the carton loader."""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

from fastapi import FastAPI, HTTPException, Response
from pydantic import BaseModel, Field, ValidationError

from carton_loader.config import load_config
from carton_loader.containers import get_container_type
from carton_loader.models import Container, ContainerType, Group
from carton_loader.packing.multi_container import pack_containers, summarize
from carton_loader.recommender import rank_candidates
from carton_loader.tiling import best_tile

logger = logging.getLogger(__name__)

# Loaded once; every request shares the same immutable configuration
config = load_config()

app = FastAPI(
    title="Carton Loader API",
    description="Container loading, recommendation and tiling service",
)


class PackRequest(BaseModel):
    groups: list[Group]
    containers: list[Container]
    allow_side_laying: bool = True
    spread_across_containers: bool = False


class RecommendRequest(BaseModel):
    groups: list[Group]
    container_types: Optional[list[ContainerType]] = Field(default=None, description="Explicit catalog")
    presets: Optional[list[str]] = Field(default=None, description="Preset keys, e.g. ['20', '40HC']")
    allow_side_laying: bool = True


class BoxDimensions(BaseModel):
    length: float
    width: float
    height: float


class TileRequest(BaseModel):
    box: BoxDimensions
    container: Container
    allow_side_laying: bool = True
    desired_count: Optional[int] = None


def validation_details(exc: ValidationError) -> list[str]:
    """One readable line per pydantic error, e.g. 'groups.0.length: Field required'."""
    details = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ()))
        details.append(f"{loc}: {err.get('msg', 'invalid value')}" if loc else err.get("msg", "invalid value"))
    return details


def missing_information(details: list[str]) -> Response:
    """Friendly 422 body shared by every endpoint."""
    error_response = {
        "error": "MISSING_INFORMATION",
        "summary": "Missing information\nPlease enter the missing details to run the calculation.",
        "details": details,
    }
    return Response(
        content=json.dumps(error_response),
        status_code=422,
        media_type="application/json",
    )


def resolve_catalog(req: RecommendRequest) -> Optional[list[ContainerType]]:
    """Explicit types plus resolved presets; None selects the default catalog."""
    if req.container_types is None and req.presets is None:
        return None
    catalog = list(req.container_types or [])
    catalog += [get_container_type(key) for key in req.presets or []]
    return catalog


@app.post("/pack")
async def pack(request: dict[str, Any]) -> Any:
    """
    Pack groups into an ordered list of containers.

    Input (request body):
        {
            "groups": [{"id": "g1", "length": 500, "width": 400, "height": 300, "weight": 12, "quantity": 40}],
            "containers": [{"id": "c1", "length": 5895, "width": 2350, "height": 2392, "weight_limit": 28230}],
            "allow_side_laying": true,
            "spread_across_containers": false
        }

    Returns:
        {"results": [per-container result], "summary": {...}}
    """
    try:
        try:
            req = PackRequest.model_validate(request)
        except ValidationError as e:
            return missing_information(validation_details(e))

        results = pack_containers(
            req.groups,
            req.containers,
            req.allow_side_laying,
            req.spread_across_containers,
            config,
        )
        summary = summarize(results, req.groups)

        logger.info(
            f"containers={summary['containers']}, "
            f"placed={summary['total_placed']}, "
            f"unplaced={summary['total_unplaced']}"
        )
        return {"results": [r.model_dump() for r in results], "summary": summary}

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"ERROR in /pack endpoint: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/recommend")
async def recommend(request: dict[str, Any]) -> Any:
    """
    Recommend a low-cost container configuration for the groups.

    Catalog: `container_types` and/or `presets`; the default catalog when neither is given.
    Returns the best configuration's containers plus every ranked candidate.
    """
    try:
        try:
            req = RecommendRequest.model_validate(request)
            catalog = resolve_catalog(req)
        except ValidationError as e:
            return missing_information(validation_details(e))
        except ValueError as e:
            return missing_information([str(e)])

        candidates = rank_candidates(req.groups, catalog, req.allow_side_laying, config)
        best = candidates[0] if candidates else None

        logger.info(
            f"candidates={len(candidates)}, "
            f"best={' + '.join(best.labels) if best else 'none'}"
        )
        return {
            "containers": [c.model_dump() for c in best.containers] if best else [],
            "candidates": [c.model_dump() for c in candidates],
        }

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"ERROR in /recommend endpoint: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/tile")
async def tile(request: dict[str, Any]) -> Any:
    """Best single-box arrangement for one container."""
    try:
        try:
            req = TileRequest.model_validate(request)
        except ValidationError as e:
            return missing_information(validation_details(e))

        result = best_tile(
            req.box.length,
            req.box.width,
            req.box.height,
            req.container.length,
            req.container.width,
            req.container.height,
            req.allow_side_laying,
            req.desired_count,
        )

        logger.info(f"pattern={result.pattern}, total={result.total}, effective={result.effective_total}")
        return result.model_dump()

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"ERROR in /tile endpoint: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@app.get("/health")
async def health() -> dict[str, Any]:
    """Health check endpoint."""
    return {"ok": True}
