from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from carton_loader.config import load_config
from carton_loader.io.schemas import import_document
from carton_loader.packing.multi_container import pack_containers, summarize
from carton_loader.recommender import rank_candidates
from carton_loader.tiling import best_tile

logger = logging.getLogger(__name__)


def load_input(path: Path):
    """Groups, containers and settings from a saved configuration document."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return import_document(data)
    except (json.JSONDecodeError, ValidationError) as e:
        raise ValueError(f"Unreadable configuration document {path}: {e}") from e


def run_pack(groups, containers, settings, config) -> dict[str, Any]:
    results = pack_containers(
        groups,
        containers,
        settings.allow_vertical_flip,
        settings.spread_across_containers,
        config,
    )
    summary = summarize(results, groups)
    print(
        f"Packed {summary['total_placed']}/{summary['total_requested']} into "
        f"{summary['containers_used']}/{summary['containers']} container(s), "
        f"Unplaced {summary['total_unplaced']}"
    )
    for r in results:
        print(
            f"  {r.container_id} ({r.container_label}): boxes={r.total_boxes} layers={r.total_layers} "
            f"Fill={r.volume_utilization:.1f}% Weight={r.total_weight:.1f} "
            f"Stability={r.stability.score:.2f}"
        )
    return {"results": [r.model_dump() for r in results], "summary": summary}


def run_recommend(groups, settings, config) -> dict[str, Any]:
    candidates = rank_candidates(groups, None, settings.allow_vertical_flip, config)
    if not candidates:
        print("No container configuration can hold these groups")
        return {"containers": [], "candidates": []}

    best = candidates[0]
    suffix = " (estimate)" if best.fallback else ""
    print(f"Recommended: {' + '.join(best.labels)} cost={best.total_cost:.2f} placed={best.total_placed}{suffix}")
    return {
        "containers": [c.model_dump() for c in best.containers],
        "candidates": [c.model_dump() for c in candidates],
    }


def run_tile(groups, containers, settings) -> dict[str, Any]:
    """Tiles the first group into the first container; its quantity is the desired count."""
    if not groups or not containers:
        raise ValueError("Tile mode needs at least one group and one container")
    g, c = groups[0], containers[0]
    allow = g.allow_side_laying if g.allow_side_laying is not None else settings.allow_vertical_flip
    result = best_tile(g.length, g.width, g.height, c.length, c.width, c.height, allow, g.quantity or None)
    print(
        f"Pattern={result.pattern} Total={result.total} ({result.per_layer}/layer x {result.layers}) "
        f"Effective={result.effective_total}"
    )
    if result.desired_too_high:
        print(f"Desired {g.quantity} exceeds the {result.total} that fit")
    return result.model_dump()


def main():
    parser = argparse.ArgumentParser(description="Carton Loader CLI")
    parser.add_argument("--input", required=True, help="Input configuration document (JSON)")
    parser.add_argument("--output", required=True, help="Output result JSON file")
    parser.add_argument(
        "--mode",
        choices=["pack", "recommend", "tile"],
        default="pack",
        help="pack: fill the document's containers; recommend: pick containers; tile: single-box pattern",
    )
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--env-file", default=None, help="Optional .env file with CARTON_LOADER_* settings")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = load_config(args.env_file)
    groups, containers, settings = load_input(Path(args.input))
    logger.debug("Loaded %d group(s), %d container(s)", len(groups), len(containers))

    if args.mode == "recommend":
        output = run_recommend(groups, settings, config)
    elif args.mode == "tile":
        output = run_tile(groups, containers, settings)
    else:
        output = run_pack(groups, containers, settings, config)

    out_path = Path(args.output)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    with open(out_path, "w", encoding="utf-8") as f:
        json.dump(output, f, indent=2, sort_keys=True)
    print(f"Result written to {args.output}")


if __name__ == "__main__":
    main()
