"""Tests for API output formatting and input validation."""

from __future__ import annotations

from fastapi.testclient import TestClient

from carton_loader.api import app

client = TestClient(app)


def test_health() -> None:
    """Test that the health check answers ok."""
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"ok": True}


def test_pack_response_has_results_and_summary() -> None:
    """Test that /pack returns per-container results and a summary."""
    request = {
        "groups": [{"id": "A", "length": 500, "width": 500, "height": 500, "weight": 20, "quantity": 10}],
        "containers": [
            {"id": "c1", "length": 1000, "width": 1000, "height": 500, "weight_limit": 1000},
            {"id": "c2", "length": 1000, "width": 1000, "height": 500, "weight_limit": 1000},
        ],
    }

    response = client.post("/pack", json=request)

    assert response.status_code == 200
    data = response.json()
    assert [r["container_id"] for r in data["results"]] == ["c1", "c2"]
    assert [r["total_boxes"] for r in data["results"]] == [4, 4]

    summary = data["summary"]
    assert summary["total_requested"] == 10
    assert summary["total_placed"] == 8
    assert summary["total_unplaced"] == 2

    first = data["results"][0]
    for key in ("placements", "groups", "stability", "weight_distribution", "volume_utilization", "total_weight"):
        assert key in first
    assert len(first["placements"]) == 4


def test_pack_even_spread() -> None:
    """Test that /pack honours the even-spread flag."""
    request = {
        "groups": [{"id": "A", "length": 500, "width": 500, "height": 500, "quantity": 5}],
        "containers": [
            {"id": "c1", "length": 1000, "width": 1000, "height": 500},
            {"id": "c2", "length": 1000, "width": 1000, "height": 500},
        ],
        "spread_across_containers": True,
    }

    data = client.post("/pack", json=request).json()

    assert [r["total_boxes"] for r in data["results"]] == [3, 2]


def test_missing_information_is_friendly_422() -> None:
    """Test that a missing groups array gives the friendly 422 body."""
    response = client.post("/pack", json={"containers": [{"length": 1000, "width": 1000, "height": 1000}]})

    assert response.status_code == 422
    data = response.json()
    assert data["error"] == "MISSING_INFORMATION"
    assert "summary" in data
    assert any(d.startswith("groups") for d in data["details"])


def test_malformed_dimension_is_reported() -> None:
    """Test that a non-numeric dimension is named in the 422 details."""
    request = {
        "groups": [{"id": "A", "length": "wide", "width": 500, "height": 500, "quantity": 1}],
        "containers": [{"length": 1000, "width": 1000, "height": 1000}],
    }

    response = client.post("/pack", json=request)

    assert response.status_code == 422
    assert any("groups.0.length" in d for d in response.json()["details"])


def test_recommend_with_explicit_types() -> None:
    """Test that /recommend searches an explicit catalog."""
    request = {
        "groups": [{"id": "cube", "length": 100, "width": 100, "height": 100, "quantity": 240}],
        "container_types": [
            {"label": "A", "length": 1000, "width": 1000, "height": 100, "weight_limit": 10000, "cost_weight": 1.0},
            {"label": "B", "length": 1000, "width": 2500, "height": 100, "weight_limit": 10000, "cost_weight": 1.5},
        ],
    }

    response = client.post("/recommend", json=request)

    assert response.status_code == 200
    data = response.json()
    assert [c["label"] for c in data["containers"]] == ["B"]
    assert data["candidates"][0]["total_cost"] == 1.5


def test_recommend_with_presets() -> None:
    """Test that /recommend resolves preset keys case-insensitively."""
    request = {
        "groups": [{"id": "g", "length": 500, "width": 400, "height": 300, "quantity": 20}],
        "presets": ["20", "40hc"],
    }

    data = client.post("/recommend", json=request).json()

    assert [c["label"] for c in data["containers"]] == ["20' Standard"]


def test_recommend_unknown_preset() -> None:
    """Test that an unknown preset key is rejected with 422."""
    request = {
        "groups": [{"id": "g", "length": 500, "width": 400, "height": 300, "quantity": 20}],
        "presets": ["99"],
    }

    response = client.post("/recommend", json=request)

    assert response.status_code == 422
    assert "Unknown container preset" in response.json()["details"][0]


def test_tile() -> None:
    """Test that /tile reports the best pattern and the desired count."""
    request = {
        "box": {"length": 500, "width": 500, "height": 500},
        "container": {"length": 1000, "width": 1000, "height": 1000},
        "desired_count": 6,
    }

    response = client.post("/tile", json=request)

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 8
    assert data["effective_total"] == 6
    assert data["desired_too_high"] is False
