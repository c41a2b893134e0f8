"""
Free-space tracking for one container packing run.

HeightMap stores, per footprint cell, the highest occupied Z. Floor height
queries take the max over every cell a footprint touches, so two footprints
that share any area always share a cell and can never interpenetrate.

FreeRectangleSet is the MaxRects structure of maximal free rectangles on the
container floor, split around every floor-level footprint and pruned of
rectangles contained in another.
"""

from __future__ import annotations

import math

import numpy as np

from carton_loader.models import FreeRect


class HeightMap:
    __slots__ = ("resolution", "grid_l", "grid_w", "cells", "_table")

    def __init__(self, length: float, width: float, resolution: float) -> None:
        self.resolution = float(resolution)
        self.grid_l = max(1, math.ceil(length / self.resolution))
        self.grid_w = max(1, math.ceil(width / self.resolution))
        self.cells: np.ndarray = np.zeros((self.grid_l, self.grid_w), dtype=np.float64)
        self._table: np.ndarray | None = None

    # ── Cell spans ───────────────────────────────────────────────────────

    def span(self, pos: float, size: float, grid: int) -> tuple[int, int]:
        start = math.floor(pos / self.resolution)
        end = min(grid, math.ceil((pos + size) / self.resolution))
        return start, end

    def grid_origins(self) -> list[tuple[float, float]]:
        """Origin of every cell, length index outer, width index inner."""
        res = self.resolution
        return [(i * res, j * res) for i in range(self.grid_l) for j in range(self.grid_w)]

    # ── Scalar queries ───────────────────────────────────────────────────

    def floor_height(self, pos_l: float, pos_w: float, length: float, width: float) -> float:
        i0, i1 = self.span(pos_l, length, self.grid_l)
        j0, j1 = self.span(pos_w, width, self.grid_w)
        if i0 >= i1 or j0 >= j1:
            return 0.0
        return float(self.cells[i0:i1, j0:j1].max())

    def raise_to(self, pos_l: float, pos_w: float, length: float, width: float, new_height: float) -> None:
        i0, i1 = self.span(pos_l, length, self.grid_l)
        j0, j1 = self.span(pos_w, width, self.grid_w)
        if i0 >= i1 or j0 >= j1:
            return
        self.cells[i0:i1, j0:j1] = new_height
        if self._table is not None:
            self._refresh(i0, i1, j0, j1)

    # ── Vectorized queries ───────────────────────────────────────────────

    def _sparse_table(self) -> np.ndarray:
        """
        2D sparse table for range-max queries: table[a, b, i, j] is the max of
        cells[i:i+2**a, j:j+2**b]. Entries that would run past the grid are unused.
        """
        if self._table is not None:
            return self._table

        levels_l = self.grid_l.bit_length()
        levels_w = self.grid_w.bit_length()
        table = np.zeros((levels_l, levels_w, self.grid_l, self.grid_w), dtype=np.float64)
        table[0, 0] = self.cells

        for a in range(1, levels_l):
            half = 1 << (a - 1)
            prev = table[a - 1, 0]
            table[a, 0, : self.grid_l - half] = np.maximum(prev[: self.grid_l - half], prev[half:])

        for a in range(levels_l):
            for b in range(1, levels_w):
                half = 1 << (b - 1)
                prev = table[a, b - 1]
                table[a, b, :, : self.grid_w - half] = np.maximum(prev[:, : self.grid_w - half], prev[:, half:])

        self._table = table
        return table

    def _refresh(self, i0: int, i1: int, j0: int, j1: int) -> None:
        """
        Bring the sparse table up to date after cells[i0:i1, j0:j1] changed.

        Entry [a, b, i, j] covers cells[i:i+2**a, j:j+2**b], so only i in
        [i0-2**a+1, i1) and j in [j0-2**b+1, j1) can change. Levels are rebuilt
        in order, each from the already refreshed level below it.
        """
        table = self._table
        levels_l, levels_w = table.shape[0], table.shape[1]
        table[0, 0, i0:i1, j0:j1] = self.cells[i0:i1, j0:j1]

        for a in range(1, levels_l):
            half = 1 << (a - 1)
            r0, r1 = max(0, i0 - (1 << a) + 1), min(i1, self.grid_l - (1 << a) + 1)
            if r0 < r1:
                table[a, 0, r0:r1, j0:j1] = np.maximum(
                    table[a - 1, 0, r0:r1, j0:j1], table[a - 1, 0, r0 + half:r1 + half, j0:j1]
                )

        for a in range(levels_l):
            r0, r1 = max(0, i0 - (1 << a) + 1), min(i1, self.grid_l - (1 << a) + 1)
            if r0 >= r1:
                continue
            for b in range(1, levels_w):
                half = 1 << (b - 1)
                c0, c1 = max(0, j0 - (1 << b) + 1), min(j1, self.grid_w - (1 << b) + 1)
                if c0 < c1:
                    table[a, b, r0:r1, c0:c1] = np.maximum(
                        table[a, b - 1, r0:r1, c0:c1], table[a, b - 1, r0:r1, c0 + half:c1 + half]
                    )

    def floor_heights(self, pos_l: np.ndarray, pos_w: np.ndarray, length: float, width: float) -> np.ndarray:
        """
        floor_height() for many positions at once.

        Positions whose span is empty or starts outside the grid get +inf so they
        can never be feasible.
        """
        res = self.resolution
        i0 = np.floor(pos_l / res).astype(np.int64)
        j0 = np.floor(pos_w / res).astype(np.int64)
        i1 = np.minimum(self.grid_l, np.ceil((pos_l + length) / res).astype(np.int64))
        j1 = np.minimum(self.grid_w, np.ceil((pos_w + width) / res).astype(np.int64))

        valid = (i0 < i1) & (j0 < j1) & (i0 >= 0) & (j0 >= 0)
        out = np.full(pos_l.shape, np.inf, dtype=np.float64)
        if not valid.any():
            return out

        i0, i1, j0, j1 = i0[valid], i1[valid], j0[valid], j1[valid]
        table = self._sparse_table()

        # floor(log2(n)) for n >= 1
        ka = np.frexp((i1 - i0).astype(np.float64))[1] - 1
        kb = np.frexp((j1 - j0).astype(np.float64))[1] - 1
        ia = i1 - (1 << ka)
        jb = j1 - (1 << kb)

        out[valid] = np.maximum(
            np.maximum(table[ka, kb, i0, j0], table[ka, kb, i0, jb]),
            np.maximum(table[ka, kb, ia, j0], table[ka, kb, ia, jb]),
        )
        return out


class FreeRectangleSet:
    """Maximal free rectangles in the footprint plane as (pos_l, pos_w, length, width)."""

    def __init__(self, length: float, width: float) -> None:
        self.length = length
        self.width = width
        self.rects: list[tuple[float, float, float, float]] = [(0.0, 0.0, length, width)]

    @staticmethod
    def intersects(a: tuple[float, float, float, float], b: tuple[float, float, float, float]) -> bool:
        return not (
            a[0] + a[2] <= b[0]
            or b[0] + b[2] <= a[0]
            or a[1] + a[3] <= b[1]
            or b[1] + b[3] <= a[1]
        )

    @staticmethod
    def contained_in(a: tuple[float, float, float, float], b: tuple[float, float, float, float]) -> bool:
        return (
            a[0] >= b[0]
            and a[1] >= b[1]
            and a[0] + a[2] <= b[0] + b[2]
            and a[1] + a[3] <= b[1] + b[3]
        )

    @classmethod
    def split(
        cls,
        free: tuple[float, float, float, float],
        used: tuple[float, float, float, float],
    ) -> list[tuple[float, float, float, float]]:
        if not cls.intersects(free, used):
            return [free]

        fl, fw, flen, fwid = free
        ul, uw, ulen, uwid = used
        pieces = []

        # below the used rect along the length axis
        if fl < ul < fl + flen:
            pieces.append((fl, fw, ul - fl, fwid))
        # beyond it along the length axis
        if ul + ulen < fl + flen:
            pieces.append((ul + ulen, fw, fl + flen - (ul + ulen), fwid))
        # below along the width axis
        if fw < uw < fw + fwid:
            pieces.append((fl, fw, flen, uw - fw))
        # beyond along the width axis
        if uw + uwid < fw + fwid:
            pieces.append((fl, uw + uwid, flen, fw + fwid - (uw + uwid)))

        return [p for p in pieces if p[2] > 0 and p[3] > 0]

    @classmethod
    def prune(cls, rects: list[tuple[float, float, float, float]]) -> list[tuple[float, float, float, float]]:
        pruned = []
        for i, rect in enumerate(rects):
            contained = False
            for j, other in enumerate(rects):
                if i == j:
                    continue
                # identical rects: keep the first one only
                if rect == other and j > i:
                    continue
                if cls.contained_in(rect, other):
                    contained = True
                    break
            if not contained:
                pruned.append(rect)
        return pruned

    def place(self, pos_l: float, pos_w: float, length: float, width: float) -> None:
        used = (pos_l, pos_w, length, width)
        updated: list[tuple[float, float, float, float]] = []
        for free in self.rects:
            updated.extend(self.split(free, used))
        self.rects = self.prune(updated)

    def as_models(self) -> list[FreeRect]:
        return [FreeRect(pos_l=r[0], pos_w=r[1], length=r[2], width=r[3]) for r in self.rects]
