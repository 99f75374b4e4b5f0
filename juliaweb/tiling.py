"""Split a large canvas into fixed-size tiles and stitch rendered tiles back together."""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import List, Sequence

import numpy as np

from juliaweb.params import RenderParameters

DEFAULT_TILE_SIZE = 256
CANVAS_MAX_DIMENSION = 65536

@dataclass(frozen=True)
class Tile:
    col: int
    row: int
    px_left: int
    px_top: int
    params: RenderParameters

def plan_tiles(params: RenderParameters, tile_size: int = DEFAULT_TILE_SIZE) -> List[Tile]:
    if tile_size <= 0:
        raise ValueError("tile_size must be > 0")

    canvas_w = params.width
    canvas_h = params.height
    span_x = params.max_x - params.min_x
    span_y = params.max_y - params.min_y

    cols = math.ceil(canvas_w / tile_size)
    rows = math.ceil(canvas_h / tile_size)

    tiles: List[Tile] = []
    for row in range(rows):
        for col in range(cols):
            px_left = col * tile_size
            px_top = row * tile_size
            # Edge tiles are clamped to the canvas.
            tile_w = min(tile_size, canvas_w - px_left)
            tile_h = min(tile_size, canvas_h - px_top)

            tile_params = replace(
                params,
                min_x=params.min_x + span_x * px_left / canvas_w,
                max_x=params.min_x + span_x * (px_left + tile_w) / canvas_w,
                min_y=params.min_y + span_y * px_top / canvas_h,
                max_y=params.min_y + span_y * (px_top + tile_h) / canvas_h,
                width=tile_w,
                height=tile_h,
            )
            tiles.append(Tile(col=col, row=row, px_left=px_left, px_top=px_top, params=tile_params))
    return tiles

def stitch_tiles(params: RenderParameters, tiles: Sequence[Tile], buffers: Sequence[np.ndarray]) -> np.ndarray:
    if len(tiles) != len(buffers):
        raise ValueError(f"Got {len(buffers)} buffers for {len(tiles)} tiles")

    canvas = np.full((params.height, params.width), np.nan, dtype=np.float32)
    for tile, buf in zip(tiles, buffers):
        tw = tile.params.width
        th = tile.params.height
        if buf.shape[0] != tw * th:
            raise ValueError(f"Tile ({tile.col},{tile.row}) expected {tw * th} values, got {buf.shape[0]}")
        canvas[tile.px_top:tile.px_top + th, tile.px_left:tile.px_left + tw] = buf.reshape(th, tw)
    return canvas.reshape(-1)
