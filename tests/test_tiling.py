import numpy as np
import pytest

from juliaweb.params import RenderParameters
from juliaweb.renderers.cpu_pool import render
from juliaweb.tiling import plan_tiles, stitch_tiles


def _canvas(width, height):
    return RenderParameters(min_x=-2.0, max_x=2.0, min_y=-1.5, max_y=1.5, c=-0.8 + 0.156j, width=width, height=height, max_iter=32)


def test_plan_clamps_edge_tiles():
    tiles = plan_tiles(_canvas(600, 300), 256)
    assert [(t.col, t.row) for t in tiles] == [(0, 0), (1, 0), (2, 0), (0, 1), (1, 1), (2, 1)]
    assert [t.params.width for t in tiles[:3]] == [256, 256, 88]
    assert [t.params.height for t in tiles[::3]] == [256, 44]


def test_single_tile_covers_small_canvas():
    canvas = _canvas(100, 50)
    (tile,) = plan_tiles(canvas, 256)
    assert (tile.px_left, tile.px_top) == (0, 0)
    assert tile.params == canvas


def test_tile_bounds_are_contiguous():
    canvas = _canvas(600, 300)
    tiles = plan_tiles(canvas, 256)
    assert tiles[0].params.min_x == canvas.min_x
    assert tiles[0].params.max_x == tiles[1].params.min_x
    assert tiles[1].params.max_x == tiles[2].params.min_x
    assert tiles[2].params.max_x == pytest.approx(canvas.max_x)
    assert tiles[0].params.max_y == tiles[3].params.min_y
    assert tiles[3].params.max_y == pytest.approx(canvas.max_y)


def test_tiles_keep_constant_and_iterations():
    for tile in plan_tiles(_canvas(300, 300), 128):
        assert tile.params.c == -0.8 + 0.156j
        assert tile.params.max_iter == 32


def test_plan_rejects_bad_tile_size():
    with pytest.raises(ValueError):
        plan_tiles(_canvas(10, 10), 0)


def test_stitch_places_tiles_row_major():
    canvas = _canvas(5, 3)
    tiles = plan_tiles(canvas, 2)
    buffers = [np.full(t.params.width * t.params.height, i, dtype=np.float32) for i, t in enumerate(tiles)]
    out = stitch_tiles(canvas, tiles, buffers).reshape(3, 5)
    assert out.tolist() == [
        [0, 0, 1, 1, 2],
        [0, 0, 1, 1, 2],
        [3, 3, 4, 4, 5],
    ]


def test_stitch_rendered_tiles_fill_canvas():
    canvas = _canvas(20, 12)
    tiles = plan_tiles(canvas, 8)
    buffers = [render(t.params, max_workers=2) for t in tiles]
    out = stitch_tiles(canvas, tiles, buffers)
    assert out.shape == (20 * 12,)
    assert not np.isnan(out).any()


def test_stitch_rejects_mismatched_buffers():
    canvas = _canvas(4, 4)
    tiles = plan_tiles(canvas, 2)
    with pytest.raises(ValueError):
        stitch_tiles(canvas, tiles, [np.zeros(4, dtype=np.float32)])
    with pytest.raises(ValueError):
        stitch_tiles(canvas, tiles, [np.zeros(3, dtype=np.float32)] * len(tiles))
