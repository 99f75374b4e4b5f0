from __future__ import annotations

import logging
import os
import time
from concurrent.futures import ProcessPoolExecutor
from typing import List, Optional, Tuple

import numpy as np

from juliaweb.kernel import iterate
from juliaweb.params import RenderParameters, pixel_to_complex
from juliaweb.util.logging_setup import configure_worker_logging, get_logger

_G = {}

def worker_count(height: int, available: Optional[int] = None) -> int:
    if available is None:
        available = os.cpu_count() or 1
    return max(1, min(available, height))

def pool_size(height: int, max_workers: Optional[int] = None) -> int:
    """Worker count for a render: CPU count, lowered to `max_workers` when given, never above height."""
    available = os.cpu_count() or 1
    if max_workers is not None:
        available = min(available, max_workers)
    return worker_count(height, available)

def partition_rows(height: int, workers: int) -> List[Tuple[int, int]]:
    """Split [0, height) into `workers` contiguous ranges; leftover rows go to the last one."""
    if workers < 1:
        raise ValueError("workers must be >= 1")
    rows_per_worker = height // workers
    bands: List[Tuple[int, int]] = []
    for w in range(workers):
        start = w * rows_per_worker
        stop = height if w == workers - 1 else start + rows_per_worker
        bands.append((start, stop))
    return bands

def render_rows(params: RenderParameters, start: int, stop: int) -> np.ndarray:
    width = params.width
    height = params.height
    band = np.empty((stop - start) * width, dtype=np.float32)

    i = 0
    for py in range(start, stop):
        for px in range(width):
            z0 = pixel_to_complex(px, py, width, height, params)
            band[i] = iterate(z0, params.c, params.max_iter, params.escape_radius).encode()
            i += 1
    return band

def _init_worker(params, log_queue, log_level):
    _G["params"] = params
    configure_worker_logging(log_queue, log_level)

def _render_band(y0_y1: Tuple[int, int]):
    y0, y1 = y0_y1
    params = _G["params"]
    logger = get_logger()

    band = render_rows(params, y0, y1)
    logger.debug("Rendered rows %s..%s of %s", y0, y1, params.height)
    return y0, band

def render(
    params: RenderParameters,
    *,
    max_workers: Optional[int] = None,
    log_queue=None,
    log_level: int = logging.INFO,
) -> np.ndarray:
    """
    Compute the smooth escape value of every pixel, row-major, as float32.

    Rows are split into one contiguous band per worker process. Each band is a pure
    function of the parameters, so the result does not depend on the worker count.
    """
    logger = get_logger()
    width = params.width
    height = params.height

    if width == 0 or height == 0:
        empty = np.empty(0, dtype=np.float32)
        empty.flags.writeable = False
        return empty

    workers = pool_size(height, max_workers)
    bands = partition_rows(height, workers)

    logger.info("Render start size=%sx%s c=%s iter=%s workers=%s", width, height, params.c, params.max_iter, workers)
    started = time.perf_counter()

    buf = np.empty(width * height, dtype=np.float32)
    try:
        with ProcessPoolExecutor(
            max_workers=workers,
            initializer=_init_worker,
            initargs=(params, log_queue, log_level),
        ) as pool:
            for y0, band in pool.map(_render_band, bands):
                buf[y0 * width:y0 * width + band.shape[0]] = band
    except Exception:
        logger.exception("Render failed size=%sx%s workers=%s", width, height, workers)
        raise

    buf.flags.writeable = False
    logger.info("Render done in %.3fs", time.perf_counter() - started)
    return buf
