from __future__ import annotations

import os

import numpy as np
from PIL import Image

from juliaweb.codec import encode_buffer
from juliaweb.util.logging_setup import get_logger

def _ensure_parent(path: str) -> None:
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)

def write_raw(path: str, buf: np.ndarray) -> str:
    _ensure_parent(path)
    with open(path, "wb") as f:
        f.write(encode_buffer(buf))
    get_logger().info("Wrote raw buffer %s (%s values)", path, buf.shape[0])
    return path

def write_tiff(path: str, buf: np.ndarray, width: int, height: int) -> str:
    """Save the smooth values unchanged as a single-channel 32-bit float TIFF."""
    if buf.shape[0] != width * height:
        raise ValueError(f"Buffer holds {buf.shape[0]} values, expected {width}x{height}")
    _ensure_parent(path)
    arr = np.asarray(buf, dtype=np.float32).reshape(height, width)
    img = Image.fromarray(arr)
    img.save(path, format="TIFF")
    get_logger().info("Wrote float TIFF %s (%sx%s)", path, width, height)
    return path
