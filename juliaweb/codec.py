"""Wire format of a rendered buffer: little-endian float32, row-major, no header."""

from __future__ import annotations

import numpy as np

WIRE_DTYPE = np.dtype("<f4")

def encode_buffer(buf: np.ndarray) -> bytes:
    return np.ascontiguousarray(buf, dtype=WIRE_DTYPE).tobytes()

def decode_buffer(data: bytes, width: int, height: int) -> np.ndarray:
    expected = 4 * width * height
    if len(data) != expected:
        raise ValueError(f"Expected {expected} bytes for {width}x{height}, got {len(data)}")
    return np.frombuffer(data, dtype=WIRE_DTYPE).astype(np.float32)
