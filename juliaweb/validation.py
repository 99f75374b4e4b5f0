"""Turn request query values into a validated RenderParameters."""

from __future__ import annotations

import math
import re
from typing import Mapping, Optional

from juliaweb.kernel import DEFAULT_ESCAPE_RADIUS, DEFAULT_MAX_ITER
from juliaweb.params import RenderParameters

DEFAULT_WIDTH = 256
DEFAULT_HEIGHT = 256

MIN_DIMENSION = 1
MAX_DIMENSION = 4096
MIN_MAX_ITER = 1
MAX_MAX_ITER = 10000

_REQUIRED = ("min_x", "max_x", "min_y", "max_y", "comp_const")

# ASCII-only literals: no surrounding whitespace, no digit-group underscores.
_DECIMAL_RE = re.compile(r"[+-]?([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?")
_HEX_RE = re.compile(r"[+-]?0[xX]([0-9a-fA-F]+\.?[0-9a-fA-F]*|\.[0-9a-fA-F]+)[pP][+-]?[0-9]+")
_INT_RE = re.compile(r"[+-]?[0-9]+")
_INT64_MIN = -(2 ** 63)
_INT64_MAX = 2 ** 63 - 1

class ParameterError(ValueError):
    """A query value is missing, malformed or out of range."""

def _finite_float(raw: str) -> Optional[float]:
    if _DECIMAL_RE.fullmatch(raw):
        value = float(raw)
    elif _HEX_RE.fullmatch(raw):
        try:
            value = float.fromhex(raw)
        except OverflowError:
            return None
    else:
        return None
    if math.isnan(value) or math.isinf(value):
        return None
    return value

def _parse_bound(query: Mapping[str, str], name: str) -> float:
    raw = query[name]
    value = _finite_float(raw)
    if value is None:
        raise ParameterError(f"invalid {name}: {raw!r} is not a valid number")
    return value

def _parse_constant(raw: str) -> complex:
    parts = raw.split(",", 2)
    if len(parts) != 2:
        raise ParameterError(f"invalid comp_const: {raw!r} must be two comma-separated numbers")
    real = _finite_float(parts[0].strip())
    if real is None:
        raise ParameterError(f"invalid comp_const real part: {parts[0]!r} is not a valid number")
    imag = _finite_float(parts[1].strip())
    if imag is None:
        raise ParameterError(f"invalid comp_const imaginary part: {parts[1]!r} is not a valid number")
    return complex(real, imag)

def _parse_bounded_int(query: Mapping[str, str], name: str, default: int, lo: int, hi: int) -> int:
    raw = query.get(name, "")
    if raw == "":
        return default
    if not _INT_RE.fullmatch(raw):
        raise ParameterError(f"invalid {name}: {raw!r} is not a valid integer")
    digits = raw.lstrip("+-").lstrip("0") or "0"
    # Anything outside a signed 64-bit integer is malformed, not merely out of range.
    if len(digits) > 19:
        raise ParameterError(f"invalid {name}: {raw!r} is not a valid integer")
    value = -int(digits) if raw.startswith("-") else int(digits)
    if not _INT64_MIN <= value <= _INT64_MAX:
        raise ParameterError(f"invalid {name}: {raw!r} is not a valid integer")
    if value < lo or value > hi:
        raise ParameterError(f"{name} must be between {lo} and {hi}, got {value}")
    return value

def parse_query(query: Mapping[str, str], *, max_dimension: int = MAX_DIMENSION) -> RenderParameters:
    for name in _REQUIRED:
        if not query.get(name, ""):
            raise ParameterError(f"missing required parameter: {name}")

    min_x = _parse_bound(query, "min_x")
    max_x = _parse_bound(query, "max_x")
    min_y = _parse_bound(query, "min_y")
    max_y = _parse_bound(query, "max_y")
    c = _parse_constant(query["comp_const"])

    if min_x >= max_x:
        raise ParameterError(f"min_x ({min_x}) must be less than max_x ({max_x})")
    if min_y >= max_y:
        raise ParameterError(f"min_y ({min_y}) must be less than max_y ({max_y})")

    width = _parse_bounded_int(query, "width", DEFAULT_WIDTH, MIN_DIMENSION, max_dimension)
    height = _parse_bounded_int(query, "height", DEFAULT_HEIGHT, MIN_DIMENSION, max_dimension)
    max_iter = _parse_bounded_int(query, "max_iter", DEFAULT_MAX_ITER, MIN_MAX_ITER, MAX_MAX_ITER)

    return RenderParameters(
        min_x=min_x,
        max_x=max_x,
        min_y=min_y,
        max_y=max_y,
        c=c,
        width=width,
        height=height,
        max_iter=max_iter,
        escape_radius=DEFAULT_ESCAPE_RADIUS,
    )
