from __future__ import annotations

import math
from typing import NamedTuple

DEFAULT_MAX_ITER = 256
DEFAULT_ESCAPE_RADIUS = 2.0

# Stored value for points that never escape. Smooth values are clamped to >= 0.
INTERIOR = -1.0

_LOG2 = math.log(2.0)

class EscapeResult(NamedTuple):
    escaped: bool
    smooth: float

    def encode(self) -> float:
        """Reduce the result to the single number stored in the output buffer."""
        return self.smooth if self.escaped else INTERIOR

def iterate(z0: complex, c: complex, max_iter: int, escape_radius: float) -> EscapeResult:
    """
    Iterate z -> z*z + c from z0 and report whether |z| leaves escape_radius.

    On escape at step i the smooth value is i + 1 - log(log|z|)/log(2), clamped at 0.
    When |z| <= 1 at escape (only possible with escape_radius < 1) the log-log term is
    undefined and the plain step count i is returned instead. A non-finite squared
    magnitude counts as an immediate escape with value 0.
    """
    z = complex(z0)
    er2 = escape_radius * escape_radius

    for i in range(max_iter):
        zr = z.real
        zi = z.imag
        mag2 = zr * zr + zi * zi

        # NaN compares false against er2, so it has to be caught first.
        if math.isnan(mag2) or math.isinf(mag2):
            return EscapeResult(True, 0.0)

        if mag2 > er2:
            log_mag = math.log(mag2) / 2.0
            if log_mag <= 0:
                return EscapeResult(True, float(i))
            smooth = i + 1.0 - math.log(log_mag) / _LOG2
            return EscapeResult(True, max(smooth, 0.0))

        z = z * z + c

    return EscapeResult(False, INTERIOR)
