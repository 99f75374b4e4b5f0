import dataclasses

import pytest

from juliaweb.params import RenderParameters, pixel_to_complex


@pytest.fixture
def params():
    return RenderParameters(min_x=-2.0, max_x=2.0, min_y=-1.5, max_y=1.5, c=0j, width=100, height=100)


@pytest.mark.parametrize(
    "px, py, width, height, want",
    [
        (0, 0, 100, 100, complex(-2.0, -1.5)),
        (50, 50, 100, 100, complex(0.0, 0.0)),
        (99, 99, 100, 100, complex(-2.0 + 4.0 * 99 / 100, -1.5 + 3.0 * 99 / 100)),
        (0, 0, 1, 1, complex(-2.0, -1.5)),
    ],
    ids=["top-left", "center", "bottom-right", "single-pixel"],
)
def test_pixel_to_complex(params, px, py, width, height, want):
    assert pixel_to_complex(px, py, width, height, params) == want


def test_last_pixel_stays_short_of_upper_bound(params):
    z = pixel_to_complex(99, 99, 100, 100, params)
    assert z.real < params.max_x
    assert z.imag < params.max_y


def test_axes_are_independent(params):
    z = pixel_to_complex(25, 0, 100, 10, params)
    assert z == complex(-1.0, -1.5)


@pytest.mark.parametrize("width, height", [(0, 10), (10, 0), (-1, 5)])
def test_non_positive_dimensions_are_rejected(params, width, height):
    with pytest.raises(ValueError):
        pixel_to_complex(0, 0, width, height, params)


def test_parameters_are_immutable(params):
    with pytest.raises(dataclasses.FrozenInstanceError):
        params.width = 10


def test_defaults(params):
    assert params.max_iter == 256
    assert params.escape_radius == 2.0
