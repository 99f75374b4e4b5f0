import json

import pytest

from juliaweb.config import DEFAULT_CONFIG, load_config, normalise_config, params_from_config
from juliaweb.validation import ParameterError


def test_defaults_without_path():
    cfg = load_config(None)
    assert cfg == DEFAULT_CONFIG
    assert cfg is not DEFAULT_CONFIG


def test_file_values_override_defaults(tmp_path):
    path = tmp_path / "julia.json"
    path.write_text(json.dumps({"width": 64, "constant": [0.285, 0.01]}), encoding="utf-8")
    cfg = load_config(str(path))
    assert cfg["width"] == 64
    assert cfg["constant"] == [0.285, 0.01]
    assert cfg["height"] == DEFAULT_CONFIG["height"]


def test_non_object_json_is_rejected(tmp_path):
    path = tmp_path / "julia.json"
    path.write_text("[1, 2, 3]", encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(str(path))


def test_normalise_coerces_types():
    cfg = normalise_config(dict(DEFAULT_CONFIG, width="32", plane=[-1, 1, -1, 1], workers="3"))
    assert cfg["width"] == 32
    assert cfg["plane"] == [-1.0, 1.0, -1.0, 1.0]
    assert cfg["workers"] == 3


@pytest.mark.parametrize(
    "override",
    [
        {"plane": [0, 1, 2]},
        {"constant": 0.5},
        {"width": 0},
        {"workers": 0},
        {"tile_size": -4},
    ],
)
def test_normalise_rejects_bad_values(override):
    with pytest.raises(ValueError):
        normalise_config(dict(DEFAULT_CONFIG, **override))


def test_normalise_requires_fields():
    cfg = dict(DEFAULT_CONFIG)
    del cfg["plane"]
    with pytest.raises(ValueError, match="plane"):
        normalise_config(cfg)


def test_params_from_config():
    cfg = normalise_config(dict(DEFAULT_CONFIG, width=48, height=24, max_iter=100))
    params = params_from_config(cfg)
    assert (params.min_x, params.max_x, params.min_y, params.max_y) == (-2.0, 2.0, -1.5, 1.5)
    assert params.c == complex(-0.7, 0.27015)
    assert (params.width, params.height, params.max_iter) == (48, 24, 100)
    assert params.escape_radius == 2.0


def test_params_from_config_shares_query_rules():
    cfg = normalise_config(dict(DEFAULT_CONFIG, plane=[1.0, -1.0, -1.0, 1.0]))
    with pytest.raises(ParameterError, match="min_x"):
        params_from_config(cfg)
