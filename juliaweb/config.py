import json
from typing import Any, Dict, Optional

from juliaweb.kernel import DEFAULT_MAX_ITER
from juliaweb.params import RenderParameters
from juliaweb.validation import DEFAULT_HEIGHT, DEFAULT_WIDTH, MAX_DIMENSION, parse_query

DEFAULT_CONFIG: Dict[str, Any] = {
    "plane": [-2.0, 2.0, -1.5, 1.5],
    "constant": [-0.7, 0.27015],
    "width": DEFAULT_WIDTH,
    "height": DEFAULT_HEIGHT,
    "max_iter": DEFAULT_MAX_ITER,
    "workers": None,
    "tile_size": 256,
    "output": "julia.f32",
    "host": "127.0.0.1",
    "port": 8080,
}

def load_config(config_path: Optional[str]) -> Dict[str, Any]:
    if not config_path:
        return dict(DEFAULT_CONFIG)

    with open(config_path, "r", encoding="utf-8") as f:
        cfg = json.load(f)
    if not isinstance(cfg, dict):
        raise ValueError("Config JSON must be an object.")
    out = dict(DEFAULT_CONFIG)
    out.update(cfg)
    return out

def normalise_config(cfg: Dict[str, Any]) -> Dict[str, Any]:
    required = ["plane", "constant", "width", "height", "max_iter"]
    for r in required:
        if r not in cfg:
            raise ValueError(f"Missing config field: {r}")

    plane = cfg["plane"]
    if not (isinstance(plane, (list, tuple)) and len(plane) == 4):
        raise ValueError("plane must be [min_x, max_x, min_y, max_y].")

    constant = cfg["constant"]
    if not (isinstance(constant, (list, tuple)) and len(constant) == 2):
        raise ValueError("constant must be [re, im].")

    width = int(cfg["width"])
    height = int(cfg["height"])
    if width <= 0 or height <= 0:
        raise ValueError("width/height must be positive.")

    workers = cfg.get("workers")
    if workers is not None:
        workers = int(workers)
        if workers <= 0:
            raise ValueError("workers must be positive.")

    out = dict(cfg)
    out["plane"] = [float(v) for v in plane]
    out["constant"] = [float(v) for v in constant]
    out["width"] = width
    out["height"] = height
    out["max_iter"] = int(cfg["max_iter"])
    out["workers"] = workers
    out["tile_size"] = int(cfg.get("tile_size", 256))
    out["output"] = str(cfg.get("output", "julia.f32"))
    out["host"] = str(cfg.get("host", "127.0.0.1"))
    out["port"] = int(cfg.get("port", 8080))
    if out["tile_size"] <= 0:
        raise ValueError("tile_size must be positive.")
    return out

def params_from_config(cfg: Dict[str, Any], *, max_dimension: int = MAX_DIMENSION) -> RenderParameters:
    min_x, max_x, min_y, max_y = cfg["plane"]
    re, im = cfg["constant"]
    query = {
        "min_x": repr(float(min_x)),
        "max_x": repr(float(max_x)),
        "min_y": repr(float(min_y)),
        "max_y": repr(float(max_y)),
        "comp_const": f"{float(re)!r},{float(im)!r}",
        "width": str(int(cfg["width"])),
        "height": str(int(cfg["height"])),
        "max_iter": str(int(cfg["max_iter"])),
    }
    return parse_query(query, max_dimension=max_dimension)
