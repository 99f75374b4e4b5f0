from __future__ import annotations

import argparse
import os
from typing import Any, Dict, Optional

import numpy as np
from tqdm import tqdm

from juliaweb.config import load_config, normalise_config, params_from_config
from juliaweb.export import write_raw, write_tiff
from juliaweb.params import RenderParameters
from juliaweb.renderers.cpu_pool import partition_rows, pool_size, render
from juliaweb.tiling import CANVAS_MAX_DIMENSION, plan_tiles, stitch_tiles
from juliaweb.util.logging_setup import LEVELS, configure_root_logging, get_logger, level_from_name, worker_log_queue
from juliaweb.util.manifest import build_manifest, write_manifest
from juliaweb.validation import ParameterError

MANIFEST_PATH = os.path.join("artifacts", "run.json")

def _add_render_options(p: argparse.ArgumentParser) -> None:
    p.add_argument("--output", type=str, default=None, help="Output file (defaults to config.output).")
    p.add_argument("--format", type=str, default="raw", choices=["raw", "tiff"], help="raw little-endian float32 or float TIFF.")
    p.add_argument("--plane", type=float, nargs=4, default=None, metavar=("MIN_X", "MAX_X", "MIN_Y", "MAX_Y"), help="Plane bounds.")
    p.add_argument("--constant", type=float, nargs=2, default=None, metavar=("RE", "IM"), help="Julia constant c.")
    p.add_argument("--width", type=int, default=None, help="Image width in pixels.")
    p.add_argument("--height", type=int, default=None, help="Image height in pixels.")
    p.add_argument("--max-iter", type=int, default=None, help="Iteration limit.")
    p.add_argument("--workers", type=int, default=None, help="Upper bound on worker processes (defaults to CPU count).")

def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="juliaweb", description="Julia set smooth-escape renderer and HTTP API.")
    p.add_argument("--config", type=str, default=None, help="Path to config JSON. If omitted, built-in defaults are used.")
    p.add_argument("--log-level", type=str, default="INFO", choices=LEVELS, help="Log level.")
    p.add_argument("--log-file", type=str, default="", help="Log file path (rotating). Empty disables file logging.")
    sub = p.add_subparsers(dest="cmd", required=True)

    r = sub.add_parser("render", help="Render one buffer and write it to a file.")
    _add_render_options(r)

    t = sub.add_parser("tiles", help="Render a canvas tile by tile and stitch the result.")
    _add_render_options(t)
    t.add_argument("--tile-size", type=int, default=None, help="Tile edge in pixels (defaults to config.tile_size).")

    s = sub.add_parser("serve", help="Run the HTTP API.")
    s.add_argument("--host", type=str, default=None, help="Bind address (defaults to config.host).")
    s.add_argument("--port", type=int, default=None, help="Port (defaults to config.port).")
    s.add_argument("--workers", type=int, default=None, help="Upper bound on worker processes per request.")

    return p

def _apply_overrides(cfg: Dict[str, Any], args: argparse.Namespace) -> Dict[str, Any]:
    overrides = {
        "plane": getattr(args, "plane", None),
        "constant": getattr(args, "constant", None),
        "width": getattr(args, "width", None),
        "height": getattr(args, "height", None),
        "max_iter": getattr(args, "max_iter", None),
        "workers": getattr(args, "workers", None),
        "tile_size": getattr(args, "tile_size", None),
        "output": getattr(args, "output", None),
        "host": getattr(args, "host", None),
        "port": getattr(args, "port", None),
    }
    out = dict(cfg)
    for k, v in overrides.items():
        if v is not None:
            out[k] = v
    return out

def _write_output(path: str, fmt: str, buf: np.ndarray, params: RenderParameters) -> None:
    if fmt == "tiff":
        write_tiff(path, buf, params.width, params.height)
    else:
        write_raw(path, buf)

def _renderer_info(params: RenderParameters, workers: Optional[int], mode: str) -> Dict[str, Any]:
    count = pool_size(params.height, workers)
    return {
        "mode": mode,
        "workers": count,
        "bands": partition_rows(params.height, count),
    }

def _cmd_render(cfg: Dict[str, Any], args: argparse.Namespace, queue, log_level: int) -> int:
    logger = get_logger()
    params = params_from_config(cfg)
    buf = render(params, max_workers=cfg["workers"], log_queue=queue, log_level=log_level)
    _write_output(cfg["output"], args.format, buf, params)

    manifest = build_manifest(params=params, renderer_info=_renderer_info(params, cfg["workers"], "single"), config=cfg)
    write_manifest(MANIFEST_PATH, manifest)
    logger.info("Run manifest written: %s", MANIFEST_PATH)
    return 0

def _cmd_tiles(cfg: Dict[str, Any], args: argparse.Namespace, queue, log_level: int) -> int:
    logger = get_logger()
    params = params_from_config(cfg, max_dimension=CANVAS_MAX_DIMENSION)
    tiles = plan_tiles(params, cfg["tile_size"])
    logger.info("Rendering %sx%s canvas as %s tiles of %spx", params.width, params.height, len(tiles), cfg["tile_size"])

    buffers = []
    for tile in tqdm(tiles, desc="tiles", unit="tile"):
        buffers.append(render(tile.params, max_workers=cfg["workers"], log_queue=queue, log_level=log_level))
    canvas = stitch_tiles(params, tiles, buffers)
    _write_output(cfg["output"], args.format, canvas, params)

    info = _renderer_info(params, cfg["workers"], "tiles")
    info["tiles"] = len(tiles)
    manifest = build_manifest(params=params, renderer_info=info, config=cfg)
    write_manifest(MANIFEST_PATH, manifest)
    logger.info("Run manifest written: %s", MANIFEST_PATH)
    return 0

def _cmd_serve(cfg: Dict[str, Any]) -> int:
    from juliaweb.server import create_app

    app = create_app(cfg)
    get_logger().info("Julia set API listening on http://%s:%s/satori/julia/api", cfg["host"], cfg["port"])
    app.run(host=cfg["host"], port=cfg["port"])
    return 0

def main(argv: Optional[list] = None) -> int:
    args = build_arg_parser().parse_args(argv)

    log_level = level_from_name(args.log_level)
    log_file = args.log_file if args.log_file and args.log_file.strip() else None
    listener_logger = configure_root_logging(level=log_level, console=True, log_file=log_file)

    logger = get_logger()

    with worker_log_queue(listener_logger) as queue:
        try:
            cfg = normalise_config(_apply_overrides(load_config(args.config), args))

            if args.cmd == "render":
                return _cmd_render(cfg, args, queue, log_level)

            if args.cmd == "tiles":
                return _cmd_tiles(cfg, args, queue, log_level)

            if args.cmd == "serve":
                return _cmd_serve(cfg)

            raise RuntimeError("Unknown command.")
        except ParameterError as e:
            logger.error("Invalid render parameters: %s", e)
            return 2

if __name__ == "__main__":
    raise SystemExit(main())
