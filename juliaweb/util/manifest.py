"""Run manifest: what was rendered, with what, on which machine."""

import importlib.metadata as importlib_metadata
import json
import os
import platform
import sys
import time
from dataclasses import asdict, dataclass
from typing import Any, Dict, List

from juliaweb.params import RenderParameters

TRACKED_PACKAGES = ("juliaweb", "numpy", "Pillow", "Flask", "tqdm")

@dataclass(frozen=True)
class RunManifest:
    started_utc: str
    params: Dict[str, Any]
    renderer: Dict[str, Any]
    config: Dict[str, Any]
    packages: Dict[str, str]
    python: Dict[str, Any]
    system: Dict[str, Any]

def params_record(params: RenderParameters) -> Dict[str, Any]:
    """JSON-friendly view of the values that determine the output buffer."""
    bounds: List[float] = [params.min_x, params.max_x, params.min_y, params.max_y]
    return {
        "bounds": bounds,
        "c": [params.c.real, params.c.imag],
        "width": params.width,
        "height": params.height,
        "max_iter": params.max_iter,
        "escape_radius": params.escape_radius,
    }

def installed_versions(names=TRACKED_PACKAGES) -> Dict[str, str]:
    found = {}
    for name in names:
        try:
            found[name] = importlib_metadata.version(name)
        except importlib_metadata.PackageNotFoundError:
            continue
    return found

def build_manifest(*, params: RenderParameters, renderer_info: Dict[str, Any], config: Dict[str, Any]) -> RunManifest:
    return RunManifest(
        started_utc=time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
        params=params_record(params),
        renderer=dict(renderer_info),
        config=dict(config),
        packages=installed_versions(),
        python={"version": platform.python_version(), "implementation": platform.python_implementation(), "executable": sys.executable},
        system={"platform": platform.platform(), "machine": platform.machine(), "cpu_count": os.cpu_count()},
    )

def write_manifest(path: str, manifest: RunManifest) -> None:
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(asdict(manifest), f, indent=2, sort_keys=True)
        f.write("\n")
