from __future__ import annotations

import time
from typing import Any, Dict, Optional

from flask import Flask, Response, jsonify, request

from juliaweb.codec import encode_buffer
from juliaweb.renderers.cpu_pool import render
from juliaweb.util.logging_setup import get_logger
from juliaweb.validation import ParameterError, parse_query

API_PREFIX = "/satori/julia"

def create_app(config: Optional[Dict[str, Any]] = None) -> Flask:
    cfg = dict(config or {})
    workers = cfg.get("workers")
    logger = get_logger()

    app = Flask(__name__)

    @app.get(f"{API_PREFIX}/api")
    def julia_api():
        try:
            params = parse_query(request.args)
        except ParameterError as e:
            logger.warning("Rejected request %s: %s", request.query_string.decode("utf-8", "replace"), e)
            return jsonify({"error": str(e)}), 400

        started = time.perf_counter()
        buf = render(params, max_workers=workers)
        body = encode_buffer(buf)
        logger.info("Served %sx%s iter=%s in %.3fs (%s bytes)",
                    params.width, params.height, params.max_iter, time.perf_counter() - started, len(body))
        return Response(body, status=200, mimetype="application/octet-stream")

    @app.get(f"{API_PREFIX}/health")
    def health():
        return jsonify({"status": "ok"})

    return app
