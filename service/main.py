import os
import json
import time
from typing import Any, Dict, Optional

import functions_framework
from flask import Request
from google.cloud import logging as cloud_logging

from network import InvalidConfiguration, from_adjacency, generate_random, make_rng
from pagerank import DanglingGraphError, compute_ranking
from search import search


DAMPING = float(os.environ.get("PAGERANK_DAMPING", "0.15"))
EPSILON = float(os.environ.get("PAGERANK_EPSILON", "0.001"))
MAX_ITERS = int(os.environ.get("PAGERANK_MAX_ITERS", "50"))
MAX_PAGES = int(os.environ.get("PAGERANK_MAX_PAGES", "200"))
USE_CLOUD_LOGGING = os.environ.get("USE_CLOUD_LOGGING", "0") == "1"
LOG_NAME = os.environ.get("LOG_NAME", "pagerank-service")

_logger = None


def get_logger():
    """Cloud Logging logger, created on first use; None when disabled or unavailable."""
    global _logger
    if _logger is None and USE_CLOUD_LOGGING:
        try:
            _logger = cloud_logging.Client().logger(LOG_NAME)
        except Exception as e:
            print(json.dumps({"severity": "WARNING", "message": f"Cloud Logging init failed: {e}"}))
    return _logger


def log_struct(status, method, severity="INFO", error_type=None, **fields):
    entry = {
        "status": status,
        "method": method,
        "error_type": error_type,
        "timestamp": time.time(),
        **fields,
    }

    logger = get_logger()
    if logger:
        logger.log_struct(entry, severity=severity)

    print(json.dumps({**entry, "severity": severity}))


def json_response(body: Dict[str, Any], status: int):
    return json.dumps(body), status, {"Content-Type": "application/json"}


def read_params(request: Request) -> Dict[str, Any]:
    """Query string values, overridden by a JSON body when one is sent."""
    params: Dict[str, Any] = dict(request.args.items())
    body = request.get_json(silent=True)
    if isinstance(body, dict):
        params.update(body)
    return params


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes")
    return bool(value)


def _as_int(params: Dict[str, Any], key: str, default: Optional[int]) -> Optional[int]:
    value = params.get(key)
    if value is None:
        return default
    # JSON true/4.7 would otherwise pass through int() silently
    if isinstance(value, (bool, float)):
        raise InvalidConfiguration(f"{key} must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidConfiguration(f"{key} must be an integer, got {value!r}")


def _as_float(params: Dict[str, Any], key: str, default: float) -> float:
    value = params.get(key)
    if value is None:
        return default
    if isinstance(value, bool):
        raise InvalidConfiguration(f"{key} must be a number, got {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise InvalidConfiguration(f"{key} must be a number, got {value!r}")


def run_ranking(params: Dict[str, Any]) -> Dict[str, Any]:
    if params.get("adjacency") is not None:
        adjacency = params["adjacency"]
        if isinstance(adjacency, list) and len(adjacency) > MAX_PAGES:
            raise InvalidConfiguration(f"adjacency has {len(adjacency)} rows, at most {MAX_PAGES} pages are allowed")
        network = from_adjacency(adjacency, params.get("keywords"))
    else:
        pages = _as_int(params, "pages", 30)
        if pages > MAX_PAGES:
            raise InvalidConfiguration(f"pages must be <= {MAX_PAGES}, got {pages}")
        links = _as_int(params, "links", 80)
        network = generate_random(pages, links, make_rng(_as_int(params, "seed", None)))

    result = compute_ranking(
        network,
        damping_factor=_as_float(params, "damping", DAMPING),
        epsilon=_as_float(params, "epsilon", EPSILON),
        max_iterations=_as_int(params, "max_iters", MAX_ITERS),
        allow_dangling=_as_bool(params.get("allow_dangling", False)),
        log_every_iters=0,
    )

    body: Dict[str, Any] = {
        "pages": [
            {"id": p.id, "links": list(p.links), "keywords": list(p.keywords)}
            for p in network.pages
        ],
        "ranking": [{"page": index + 1, "score": score} for index, score in result.ranking],
        "iterations": result.iterations,
        "converged": result.converged,
        "matrices": {
            "adjacency": result.adjacency.tolist(),
            "hyperlink": result.hyperlink.tolist(),
        },
    }

    query = params.get("query")
    if query is not None:
        hits = search(result, network.pages, str(query))
        body["search"] = [{"page": h.page_id, "keyword": h.keyword} for h in hits]

    return body


@functions_framework.http
def rank_network(request: Request):
    method = request.method

    if method not in ("GET", "POST"):
        log_struct(501, method, severity="ERROR", error_type="NOT_IMPLEMENTED")
        return json_response({"error": "Not Implemented", "message": f"{method} not supported"}, 501)

    try:
        body = run_ranking(read_params(request))
    except DanglingGraphError as e:
        log_struct(400, method, severity="WARNING", error_type="DANGLING_GRAPH", dangling=e.dangling)
        return json_response({"error": "Dangling Graph", "message": str(e), "dangling": e.dangling}, 400)
    except ValueError as e:
        # InvalidConfiguration and blank search queries
        log_struct(400, method, severity="WARNING", error_type="INVALID_CONFIGURATION")
        return json_response({"error": "Bad Request", "message": str(e)}, 400)
    except Exception as e:
        log_struct(500, method, severity="ERROR", error_type="INTERNAL_ERROR")
        return json_response({"error": "Internal Server Error", "message": str(e)}, 500)

    log_struct(
        200,
        method,
        severity="INFO",
        pages=len(body["pages"]),
        iterations=body["iterations"],
        converged=body["converged"],
    )
    return json_response(body, 200)
