"""One-shot loading of the graph dataset from a URL or a local file."""
from __future__ import annotations

import json
import logging
import time
from pathlib import Path
from typing import Any, Dict, Optional
from urllib.parse import urlparse

import httpx

from kasmo.graph.model import Graph, build_graph

logger = logging.getLogger(__name__)


class DatasetLoadError(RuntimeError):
    """Raised when the dataset cannot be fetched or decoded; fatal for the view."""

    def __init__(self, location: str, cause: str) -> None:
        self.location = location
        self.cause = cause
        super().__init__(f"Could not load {location} — {cause}")


def _is_remote(location: str) -> bool:
    return urlparse(location).scheme in {"http", "https"}


def _fetch_remote(location: str, *, timeout: float, client: Optional[httpx.Client]) -> Any:
    should_close = client is None
    session = client or httpx.Client(timeout=timeout)
    start_time = time.monotonic()
    try:
        response = session.get(location, headers={"Cache-Control": "no-store"})
        latency_ms = (time.monotonic() - start_time) * 1000
        if not response.is_success:
            logger.error(
                "Dataset request failed with status",
                extra={"url": location, "status_code": response.status_code, "latency_ms": latency_ms},
            )
            raise DatasetLoadError(location, f"HTTP {response.status_code}")
        try:
            payload = response.json()
        except ValueError as exc:
            logger.error("Dataset response is not valid JSON", extra={"url": location})
            raise DatasetLoadError(location, f"invalid JSON: {exc}") from exc
        logger.info("Dataset fetched", extra={"url": location, "latency_ms": latency_ms})
        return payload
    except httpx.HTTPError as exc:
        logger.error("Dataset request raised an error", extra={"url": location, "error": str(exc)})
        raise DatasetLoadError(location, str(exc)) from exc
    finally:
        if should_close:
            session.close()


def _read_local(location: str) -> Any:
    path = Path(location).expanduser()
    try:
        with path.open("r", encoding="utf-8") as handle:
            return json.load(handle)
    except OSError as exc:
        logger.error("Dataset file unreadable at %s", path)
        raise DatasetLoadError(location, exc.strerror or str(exc)) from exc
    except json.JSONDecodeError as exc:
        logger.error("Dataset file %s is not valid JSON", path)
        raise DatasetLoadError(location, f"invalid JSON: {exc}") from exc


def load_payload(
    location: str,
    *,
    timeout: float = 10.0,
    client: Optional[httpx.Client] = None,
) -> Dict[str, Any]:
    """Fetch and decode the dataset exactly once; there is no retry.

    Args:
        location: ``http(s)`` URL or filesystem path of the JSON dataset.
        timeout: Request timeout in seconds when creating an internal client.
        client: Optional pre-configured ``httpx.Client`` (useful for testing).

    Returns:
        Dict[str, Any]: The decoded dataset object.

    Raises:
        DatasetLoadError: On transport failure, non-success status, unreadable
            file, invalid JSON, or a root value that is not an object.
    """

    if _is_remote(location):
        payload = _fetch_remote(location, timeout=timeout, client=client)
    else:
        payload = _read_local(location)
    if not isinstance(payload, dict):
        logger.error("Dataset root must be an object: %s", location)
        raise DatasetLoadError(location, "dataset root must be a JSON object")
    return payload


def load_graph(
    location: str,
    *,
    timeout: float = 10.0,
    client: Optional[httpx.Client] = None,
) -> Graph:
    """Load the dataset at ``location`` and build the validated graph."""

    return build_graph(load_payload(location, timeout=timeout, client=client))


__all__ = ["DatasetLoadError", "load_graph", "load_payload"]
