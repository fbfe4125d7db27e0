import logging
import time
from typing import Any, Dict, Optional, Union

import requests

from cats_gateway.metrics import UPSTREAM_LATENCY

logger = logging.getLogger(__name__)

RANDOM_CAT = "get_random_cat"
CATS = "get_cats"


class UpstreamError(Exception):
    """Failure talking to the cats API (network, HTTP status or body)."""

    pass


class CatsClient:
    """
    One-shot HTTP client for the upstream cats API.
    Every call issues exactly one GET; nothing is retried or pooled.
    """

    def __init__(self, base_url: str, endpoints: Dict[str, str]):
        self.base_url = base_url.rstrip("/")
        self.endpoints = dict(endpoints)

    def _url(self, tool: str) -> str:
        path = self.endpoints.get(tool)
        if path is None:
            raise UpstreamError(f"No endpoint configured for {tool}")
        return f"{self.base_url}{path}"

    def _get(self, tool: str, query: Optional[Dict[str, str]] = None) -> Any:
        url = self._url(tool)
        logger.debug(f"GET {url} params={query}")
        started = time.perf_counter()
        try:
            resp = requests.get(url, params=query)
            resp.raise_for_status()
            return resp.json()
        except requests.RequestException as e:
            logger.error(f"Upstream call to {url} failed: {e}")
            raise UpstreamError(str(e)) from e
        except ValueError as e:
            # Body was not JSON
            logger.error(f"Upstream call to {url} returned an undecodable body: {e}")
            raise UpstreamError(f"Invalid JSON from upstream: {e}") from e
        finally:
            UPSTREAM_LATENCY.labels(endpoint=tool).observe(time.perf_counter() - started)

    def get_random_cat(self) -> Any:
        return self._get(RANDOM_CAT)

    def get_cats(self, n: Union[int, float]) -> Any:
        return self._get(CATS, {"n": format_count(n)})


def format_count(n: Union[int, float]) -> str:
    """Render a count for the query string; 3.0 is sent as 3."""
    if isinstance(n, float) and n.is_integer():
        return str(int(n))
    return str(n)
