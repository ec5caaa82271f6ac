"""
Extensions built on top of SQLObject.

`cache_fetch` keeps HTTP JSON responses in a `cache` table keyed by a caller
supplied reference, so repeated lookups of the same resource skip the network.
Expected table shape: ``cache(guid, ref, value)``.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Optional

import httpx

from sqlrecord.infrastructure.executor import QueryExecutor
from sqlrecord.record import SQLObject
from sqlrecord.utils.logging import get_logger

log = get_logger(__name__)

CACHE_TABLE = "cache"
HTTP_TIMEOUT = 30.0


def _is_empty(value: Any) -> bool:
    return not value or value == "{}"


async def _download(url: str, client: Optional[httpx.AsyncClient]) -> Any:
    if client is not None:
        response = await client.get(url)
        response.raise_for_status()
        return response.json()
    async with httpx.AsyncClient(timeout=HTTP_TIMEOUT) as own_client:
        response = await own_client.get(url)
        response.raise_for_status()
        return response.json()


async def cache_fetch(
    ref: str,
    url: str,
    *,
    client: Optional[httpx.AsyncClient] = None,
    executor: Optional[QueryExecutor] = None,
) -> Dict[str, Any]:
    """
    Return the JSON document cached under `ref`, fetching `url` on a miss.

    A row whose `value` is empty or ``"{}"`` counts as a miss and is
    refreshed in place; a missing row is created. The returned
    mapping is the decoded document plus the cache row's `guid`; documents
    that are not JSON objects are returned under ``"value"``.

    Raises
    ------
    httpx.HTTPError
        The download failed on a cache miss.
    """
    cache = SQLObject(table=CACHE_TABLE, key="ref", id=ref, datum={"ref": ref}, executor=executor)
    record = await cache.read()

    if not record or _is_empty(cache.datum.get("value")):
        log.info("Fetching %s for cache ref %s", url, ref)
        document = await _download(url, client)
        value = json.dumps(document)
        if record:
            stored = await cache.update({"value": value})
            await cache.read()
        else:
            stored = await cache.create({"ref": ref, "value": value})
        if not stored:
            log.warning("Could not store cache ref %s (%s)", ref, stored.status.value)

    value = cache.datum.get("value")
    parsed = json.loads(value) if value else {}
    if not isinstance(parsed, dict):
        parsed = {"value": parsed}
    return {**parsed, "guid": cache.datum.get("guid")}


__all__ = ["cache_fetch", "CACHE_TABLE"]
