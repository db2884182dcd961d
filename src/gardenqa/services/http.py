import asyncio
import requests

from typing import Any

# The data file changes between deployments; never accept a cached copy.
NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
}


async def request(method: str, url: str, *, headers: dict[str, str] | None = None,
                  params: dict[str, Any] | None = None,
                  timeout: float = 30) -> requests.Response:
    def _do():
        return requests.request(
            method, url,
            headers=headers,
            params=params,
            timeout=timeout,
        )
    return await asyncio.to_thread(_do)


async def get_fresh(url: str, *, timeout: float = 30) -> requests.Response:
    return await request("GET", url, headers=dict(NO_CACHE_HEADERS), timeout=timeout)
