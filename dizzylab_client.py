import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from exceptions import MalformedResponse, NetworkError, UpstreamHTTPError


logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 100


class DizzylabClient:
    """Client for the dizzylab user listing API and disc detail pages"""

    def __init__(
        self,
        base_url: str = "https://www.dizzylab.net",
        timeout: float = 10,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.client = httpx.AsyncClient(
            timeout=timeout, transport=transport, follow_redirects=True
        )

    async def close(self):
        """Close the HTTP client"""
        await self.client.aclose()

    async def _get(self, url: str, params: Optional[Dict[str, Any]] = None) -> httpx.Response:
        try:
            response = await self.client.get(url, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise UpstreamHTTPError(exc.response.status_code, url) from exc
        except httpx.RequestError as exc:
            raise NetworkError(f"Network error while fetching {url}: {exc}") from exc
        return response

    async def fetch_collection(
        self, account_id: str, page_size: int = DEFAULT_PAGE_SIZE
    ) -> Dict[str, Any]:
        """Fetch the raw disc listing payload for a user"""
        url = f"{self.base_url}/apis/getotheruserinfo/"
        params = {"r": page_size, "uid": account_id}

        logger.info("Fetching disc listing for account %s", account_id)
        response = await self._get(url, params=params)

        try:
            payload = response.json()
        except ValueError as exc:
            raise MalformedResponse(f"Listing for account {account_id} is not JSON") from exc

        if not isinstance(payload, dict):
            raise MalformedResponse(
                f"Listing for account {account_id} is not a JSON object"
            )
        return payload

    async def fetch_detail_page(self, item_id: str) -> str:
        """Fetch the HTML detail page of a single disc"""
        # Percent-encode so the id stays a single path segment
        url = f"{self.base_url}/d/{quote(item_id, safe='')}/"

        logger.info("Fetching detail page for disc %s", item_id)
        response = await self._get(url)

        content_type = response.headers.get("content-type", "")
        if content_type and "html" not in content_type.lower():
            raise MalformedResponse(
                f"Detail page for disc {item_id} has content type {content_type!r}"
            )
        return response.text
