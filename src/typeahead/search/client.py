"""HTTP client for the remote product search endpoint.

Performs ``GET {base_url}/products?limit=<N>&page=<p>&q=<query>`` with
httpx and validates the body with pydantic. Transport and decoding
failures are raised as ``NetworkError`` / ``ResponseFormatError``.
"""

from __future__ import annotations

import logging

import httpx
from pydantic import ValidationError

from typeahead.exceptions import NetworkError, ResponseFormatError
from typeahead.models import Page, Product
from typeahead.search.schemas import ProductPageBody

logger = logging.getLogger(__name__)


class ProductSearchClient:
    """Async client fetching one page of products per call.

    Usage::

        async with ProductSearchClient("http://fakestoreapi.in/api") as client:
            page = await client.fetch_page("shoe", 1)
    """

    def __init__(
        self,
        base_url: str,
        page_size: int = 15,
        timeout: float = 10.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._page_size = page_size
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=timeout)

    @property
    def page_size(self) -> int:
        return self._page_size

    async def fetch_page(self, query: str, page: int) -> Page:
        """Fetch page *page* (1-based) of products matching *query*.

        Args:
            query: Settled search text, sent as the ``q`` parameter.
            page: 1-based page number.

        Returns:
            Page with the decoded products, in response order.

        Raises:
            NetworkError: Transport failure, timeout or non-2xx status.
            ResponseFormatError: Body is not JSON or not a product page.
        """
        url = f"{self._base_url}/products"
        params = {"limit": self._page_size, "page": page, "q": query}
        try:
            response = await self._client.get(url, params=params)
            response.raise_for_status()
        except httpx.TimeoutException as exc:
            raise NetworkError(f"Request timed out: {url}") from exc
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            raise NetworkError(
                f"Search request failed with HTTP {status}", status_code=status
            ) from exc
        except httpx.HTTPError as exc:
            raise NetworkError(f"Search request failed: {exc}") from exc

        try:
            body = response.json()
        except ValueError as exc:
            raise ResponseFormatError("Search response is not valid JSON") from exc

        # Some deployments answer with a bare list instead of the envelope
        if isinstance(body, list):
            body = {"products": body}

        try:
            parsed = ProductPageBody.model_validate(body)
        except ValidationError as exc:
            raise ResponseFormatError(
                f"Search response has unexpected shape ({exc.error_count()} errors)"
            ) from exc

        items = tuple(Product.from_record(r) for r in parsed.products)
        logger.debug("Fetched page %d for %r: %d items", page, query, len(items))
        return Page(number=page, items=items)

    async def aclose(self) -> None:
        """Close the underlying httpx client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> ProductSearchClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
