# flowershop/services/product_client.py
from decimal import Decimal
from typing import List

import httpx
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from flowershop.domain.errors import StorageFailure
from flowershop.domain.pricing import CatalogProduct
from flowershop.utils.logging import get_logger
from flowershop.utils.settings import CATALOG_SERVICE_URL, CATALOG_TIMEOUT_SECONDS

logger = get_logger(__name__)


def http_retry():
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.3, min=0.3, max=3),
        retry=retry_if_exception_type(httpx.TransportError),
    )


class ProductClient:
    """
    Read-only view of the catalog service.

    Only used at order creation time, one batched request per order.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float = CATALOG_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or CATALOG_SERVICE_URL).rstrip("/")
        self.timeout = timeout
        self.transport = transport

    @http_retry()
    async def _fetch(self, ids: List[int]) -> list:
        url = f"{self.base_url}/products"
        params = {"ids": ",".join(str(i) for i in ids)}
        logger.info(f"ProductClient GET {url} ids={params['ids']}")

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            resp = await client.get(url, params=params)
            resp.raise_for_status()
            return resp.json()

    async def get_products_by_ids(self, ids: List[int]) -> List[CatalogProduct]:
        unique_ids = sorted(set(ids))
        if not unique_ids:
            return []

        try:
            rows = await self._fetch(unique_ids)
        except httpx.HTTPError as e:
            logger.error(f"Catalog read failed for ids {unique_ids}: {e}")
            raise StorageFailure("catalog read") from e

        return [
            CatalogProduct(
                id=int(row["id"]),
                name=row["name"],
                summary=row.get("summary"),
                price=Decimal(str(row["price"])),
                stock=int(row.get("stock", 0)),
                active=bool(row.get("active", True)),
            )
            for row in rows
        ]
