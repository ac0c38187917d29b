"""
ProductClient tests with httpx.MockTransport (no network)
"""
from decimal import Decimal

import httpx
import pytest

from flowershop.domain.errors import StorageFailure
from flowershop.services.product_client import ProductClient

ROWS = [
    {"id": 7, "name": "Arreglo de tulipanes", "summary": "Tulipanes mixtos", "price": 25.99, "stock": 10, "active": True},
    {"id": 9, "name": "Corona fúnebre", "price": "120.00", "stock": 0, "active": False},
]


class TestProductClient:
    @pytest.mark.asyncio
    async def test_single_batched_request(self):
        seen = []

        def handler(request: httpx.Request):
            seen.append(request)
            return httpx.Response(200, json=ROWS)

        client = ProductClient(base_url="http://catalog/", transport=httpx.MockTransport(handler))
        products = await client.get_products_by_ids([9, 7, 7])

        assert len(seen) == 1
        assert seen[0].url.path == "/products"
        assert seen[0].url.params["ids"] == "7,9"

        tulips, wreath = products
        assert tulips.price == Decimal("25.99")
        assert tulips.summary == "Tulipanes mixtos"
        assert wreath.active is False
        assert wreath.price == Decimal("120.00")

    @pytest.mark.asyncio
    async def test_empty_ids_skip_request(self):
        def handler(request):
            raise AssertionError("no request expected")

        client = ProductClient(base_url="http://catalog", transport=httpx.MockTransport(handler))
        assert await client.get_products_by_ids([]) == []

    @pytest.mark.asyncio
    async def test_retries_transport_errors(self):
        attempts = {"n": 0}

        def handler(request):
            attempts["n"] += 1
            if attempts["n"] == 1:
                raise httpx.ConnectError("connection refused", request=request)
            return httpx.Response(200, json=ROWS[:1])

        client = ProductClient(base_url="http://catalog", transport=httpx.MockTransport(handler))
        products = await client.get_products_by_ids([7])

        assert attempts["n"] == 2
        assert [p.id for p in products] == [7]

    @pytest.mark.asyncio
    async def test_http_error_is_storage_failure(self):
        client = ProductClient(
            base_url="http://catalog",
            transport=httpx.MockTransport(lambda request: httpx.Response(500, json={"detail": "boom"})),
        )

        with pytest.raises(StorageFailure) as exc:
            await client.get_products_by_ids([1])

        assert exc.value.operation == "catalog read"
        assert isinstance(exc.value.__cause__, httpx.HTTPStatusError)
        assert exc.value.to_dict() == {
            "code": "storage_failure",
            "message": "Storage failure during catalog read",
            "operation": "catalog read",
        }
