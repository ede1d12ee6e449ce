import asyncio

import pytest

from food_storefront.db.session import bounded, with_timeout
from food_storefront.exceptions import StorageTimeout


async def test_bounded_passes_result_through():
    async def quick():
        return 42

    assert await bounded(quick(), timeout=1) == 42


async def test_bounded_raises_storage_timeout():
    with pytest.raises(StorageTimeout):
        await bounded(asyncio.sleep(1), timeout=0.01)


async def test_with_timeout_keeps_function_name():
    @with_timeout
    async def slow_query():
        await asyncio.sleep(0)
        return "ok"

    assert slow_query.__name__ == "slow_query"
    assert await slow_query() == "ok"


def test_storage_timeout_payload():
    exc = StorageTimeout("Storage call exceeded 5.0s")
    assert exc.status_code == 504
    assert exc.to_dict() == {"error": "timeout", "detail": "Storage call exceeded 5.0s"}
