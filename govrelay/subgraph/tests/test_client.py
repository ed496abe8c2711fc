import json

import httpx
import pytest

from govrelay.exceptions import SubgraphError
from govrelay.subgraph.client import SubgraphClient

SUBGRAPH_URL = "https://subgraph.local/govern"


def make_client(handler) -> SubgraphClient:
    return SubgraphClient(
        url=SUBGRAPH_URL,
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


class TestQueryDaoByName:

    @pytest.mark.asyncio
    async def test_returns_registry_entry(self, dao_payload):
        seen = []

        def handler(request):
            seen.append(json.loads(request.content))
            return httpx.Response(200, json={"data": {"registryEntries": [dao_payload]}})

        client = make_client(handler)
        dao = await client.query_dao_by_name("witnet-dao")

        assert dao.name == "witnet-dao"
        assert dao.queue.address == "0x1111111111111111111111111111111111111111"
        assert dao.queue.config.execution_delay == 30
        assert dao.queue.config.schedule_deposit.amount == "1000"
        assert seen[0]["variables"] == {"name": "witnet-dao"}
        assert "registryEntries" in seen[0]["query"]
        await client.aclose()

    @pytest.mark.asyncio
    async def test_unknown_dao_is_none(self):
        client = make_client(lambda request: httpx.Response(200, json={"data": {"registryEntries": []}}))

        assert await client.query_dao_by_name("nobody") is None

    @pytest.mark.asyncio
    async def test_graphql_errors_raise(self):
        client = make_client(
            lambda request: httpx.Response(200, json={"errors": [{"message": "indexing failed"}]})
        )

        with pytest.raises(SubgraphError) as exc_info:
            await client.query_dao_by_name("witnet-dao")

        assert "indexing failed" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_http_error_raises(self):
        client = make_client(lambda request: httpx.Response(500, text="boom"))

        with pytest.raises(SubgraphError) as exc_info:
            await client.query_dao_by_name("witnet-dao")

        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_transport_error_raises(self):
        def handler(request):
            raise httpx.ConnectError("refused")

        with pytest.raises(SubgraphError) as exc_info:
            await make_client(handler).query_dao_by_name("witnet-dao")

        assert exc_info.value.status_code == 503
        assert exc_info.value.retryable


@pytest.mark.asyncio
async def test_query_daos_lists_entries(dao_payload):
    other = dict(dao_payload, name="other-dao")
    client = make_client(
        lambda request: httpx.Response(200, json={"data": {"registryEntries": [dao_payload, other]}})
    )

    daos = await client.query_daos()

    assert [dao.name for dao in daos] == ["witnet-dao", "other-dao"]
