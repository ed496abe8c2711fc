"""
Tests for WitnetNodeClient against a mocked JSON-RPC node.
"""
import json

import httpx
import pytest

from govrelay.exceptions import OracleError, OracleSubmissionError, OracleTimeoutError
from govrelay.oracle.request_builder import build_data_request
from govrelay.oracle.witnet_client import WitnetNodeClient
from govrelay.orchestrator.tests.fakes import FakeClock

NODE_URL = "http://witnet.local:21338"


def rpc_result(request: httpx.Request, result):
    body = json.loads(request.content)
    return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": result})


def make_client(handler, clock=None, **kwargs) -> WitnetNodeClient:
    clock = clock or FakeClock()
    return WitnetNodeClient(
        node_url=NODE_URL,
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        sleep=clock.sleep,
        clock=clock,
        **kwargs,
    )


@pytest.fixture
def data_request():
    return build_data_request("c-1", "m-1", ["https://monitor.example/{channel_id}/{message_id}"])


class TestSubmit:

    @pytest.mark.asyncio
    async def test_returns_transaction_hash(self, data_request):
        seen = []

        def handler(request):
            seen.append(json.loads(request.content))
            return rpc_result(request, "0xdrtx")

        client = make_client(handler)
        request_id = await client.submit(data_request)

        assert request_id == "0xdrtx"
        assert seen[0]["method"] == "sendRequest"
        dro = seen[0]["params"]["dro"]
        assert dro["data_request"]["retrieve"][0]["url"] == "https://monitor.example/c-1/m-1"
        assert dro["witnesses"] == data_request.witnesses
        await client.aclose()

    @pytest.mark.asyncio
    async def test_rpc_error_is_a_submission_error(self, data_request):
        def handler(request):
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "error": {"code": -32000, "message": "no funds"}})

        client = make_client(handler)
        with pytest.raises(OracleSubmissionError) as exc_info:
            await client.submit(data_request)

        assert "no funds" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_http_failure_is_a_submission_error(self, data_request):
        client = make_client(lambda request: httpx.Response(503, text="unavailable"))

        with pytest.raises(OracleSubmissionError):
            await client.submit(data_request)

    @pytest.mark.asyncio
    async def test_empty_result_is_rejected(self, data_request):
        client = make_client(lambda request: rpc_result(request, None))

        with pytest.raises(OracleSubmissionError):
            await client.submit(data_request)


class TestAwaitResult:

    @pytest.mark.asyncio
    async def test_polls_until_tallied(self):
        reports = iter([
            None,
            {"tally": None},
            {"tally": {"result": "positive"}, "block_hash_dr_tx": "0xblock"},
        ])
        clock = FakeClock()
        client = make_client(lambda request: rpc_result(request, next(reports)), clock=clock, poll_interval=15)

        tally = await client.await_result("0xdrtx")

        assert tally.request_id == "0xdrtx"
        assert tally.success
        assert tally.result == "positive"
        assert tally.raw["block_hash_dr_tx"] == "0xblock"
        assert clock.sleeps == [15, 15]

    @pytest.mark.asyncio
    async def test_transport_errors_are_retried(self):
        calls = []

        def handler(request):
            calls.append(request)
            if len(calls) == 1:
                raise httpx.ConnectError("refused")
            return rpc_result(request, {"tally": "negative"})

        client = make_client(handler, poll_interval=1)
        tally = await client.await_result("0xdrtx")

        assert tally.result == "negative"
        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_gives_up_after_timeout(self):
        calls = []

        def handler(request):
            calls.append(request)
            return rpc_result(request, None)

        clock = FakeClock()
        client = make_client(handler, clock=clock, tally_timeout=30, poll_interval=10)

        with pytest.raises(OracleTimeoutError) as exc_info:
            await client.await_result("0xdrtx")

        assert exc_info.value.request_id == "0xdrtx"
        assert exc_info.value.code == 504
        assert len(calls) == 4

    @pytest.mark.asyncio
    async def test_error_tally_raises(self):
        client = make_client(
            lambda request: rpc_result(request, {"tally": {"result": {"RadonError": "HTTP GET failed"}}})
        )

        with pytest.raises(OracleError) as exc_info:
            await client.await_result("0xdrtx")

        assert not isinstance(exc_info.value, OracleTimeoutError)
        assert exc_info.value.request_id == "0xdrtx"
