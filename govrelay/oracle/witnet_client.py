"""
JSON-RPC client for a Witnet node.

Submits data requests and polls the node until the request is tallied.
"""
import asyncio
import itertools
from typing import Any, Awaitable, Callable, Dict, Optional, Protocol

import httpx

from govrelay.config import common_settings as settings
from govrelay.data_models.schemas import OracleRequest, TallyResult
from govrelay.exceptions import OracleError, OracleSubmissionError, OracleTimeoutError
from govrelay.utils.logger import logger


class OracleClient(Protocol):
    """What the orchestrator needs from an oracle network."""

    async def submit(self, request: OracleRequest) -> str:
        ...

    async def await_result(self, request_id: str) -> TallyResult:
        ...


class WitnetNodeClient:
    """
    Witnet node client speaking JSON-RPC over HTTP.

    Provides methods to:
    - Submit a data request (`sendRequest`)
    - Wait for the tally of a submitted request (`dataRequestReport`)
    """

    def __init__(
        self,
        node_url: str = None,
        timeout: float = None,
        tally_timeout: float = None,
        poll_interval: float = None,
        http_client: Optional[httpx.AsyncClient] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = None,
    ):
        """
        Initialize the Witnet node client.

        Args:
            node_url: JSON-RPC endpoint (default from WITNET_NODE_URL env var)
            timeout: Per-call HTTP timeout in seconds
            tally_timeout: How long await_result waits before giving up
            poll_interval: Seconds between two report polls
            http_client: Pre-built async client (tests inject a mock transport)
            sleep: Awaitable used between polls
            clock: Monotonic clock used for the tally timeout
        """
        self.node_url = (node_url or settings.WITNET_NODE_URL).rstrip("/")
        self.tally_timeout = settings.ORACLE_TALLY_TIMEOUT_SECONDS if tally_timeout is None else tally_timeout
        self.poll_interval = settings.ORACLE_POLL_INTERVAL_SECONDS if poll_interval is None else poll_interval
        self.client = http_client or httpx.AsyncClient(
            timeout=timeout or settings.ORACLE_HTTP_TIMEOUT_SECONDS
        )
        self._sleep = sleep
        self._clock = clock
        self._ids = itertools.count(1)

    async def _call(self, method: str, params: Any) -> Any:
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params,
        }
        response = await self.client.post(self.node_url, json=payload)
        response.raise_for_status()
        data = response.json()
        if data.get("error"):
            error = data["error"]
            message = error.get("message", "Unknown error") if isinstance(error, dict) else str(error)
            raise OracleError(f"{method} failed: {message}")
        return data.get("result")

    async def submit(self, request: OracleRequest) -> str:
        """
        Submit a data request to the node.

        Returns:
            The data request transaction hash, used as the request id

        Raises:
            OracleSubmissionError: If the node rejects the request or is unreachable
        """
        params = {
            "dro": {
                "data_request": {
                    "time_lock": 0,
                    "retrieve": [source.model_dump() for source in request.retrieve],
                    "aggregate": request.aggregate.model_dump(),
                    "tally": request.tally.model_dump(),
                },
                "witness_reward": request.witness_reward,
                "witnesses": request.witnesses,
                "commit_and_reveal_fee": request.commit_and_reveal_fee,
                "min_consensus_percentage": request.min_consensus_percentage,
                "collateral": request.collateral,
            },
            "fee": request.fee,
        }

        logger.info(f"[WitnetClient] Submitting data request {request.fingerprint()[:12]}")
        try:
            result = await self._call("sendRequest", params)
        except OracleError as e:
            raise OracleSubmissionError(e.message)
        except httpx.HTTPError as e:
            logger.error(f"[WitnetClient] sendRequest transport error: {e}")
            raise OracleSubmissionError(f"Witnet node unreachable: {e}")

        if not result or not isinstance(result, str):
            raise OracleSubmissionError(f"Unexpected sendRequest result: {result!r}")
        return result

    async def get_report(self, request_id: str) -> Optional[Dict[str, Any]]:
        """Fetch the current report of a data request, or None if the node has none yet."""
        return await self._call("dataRequestReport", [request_id])

    async def await_result(self, request_id: str) -> TallyResult:
        """
        Poll the node until the data request is tallied.

        Transport errors while polling are logged and the poll continues;
        only the overall timeout ends the wait.

        Raises:
            OracleTimeoutError: If no tally arrives within tally_timeout
            OracleError: If the tally reports a failed request
        """
        clock = self._clock or asyncio.get_running_loop().time
        give_up_at = clock() + self.tally_timeout

        while True:
            try:
                report = await self.get_report(request_id)
            except httpx.HTTPError as e:
                logger.warning(f"[WitnetClient] Polling {request_id} failed, will retry: {e}")
                report = None

            tally = (report or {}).get("tally")
            if tally is not None:
                return self._parse_tally(request_id, report, tally)

            if clock() >= give_up_at:
                raise OracleTimeoutError(request_id, self.tally_timeout)
            await self._sleep(self.poll_interval)

    @staticmethod
    def _parse_tally(request_id: str, report: Dict[str, Any], tally: Any) -> TallyResult:
        result = tally.get("result", tally.get("tally")) if isinstance(tally, dict) else tally
        if isinstance(result, dict) and ("RadonError" in result or "error" in result):
            raise OracleError(f"Data request {request_id} resolved to an error: {result}", request_id=request_id)

        logger.info(f"[WitnetClient] Data request {request_id} tallied: {result!r}")
        return TallyResult(request_id=request_id, success=True, result=result, raw=report)

    async def aclose(self):
        """Close the HTTP client."""
        await self.client.aclose()
