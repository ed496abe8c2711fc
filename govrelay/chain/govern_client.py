"""
Aragon Govern queue client.

Reports a tallied proposal by scheduling a container on the DAO's queue and
later executes that same container. Both calls follow the reporter/executor
contract used by the orchestrator: a success value, or None on any failure.
"""
import time
from typing import Any, Callable, Dict, Optional, Protocol

from eth_account import Account
from web3 import AsyncHTTPProvider, AsyncWeb3, Web3

from govrelay.chain.abis import GOVERN_QUEUE_ABI
from govrelay.config import common_settings as settings
from govrelay.data_models.schemas import RegistryEntry, Report
from govrelay.utils.logger import logger

EMPTY_FAILURE_MAP = "0x" + "00" * 32


class OutcomeReporter(Protocol):
    async def report(
        self, dao: RegistryEntry, request_id: str, execution_delay_seconds: int
    ) -> Optional[Report]:
        ...


class OutcomeExecutor(Protocol):
    async def execute(self, dao: RegistryEntry, payload: Dict[str, Any]) -> Optional[str]:
        ...


def _to_bytes(value: str) -> bytes:
    if not value or value == "0x":
        return b""
    return Web3.to_bytes(hexstr=value if value.startswith("0x") else "0x" + value)


def container_args(container: Dict[str, Any]) -> tuple:
    """Convert a JSON-friendly container into the tuple web3 encodes."""
    payload = container["payload"]
    config = container["config"]
    return (
        (
            int(payload["nonce"]),
            int(payload["executionTime"]),
            Web3.to_checksum_address(payload["submitter"]),
            Web3.to_checksum_address(payload["executor"]),
            [
                (Web3.to_checksum_address(action["to"]), int(action["value"]), _to_bytes(action["data"]))
                for action in payload["actions"]
            ],
            _to_bytes(payload["allowFailuresMap"]),
            _to_bytes(payload["proof"]),
        ),
        (
            int(config["executionDelay"]),
            (
                Web3.to_checksum_address(config["scheduleDeposit"]["token"]),
                int(config["scheduleDeposit"]["amount"]),
            ),
            (
                Web3.to_checksum_address(config["challengeDeposit"]["token"]),
                int(config["challengeDeposit"]["amount"]),
            ),
            Web3.to_checksum_address(config["resolver"]),
            _to_bytes(config["rules"]),
        ),
    )


class GovernQueueClient:
    """Signs and sends transactions to Govern queues on behalf of the relayer."""

    def __init__(
        self,
        rpc_url: str = None,
        private_key: Optional[str] = None,
        receipt_timeout: float = None,
        web3: Optional[AsyncWeb3] = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Args:
            rpc_url: Ethereum JSON-RPC endpoint (default from ETHEREUM_RPC_URL env var)
            private_key: Relayer key; when absent the node's first unlocked account sends
            receipt_timeout: Seconds to wait for a transaction receipt
            web3: Pre-built AsyncWeb3 instance (tests inject a mock)
            clock: Wall clock used to compute execution times
        """
        self.w3 = web3 or AsyncWeb3(AsyncHTTPProvider(rpc_url or settings.ETHEREUM_RPC_URL))
        key = private_key if private_key is not None else settings.RELAYER_PRIVATE_KEY
        self.account = Account.from_key(key) if key else None
        self.receipt_timeout = receipt_timeout or settings.CHAIN_RECEIPT_TIMEOUT_SECONDS
        self._clock = clock

    def queue_contract(self, address: str):
        return self.w3.eth.contract(address=Web3.to_checksum_address(address), abi=GOVERN_QUEUE_ABI)

    async def sender_address(self) -> str:
        if self.account is not None:
            return self.account.address
        accounts = await self.w3.eth.accounts
        if not accounts:
            raise RuntimeError("No relayer key configured and the node exposes no accounts")
        return accounts[0]

    async def send(self, contract_call) -> Optional[str]:
        """Send a contract call and wait for it to be mined. Returns the hash on success."""
        sender = await self.sender_address()
        if self.account is not None:
            tx = await contract_call.build_transaction({
                "from": sender,
                "nonce": await self.w3.eth.get_transaction_count(sender),
            })
            signed = self.account.sign_transaction(tx)
            tx_hash = await self.w3.eth.send_raw_transaction(signed.raw_transaction)
        else:
            tx_hash = await contract_call.transact({"from": sender})

        receipt = await self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=self.receipt_timeout)
        tx_hex = Web3.to_hex(tx_hash)
        if receipt.get("status") != 1:
            logger.error(f"[Govern] Transaction {tx_hex} reverted")
            return None
        return tx_hex

    async def build_container(
        self, dao: RegistryEntry, request_id: str, execution_delay_seconds: int
    ) -> Dict[str, Any]:
        queue = self.queue_contract(dao.queue.address)
        nonce = await queue.functions.nonce().call()
        config = dao.queue.config
        return {
            "payload": {
                "nonce": nonce + 1,
                "executionTime": int(self._clock()) + int(execution_delay_seconds),
                "submitter": await self.sender_address(),
                "executor": dao.executor.address,
                "actions": [],
                "allowFailuresMap": EMPTY_FAILURE_MAP,
                "proof": request_id if request_id.startswith("0x") else "0x" + request_id,
            },
            "config": {
                "executionDelay": config.execution_delay,
                "scheduleDeposit": config.schedule_deposit.model_dump(),
                "challengeDeposit": config.challenge_deposit.model_dump(),
                "resolver": config.resolver,
                "rules": config.rules,
            },
        }


class GovernReporter:
    """Reports an oracle outcome by scheduling it on the DAO's Govern queue."""

    def __init__(self, client: GovernQueueClient):
        self.client = client

    async def report(
        self, dao: RegistryEntry, request_id: str, execution_delay_seconds: int
    ) -> Optional[Report]:
        logger.info(f"[Govern] Reporting data request {request_id} to queue {dao.queue.address} ({dao.name})")
        try:
            container = await self.client.build_container(dao, request_id, execution_delay_seconds)
            queue = self.client.queue_contract(dao.queue.address)
            tx_hash = await self.client.send(queue.functions.schedule(container_args(container)))
        except Exception as e:
            logger.error(f"[Govern] Reporting {request_id} for {dao.name} failed: {e}", exc_info=True)
            return None

        if not tx_hash:
            return None
        logger.info(f"[Govern] Scheduled container for {request_id} in {tx_hash}")
        return Report(transaction_hash=tx_hash, payload=container)


class GovernExecutor:
    """Executes a previously scheduled Govern container."""

    def __init__(self, client: GovernQueueClient):
        self.client = client

    async def execute(self, dao: RegistryEntry, payload: Dict[str, Any]) -> Optional[str]:
        if not payload:
            logger.error(f"[Govern] Nothing to execute for {dao.name}: empty payload")
            return None

        logger.info(f"[Govern] Executing container nonce={payload['payload']['nonce']} on {dao.queue.address}")
        try:
            queue = self.client.queue_contract(dao.queue.address)
            tx_hash = await self.client.send(queue.functions.execute(container_args(payload)))
        except Exception as e:
            logger.error(f"[Govern] Execution for {dao.name} failed: {e}", exc_info=True)
            return None

        if tx_hash:
            logger.info(f"[Govern] Executed container for {dao.name} in {tx_hash}")
        return tx_hash
