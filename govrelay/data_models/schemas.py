"""
Pydantic schemas for proposals, DAO registry entries, oracle requests and
on-chain reports.
"""
import hashlib
import json
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


# ==================
# DAO Registry Schemas
# ==================

class Collateral(BaseModel):
    """Deposit required by a Govern queue (token address + raw amount)."""
    token: str
    amount: str = "0"


class QueueConfig(BaseModel):
    """Govern queue configuration as indexed by the subgraph."""
    model_config = ConfigDict(populate_by_name=True)

    execution_delay: int = Field(0, alias="executionDelay")
    schedule_deposit: Collateral = Field(..., alias="scheduleDeposit")
    challenge_deposit: Collateral = Field(..., alias="challengeDeposit")
    resolver: str
    rules: str = "0x"


class Queue(BaseModel):
    address: str
    config: QueueConfig


class Executor(BaseModel):
    address: str


class RegistryEntry(BaseModel):
    """A DAO registered in Aragon Govern.

    `grace_period_seconds` is local configuration, not part of the subgraph
    entity: it overrides how long the relay waits between reporting an
    outcome and executing it.
    """
    model_config = ConfigDict(populate_by_name=True)

    name: str
    queue: Queue
    executor: Executor
    grace_period_seconds: Optional[int] = Field(None, ge=0)


# ==================
# Proposal Schemas
# ==================

class Proposal(BaseModel):
    """A validated governance proposal awaiting evaluation."""
    model_config = ConfigDict(frozen=True)

    message_id: str
    channel_id: str
    guild_id: str
    description: str
    deadline: float  # epoch seconds
    dao: RegistryEntry
    created_at: float


class ChatMessage(BaseModel):
    """A chat message forwarded by the chat transport."""
    content: str
    message_id: str
    channel_id: str
    guild_id: Optional[str] = None
    author_id: Optional[str] = None
    author_is_bot: bool = False
    author_is_admin: bool = False


# ==================
# Oracle Schemas
# ==================

class RetrievalSource(BaseModel):
    """One data source the oracle witnesses query."""
    kind: str = "HTTP-GET"
    url: str
    script: List[Any] = Field(default_factory=list)


class ReducerStage(BaseModel):
    filters: List[Any] = Field(default_factory=list)
    reducer: str = "mode"


class OracleRequest(BaseModel):
    """Opaque data request descriptor submitted to the oracle network."""
    model_config = ConfigDict(frozen=True)

    retrieve: List[RetrievalSource]
    aggregate: ReducerStage = Field(default_factory=ReducerStage)
    tally: ReducerStage = Field(default_factory=ReducerStage)
    witnesses: int = 3
    min_consensus_percentage: int = 51
    witness_reward: int = 0
    commit_and_reveal_fee: int = 0
    collateral: int = 0
    fee: int = 0

    def fingerprint(self) -> str:
        """Stable digest of the request, used to correlate log lines."""
        canonical = json.dumps(self.model_dump(), sort_keys=True, separators=(",", ":"))
        return hashlib.sha256(canonical.encode()).hexdigest()


class TallyResult(BaseModel):
    """Resolved outcome of one data request."""
    request_id: str
    success: bool = True
    result: Any = None
    raw: Dict[str, Any] = Field(default_factory=dict)


# ==================
# Chain Schemas
# ==================

class Report(BaseModel):
    """Receipt of an outcome reported to the Govern queue."""
    transaction_hash: str
    payload: Dict[str, Any]


# ==================
# API Response Schemas
# ==================

class MessageHandledResponse(BaseModel):
    handled: bool
    accepted: bool = False
    reply: Optional[str] = None


class StageChangeOut(BaseModel):
    stage: str
    at: float
    detail: Optional[str] = None


class ProposalRunOut(BaseModel):
    message_id: str
    channel_id: str
    guild_id: str
    dao_name: str
    deadline: float
    stage: str
    terminal: bool
    request_id: Optional[str] = None
    report_transaction_hash: Optional[str] = None
    execution_transaction_hash: Optional[str] = None
    error: Optional[str] = None
    history: List[StageChangeOut] = Field(default_factory=list)
