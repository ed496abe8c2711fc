"""
Explicit lifecycle state of one proposal.

A ProposalRun records where a proposal is in the pipeline and everything the
pipeline produced along the way. Stages only move along ALLOWED_TRANSITIONS.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, List, Optional

from govrelay.data_models.schemas import (
    OracleRequest,
    Proposal,
    ProposalRunOut,
    Report,
    StageChangeOut,
    TallyResult,
)
from govrelay.exceptions import InvalidTransitionError


class ProposalStage(str, Enum):
    """Pipeline stages of a proposal."""
    SCHEDULED = "scheduled"
    REQUEST_BUILT = "request_built"
    REQUEST_SUBMITTED = "request_submitted"
    TALLY_PENDING = "tally_pending"
    REPORTED = "reported"
    EXECUTION_PENDING = "execution_pending"
    EXECUTED = "executed"
    REPORT_FAILED = "report_failed"
    EXECUTION_FAILED = "execution_failed"
    ORACLE_FAILED = "oracle_failed"
    FAILED = "failed"


# FAILED is reachable from every non-terminal stage: an unexpected error ends the run there
ALLOWED_TRANSITIONS: Dict[ProposalStage, FrozenSet[ProposalStage]] = {
    ProposalStage.SCHEDULED: frozenset({ProposalStage.REQUEST_BUILT, ProposalStage.FAILED}),
    ProposalStage.REQUEST_BUILT: frozenset({
        ProposalStage.REQUEST_SUBMITTED,
        ProposalStage.ORACLE_FAILED,
        ProposalStage.FAILED,
    }),
    ProposalStage.REQUEST_SUBMITTED: frozenset({ProposalStage.TALLY_PENDING, ProposalStage.FAILED}),
    ProposalStage.TALLY_PENDING: frozenset({
        ProposalStage.REPORTED,
        ProposalStage.REPORT_FAILED,
        ProposalStage.ORACLE_FAILED,
        ProposalStage.FAILED,
    }),
    ProposalStage.REPORTED: frozenset({ProposalStage.EXECUTION_PENDING, ProposalStage.FAILED}),
    ProposalStage.EXECUTION_PENDING: frozenset({
        ProposalStage.EXECUTED,
        ProposalStage.EXECUTION_FAILED,
        ProposalStage.FAILED,
    }),
}

TERMINAL_STAGES: FrozenSet[ProposalStage] = frozenset({
    ProposalStage.EXECUTED,
    ProposalStage.REPORT_FAILED,
    ProposalStage.EXECUTION_FAILED,
    ProposalStage.ORACLE_FAILED,
    ProposalStage.FAILED,
})


@dataclass
class StageChange:
    stage: ProposalStage
    at: float
    detail: Optional[str] = None


@dataclass
class ProposalRun:
    """Everything known about one proposal's trip through the pipeline."""
    proposal: Proposal
    stage: ProposalStage = ProposalStage.SCHEDULED
    request: Optional[OracleRequest] = None
    request_id: Optional[str] = None
    tally: Optional[TallyResult] = None
    report: Optional[Report] = None
    execution_tx: Optional[str] = None
    error: Optional[str] = None
    history: List[StageChange] = field(default_factory=list)

    @property
    def message_id(self) -> str:
        return self.proposal.message_id

    @property
    def is_terminal(self) -> bool:
        return self.stage in TERMINAL_STAGES

    def can_advance(self, stage: ProposalStage) -> bool:
        return stage in ALLOWED_TRANSITIONS.get(self.stage, frozenset())

    def advance(self, stage: ProposalStage, at: float, detail: Optional[str] = None) -> StageChange:
        """Move to `stage`, recording when it happened.

        Raises:
            InvalidTransitionError: If `stage` is not reachable from the current stage
        """
        if not self.can_advance(stage):
            raise InvalidTransitionError(self.stage.value, stage.value)
        self.stage = stage
        change = StageChange(stage=stage, at=at, detail=detail)
        self.history.append(change)
        return change

    def to_out(self) -> ProposalRunOut:
        return ProposalRunOut(
            message_id=self.proposal.message_id,
            channel_id=self.proposal.channel_id,
            guild_id=self.proposal.guild_id,
            dao_name=self.proposal.dao.name,
            deadline=self.proposal.deadline,
            stage=self.stage.value,
            terminal=self.is_terminal,
            request_id=self.request_id,
            report_transaction_hash=self.report.transaction_hash if self.report else None,
            execution_transaction_hash=self.execution_tx,
            error=self.error,
            history=[
                StageChangeOut(stage=change.stage.value, at=change.at, detail=change.detail)
                for change in self.history
            ],
        )


def new_run(proposal: Proposal, at: float) -> ProposalRun:
    """Create a run in the initial stage, with that stage recorded in its history."""
    run = ProposalRun(proposal=proposal)
    run.history.append(StageChange(stage=ProposalStage.SCHEDULED, at=at))
    return run
