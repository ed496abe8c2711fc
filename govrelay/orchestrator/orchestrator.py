"""
Proposal lifecycle orchestrator.

Drives every accepted proposal through the pipeline:

    scheduled -> request_built -> request_submitted -> tally_pending
        -> reported -> execution_pending -> executed

with the terminal failures report_failed, execution_failed and oracle_failed,
and failed for errors outside the oracle, reporter and executor contracts.

Each proposal gets one asyncio task that walks the stages strictly in order.
The individual transitions are exposed as `handle_*` methods so they can be
driven one at a time with fake collaborators.
"""
import asyncio
import inspect
import time
from typing import Any, Awaitable, Callable, Dict, List, Optional

from govrelay.chain.govern_client import OutcomeExecutor, OutcomeReporter
from govrelay.config import common_settings as settings
from govrelay.data_models.schemas import OracleRequest, Proposal, RegistryEntry, Report, TallyResult
from govrelay.exceptions import ConflictError, OracleError
from govrelay.oracle.request_builder import build_data_request
from govrelay.oracle.witnet_client import OracleClient
from govrelay.utils.logger import logger

from .notifications import (
    EXECUTION_FAILED_TEXT,
    REPORT_FAILED_TEXT,
    Notifier,
    accepted_text,
    executed_text,
    reported_text,
)
from .scheduler import DeadlineTimer
from .state import ProposalRun, ProposalStage, StageChange, new_run

StageListener = Callable[[ProposalRun, StageChange], Any]


class ProposalOrchestrator:
    """
    Schedules, evaluates, reports and executes governance proposals.

    Usage:
        orchestrator = ProposalOrchestrator(oracle, reporter, executor, notifier)
        run = await orchestrator.accept(proposal)
    """

    def __init__(
        self,
        oracle: OracleClient,
        reporter: OutcomeReporter,
        executor: OutcomeExecutor,
        notifier: Notifier,
        timer: Optional[DeadlineTimer] = None,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        request_builder: Callable[[str, str], OracleRequest] = build_data_request,
        default_grace_seconds: Optional[int] = None,
    ):
        self.oracle = oracle
        self.reporter = reporter
        self.executor = executor
        self.notifier = notifier
        self.timer = timer or DeadlineTimer(clock=clock, sleep=sleep)
        self.request_builder = request_builder
        self.default_grace_seconds = (
            settings.EXECUTION_GRACE_SECONDS if default_grace_seconds is None else default_grace_seconds
        )
        self._clock = clock
        self._sleep = sleep
        self._runs: Dict[str, ProposalRun] = {}
        self._tasks: Dict[str, asyncio.Task] = {}
        self._listeners: List[StageListener] = []

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_run(self, message_id: str) -> Optional[ProposalRun]:
        return self._runs.get(message_id)

    def list_runs(self) -> List[ProposalRun]:
        return list(self._runs.values())

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    def add_listener(self, listener: StageListener) -> None:
        """Register a callback (sync or async) invoked on every stage change."""
        self._listeners.append(listener)

    def grace_period_for(self, dao: RegistryEntry) -> int:
        """Seconds to wait between reporting and executing for this DAO."""
        grace = dao.grace_period_seconds if dao.grace_period_seconds is not None else self.default_grace_seconds
        if grace < dao.queue.config.execution_delay:
            logger.warning(
                f"[Orchestrator] Grace period {grace}s for '{dao.name}' is shorter than its queue "
                f"executionDelay {dao.queue.config.execution_delay}s; execution will likely be rejected"
            )
        return grace

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def accept(self, proposal: Proposal) -> ProposalRun:
        """Accept a validated proposal, arm its deadline and acknowledge it.

        Raises:
            ConflictError: If a proposal for the same message is already known
        """
        if proposal.message_id in self._runs:
            raise ConflictError(proposal.message_id)

        run = new_run(proposal, self._clock())
        self._runs[proposal.message_id] = run

        delay = self.timer.delay_until(proposal.deadline)
        logger.info(
            f"[Orchestrator] Accepted proposal {proposal.message_id} for '{proposal.dao.name}', "
            f"evaluating in {delay:.0f}s"
        )
        # Acknowledge before arming so the acceptance is always the first reply
        await self._notify(run, accepted_text(proposal.message_id, proposal.deadline))

        task = asyncio.create_task(self._drive(run), name=f"proposal-{proposal.message_id}")
        self._tasks[proposal.message_id] = task
        task.add_done_callback(lambda _t, key=proposal.message_id: self._tasks.pop(key, None))
        return run

    async def _drive(self, run: ProposalRun) -> None:
        proposal = run.proposal
        try:
            await self.timer.wait_until(proposal.deadline)
            await self.handle_deadline_reached(run)

            try:
                request_id = await self.oracle.submit(run.request)
            except Exception as e:
                await self.handle_oracle_failure(run, e)
                return
            await self.handle_request_accepted(run, request_id)

            try:
                tally = await self.oracle.await_result(request_id)
            except Exception as e:
                await self.handle_oracle_failure(run, e)
                return
            await self.handle_tally_resolved(run, tally)
            if not tally.success:
                await self.handle_oracle_failure(
                    run, OracleError(f"Data request {request_id} resolved unsuccessfully", request_id=request_id)
                )
                return

            grace = self.grace_period_for(proposal.dao)
            report = await self._report(run, grace)
            await self.handle_report_settled(run, report)
            if run.stage is not ProposalStage.REPORTED:
                return

            await self._sleep(grace)
            await self.handle_grace_elapsed(run)

            transaction_hash = await self._execute(run)
            await self.handle_execution_settled(run, transaction_hash)
        except asyncio.CancelledError:
            logger.warning(f"[Orchestrator] Proposal {proposal.message_id} abandoned at stage '{run.stage.value}'")
            raise
        except Exception as e:
            logger.error(
                f"[Orchestrator] Proposal {proposal.message_id} stopped at stage '{run.stage.value}': {e}",
                exc_info=True,
            )
            await self.handle_unexpected_failure(run, e)

    async def _report(self, run: ProposalRun, execution_delay_seconds: int) -> Optional[Report]:
        try:
            return await self.reporter.report(run.proposal.dao, run.request_id, execution_delay_seconds)
        except Exception as e:
            logger.error(f"[Orchestrator] Reporter raised for {run.message_id}: {e}", exc_info=True)
            return None

    async def _execute(self, run: ProposalRun) -> Optional[str]:
        try:
            return await self.executor.execute(run.proposal.dao, run.report.payload)
        except Exception as e:
            logger.error(f"[Orchestrator] Executor raised for {run.message_id}: {e}", exc_info=True)
            return None

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    async def handle_deadline_reached(self, run: ProposalRun) -> None:
        proposal = run.proposal
        logger.info(
            f"[Orchestrator] Building data request for channel {proposal.channel_id} "
            f"and message {proposal.message_id}"
        )
        run.request = self.request_builder(proposal.channel_id, proposal.message_id)
        await self._advance(run, ProposalStage.REQUEST_BUILT, run.request.fingerprint())

    async def handle_request_accepted(self, run: ProposalRun, request_id: str) -> None:
        run.request_id = request_id
        logger.info(f"[Orchestrator] Data request for {run.message_id} accepted: {request_id}")
        await self._advance(run, ProposalStage.REQUEST_SUBMITTED, request_id)
        await self._advance(run, ProposalStage.TALLY_PENDING)

    async def handle_tally_resolved(self, run: ProposalRun, tally: TallyResult) -> None:
        run.tally = tally
        logger.info(f"[Orchestrator] Tallied result for {run.message_id}: {tally.result!r}")

    async def handle_oracle_failure(self, run: ProposalRun, error: Exception) -> None:
        """End the run without a chat reply; the failure is visible to listeners and in the logs."""
        run.error = str(error) or type(error).__name__
        logger.error(
            f"[Orchestrator] Oracle failed for proposal {run.message_id} at stage '{run.stage.value}': {run.error}"
        )
        await self._advance(run, ProposalStage.ORACLE_FAILED, run.error)

    async def handle_unexpected_failure(self, run: ProposalRun, error: Exception) -> None:
        """End a run that broke outside the oracle, reporter and executor contracts."""
        run.error = str(error) or type(error).__name__
        if run.is_terminal:
            return
        await self._advance(run, ProposalStage.FAILED, run.error)

    async def handle_report_settled(self, run: ProposalRun, report: Optional[Report]) -> None:
        if report:
            run.report = report
            await self._advance(run, ProposalStage.REPORTED, report.transaction_hash)
            await self._notify(run, reported_text(run.request_id, report.transaction_hash))
        else:
            run.error = "Reporter returned no receipt"
            await self._advance(run, ProposalStage.REPORT_FAILED, run.error)
            await self._notify(run, REPORT_FAILED_TEXT)

    async def handle_grace_elapsed(self, run: ProposalRun) -> None:
        await self._advance(run, ProposalStage.EXECUTION_PENDING)

    async def handle_execution_settled(self, run: ProposalRun, transaction_hash: Optional[str]) -> None:
        if transaction_hash:
            run.execution_tx = transaction_hash
            await self._advance(run, ProposalStage.EXECUTED, transaction_hash)
            await self._notify(run, executed_text(transaction_hash))
        else:
            run.error = "Executor returned no transaction"
            await self._advance(run, ProposalStage.EXECUTION_FAILED, run.error)
            await self._notify(run, EXECUTION_FAILED_TEXT)

    # ------------------------------------------------------------------
    # Plumbing
    # ------------------------------------------------------------------

    async def _advance(self, run: ProposalRun, stage: ProposalStage, detail: Optional[str] = None) -> None:
        change = run.advance(stage, self._clock(), detail)
        for listener in list(self._listeners):
            try:
                result = listener(run, change)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.warning(f"[Orchestrator] Stage listener failed: {e}", exc_info=True)

    async def _notify(self, run: ProposalRun, content: str) -> None:
        # Replies are best effort: a failed delivery never changes the run
        try:
            await self.notifier.reply(run.proposal.channel_id, run.proposal.message_id, content)
        except Exception as e:
            logger.warning(f"[Orchestrator] Could not notify message {run.message_id}: {e}")

    async def drain(self) -> None:
        """Wait until every in-flight proposal reaches a terminal stage or stops."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks.values()), return_exceptions=True)

    async def shutdown(self) -> None:
        """Cancel in-flight proposals; their pending waits are lost."""
        tasks = list(self._tasks.values())
        if tasks:
            logger.warning(f"[Orchestrator] Shutting down with {len(tasks)} proposal(s) in flight")
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
