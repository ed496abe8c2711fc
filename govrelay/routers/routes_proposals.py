from typing import List

from fastapi import Depends, HTTPException

from govrelay.data_models.schemas import ProposalRunOut
from govrelay.directory.dao_directory import DaoDirectory
from govrelay.orchestrator.orchestrator import ProposalOrchestrator
from govrelay.routers.deps import get_directory, get_orchestrator


async def list_proposals(
    orchestrator: ProposalOrchestrator = Depends(get_orchestrator),
) -> List[ProposalRunOut]:
    """List every proposal known to this process, most recent deadline last."""
    runs = sorted(orchestrator.list_runs(), key=lambda run: run.proposal.deadline)
    return [run.to_out() for run in runs]


async def get_proposal(
    message_id: str,
    orchestrator: ProposalOrchestrator = Depends(get_orchestrator),
) -> ProposalRunOut:
    run = orchestrator.get_run(message_id)
    if run is None:
        raise HTTPException(status_code=404, detail=f"Proposal '{message_id}' not found")
    return run.to_out()


async def list_daos(directory: DaoDirectory = Depends(get_directory)) -> dict:
    return {
        "bindings": [
            {
                "guild_id": guild_id,
                "dao_name": dao.name,
                "queue": dao.queue.address,
                "executor": dao.executor.address,
            }
            for guild_id, dao in directory.items()
        ]
    }
