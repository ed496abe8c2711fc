"""Builds Witnet data requests that tally the reactions on a proposal message."""
from typing import List, Optional

from govrelay.config import common_settings as settings
from govrelay.data_models.schemas import OracleRequest, ReducerStage, RetrievalSource

# Each reaction monitor answers with {"result": "<positive|negative|...>"};
# witnesses read that field and the network keeps the majority answer.
REACTION_SCRIPT = ["StringParseJSONMap", ["MapGetString", "result"]]


def build_data_request(
    channel_id: str,
    message_id: str,
    monitor_urls: Optional[List[str]] = None,
) -> OracleRequest:
    """Build the data request for the proposal posted at (channel_id, message_id).

    The result depends only on the message location and the configured
    monitors, so building twice yields equal requests.
    """
    templates = monitor_urls if monitor_urls is not None else settings.REACTION_MONITOR_URLS
    if not templates:
        raise ValueError("At least one reaction monitor URL is required")

    sources = [
        RetrievalSource(
            url=template.format(channel_id=channel_id, message_id=message_id),
            script=REACTION_SCRIPT,
        )
        for template in templates
    ]
    return OracleRequest(
        retrieve=sources,
        aggregate=ReducerStage(reducer="mode"),
        tally=ReducerStage(reducer="mode"),
        witnesses=settings.ORACLE_WITNESSES,
        min_consensus_percentage=settings.ORACLE_MIN_CONSENSUS_PERCENTAGE,
        witness_reward=settings.ORACLE_WITNESS_REWARD,
        commit_and_reveal_fee=settings.ORACLE_COMMIT_AND_REVEAL_FEE,
        collateral=settings.ORACLE_COLLATERAL,
        fee=settings.ORACLE_REQUEST_FEE,
    )
