from __future__ import annotations

from typing import Optional

from fastapi import HTTPException

from govrelay.bot.message_handler import MessageHandler
from govrelay.chain.govern_client import GovernExecutor, GovernQueueClient, GovernReporter
from govrelay.config import common_settings as settings
from govrelay.directory.dao_directory import DaoDirectory
from govrelay.oracle.witnet_client import WitnetNodeClient
from govrelay.orchestrator.notifications import WebhookNotifier
from govrelay.orchestrator.orchestrator import ProposalOrchestrator
from govrelay.subgraph.client import SubgraphClient
from govrelay.utils.logger import logger

# Process-wide service instances, created on first use
_directory: Optional[DaoDirectory] = None
_notifier: Optional[WebhookNotifier] = None
_orchestrator: Optional[ProposalOrchestrator] = None
_message_handler: Optional[MessageHandler] = None


def get_directory() -> DaoDirectory:
    global _directory
    if _directory is None:
        _directory = DaoDirectory()
    return _directory


def get_notifier() -> WebhookNotifier:
    global _notifier
    if _notifier is None:
        _notifier = WebhookNotifier()
    return _notifier


def get_orchestrator() -> ProposalOrchestrator:
    global _orchestrator
    if _orchestrator is None:
        logger.info("🔄 Initializing ProposalOrchestrator")
        chain_client = GovernQueueClient()
        _orchestrator = ProposalOrchestrator(
            oracle=WitnetNodeClient(),
            reporter=GovernReporter(chain_client),
            executor=GovernExecutor(chain_client),
            notifier=get_notifier(),
        )
        logger.info("✅ ProposalOrchestrator initialized")
    return _orchestrator


def get_message_handler() -> MessageHandler:
    global _message_handler
    if _message_handler is None:
        _message_handler = MessageHandler(
            directory=get_directory(),
            subgraph=SubgraphClient(),
            orchestrator=get_orchestrator(),
            notifier=get_notifier(),
        )
    return _message_handler


def peek_orchestrator() -> Optional[ProposalOrchestrator]:
    """The orchestrator if it has been created, without creating it."""
    return _orchestrator


def _required_api_key() -> Optional[str]:
    return settings.REQUIRED_API_KEY


def _validate_api_key(auth_header: Optional[str]):
    required = _required_api_key()
    if not required:
        logger.error("Router: missing GOVRELAY_TOKEN in environment")
        raise HTTPException(status_code=500, detail={
            "error": {
                "message": "Server missing API key configuration.",
                "type": "server_error",
            }
        })
    if not auth_header or not auth_header.startswith("Bearer "):
        logger.warning("Router: missing or malformed Authorization header")
        raise HTTPException(status_code=401, detail={
            "error": {
                "message": "You didn't provide an API key.",
                "type": "invalid_request_error",
            }
        })
    token_value = auth_header.split("Bearer ")[-1].strip()
    if token_value != required:
        logger.warning("Router: incorrect API key provided")
        raise HTTPException(status_code=401, detail={
            "error": {
                "message": "Incorrect API key provided.",
                "type": "invalid_request_error",
            }
        })
