"""
Chat message handling.

Recognizes commands, validates them, and hands validated proposals to the
orchestrator. Every reply, including validation errors, is delivered through
the notifier at the location of the triggering message.
"""
import time
from dataclasses import dataclass
from typing import Callable, List, Optional

from govrelay.config import common_settings as settings
from govrelay.data_models.schemas import ChatMessage, Proposal
from govrelay.directory.dao_directory import DaoDirectory
from govrelay.exceptions import (
    DaoNotBoundError,
    DaoNotFoundError,
    DirectMessageError,
    GovRelayError,
    MalformedProposalError,
    MalformedSetupError,
    PastDeadlineError,
    PermissionDeniedError,
)
from govrelay.orchestrator.notifications import Notifier, accepted_text
from govrelay.orchestrator.orchestrator import ProposalOrchestrator
from govrelay.subgraph.client import SubgraphClient
from govrelay.utils.logger import logger

from .commands import Command, find_command, parse_proposal, parse_setup


@dataclass
class HandlerResult:
    handled: bool
    accepted: bool = False
    reply: Optional[str] = None


def setup_confirmation_text(dao_name: str, monitor_invites: List[str]) -> str:
    text = (
        "Congrats to you and your fellow Discord users! "
        f'This server is now connected to the DAO named "{dao_name}".'
    )
    if monitor_invites:
        text += "\n\n**Remember to also add these other bots to your server**, otherwise the integration will fail:"
        text += "".join(f"\n- {invite}" for invite in monitor_invites)
    return text


class MessageHandler:
    """Turns chat commands into directory bindings and scheduled proposals."""

    def __init__(
        self,
        directory: DaoDirectory,
        subgraph: SubgraphClient,
        orchestrator: ProposalOrchestrator,
        notifier: Notifier,
        clock: Callable[[], float] = time.time,
        monitor_invites: Optional[List[str]] = None,
    ):
        self.directory = directory
        self.subgraph = subgraph
        self.orchestrator = orchestrator
        self.notifier = notifier
        self._clock = clock
        self.monitor_invites = settings.REACTION_MONITOR_INVITES if monitor_invites is None else monitor_invites

    async def handle(self, message: ChatMessage) -> HandlerResult:
        if message.author_is_bot:
            return HandlerResult(handled=False)

        command = find_command(message.content)
        if command is None:
            return HandlerResult(handled=False)

        try:
            if command is Command.NEW_PROPOSAL:
                proposal = self.validate_proposal(message)
                await self.orchestrator.accept(proposal)
                return HandlerResult(
                    handled=True, accepted=True, reply=accepted_text(proposal.message_id, proposal.deadline)
                )
            if command is Command.SETUP:
                reply = await self.setup(message)
            else:
                reply = f"DAO with ID {message.message_id} is being created"
        except GovRelayError as e:
            logger.info(
                f"[MessageHandler] Rejected {command.value} from author {message.author_id} "
                f"(message {message.message_id}): {e.message}"
            )
            reply = e.message

        await self._reply(message, reply)
        return HandlerResult(handled=True, reply=reply)

    def validate_proposal(self, message: ChatMessage) -> Proposal:
        """Build a Proposal from a `!proposal` message.

        Raises:
            ValidationError: When the message cannot become a proposal
        """
        parsed = parse_proposal(message.content)
        logger.info(
            f"[MessageHandler] Received a request for creating a proposal with "
            f"message_id='{message.message_id}' and deadline={parsed.deadline}"
        )

        if not message.guild_id:
            raise DirectMessageError()

        dao = self.directory.get(message.guild_id)
        if dao is None:
            raise DaoNotBoundError()

        if not parsed.description or parsed.deadline is None:
            raise MalformedProposalError()

        now = self._clock()
        if parsed.deadline <= now:
            raise PastDeadlineError()

        return Proposal(
            message_id=message.message_id,
            channel_id=message.channel_id,
            guild_id=message.guild_id,
            description=parsed.description,
            deadline=parsed.deadline,
            dao=dao,
            created_at=now,
        )

    async def setup(self, message: ChatMessage) -> str:
        parsed = parse_setup(message.content)
        logger.info(
            f"[MessageHandler] Received setup request from author {message.author_id} "
            f"in guild {message.guild_id} "
            f'trying to integrate with DAO named "{parsed.dao_name}"'
        )

        if not parsed.dao_name:
            raise MalformedSetupError()
        if not message.author_is_admin:
            raise PermissionDeniedError()
        if not message.guild_id:
            raise DirectMessageError()

        dao = await self.subgraph.query_dao_by_name(parsed.dao_name)
        if dao is None:
            raise DaoNotFoundError(parsed.dao_name)

        self.directory.bind(message.guild_id, dao)
        return setup_confirmation_text(parsed.dao_name, self.monitor_invites)

    async def _reply(self, message: ChatMessage, content: str) -> None:
        try:
            await self.notifier.reply(message.channel_id, message.message_id, content)
        except Exception as e:
            logger.warning(f"[MessageHandler] Could not reply to message {message.message_id}: {e}")
