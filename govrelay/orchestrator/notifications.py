"""
Reply texts and delivery to the chat message a proposal came from.
"""
from datetime import datetime, timezone
from typing import Optional, Protocol

import httpx

from govrelay.config import common_settings as settings
from govrelay.exceptions import NotifierError
from govrelay.utils.logger import logger


def format_deadline(deadline: float) -> str:
    return datetime.fromtimestamp(deadline, tz=timezone.utc).strftime("%a %b %d %Y %H:%M:%S UTC")


def accepted_text(message_id: str, deadline: float) -> str:
    return (
        f"Received a request for creating a proposal with message_id='{message_id}' "
        f"and deadline={format_deadline(deadline)}"
    )


def transaction_url(transaction_hash: str) -> Optional[str]:
    """Block explorer link for a transaction, None when no explorer is configured."""
    if not settings.ETHERSCAN_HOST:
        return None
    return f"https://{settings.ETHERSCAN_HOST}/tx/{transaction_hash}"


def _with_link(text: str, transaction_hash: str) -> str:
    url = transaction_url(transaction_hash)
    return f"{text}\n{url}" if url else text


def reported_text(request_id: str, transaction_hash: str) -> str:
    return _with_link(
        f"The ID of the data request ({request_id}) has been reported to the "
        f"Ethereum contract ({transaction_hash})",
        transaction_hash,
    )


REPORT_FAILED_TEXT = "There was an error reporting the proposal result"


def executed_text(transaction_hash: str) -> str:
    return _with_link(
        f"The proposal has been executed in Ethereum transaction: {transaction_hash}",
        transaction_hash,
    )


EXECUTION_FAILED_TEXT = "There was an error executing the proposal"


class Notifier(Protocol):
    """Delivers a reply at the location of a chat message."""

    async def reply(self, channel_id: str, message_id: str, content: str) -> None:
        ...


class WebhookNotifier:
    """Posts replies to the chat transport's reply webhook."""

    def __init__(
        self,
        webhook_url: str = None,
        token: Optional[str] = None,
        timeout: float = 15.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.webhook_url = webhook_url or settings.CHAT_REPLY_WEBHOOK_URL
        self.token = token if token is not None else settings.CHAT_REPLY_TOKEN
        self.client = http_client or httpx.AsyncClient(timeout=timeout)

    def _get_headers(self) -> dict:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def reply(self, channel_id: str, message_id: str, content: str) -> None:
        """
        Raises:
            NotifierError: If no webhook is configured or the webhook rejects the reply
        """
        if not self.webhook_url:
            raise NotifierError("CHAT_REPLY_WEBHOOK_URL is not configured", 500)

        body = {"channel_id": channel_id, "message_id": message_id, "content": content}
        try:
            response = await self.client.post(self.webhook_url, json=body, headers=self._get_headers())
        except httpx.HTTPError as e:
            raise NotifierError(str(e), 503)
        if response.status_code >= 400:
            raise NotifierError(response.text or "Unknown error", response.status_code)
        logger.info(f"[Notifier] Replied to message {message_id} in channel {channel_id}")

    async def aclose(self):
        await self.client.aclose()
