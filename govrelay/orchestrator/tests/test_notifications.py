import json

import httpx
import pytest

from govrelay.config import common_settings as settings
from govrelay.exceptions import NotifierError
from govrelay.orchestrator.notifications import (
    WebhookNotifier,
    accepted_text,
    executed_text,
    format_deadline,
    reported_text,
    transaction_url,
)

WEBHOOK_URL = "https://chat.local/replies"


def make_notifier(handler, token="reply-token", url=WEBHOOK_URL) -> WebhookNotifier:
    return WebhookNotifier(
        webhook_url=url,
        token=token,
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


def test_deadline_is_rendered_in_utc():
    assert format_deadline(0) == "Thu Jan 01 1970 00:00:00 UTC"
    assert accepted_text("m-1", 0) == (
        "Received a request for creating a proposal with message_id='m-1' "
        "and deadline=Thu Jan 01 1970 00:00:00 UTC"
    )


@pytest.mark.asyncio
async def test_reply_posts_to_webhook():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(204)

    notifier = make_notifier(handler)
    await notifier.reply("c-1", "m-1", "hello")

    assert json.loads(seen[0].content) == {"channel_id": "c-1", "message_id": "m-1", "content": "hello"}
    assert seen[0].headers["Authorization"] == "Bearer reply-token"
    await notifier.aclose()


@pytest.mark.asyncio
async def test_rejected_reply_raises():
    notifier = make_notifier(lambda request: httpx.Response(404, text="unknown channel"))

    with pytest.raises(NotifierError) as exc_info:
        await notifier.reply("c-1", "m-1", "hello")

    assert exc_info.value.status_code == 404


@pytest.mark.asyncio
async def test_unreachable_webhook_raises():
    def handler(request):
        raise httpx.ConnectError("refused")

    with pytest.raises(NotifierError) as exc_info:
        await make_notifier(handler).reply("c-1", "m-1", "hello")

    assert exc_info.value.status_code == 503


@pytest.mark.asyncio
async def test_unconfigured_webhook_raises(monkeypatch):
    monkeypatch.setattr(settings, "CHAT_REPLY_WEBHOOK_URL", "")
    notifier = make_notifier(lambda request: httpx.Response(204), url="")

    with pytest.raises(NotifierError):
        await notifier.reply("c-1", "m-1", "hello")


def test_transaction_texts_link_to_explorer(monkeypatch):
    monkeypatch.setattr(settings, "ETHERSCAN_HOST", "rinkeby.etherscan.io")

    assert transaction_url("0xAA") == "https://rinkeby.etherscan.io/tx/0xAA"
    assert reported_text("0xdr", "0xAA").endswith("\nhttps://rinkeby.etherscan.io/tx/0xAA")
    assert executed_text("0xEE") == (
        "The proposal has been executed in Ethereum transaction: 0xEE\n"
        "https://rinkeby.etherscan.io/tx/0xEE"
    )


def test_transaction_texts_without_explorer(monkeypatch):
    monkeypatch.setattr(settings, "ETHERSCAN_HOST", "")

    assert transaction_url("0xEE") is None
    assert executed_text("0xEE") == "The proposal has been executed in Ethereum transaction: 0xEE"
