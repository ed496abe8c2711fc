from fastapi import Depends, Header, HTTPException

from govrelay.bot.message_handler import MessageHandler
from govrelay.data_models.schemas import ChatMessage, MessageHandledResponse
from govrelay.exceptions import GovRelayError
from govrelay.routers.deps import _validate_api_key, get_message_handler
from govrelay.utils.logger import logger


async def handle_message(
    message: ChatMessage,
    authorization: str | None = Header(None),
    handler: MessageHandler = Depends(get_message_handler),
) -> MessageHandledResponse:
    """
    Handle a chat message forwarded by the chat transport.

    Replies are delivered through the reply webhook; `reply` in the response
    only echoes what was sent.
    """
    _validate_api_key(authorization)

    try:
        result = await handler.handle(message)
    except GovRelayError as e:
        logger.error(f"Router: message {message.message_id} failed: {e.message}")
        raise HTTPException(status_code=e.code, detail=e.to_dict())

    return MessageHandledResponse(handled=result.handled, accepted=result.accepted, reply=result.reply)
