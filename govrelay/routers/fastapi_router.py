from fastapi import APIRouter

from .routes_messages import handle_message
from .routes_proposals import get_proposal, list_daos, list_proposals

router = APIRouter()
router.add_api_route("/v1/messages", handle_message, methods=["POST"])
router.add_api_route("/v1/proposals", list_proposals, methods=["GET"])
router.add_api_route("/v1/proposals/{message_id}", get_proposal, methods=["GET"])
router.add_api_route("/v1/daos", list_daos, methods=["GET"])
