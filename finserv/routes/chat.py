# Load environment variables early
from dotenv import load_dotenv

load_dotenv()

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from finserv.config.settings import CHATBOT_ERROR_MESSAGE
from finserv.dependencies.auth import get_chat_session, get_services
from finserv.models.requests import ChatRequest
from finserv.models.responses import (
    ChatFailureResponse,
    ChatResponse,
    MessageResponse,
)
from finserv.utils.cancellation import (
    CLIENT_CLOSED_REQUEST,
    ClientDisconnected,
    run_until_disconnected,
)
from finserv.utils.debug import print__chat_debug

router = APIRouter(prefix="/api")


@router.post(
    "/chat",
    response_model=ChatResponse,
    responses={
        500: {"model": ChatFailureResponse},
        CLIENT_CLOSED_REQUEST: {"model": MessageResponse},
    },
)
async def chat(
    body: ChatRequest,
    request: Request,
    services=Depends(get_services),
    _session=Depends(get_chat_session),
):
    """Relay a message to the AI assistant.

    200 ``{"reply": ...}`` on success. Any provider failure answers 500 with
    the fallback reply and a generic error; provider detail stays in the
    server log. If the client disconnects first, the upstream call is
    cancelled and 499 is returned.
    """
    print__chat_debug(f"💬 CHAT: message received (length {len(body.message)})")
    try:
        outcome = await run_until_disconnected(
            request, services.chat_proxy.relay(body.message)
        )
    except ClientDisconnected:
        return JSONResponse(
            status_code=CLIENT_CLOSED_REQUEST,
            content={"message": "Client closed request"},
        )

    if outcome.ok:
        return {"reply": outcome.reply}

    print__chat_debug(f"💬 CHAT: fallback reply ({outcome.failure_reason})")
    return JSONResponse(
        status_code=500,
        content={"reply": outcome.reply, "error": CHATBOT_ERROR_MESSAGE},
    )
