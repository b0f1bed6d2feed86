import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlmodel import Session
from starlette.concurrency import run_in_threadpool

from app.api.analyze import read_json_body
from app.api.deps import get_completion_client
from app.core.config import settings
from app.core.database import get_db
from app.core.rate_limit import limiter, per_minute_limit
from app.schemas import ChatResponse, ErrorResponse
from app.services.chat import ChatAssistant
from app.services.completion import CompletionClient
from app.services.errors import EmptyResponse, MissingCredential, UpstreamError

log = logging.getLogger("nirogya")

router = APIRouter(tags=["chat"])


@router.post(
    "/chat",
    response_model=ChatResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
@limiter.limit(per_minute_limit)
async def chat(
    request: Request,
    db: Session = Depends(get_db),
    completion: CompletionClient = Depends(get_completion_client),
):
    """Assistant reply. Body: {messages: [{role, content}], user_id?}."""
    body = await read_json_body(request)
    messages = body.get("messages") if isinstance(body, dict) else None
    if not isinstance(messages, list):
        return JSONResponse(status_code=400, content={"error": "Messages array is required"})
    user_id = body.get("user_id") or None
    assistant = ChatAssistant(completion, db, title=settings.app_title)
    try:
        text = await run_in_threadpool(assistant.reply, messages, str(user_id) if user_id else None)
    except MissingCredential:
        return JSONResponse(status_code=500, content={"error": "API key not configured"})
    except UpstreamError as e:
        return JSONResponse(status_code=e.status_code, content={"error": f"API error: {e.status_code}"})
    except EmptyResponse as e:
        return JSONResponse(status_code=500, content={"error": e.message})
    return ChatResponse(message=text, success=True)
