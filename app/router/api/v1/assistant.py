"""
Dengue assistant chat. Guests get a small number of free questions per session id.
"""
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends

from app.core.dependencies import optional_session
from app.core.exceptions import BadRequest
from app.schema.assistant import AssistantRequest, AssistantResponse
from app.schema.chat import DetailResponse
from app.service.assistant_service import AssistantService

router = APIRouter()
logger = logging.getLogger(__name__)


def get_assistant_service() -> AssistantService:
    return AssistantService()


@router.post("", response_model=AssistantResponse)
def ask(
    body: AssistantRequest,
    session: Optional[Dict[str, Any]] = Depends(optional_session),
    service: AssistantService = Depends(get_assistant_service),
):
    if not body.message or not body.message.strip() or not body.session_id:
        raise BadRequest("MISSING_FIELDS", "Message and sessionId are required")
    return service.reply(body.message.strip(), body.session_id, authenticated=session is not None)


@router.delete("/{session_id}", response_model=DetailResponse)
def clear_conversation(
    session_id: str,
    service: AssistantService = Depends(get_assistant_service),
):
    service.clear_memory(session_id)
    logger.info("Cleared assistant memory for session %s", session_id)
    return DetailResponse(message="Chat history cleared")
