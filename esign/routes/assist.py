"""AI assistant endpoint for the contract builder."""

import json
import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from esign.db.models import AiLog
from esign.db.session import get_db_dependency
from esign.deps import get_current_owner
from esign.schemas.api import AssistRequest
from esign.schemas.domain import AssistSuggestion
from esign.services.ai_assist import AssistError, suggest_fields

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/assist", tags=["assist"])


def _last_user_message(messages: list[dict[str, str]]) -> str:
    for message in reversed(messages):
        if message["role"] == "user":
            return message["content"]
    return ""


@router.post("/chat", response_model=AssistSuggestion, response_model_exclude_none=True)
def chat(
    body: AssistRequest,
    owner_id: str = Depends(get_current_owner),
    db: Session = Depends(get_db_dependency),
):
    """Suggest contract field values. The client decides what to apply."""
    messages = [m.model_dump() for m in body.messages]
    try:
        suggestion, tokens = suggest_fields(messages, body.contract)
    except AssistError as e:
        logger.error("Assistant failed for user %s: %s", owner_id, e)
        raise HTTPException(status_code=e.status_code, detail=str(e))

    db.add(
        AiLog(
            user_id=owner_id,
            prompt=_last_user_message(messages),
            response=json.dumps(suggestion.model_dump(mode="json", exclude_none=True)),
            tokens_used=tokens,
        )
    )
    db.commit()
    return suggestion
