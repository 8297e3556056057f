"""Practice API: load a text for typing practice and save the typist's position."""

import logging

from fastapi import APIRouter, Depends

from ..core.auth import AuthContext, require_auth
from ..core.responses import json_message, json_response
from ..exceptions import TypecraftException
from ..models.text import Text
from ..schemas.text import PracticeResponse, ProgressRequest, TextResponse
from ..services.text_service import TextService
from .dependencies import get_owned_text, get_text_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/practice", tags=["practice"])


@router.post("/progress")
def save_progress(
    body: ProgressRequest,
    auth: AuthContext = Depends(require_auth),
    service: TextService = Depends(get_text_service),
):
    """Store ``progress_index`` for an owned text. Always answers JSON."""
    try:
        service.save_progress(auth, body.text_id, body.progress_index)
    except TypecraftException as e:
        return json_message(e.message, status_code=e.status_code, success=False)
    return json_response({"success": True})


@router.get("/{text_id}", response_model=PracticeResponse)
def practice(
    text: Text = Depends(get_owned_text),
    auth: AuthContext = Depends(require_auth),
):
    return PracticeResponse(
        user={"id": auth.user_id, "username": auth.username},
        text=TextResponse.model_validate(text),
    )
