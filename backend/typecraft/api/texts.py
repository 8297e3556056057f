"""Texts API: browse, add (paste or PDF), view, edit, delete, reorder, summarize.

Thin endpoints. Creation goes through TextSubmissionWorkflow, AI summaries
through SummaryService, everything else through TextService. Per-text
routes are gated by ``get_owned_text``.

Fixed paths (``/texts/new``, ``/texts/order``) are registered before the
``/texts/{text_id}`` routes so they are not captured as ids.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile

from ..core.auth import AuthContext, require_auth
from ..core.responses import json_message, redirect, render_form
from ..exceptions import DatabaseError, SubmissionError, ValidationError
from ..models.text import Text
from ..schemas.text import (
    EditTextContext,
    NewTextContext,
    OrderRequest,
    SummaryResponse,
    TextListResponse,
    TextResponse,
)
from ..services.pdf_extractor import UploadedFile
from ..services.submission_workflow import TextSubmissionWorkflow
from ..services.summary_service import SummaryService
from ..services.text_service import TextService
from .dependencies import (
    get_owned_text,
    get_submission_workflow,
    get_summary_service,
    get_text_service,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/texts", tags=["texts"])


def _to_upload(pdf_file: Optional[UploadFile]) -> Optional[UploadedFile]:
    """Browsers send an empty file part when nothing was chosen."""
    if pdf_file is None or not pdf_file.filename:
        return None
    return UploadedFile(
        filename=pdf_file.filename,
        mime_type=pdf_file.content_type or "",
        content=pdf_file.file.read(),
    )


# -- Listing ----------------------------------------------------------------

@router.get("", response_model=TextListResponse)
def list_texts(
    category_id: Optional[str] = Query(None),
    message: Optional[str] = Query(None),
    auth: AuthContext = Depends(require_auth),
    service: TextService = Depends(get_text_service),
):
    """Texts and sub-folders of one folder (root when absent or invalid)."""
    page = service.browse(auth, category_id)
    return TextListResponse(**page, message=message)


@router.get("/new", response_model=NewTextContext)
def new_text_form(
    folder_id: Optional[str] = Query(None),
    auth: AuthContext = Depends(require_auth),
    service: TextService = Depends(get_text_service),
):
    return NewTextContext(**service.new_text_context(auth, folder_id))


# -- Creation ---------------------------------------------------------------

@router.post("")
def add_text(
    title: Optional[str] = Form(None),
    content: Optional[str] = Form(None),
    category_id: Optional[str] = Form(None),
    pdf_file: Optional[UploadFile] = File(None),
    auth: AuthContext = Depends(require_auth),
    workflow: TextSubmissionWorkflow = Depends(get_submission_workflow),
    service: TextService = Depends(get_text_service),
):
    """Add a text from pasted content or an uploaded PDF.

    Success redirects to the folder the text landed in. Any failure returns
    the add form again with the error and the submitted values.
    """
    def form_again(error: str, error_code: Optional[str] = None):
        return render_form(
            "add_text",
            error,
            error_code=error_code,
            title=title or "",
            content=content or "",
            categories=service.flat_categories(auth),
            selected_folder_id=category_id,
        )

    try:
        submitted = workflow.submit(
            auth,
            title,
            pasted_content=content,
            uploaded_file=_to_upload(pdf_file),
            category_id=category_id,
        )
    except (SubmissionError, ValidationError) as e:
        return form_again(e.message, e.error_code.value)
    except Exception:
        logger.exception("Unexpected error adding text", extra={"user_id": auth.user_id})
        return form_again("An unexpected error occurred while adding the text.")

    return redirect("/texts", message="Text added successfully!", category_id=submitted.category_id)


# -- Ordering ---------------------------------------------------------------

@router.post("/order")
def update_order(
    body: OrderRequest,
    auth: AuthContext = Depends(require_auth),
    service: TextService = Depends(get_text_service),
):
    try:
        service.reorder(auth, body.order)
    except ValidationError as e:
        return json_message(e.message, status_code=400, success=False)
    except DatabaseError as e:
        return json_message(e.message, status_code=500, success=False)
    return json_message("Order updated successfully.", success=True)


# -- Single text ------------------------------------------------------------

@router.get("/{text_id}", response_model=TextResponse)
def get_text(text: Text = Depends(get_owned_text)):
    return text


@router.get("/{text_id}/edit", response_model=EditTextContext)
def edit_text_form(
    text: Text = Depends(get_owned_text),
    auth: AuthContext = Depends(require_auth),
    service: TextService = Depends(get_text_service),
):
    return EditTextContext(
        text=TextResponse.model_validate(text),
        categories=service.flat_categories(auth),
    )


@router.post("/{text_id}")
def edit_text(
    title: Optional[str] = Form(None),
    content: Optional[str] = Form(None),
    category_id: Optional[str] = Form(None),
    text: Text = Depends(get_owned_text),
    auth: AuthContext = Depends(require_auth),
    service: TextService = Depends(get_text_service),
):
    """Save an edited text, then redirect to the folder it now lives in."""
    try:
        folder_id = service.edit(auth, text, title, content, category_id)
    except (ValidationError, DatabaseError) as e:
        return render_form(
            "edit_text",
            e.message,
            text={
                "id": text.id,
                "title": title or "",
                "content": content or "",
                "category_id": text.category_id,
            },
            categories=service.flat_categories(auth),
        )
    return redirect("/texts", message="Text updated successfully!", category_id=folder_id)


@router.post("/{text_id}/delete")
def delete_text(
    request: Request,
    text: Text = Depends(get_owned_text),
    service: TextService = Depends(get_text_service),
):
    """Delete a text and go back to the folder it was in."""
    folder_id = request.state.text.category_id
    try:
        deleted = service.delete(text)
    except DatabaseError as e:
        return redirect("/texts", message=e.message, category_id=folder_id)

    if not deleted:
        return redirect(
            "/texts",
            message="Could not delete text. It might have already been removed.",
            category_id=folder_id,
        )
    return redirect("/texts", message="Text deleted successfully!", category_id=folder_id)


@router.post("/{text_id}/summarize", status_code=201, response_model=SummaryResponse, response_model_by_alias=True)
def summarize_text(
    text: Text = Depends(get_owned_text),
    service: SummaryService = Depends(get_summary_service),
):
    """Summarize a text with the configured model and save it as a new text."""
    result = service.summarize(text)
    return SummaryResponse(new_text_id=result.text_id, new_text_title=result.title)
