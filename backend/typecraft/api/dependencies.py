"""Shared FastAPI dependencies: service construction and the ownership gate.

This is the one place that reads the global ``settings`` on behalf of the
services; each service receives the values it needs explicitly.
"""

import logging

from fastapi import Depends, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.auth import AuthContext, optional_auth
from ..core.config import settings
from ..database import get_db
from ..exceptions import DatabaseError
from ..models.text import Text
from ..repositories.category_repository import CategoryRepository
from ..repositories.text_repository import TextRepository
from ..services.category_service import CategoryService
from ..services.ownership_guard import OwnershipGuard
from ..services.pdf_extractor import PdfExtractor
from ..services.submission_workflow import TextSubmissionWorkflow
from ..services.summary_service import SummaryService
from ..services.text_service import TextService

logger = logging.getLogger(__name__)


def get_pdf_extractor() -> PdfExtractor:
    return PdfExtractor(
        command=settings.pdftotext_command,
        timeout=settings.pdf_extraction_timeout,
        max_bytes=settings.max_upload_bytes,
    )


def get_text_service(db: Session = Depends(get_db)) -> TextService:
    return TextService(
        TextRepository(db),
        CategoryRepository(db),
        strict_category_ids=settings.strict_category_ids,
    )


def get_category_service(db: Session = Depends(get_db)) -> CategoryService:
    return CategoryService(CategoryRepository(db), TextRepository(db))


def get_submission_workflow(
    db: Session = Depends(get_db),
    extractor: PdfExtractor = Depends(get_pdf_extractor),
) -> TextSubmissionWorkflow:
    return TextSubmissionWorkflow(TextRepository(db), CategoryRepository(db), extractor, settings)


def get_summary_service(db: Session = Depends(get_db)) -> SummaryService:
    return SummaryService(TextRepository(db), settings)


def get_owned_text(
    text_id: int,
    request: Request,
    auth: AuthContext = Depends(optional_auth),
    db: Session = Depends(get_db),
) -> Text:
    """Gate for every ``/texts/{text_id}`` and ``/practice/{text_id}`` route.

    Loads the text fresh, checks ownership, and leaves it on
    ``request.state.text`` for anything downstream that needs it.
    """
    try:
        text = OwnershipGuard(TextRepository(db)).authorize(auth, text_id)
    except SQLAlchemyError as e:
        logger.error("Ownership lookup failed", extra={"text_id": text_id, "error": str(e)})
        raise DatabaseError("An internal error occurred while verifying text ownership.", e)
    request.state.text = text
    return text
