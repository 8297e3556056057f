"""Text submission workflow: validate, extract, normalize, persist.

Deep module: one public method, ``submit``. A submission moves through
Validating -> (ExtractingPdf) -> Normalizing -> Persisting and either
returns the stored text or raises a ``SubmissionError``. Nothing is written
until the very last step, so a failed submission leaves no trace.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Union

from ..core.auth import AuthContext
from ..core.config import Settings
from ..exceptions import (
    AuthenticationError,
    ConflictingContentError,
    EmptyResultError,
    EmptyTitleError,
    ExtractionError,
    InvalidCategoryError,
    MissingContentError,
    PersistenceFailedError,
    SubmissionError,
)
from ..repositories.category_repository import CategoryRepository
from ..repositories.text_repository import TextRepository
from .pdf_extractor import PdfExtractor, UploadedFile
from .text_normalizer import normalize

logger = logging.getLogger(__name__)

CategoryRef = Union[None, int, str]

_ROOT_VALUES = ("", "root")


@dataclass(frozen=True)
class SubmittedText:
    text_id: int
    category_id: Optional[int]


def resolve_category_id(
    categories: CategoryRepository,
    user_id: int,
    category_id: CategoryRef,
    strict: bool = False,
) -> Optional[int]:
    """Turn a submitted folder reference into a category id owned by *user_id*.

    ``None``, ``""`` and ``"root"`` mean the root (None). Anything that is
    not an integer, or an integer naming a folder the user does not own,
    also files the text at the root with a warning, unless *strict* is set,
    in which case ``InvalidCategoryError`` is raised.
    """
    if category_id is None:
        return None
    if isinstance(category_id, str):
        raw = category_id.strip()
        if raw.lower() in _ROOT_VALUES:
            return None
        try:
            parsed = int(raw)
        except ValueError:
            if strict:
                raise InvalidCategoryError(category_id)
            logger.warning(
                "Invalid category id, filing at root",
                extra={"category_id": category_id, "user_id": user_id},
            )
            return None
    else:
        parsed = int(category_id)

    if categories.get_owned(parsed, user_id) is None:
        if strict:
            raise InvalidCategoryError(category_id)
        logger.warning(
            "Unknown or foreign category id, filing at root",
            extra={"category_id": parsed, "user_id": user_id},
        )
        return None
    return parsed


class TextSubmissionWorkflow:
    """Turns a submitted title plus pasted text or PDF into a stored text."""

    def __init__(
        self,
        texts: TextRepository,
        categories: CategoryRepository,
        extractor: PdfExtractor,
        settings: Settings,
    ):
        self.texts = texts
        self.categories = categories
        self.extractor = extractor
        self.settings = settings

    def submit(
        self,
        principal: AuthContext,
        title: Optional[str],
        pasted_content: Optional[str] = None,
        uploaded_file: Optional[UploadedFile] = None,
        category_id: CategoryRef = None,
    ) -> SubmittedText:
        """Validate and store a new text, returning its id and folder.

        Validation order (first failure wins): title, content source,
        category. Any non-empty paste counts as a paste, so whitespace
        plus a PDF is a conflict; whitespace alone is missing content.

        Raises:
            SubmissionError: any failure; subclasses name the cause.
        """
        if principal is None:
            raise AuthenticationError()

        # --- Validating ---
        title = (title or "").strip()
        if not title:
            raise EmptyTitleError()

        has_text = bool(pasted_content)
        has_file = uploaded_file is not None
        if not has_text and not has_file:
            raise MissingContentError()
        if has_text and has_file:
            raise ConflictingContentError()

        target_category = resolve_category_id(
            self.categories,
            principal.user_id,
            category_id,
            strict=self.settings.strict_category_ids,
        )

        # --- ExtractingPdf ---
        if has_file:
            try:
                raw = self.extractor.extract(uploaded_file)
            except ExtractionError as e:
                logger.info(
                    "PDF submission rejected",
                    extra={"user_id": principal.user_id, "error_code": e.error_code.value},
                )
                raise SubmissionError.from_extraction(e) from e
        else:
            raw = pasted_content

        # --- Normalizing ---
        content = normalize(raw)
        if not content:
            if has_file:
                raise SubmissionError.from_extraction(EmptyResultError())
            raise MissingContentError()

        # --- Persisting ---
        try:
            new_id = self.texts.add_text(principal.user_id, title, content, target_category)
        except Exception as e:
            logger.error(
                "Unexpected error saving text",
                extra={"user_id": principal.user_id, "error": str(e)},
                exc_info=True,
            )
            raise PersistenceFailedError() from e

        if new_id is None:
            raise PersistenceFailedError()

        logger.info(
            "Text added",
            extra={
                "text_id": new_id,
                "user_id": principal.user_id,
                "category_id": target_category,
                "source": "pdf" if has_file else "paste",
            },
        )
        return SubmittedText(new_id, target_category)
