"""Business logic services."""

from .text_service import TextService
from .category_service import CategoryService
from .submission_workflow import TextSubmissionWorkflow
from .summary_service import SummaryService

__all__ = ["TextService", "CategoryService", "TextSubmissionWorkflow", "SummaryService"]
