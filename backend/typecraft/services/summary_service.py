"""Summary service: asks an LLM to summarize a text and stores the result
as a new text next to the original.

The provider is reached through LiteLLM, so any model string LiteLLM
understands works (``gemini/...``, ``openai/...``, ...).
"""

import logging
from dataclasses import dataclass

from ..core.config import Settings
from ..exceptions import ErrorCode, SummaryError
from ..models.text import Text
from ..repositories.text_repository import TextRepository

logger = logging.getLogger(__name__)

SUMMARY_PROMPT = (
    "Detect the language of the following text and provide a detailed summary "
    "(in that same language):\n\n---\n{content}\n---"
)
SUMMARY_TITLE = "Summary of: {title}"


@dataclass(frozen=True)
class SummaryResult:
    text_id: int
    title: str


class SummaryService:
    """Summarizes an owned text. The caller has already run the ownership guard."""

    def __init__(self, texts: TextRepository, settings: Settings):
        self.texts = texts
        self.settings = settings

    def is_configured(self) -> bool:
        return self.settings.summaries_enabled

    def summarize(self, text: Text) -> SummaryResult:
        """Generate and store a summary of *text*.

        Raises:
            SummaryError: with the status code the client should see.
        """
        if not self.is_configured():
            raise SummaryError(
                "AI Service is not configured or unavailable. Missing API Key.",
                status_code=503,
                error_code=ErrorCode.SUMMARY_UNAVAILABLE,
            )

        if not text.content or not text.content.strip():
            raise SummaryError("Cannot summarize empty text.", status_code=400)

        summary = self._complete(SUMMARY_PROMPT.format(content=text.content), text.id)
        if not summary or not summary.strip():
            logger.error("Model returned no summary", extra={"text_id": text.id})
            raise SummaryError("AI did not return a summary.", status_code=502)

        title = SUMMARY_TITLE.format(title=text.title)
        new_id = self.texts.add_text(text.user_id, title, summary.strip(), text.category_id)
        if new_id is None:
            logger.error("Failed to save summary", extra={"text_id": text.id, "user_id": text.user_id})
            raise SummaryError("Failed to save the summary to the database.", status_code=500)

        logger.info("Summary created", extra={"text_id": text.id, "summary_id": new_id})
        return SummaryResult(text_id=new_id, title=title)

    def _complete(self, prompt: str, text_id: int) -> str:
        import litellm

        kwargs: dict = {
            "model": self.settings.summary_model,
            "api_key": self.settings.summary_api_key,
            "messages": [{"role": "user", "content": prompt}],
            "timeout": self.settings.summary_timeout,
        }
        if self.settings.summary_api_base:
            kwargs["api_base"] = self.settings.summary_api_base

        try:
            response = litellm.completion(**kwargs)
        except litellm.AuthenticationError:
            logger.error("Summary provider rejected the API key", extra={"text_id": text_id})
            raise SummaryError(
                "AI Service Error: Invalid API Key.",
                status_code=503,
                error_code=ErrorCode.SUMMARY_UNAVAILABLE,
            )
        except (litellm.Timeout, litellm.APIConnectionError):
            logger.exception("Summary provider unreachable")
            raise SummaryError("Network error communicating with AI service.", status_code=504)
        except Exception:
            logger.exception("Summary completion failed")
            raise SummaryError("Failed to summarize text due to an internal error.", status_code=500)

        try:
            return response.choices[0].message.content or ""
        except (AttributeError, IndexError):
            return ""
