"""PDF extractor: uploaded PDF bytes in, raw text out, via ``pdftotext``.

The upload is written to a uniquely named temporary file, ``pdftotext`` is
run on it with a bounded timeout, and the file is removed again on every
exit path. Cleanup of the returned text is the caller's job (see
``text_normalizer``).
"""

import logging
import os
import subprocess
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..exceptions import (
    EmptyResultError,
    ExtractionFailedError,
    ToolNotFoundError,
    UnsupportedTypeError,
    UploadTooLargeError,
)

logger = logging.getLogger(__name__)

PDF_MIME_TYPE = "application/pdf"


@dataclass(frozen=True)
class UploadedFile:
    """An uploaded file held in memory for the length of one request."""
    filename: str
    mime_type: str
    content: bytes


class PdfExtractor:
    """Runs ``pdftotext`` on uploaded PDFs.

    Args:
        command: Executable name or path.
        timeout: Seconds before a running extraction is killed.
        temp_dir: Where temporary files go (system default when None).
        max_bytes: Largest accepted upload (unlimited when None).
    """

    def __init__(
        self,
        command: str = "pdftotext",
        timeout: float = 60.0,
        temp_dir: Optional[str] = None,
        max_bytes: Optional[int] = None,
    ):
        self.command = command
        self.timeout = timeout
        self.temp_dir = temp_dir
        self.max_bytes = max_bytes

    def extract(self, upload: UploadedFile) -> str:
        """Return the raw text of *upload*.

        Raises:
            UnsupportedTypeError: not a PDF (nothing is written to disk).
            UploadTooLargeError: larger than ``max_bytes``.
            ToolNotFoundError: the executable is missing.
            ExtractionFailedError: non-zero exit, timeout, or other OS error.
            EmptyResultError: the PDF yielded no text.
        """
        if upload.mime_type != PDF_MIME_TYPE:
            raise UnsupportedTypeError(upload.mime_type)
        if self.max_bytes is not None and len(upload.content) > self.max_bytes:
            raise UploadTooLargeError(self.max_bytes // (1024 * 1024))

        fd, name = tempfile.mkstemp(prefix="upload_", suffix=".pdf", dir=self.temp_dir)
        path = Path(name)
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(upload.content)
            text = self._run(path)
        finally:
            try:
                path.unlink(missing_ok=True)
            except OSError:
                logger.warning("Failed to remove temporary PDF", extra={"path": str(path)}, exc_info=True)

        if not text.strip():
            logger.info("pdftotext returned no text", extra={"upload_name": upload.filename})
            raise EmptyResultError()

        logger.info(
            "Extracted text from PDF",
            extra={"upload_name": upload.filename, "chars": len(text)},
        )
        return text

    def _run(self, path: Path) -> str:
        args = [self.command, "-enc", "UTF-8", str(path), "-"]
        try:
            result = subprocess.run(
                args,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                timeout=self.timeout,
                check=False,
            )
        except FileNotFoundError:
            logger.error("pdftotext executable not found", extra={"command": self.command})
            raise ToolNotFoundError(self.command)
        except subprocess.TimeoutExpired:
            logger.warning("pdftotext timed out", extra={"timeout": self.timeout})
            raise ExtractionFailedError(f"timed out after {self.timeout:g} seconds")
        except OSError as e:
            logger.error("pdftotext could not be started", extra={"error": str(e)})
            raise ExtractionFailedError(str(e))

        if result.returncode != 0:
            stderr = result.stderr.decode("utf-8", errors="replace").strip()
            logger.warning(
                "pdftotext exited with an error",
                extra={"returncode": result.returncode, "stderr": stderr[:500]},
            )
            raise ExtractionFailedError(stderr or f"exit status {result.returncode}")

        return result.stdout.decode("utf-8", errors="replace")
