"""Tests for PdfExtractor.

``subprocess.run`` is patched so these run without poppler installed. The
extractor writes into pytest's ``tmp_path`` so leftover files are visible.
"""

import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from typecraft.exceptions import (
    EmptyResultError,
    ErrorCode,
    ExtractionFailedError,
    ToolNotFoundError,
    UnsupportedTypeError,
    UploadTooLargeError,
)
from typecraft.services.pdf_extractor import PdfExtractor, UploadedFile

RUN = "typecraft.services.pdf_extractor.subprocess.run"


def _pdf(content: bytes = b"%PDF-1.4 fake") -> UploadedFile:
    return UploadedFile(filename="test.pdf", mime_type="application/pdf", content=content)


def _completed(stdout: bytes = b"", stderr: bytes = b"", returncode: int = 0):
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr)


@pytest.fixture()
def extractor(tmp_path):
    return PdfExtractor(command="pdftotext", timeout=5, temp_dir=str(tmp_path))


class TestExtract:

    def test_returns_stdout_text(self, extractor):
        with patch(RUN, return_value=_completed(b"Hello from a PDF\n")):
            assert extractor.extract(_pdf()) == "Hello from a PDF\n"

    def test_invokes_pdftotext_with_utf8_to_stdout(self, extractor, tmp_path):
        seen = {}

        def fake_run(args, **kwargs):
            path = Path(args[3])
            seen["args"] = args
            seen["exists"] = path.exists()
            seen["bytes"] = path.read_bytes()
            seen["timeout"] = kwargs["timeout"]
            return _completed(b"text")

        with patch(RUN, side_effect=fake_run):
            extractor.extract(_pdf(b"%PDF-1.4 payload"))

        assert seen["args"][:3] == ["pdftotext", "-enc", "UTF-8"]
        assert seen["args"][4] == "-"
        assert seen["exists"] is True
        assert seen["bytes"] == b"%PDF-1.4 payload"
        assert seen["timeout"] == 5
        assert Path(seen["args"][3]).parent == tmp_path
        assert list(tmp_path.iterdir()) == []

    def test_invalid_utf8_is_replaced_not_raised(self, extractor):
        with patch(RUN, return_value=_completed(b"caf\xe9 ok")):
            assert extractor.extract(_pdf()) == "caf\ufffd ok"


class TestRejections:

    def test_non_pdf_writes_nothing(self, extractor, tmp_path):
        upload = UploadedFile(filename="notes.txt", mime_type="text/plain", content=b"hi")
        with patch(RUN) as run:
            with pytest.raises(UnsupportedTypeError) as exc_info:
                extractor.extract(upload)
        run.assert_not_called()
        assert exc_info.value.status_code == 415
        assert exc_info.value.message == "Only PDF files are allowed!"
        assert list(tmp_path.iterdir()) == []

    def test_oversized_upload_is_rejected(self, tmp_path):
        small = PdfExtractor(temp_dir=str(tmp_path), max_bytes=10)
        with patch(RUN) as run:
            with pytest.raises(UploadTooLargeError):
                small.extract(_pdf(b"x" * 11))
        run.assert_not_called()
        assert list(tmp_path.iterdir()) == []


class TestFailures:
    """Every failure removes the temporary file."""

    def test_missing_executable(self, extractor, tmp_path):
        with patch(RUN, side_effect=FileNotFoundError("pdftotext")):
            with pytest.raises(ToolNotFoundError) as exc_info:
                extractor.extract(_pdf())
        assert "pdftotext command not found" in exc_info.value.message
        assert exc_info.value.error_code == ErrorCode.TOOL_NOT_FOUND
        assert list(tmp_path.iterdir()) == []

    def test_missing_executable_for_real(self, tmp_path):
        missing = PdfExtractor(command="definitely-not-a-pdftotext-binary", temp_dir=str(tmp_path))
        with pytest.raises(ToolNotFoundError):
            missing.extract(_pdf())
        assert list(tmp_path.iterdir()) == []

    def test_non_zero_exit_carries_stderr(self, extractor, tmp_path):
        with patch(RUN, return_value=_completed(stderr=b"Syntax Error: broken xref", returncode=1)):
            with pytest.raises(ExtractionFailedError) as exc_info:
                extractor.extract(_pdf())
        assert exc_info.value.message == "Error processing PDF with pdftotext: Syntax Error: broken xref"
        assert list(tmp_path.iterdir()) == []

    def test_non_zero_exit_without_stderr(self, extractor):
        with patch(RUN, return_value=_completed(returncode=3)):
            with pytest.raises(ExtractionFailedError) as exc_info:
                extractor.extract(_pdf())
        assert "exit status 3" in exc_info.value.message

    def test_timeout(self, extractor, tmp_path):
        with patch(RUN, side_effect=subprocess.TimeoutExpired(cmd="pdftotext", timeout=5)):
            with pytest.raises(ExtractionFailedError) as exc_info:
                extractor.extract(_pdf())
        assert "timed out after 5 seconds" in exc_info.value.message
        assert list(tmp_path.iterdir()) == []

    @pytest.mark.parametrize("stdout", [b"", b"   \n\f  \n"])
    def test_empty_output(self, extractor, tmp_path, stdout):
        with patch(RUN, return_value=_completed(stdout)):
            with pytest.raises(EmptyResultError) as exc_info:
                extractor.extract(_pdf())
        assert exc_info.value.message == (
            "Could not extract text from the PDF. The file might be image-based or empty."
        )
        assert list(tmp_path.iterdir()) == []
