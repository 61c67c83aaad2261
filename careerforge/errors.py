# careerforge/errors.py
# Error taxonomy for the chat pipeline. Every error renders as {"error", "details"}.

from typing import Dict, Optional


class ChatError(Exception):
    """Base class for errors reported to the caller before streaming starts."""

    status_code: int = 500

    def __init__(
        self,
        error: str,
        details: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        super().__init__(error if details is None else f"{error}: {details}")
        self.error = error
        self.details = details
        self.headers = headers or {}

    def to_body(self) -> Dict[str, str]:
        body = {"error": self.error}
        if self.details is not None:
            body["details"] = self.details
        return body


class ValidationError(ChatError):
    status_code = 400


class RateLimitedError(ChatError):
    status_code = 429


class ExtractionError(ChatError):
    status_code = 422


class EmptyDocumentError(ExtractionError):
    def __init__(self):
        super().__init__("Empty PDF", "The uploaded PDF file is empty.")


class NoExtractableTextError(ExtractionError):
    def __init__(self):
        super().__init__(
            "No text found in PDF",
            "No text could be extracted. The PDF might be scanned images (use OCR) or empty.",
        )


class UnreadableDocumentError(ExtractionError):
    def __init__(self):
        super().__init__(
            "Could not read PDF",
            "Failed to read PDF. The file may be corrupted or password-protected.",
        )


class ConfigurationError(ChatError):
    status_code = 500


class UpstreamError(ChatError):
    status_code = 500
