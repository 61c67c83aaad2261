# careerforge/validation.py
# Input validation for /chat multipart fields. Pure classification, no I/O.

import logging
from typing import List, Optional

from pydantic import TypeAdapter
from pydantic import ValidationError as SchemaError

from .config import Settings
from .errors import ValidationError
from .schemas import ChatMessage, InboundRequest
from .utils import normalize_message

logger = logging.getLogger(__name__)

PDF_MIME_TYPE = "application/pdf"

_MESSAGES_ADAPTER = TypeAdapter(List[ChatMessage])


def parse_messages(messages_raw: Optional[str]) -> List[ChatMessage]:
    """Parse the JSON-encoded history; anything malformed is treated as no history."""
    if not messages_raw:
        return []
    try:
        return _MESSAGES_ADAPTER.validate_json(messages_raw)
    except SchemaError:
        logger.debug("Ignoring malformed message history")
        return []


def _format_bytes(n: int) -> str:
    mb = n / (1024 * 1024)
    return f"{mb:g}MB" if mb >= 1 else f"{n} bytes"


def validate_chat_form(
    settings: Settings,
    message: Optional[str] = None,
    pdf_bytes: Optional[bytes] = None,
    pdf_content_type: Optional[str] = None,
    pdf_filename: Optional[str] = None,
    messages_raw: Optional[str] = None,
    job_id: Optional[str] = None,
) -> InboundRequest:
    """
    Normalize and validate the raw form fields. Checks run in a fixed order and
    the first failure raises ValidationError:

      1. normalize the message (strip tags, collapse whitespace, trim)
      2. message length
      3. message or file present
      4. file media type, then file size
      5. history parsing (lenient; never fails)
    """
    text = normalize_message(message)

    if len(text) > settings.max_message_length:
        raise ValidationError(
            "Message too long",
            f"Message must be {settings.max_message_length} characters or fewer.",
        )

    has_file = bool(pdf_bytes)
    if not text and not has_file:
        raise ValidationError("Missing input", "Please provide a message or upload a PDF resume.")

    if has_file:
        if pdf_content_type != PDF_MIME_TYPE:
            raise ValidationError("Invalid file type", "Only PDF files are supported.")
        if len(pdf_bytes) > settings.max_pdf_size_bytes:
            raise ValidationError(
                "File too large",
                f"PDF must be {_format_bytes(settings.max_pdf_size_bytes)} or smaller.",
            )

    return InboundRequest(
        message=text,
        pdf_bytes=pdf_bytes if has_file else None,
        pdf_filename=pdf_filename if has_file else None,
        prior_messages=parse_messages(messages_raw),
        job_id=(job_id or "").strip() or None,
    )
