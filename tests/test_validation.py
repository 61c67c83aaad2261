# tests/test_validation.py
# Input validation rules and their ordering.

import pytest

from careerforge.errors import ValidationError
from careerforge.validation import PDF_MIME_TYPE, validate_chat_form


def _error(settings, **fields) -> ValidationError:
    with pytest.raises(ValidationError) as exc_info:
        validate_chat_form(settings, **fields)
    assert exc_info.value.status_code == 400
    return exc_info.value


def test_valid_text_only(settings):
    req = validate_chat_form(settings, message=" I know <i>React</i> and Node.js ", job_id=" 1 ")
    assert req.message == "I know React and Node.js"
    assert req.job_id == "1"
    assert req.has_pdf is False
    assert req.prior_messages == []


def test_valid_pdf_only(settings):
    req = validate_chat_form(settings, pdf_bytes=b"%PDF-1.4", pdf_content_type=PDF_MIME_TYPE, pdf_filename="cv.pdf")
    assert req.has_pdf
    assert req.pdf_filename == "cv.pdf"
    assert req.message == ""


@pytest.mark.parametrize("text", ["a" * 50_001, "word " * 20_000 + "x" * 10])
def test_message_too_long(settings, text):
    err = _error(settings, message=text)
    assert err.error == "Message too long"


def test_message_at_limit_is_accepted(settings):
    req = validate_chat_form(settings, message="a" * settings.max_message_length)
    assert len(req.message) == settings.max_message_length


def test_length_is_measured_after_normalization(settings):
    padded = "<b>" * 10_000 + "a" * 100 + " " * 60_000
    assert validate_chat_form(settings, message=padded).message == "a" * 100


@pytest.mark.parametrize("message", [None, "", "   ", "<div></div>"])
def test_missing_input(settings, message):
    err = _error(settings, message=message)
    assert err.error == "Missing input"
    assert err.details == "Please provide a message or upload a PDF resume."


def test_empty_file_counts_as_missing(settings):
    err = _error(settings, pdf_bytes=b"", pdf_content_type=PDF_MIME_TYPE)
    assert err.error == "Missing input"


@pytest.mark.parametrize("content_type", ["image/png", "application/octet-stream", "application/pdf; charset=binary", None])
def test_invalid_file_type_even_with_pdf_extension(settings, content_type):
    err = _error(settings, message="hi", pdf_bytes=b"%PDF-1.4", pdf_content_type=content_type, pdf_filename="cv.pdf")
    assert err.error == "Invalid file type"


def test_file_too_large(settings):
    data = b"0" * (settings.max_pdf_size_bytes + 1)
    err = _error(settings, pdf_bytes=data, pdf_content_type=PDF_MIME_TYPE)
    assert err.error == "File too large"
    assert "10MB" in err.details


def test_file_at_size_limit_is_accepted(settings):
    data = b"0" * settings.max_pdf_size_bytes
    assert validate_chat_form(settings, pdf_bytes=data, pdf_content_type=PDF_MIME_TYPE).has_pdf


def test_type_is_checked_before_size(settings):
    data = b"0" * (settings.max_pdf_size_bytes + 1)
    err = _error(settings, pdf_bytes=data, pdf_content_type="image/png")
    assert err.error == "Invalid file type"


def test_length_is_checked_before_file(settings):
    err = _error(settings, message="a" * 50_001, pdf_bytes=b"x", pdf_content_type="image/png")
    assert err.error == "Message too long"


def test_bad_history_is_not_an_error(settings):
    req = validate_chat_form(settings, message="hi", messages_raw="{broken")
    assert req.prior_messages == []
