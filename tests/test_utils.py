from types import SimpleNamespace

import pytest

from texttoslides.errors import UploadValidationError
from texttoslides.utils import (
    read_uploaded_template, strip_code_fence, validate_generation_request, validate_template_upload
)


def test_strip_code_fence():
    assert strip_code_fence('```json\n{"a": 1}\n```') == '{"a": 1}'
    assert strip_code_fence('```\n{"a": 1}```') == '{"a": 1}'
    assert strip_code_fence('  {"a": 1}  ') == '{"a": 1}'
    assert strip_code_fence(None) == ""


def test_template_upload_checks_extension_and_size(monkeypatch):
    validate_template_upload("deck.PPTX", b"PK")
    validate_template_upload("deck.potx", b"PK")

    with pytest.raises(UploadValidationError) as exc:
        validate_template_upload("deck.key", b"PK")
    assert "Only .pptx and .potx" in str(exc.value)

    with pytest.raises(UploadValidationError):
        validate_template_upload("deck.pptx", b"")

    monkeypatch.setenv("TEXTTOSLIDES_MAX_UPLOAD_MB", "1")
    with pytest.raises(UploadValidationError) as exc:
        validate_template_upload("deck.pptx", b"x" * (1024 * 1024 + 1))
    assert "Maximum 1MB" in str(exc.value)


def test_read_uploaded_template():
    upload = SimpleNamespace(name="brand.pptx", getvalue=lambda: b"PK\x03\x04")
    assert read_uploaded_template(upload) == b"PK\x03\x04"


def test_generation_request_lists_missing_fields():
    validate_generation_request("text", "openai", "key", b"PK")
    with pytest.raises(UploadValidationError) as exc:
        validate_generation_request("  ", "openai", "", None)
    message = str(exc.value)
    assert "text" in message and "apiKey" in message and "template" in message
    assert "llmProvider" not in message
