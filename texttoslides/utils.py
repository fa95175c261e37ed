import os
import re
from typing import Optional

from texttoslides import config
from texttoslides.errors import UploadValidationError

_FENCE_RE = re.compile(r"^```[a-zA-Z]*\s*\n?(.*?)\n?```$", re.DOTALL)


def read_uploaded_template(uploaded_file) -> bytes:
    """Return the bytes of a Streamlit upload after checking its extension and size."""
    name = getattr(uploaded_file, "name", "") or ""
    data = uploaded_file.getvalue()
    validate_template_upload(name, data)
    return data


def validate_template_upload(name: str, data: Optional[bytes]):
    issues = []
    suffix = os.path.splitext(name)[1].lower()
    if suffix not in config.ALLOWED_TEMPLATE_EXTENSIONS:
        issues.append("Invalid file type. Only .pptx and .potx files are allowed.")
    if not data:
        issues.append("Template file is empty.")
    elif len(data) > config.max_upload_bytes():
        limit_mb = config.max_upload_bytes() // (1024 * 1024)
        issues.append(f"File size too large. Maximum {limit_mb}MB allowed.")
    if issues:
        raise UploadValidationError(issues)


def validate_generation_request(text: str, provider: str, api_key: str, template_bytes: Optional[bytes]):
    missing = []
    if not (text or "").strip():
        missing.append("text")
    if not provider:
        missing.append("llmProvider")
    if not (api_key or "").strip():
        missing.append("apiKey")
    if not template_bytes:
        missing.append("template")
    if missing:
        raise UploadValidationError([f"Missing required fields: {', '.join(missing)}"])


def strip_code_fence(text: str) -> str:
    """Remove a surrounding markdown code fence (```json ... ```) if present."""
    text = (text or "").strip()
    match = _FENCE_RE.match(text)
    return match.group(1).strip() if match else text
