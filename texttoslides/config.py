import os
import logging
from dotenv import load_dotenv

load_dotenv()

PPTX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.presentationml.presentation"
ALLOWED_TEMPLATE_EXTENSIONS = (".pptx", ".potx")

DEFAULT_MODELS = {
    "openai": "gpt-4-turbo",
    "anthropic": "claude-3-5-sonnet-20241022",
    "gemini": "gemini-1.5-pro",
}

PROVIDER_MODELS = {
    "openai": ["gpt-4-turbo", "gpt-4", "gpt-3.5-turbo"],
    "anthropic": ["claude-3-5-sonnet-20241022", "claude-3-haiku-20240307"],
    "gemini": ["gemini-1.5-pro", "gemini-1.5-flash"],
}

API_KEY_ENV_VARS = {
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
    "gemini": "GEMINI_API_KEY",
}


def _clean_secret(value: str) -> str:
    # Strip accidental whitespace and smart quotes pasted into .env files
    return (value or "").strip(' \t\n\r"“”\'')


def env_api_key(provider: str) -> str:
    var = API_KEY_ENV_VARS.get(provider)
    return _clean_secret(os.environ.get(var, "")) if var else ""


def max_upload_bytes() -> int:
    try:
        mb = float(os.environ.get("TEXTTOSLIDES_MAX_UPLOAD_MB", "50"))
    except ValueError:
        mb = 50.0
    return int(mb * 1024 * 1024)


def output_filename() -> str:
    return os.environ.get("TEXTTOSLIDES_OUTPUT_NAME", "generated-presentation.pptx")


def configure_logging():
    level_name = os.environ.get("TEXTTOSLIDES_LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
