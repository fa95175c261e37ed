import io
import zipfile

import pytest
from pptx import Presentation


def make_package(entries) -> bytes:
    """Zip ``{path: text_or_bytes}`` in the given order."""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as zf:
        for path, content in entries.items():
            zf.writestr(path, content)
    return buf.getvalue()


@pytest.fixture
def blank_template_bytes():
    buf = io.BytesIO()
    Presentation().save(buf)
    return buf.getvalue()
