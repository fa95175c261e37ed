import io
import logging
import zipfile
import zlib
from typing import Dict, List, Set, Union

from texttoslides.errors import ArchiveFormatError, EntryNotFoundError

logger = logging.getLogger(__name__)


class Archive:
    """In-memory zip package. Entries keep the order they were listed or written in."""

    def __init__(self):
        self._entries: Dict[str, bytes] = {}

    @classmethod
    def from_bytes(cls, data: bytes) -> "Archive":
        archive = cls()
        try:
            with zipfile.ZipFile(io.BytesIO(data), "r") as zf:
                for info in zf.infolist():
                    if info.is_dir():
                        continue
                    archive._entries[info.filename] = zf.read(info)
        except (zipfile.BadZipFile, zipfile.LargeZipFile, zlib.error, EOFError, OSError,
                ValueError, NotImplementedError, RuntimeError) as e:
            raise ArchiveFormatError(f"Could not open package: {e}") from e
        logger.debug(f"Opened package with {len(archive._entries)} entries")
        return archive

    def names(self) -> List[str]:
        return list(self._entries)

    def entries(self) -> Set[str]:
        return set(self._entries)

    def __contains__(self, path: str) -> bool:
        return path in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def read_bytes(self, path: str) -> bytes:
        try:
            return self._entries[path]
        except KeyError:
            raise EntryNotFoundError(path) from None

    def read(self, path: str) -> str:
        return self.read_bytes(path).decode("utf-8")

    def write(self, path: str, content: Union[str, bytes]):
        if isinstance(content, str):
            content = content.encode("utf-8")
        self._entries[path] = content

    def serialize(self) -> bytes:
        buf = io.BytesIO()
        with zipfile.ZipFile(buf, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            for path, content in self._entries.items():
                zf.writestr(path, content)
        return buf.getvalue()
