"""Source-file context for fingerprinting.

The caller supplies file content as it was at analysis time. Providers
return the file as a list of lines, or ``None`` when the content is not
available; a missing file only weakens the fingerprint, it is never an
error.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Mapping, Optional, Protocol, Union

from ..logging_config import get_logger
from ..models import normalize_path

logger = get_logger(__name__)


class FileContextProvider(Protocol):
    """Anything that can hand out the lines of an analyzed file."""

    def lines(self, path: str) -> Optional[list[str]]:
        ...


class NoContext:
    """Provider for builds where no source is available."""

    def lines(self, path: str) -> Optional[list[str]]:
        return None


class InMemoryContext:
    """Serves file content from a mapping of path -> text (or bytes)."""

    def __init__(self, files: Mapping[str, Union[str, bytes]]) -> None:
        self._files = {normalize_path(k): _decode(v) for k, v in files.items()}

    def lines(self, path: str) -> Optional[list[str]]:
        text = self._files.get(normalize_path(path))
        if text is None:
            return None
        return text.splitlines()


class WorkspaceContext:
    """Reads files relative to a workspace root.

    Paths escaping the root are refused. Results are cached per instance,
    so one provider should be used for one build only.
    """

    def __init__(self, root: Union[str, Path], max_file_size: int = 10 * 1024 * 1024) -> None:
        self.root = Path(root).resolve()
        self.max_file_size = max_file_size
        self._read = lru_cache(maxsize=256)(self._read_uncached)

    def lines(self, path: str) -> Optional[list[str]]:
        return self._read(normalize_path(path))

    def _read_uncached(self, path: str) -> Optional[list[str]]:
        candidate = (self.root / path).resolve()
        try:
            candidate.relative_to(self.root)
        except ValueError:
            logger.info("Refusing context outside workspace: %s", path)
            return None
        try:
            if not candidate.is_file() or candidate.stat().st_size > self.max_file_size:
                return None
            return _decode(candidate.read_bytes()).splitlines()
        except OSError as e:
            logger.info("Cannot read context for %s: %s", path, e)
            return None


def _decode(content: Union[str, bytes]) -> str:
    if isinstance(content, bytes):
        return content.decode("utf-8", errors="replace")
    return content
