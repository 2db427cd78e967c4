"""DocumentPort contract and the local-filesystem implementation."""
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol, Sequence

from welcomekit.application.dialogs import ANY_FILE, FOLDER, PLAIN_TEXT, ContentKind
from welcomekit.core.exceptions import OpenError, WriteError
from welcomekit.core.logger import get_logger

logger = get_logger("documents")


@dataclass
class Document:
    kind: ContentKind
    location: Optional[Path] = None
    content: bytes = b""


class DocumentPort(Protocol):
    def open(self, location: Path) -> Document: ...

    def write(self, location: Path, content: bytes) -> None: ...

    def make_untitled(self, kind: ContentKind) -> Document: ...


class FileDocumentPort:
    """
    Documents as plain files; a directory opens as a folder document.
    open raises OpenError, write raises WriteError (cause chained).
    """

    def __init__(self, kinds: Sequence[ContentKind] = (PLAIN_TEXT, FOLDER)):
        self._kinds = tuple(kinds)

    def _kind_for(self, path: Path) -> ContentKind:
        for kind in self._kinds:
            if kind.matches(path):
                return kind
        return ANY_FILE

    def open(self, location: Path) -> Document:
        path = Path(location)
        if path.is_dir():
            return Document(kind=FOLDER, location=path)
        try:
            content = path.read_bytes()
        except OSError as e:
            raise OpenError(f"Cannot open {path}: {e.strerror or e}", location=path) from e
        logger.debug("Opened %s (%d bytes)", path, len(content))
        return Document(kind=self._kind_for(path), location=path, content=content)

    def write(self, location: Path, content: bytes) -> None:
        path = Path(location)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(prefix=".%s." % path.name, dir=path.parent)
            try:
                with os.fdopen(fd, "wb") as f:
                    f.write(content)
                os.replace(tmp, path)
            except BaseException:
                Path(tmp).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise WriteError(f"Cannot write {path}: {e.strerror or e}", location=path) from e
        logger.debug("Wrote %s (%d bytes)", path, len(content))

    def make_untitled(self, kind: ContentKind) -> Document:
        return Document(kind=kind)
