"""
Open/save dialog configurations and the DialogPort contract.

A DialogPort presents a dialog and returns a Future that completes once, with the
chosen Path or None when the user cancelled. A future that raises DialogCancelled or
is itself cancelled also counts as a cancellation.
"""
from concurrent.futures import Future
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Mapping, Optional, Protocol, Tuple, Union

from welcomekit.core.exceptions import ConfigError


@dataclass(frozen=True)
class ContentKind:
    """A document type: identifier, display name, filename extensions (first is preferred)."""

    identifier: str
    description: str
    extensions: Tuple[str, ...] = ()
    is_directory: bool = False

    @property
    def preferred_extension(self) -> Optional[str]:
        return self.extensions[0] if self.extensions else None

    def matches(self, path: Path) -> bool:
        if self.is_directory:
            return path.is_dir()
        return not self.extensions or path.suffix.lstrip(".").lower() in self.extensions

    def name_filter(self) -> str:
        """Qt-style filter, e.g. 'Plain Text (*.txt *.text)'."""
        if not self.extensions:
            return "%s (*)" % self.description
        return "%s (%s)" % (self.description, " ".join("*.%s" % ext for ext in self.extensions))


PLAIN_TEXT = ContentKind("public.plain-text", "Plain Text", ("txt", "text"))
FOLDER = ContentKind("public.folder", "Folder", (), is_directory=True)
ANY_FILE = ContentKind("public.data", "All Files")

KNOWN_KINDS: Tuple[ContentKind, ...] = (PLAIN_TEXT, FOLDER, ANY_FILE)


def content_kind(name: Union[str, ContentKind]) -> ContentKind:
    """Look up a kind by identifier ("public.plain-text") or extension ("txt", ".txt")."""
    if isinstance(name, ContentKind):
        return name
    for kind in KNOWN_KINDS:
        if name == kind.identifier:
            return kind
    ext = name.lstrip(".").lower()
    for kind in KNOWN_KINDS:
        if ext in kind.extensions:
            return kind
    raise ConfigError(
        "Unknown content kind %r (known: %s)" % (name, ", ".join(k.identifier for k in KNOWN_KINDS))
    )


def default_documents_dir() -> Path:
    """~/Documents when it exists, else the home directory."""
    docs = Path.home() / "Documents"
    return docs if docs.is_dir() else Path.home()


def _coerce_options(cls, options: Mapping[str, Any]) -> dict:
    known = {f.name for f in fields(cls)}
    unknown = sorted(set(options) - known)
    if unknown:
        raise ConfigError("Unknown %s option(s): %s" % (cls.__name__, ", ".join(unknown)))
    kwargs = dict(options)
    if "allowed_kinds" in kwargs:
        kwargs["allowed_kinds"] = tuple(content_kind(k) for k in kwargs["allowed_kinds"])
    if "default_kind" in kwargs:
        kwargs["default_kind"] = content_kind(kwargs["default_kind"])
    if isinstance(kwargs.get("directory"), str):
        kwargs["directory"] = Path(kwargs["directory"]).expanduser()
    return kwargs


@dataclass(frozen=True)
class OpenDialogConfiguration:
    title: str = "Open Document"
    allowed_kinds: Tuple[ContentKind, ...] = (PLAIN_TEXT,)
    can_choose_files: bool = True
    can_choose_directories: bool = False
    directory: Optional[Path] = field(default_factory=default_documents_dir)

    @classmethod
    def from_options(cls, options: Mapping[str, Any]) -> "OpenDialogConfiguration":
        """Build from config-style options (kind names allowed); bad keys or kinds raise ConfigError."""
        return cls(**_coerce_options(cls, options))


@dataclass(frozen=True)
class SaveDialogConfiguration:
    """
    Save panel settings. default_kind decides the extension of package documents
    (<container>/<container-name>.<ext>) and the default suffix for flat files.
    """

    prompt: str = "Create Document"
    name_field_label: str = "File Name:"
    default_file_name: str = "Untitled"
    allowed_kinds: Tuple[ContentKind, ...] = (PLAIN_TEXT,)
    title: str = "Create a New Document"
    directory: Optional[Path] = field(default_factory=default_documents_dir)
    default_kind: ContentKind = PLAIN_TEXT

    @classmethod
    def from_options(cls, options: Mapping[str, Any]) -> "SaveDialogConfiguration":
        return cls(**_coerce_options(cls, options))

    def default_suffix(self) -> Optional[str]:
        """Extension appended to bare names: the default kind's, when any kinds are allowed."""
        if not self.allowed_kinds:
            return None
        return self.default_kind.preferred_extension


class DialogPort(Protocol):
    def present_open(self, configuration: OpenDialogConfiguration) -> "Future[Optional[Path]]": ...

    def present_save(self, configuration: SaveDialogConfiguration) -> "Future[Optional[Path]]": ...
