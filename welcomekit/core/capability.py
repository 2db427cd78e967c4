"""
Access capabilities: opaque, serializable tokens granting renewable access to a location.

A capability is created when a location is first opened, resolved back to a path
before each reuse, and bracketed by begin_access/end_access while in use. Platforms
with OS-level security-scoped bookmarks plug in their own CapabilityProvider;
PathCapabilityProvider is the pass-through used everywhere else.
"""
import json
import os
import threading
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol, Union

from .config import TOKEN_VERSION
from .exceptions import CapabilityCreationError, StaleCapabilityError
from .logger import get_logger

logger = get_logger("capability")

Location = Union[str, os.PathLike]


def normalize_location(location: Location) -> str:
    """Canonical path string for identity and dedup: ~ expanded, absolute, symlinks resolved."""
    return str(Path(location).expanduser().resolve(strict=False))


@dataclass(frozen=True)
class AccessCapability:
    """Opaque token plus the normalized key it was created for. Equality is by key only."""

    key: str
    token: bytes = field(compare=False, repr=False)


class CapabilityProvider(Protocol):
    def create(self, location: Location) -> AccessCapability: ...

    def resolve(self, capability: AccessCapability) -> Path: ...

    def begin_access(self, capability: AccessCapability) -> bool: ...

    def end_access(self, capability: AccessCapability) -> None: ...


class PathCapabilityProvider:
    """
    Pass-through provider: the token records the resolved path only, so resolution
    succeeds while something exists at that path (a file replaced in place, as by an
    atomic save, keeps its entry) and access is granted when the process can read it.
    Outstanding grants are counted per key so an unmatched end_access is a no-op.
    """

    def __init__(self) -> None:
        self._active: Counter[str] = Counter()
        self._lock = threading.Lock()

    def create(self, location: Location) -> AccessCapability:
        key = normalize_location(location)
        path = Path(key)
        try:
            path.stat()
        except FileNotFoundError as e:
            raise CapabilityCreationError(f"Location not found: {key}") from e
        except OSError as e:
            raise CapabilityCreationError(f"Location inaccessible: {key}: {e}") from e
        if not os.access(path, os.R_OK):
            raise CapabilityCreationError(f"Permission denied: {key}")
        payload = {"v": TOKEN_VERSION, "path": key}
        token = json.dumps(payload, sort_keys=True).encode("utf-8")
        return AccessCapability(key=key, token=token)

    def resolve(self, capability: AccessCapability) -> Path:
        try:
            payload = json.loads(capability.token.decode("utf-8"))
            path = Path(payload["path"])
        except (UnicodeDecodeError, ValueError, KeyError, TypeError) as e:
            raise StaleCapabilityError(f"Unreadable capability token for {capability.key}") from e
        if not path.exists():
            raise StaleCapabilityError(f"Location no longer exists: {path}")
        return path

    def begin_access(self, capability: AccessCapability) -> bool:
        try:
            path = self.resolve(capability)
        except StaleCapabilityError as e:
            logger.debug("Access refused: %s", e)
            return False
        if not os.access(path, os.R_OK):
            return False
        with self._lock:
            self._active[capability.key] += 1
        return True

    def end_access(self, capability: AccessCapability) -> None:
        with self._lock:
            count = self._active.get(capability.key, 0)
            if count <= 1:
                self._active.pop(capability.key, None)
            else:
                self._active[capability.key] = count - 1

    def active_count(self, capability: AccessCapability) -> int:
        """Number of begin_access grants not yet ended for this capability's key."""
        with self._lock:
            return self._active.get(capability.key, 0)
