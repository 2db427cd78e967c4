"""Scoped access: pair begin_access/end_access around work on a capability-protected location."""
from contextlib import contextmanager
from typing import Callable, Iterator, TypeVar

from .capability import AccessCapability, CapabilityProvider
from .exceptions import AccessDeniedError
from .logger import get_logger

logger = get_logger("scope")

R = TypeVar("R")


class ScopeGuard:
    """
    Grants access for the duration of a block. end_access runs exactly once on every
    exit path (return, exception, generator close); a denied begin_access raises
    AccessDeniedError and neither runs the block nor calls end_access.
    """

    def __init__(self, capabilities: CapabilityProvider):
        self._capabilities = capabilities

    @contextmanager
    def scope(self, capability: AccessCapability) -> Iterator[AccessCapability]:
        if not self._capabilities.begin_access(capability):
            raise AccessDeniedError(f"Access not granted: {capability.key}")
        logger.debug("Access granted: %s", capability.key)
        try:
            yield capability
        finally:
            self._capabilities.end_access(capability)
            logger.debug("Access released: %s", capability.key)

    def with_scope(self, capability: AccessCapability, body: Callable[[], R]) -> R:
        with self.scope(capability):
            return body()
