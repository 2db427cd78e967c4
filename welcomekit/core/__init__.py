from .capability import AccessCapability, CapabilityProvider, PathCapabilityProvider, normalize_location
from .config import RECENTS_CAPACITY, RECENTS_SETTINGS_KEY, RECENTS_UPDATED
from .event_bus import EventBus
from .exceptions import (
    WelcomeKitError, ConfigError, DialogCancelled,
    CapabilityError, CapabilityCreationError, StaleCapabilityError,
    AccessDeniedError, DocumentError, OpenError, WriteError, PersistenceError,
)
from .recents import RecentEntry, RecentsStore
from .scope import ScopeGuard
from .storage import KeyValueStorage, MemoryStorage, JsonFileStorage
from .logger import get_logger, get_workflow_logger, setup_logging

__all__ = [
    "AccessCapability", "CapabilityProvider", "PathCapabilityProvider", "normalize_location",
    "RECENTS_CAPACITY", "RECENTS_SETTINGS_KEY", "RECENTS_UPDATED",
    "EventBus",
    "WelcomeKitError", "ConfigError", "DialogCancelled",
    "CapabilityError", "CapabilityCreationError", "StaleCapabilityError",
    "AccessDeniedError", "DocumentError", "OpenError", "WriteError", "PersistenceError",
    "RecentEntry", "RecentsStore", "ScopeGuard",
    "KeyValueStorage", "MemoryStorage", "JsonFileStorage",
    "get_logger", "get_workflow_logger", "setup_logging",
]
