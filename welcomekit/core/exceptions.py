"""welcomekit exceptions."""


class WelcomeKitError(Exception):
    """Base exception for welcomekit."""


class ConfigError(WelcomeKitError):
    """Invalid or missing configuration."""


class DialogCancelled(WelcomeKitError):
    """The user dismissed an open or save dialog. Not a failure."""


class CapabilityError(WelcomeKitError):
    """An access capability could not be created or used."""


class CapabilityCreationError(CapabilityError):
    """Location is inaccessible (not found, permission denied)."""


class StaleCapabilityError(CapabilityError):
    """Capability no longer resolves (resource moved, deleted or revoked)."""


class AccessDeniedError(WelcomeKitError):
    """Scoped access to a capability was not granted."""


class DocumentError(WelcomeKitError):
    """Document load or write failed."""

    def __init__(self, message: str, location=None):
        super().__init__(message)
        self.location = location


class OpenError(DocumentError):
    """Document could not be opened."""


class WriteError(DocumentError):
    """Document could not be written."""


class PersistenceError(WelcomeKitError):
    """Recents slot could not be read, decoded or written."""
