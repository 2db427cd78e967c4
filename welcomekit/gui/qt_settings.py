"""Key-value slots in QSettings (the platform's per-user preferences store)."""

import os

from PySide6.QtCore import QByteArray, QSettings

from welcomekit.core.exceptions import PersistenceError


class QSettingsStorage:
    """
    Stores each slot as a byte array so INI backends round-trip JSON text unchanged.
    Every set() is followed by sync(); a failing status raises PersistenceError.
    """

    def __init__(self, organization: str = "welcomekit", application: str = "welcomekit", settings: QSettings | None = None):
        self._settings = settings if settings is not None else QSettings(organization, application)

    @classmethod
    def from_file(cls, path: os.PathLike | str) -> "QSettingsStorage":
        return cls(settings=QSettings(str(path), QSettings.Format.IniFormat))

    @classmethod
    def from_config(cls, cfg: dict) -> "QSettingsStorage":
        s = cfg.get("settings") or {}
        return cls(s.get("organization", "welcomekit"), s.get("application", "welcomekit"))

    @property
    def settings(self) -> QSettings:
        return self._settings

    def get(self, key: str) -> str | None:
        value = self._settings.value(key)
        if value is None:
            return None
        if isinstance(value, QByteArray):
            value = bytes(value.data())
        if isinstance(value, (bytes, bytearray)):
            try:
                return bytes(value).decode("utf-8")
            except UnicodeDecodeError as e:
                raise PersistenceError("Settings slot %r is not UTF-8" % key) from e
        return str(value)

    def set(self, key: str, value: str) -> None:
        self._settings.setValue(key, QByteArray(value.encode("utf-8")))
        self._settings.sync()
        status = self._settings.status()
        if status != QSettings.Status.NoError:
            raise PersistenceError("QSettings write failed for %r: %s" % (key, status))
