"""
Pytest configuration and shared fixtures.

Headless Qt on Linux: set QT_QPA_PLATFORM=offscreen so that dialogs and list widgets
can be created in CI without a display. Where offscreen is not available, run under Xvfb:

  xvfb-run -a pytest tests/test_qt_adapters.py -v
"""
import os
import sys
from concurrent.futures import Future
from pathlib import Path

import pytest

# Must set before any PySide6/Qt import
if sys.platform.startswith("linux"):
    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from welcomekit.application.documents import FileDocumentPort
from welcomekit.config import reset_config
from welcomekit.core.capability import PathCapabilityProvider
from welcomekit.core.config import RECENTS_UPDATED
from welcomekit.core.event_bus import EventBus
from welcomekit.core.exceptions import OpenError, WriteError
from welcomekit.core.recents import RecentsStore
from welcomekit.core.storage import MemoryStorage


class FakeDialogPort:
    """Returns preset selections. With pending=True the futures are left for the test to complete."""

    def __init__(self, open_result=None, save_result=None, pending=False):
        self.open_result = open_result
        self.save_result = save_result
        self.pending = pending
        self.open_calls = []
        self.save_calls = []
        self.futures = []

    def _future(self, value):
        f = Future()
        self.futures.append(f)
        if not self.pending:
            if isinstance(value, BaseException):
                f.set_exception(value)
            else:
                f.set_result(value)
        return f

    def present_open(self, configuration):
        self.open_calls.append(configuration)
        return self._future(self.open_result)

    def present_save(self, configuration):
        self.save_calls.append(configuration)
        return self._future(self.save_result)


class RecordingDocumentPort(FileDocumentPort):
    def __init__(self, fail_open=False, fail_write=False):
        super().__init__()
        self.fail_open = fail_open
        self.fail_write = fail_write
        self.opened = []
        self.written = []

    def open(self, location):
        self.opened.append(Path(location))
        if self.fail_open:
            raise OpenError("cannot parse document", location=location)
        return super().open(location)

    def write(self, location, content):
        self.written.append((Path(location), content))
        if self.fail_write:
            raise WriteError("disk full", location=location)
        super().write(location, content)


class Notifications:
    def __init__(self, bus):
        self.count = 0
        bus.subscribe(RECENTS_UPDATED, self)

    def __call__(self, ev, data):
        self.count += 1


@pytest.fixture(autouse=True)
def _fresh_config():
    reset_config()
    yield
    reset_config()


@pytest.fixture
def capabilities():
    return PathCapabilityProvider()


@pytest.fixture
def event_bus():
    return EventBus()


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def store(storage, capabilities, event_bus):
    return RecentsStore(storage, capabilities, event_bus)


@pytest.fixture
def notifications(event_bus):
    return Notifications(event_bus)


@pytest.fixture
def make_file(tmp_path):
    def _make(name, content=b"hello"):
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        return path.resolve()

    return _make
