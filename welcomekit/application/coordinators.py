"""
Open/create document workflows.

Each run() presents a dialog, then (on a chosen location) enters the access phase:
capability -> scoped access -> DocumentPort -> record recency -> release. The caller
gets a concurrent.futures.Future[Outcome] that settles exactly once; the optional
on_completion / on_cancel / on_error callbacks hang off that future's single done
callback, so exactly one of them fires.

Cancelling the returned future abandons the workflow only while the dialog is still
up. Entering the access phase marks the future running, after which it cannot be
cancelled and the scope is always released by the guard's finally clause.

Callbacks run on the thread that settles the future: the dialog's thread, or the
executor's worker when an executor is injected (Qt callers connect through signals).
"""
import itertools
from concurrent.futures import Executor, Future
from dataclasses import replace
from enum import Enum
from pathlib import Path
from typing import Callable, Optional, Union

from welcomekit.application.dialogs import DialogPort, OpenDialogConfiguration, SaveDialogConfiguration
from welcomekit.application.documents import DocumentPort
from welcomekit.application.outcome import Outcome, OutcomeKind
from welcomekit.core.capability import CapabilityProvider, Location
from welcomekit.core.exceptions import (
    AccessDeniedError,
    CapabilityCreationError,
    DialogCancelled,
    OpenError,
    WriteError,
)
from welcomekit.core.logger import get_logger, get_workflow_logger
from welcomekit.core.recents import RecentsStore
from welcomekit.core.scope import ScopeGuard

logger = get_logger("coordinators")

_workflow_ids = itertools.count(1)

ContentProvider = Callable[[], Union[bytes, str]]


class SaveMode(Enum):
    FILE = "file"        # chosen path is the document
    PACKAGE = "package"  # chosen path is a container; document is <container>/<container>.<ext>


def _selected_location(selection: Future) -> Optional[Path]:
    """Chosen path from a dialog future, or None when the dialog was cancelled."""
    if selection.cancelled():
        return None
    try:
        chosen = selection.result()
    except DialogCancelled:
        return None
    return Path(chosen) if chosen else None


def _settle(result: Future, outcome: Outcome) -> None:
    """Complete a still-pending result; no-op if the caller already cancelled it."""
    if result.set_running_or_notify_cancel():
        result.set_result(outcome)


def _attach_callbacks(result: Future, on_completion, on_cancel, on_error) -> None:
    def dispatch(f: Future) -> None:
        if f.cancelled():
            if on_cancel is not None:
                on_cancel()
            return
        outcome = f.result()
        if outcome.kind is OutcomeKind.COMPLETED:
            if on_completion is not None:
                on_completion(outcome)
        elif outcome.kind is OutcomeKind.CANCELLED:
            if on_cancel is not None:
                on_cancel()
        elif on_error is not None:
            on_error(outcome.error)

    result.add_done_callback(dispatch)


class _DocumentWorkflow:
    _name = "workflow"

    def __init__(
        self,
        dialogs: DialogPort,
        documents: DocumentPort,
        store: RecentsStore,
        capabilities: CapabilityProvider,
        executor: Optional[Executor] = None,
    ):
        self._dialogs = dialogs
        self._documents = documents
        self._store = store
        self._capabilities = capabilities
        self._guard = ScopeGuard(capabilities)
        self._executor = executor

    def _start(self, on_completion, on_cancel, on_error):
        log = get_workflow_logger(logger, "%s#%d" % (self._name, next(_workflow_ids)))
        result: Future = Future()
        _attach_callbacks(result, on_completion, on_cancel, on_error)
        return log, result

    def _present(self, result, log, show, on_dialog_presented, proceed) -> None:
        try:
            selection = show()
        except Exception as e:
            log.exception("Dialog could not be presented: %s", e)
            _settle(result, Outcome.failed(e))
            return
        if on_dialog_presented is not None:
            try:
                on_dialog_presented()
            except Exception:
                log.exception("on_dialog_presented callback failed")

        def on_selection(f: Future) -> None:
            try:
                location = _selected_location(f)
            except Exception as e:
                log.error("Dialog failed: %s", e)
                _settle(result, Outcome.failed(e))
                return
            if location is None:
                log.info("Dialog cancelled")
                _settle(result, Outcome.cancelled())
                return
            log.info("Selected %s", location)
            proceed(location)

        selection.add_done_callback(on_selection)

    def _access(self, result: Future, log, work: Callable[[], Outcome]) -> None:
        """Enter the access phase: the result stops being cancellable, work runs inline or on the executor."""
        if not result.set_running_or_notify_cancel():
            log.info("Abandoned before access")
            return
        if self._executor is None:
            result.set_result(self._guarded(work, log))
            return
        try:
            task = self._executor.submit(self._guarded, work, log)
        except RuntimeError as e:
            log.error("Executor rejected document task: %s", e)
            result.set_result(Outcome.failed(e))
            return

        def relay(t: Future) -> None:
            result.set_result(Outcome.cancelled() if t.cancelled() else t.result())

        task.add_done_callback(relay)

    @staticmethod
    def _guarded(work: Callable[[], Outcome], log) -> Outcome:
        try:
            return work()
        except Exception as e:
            log.exception("Workflow failed: %s", e)
            return Outcome.failed(e)

    def _open_scoped(self, location: Path, log) -> Outcome:
        try:
            capability = self._capabilities.create(location)
        except CapabilityCreationError as e:
            log.warning("Cannot access %s: %s", location, e)
            return Outcome.failed(e, location)
        try:
            with self._guard.scope(capability):
                document = self._documents.open(location)
                self._store.record_opened(location)
        except (AccessDeniedError, OpenError) as e:
            log.warning("Open failed: %s", e)
            return Outcome.failed(e, location)
        log.info("Opened %s", location)
        return Outcome.completed(location, document)


class OpenCoordinator(_DocumentWorkflow):
    """Open dialog -> scoped open -> record recency."""

    _name = "open"

    def run(
        self,
        configuration: Optional[OpenDialogConfiguration] = None,
        on_dialog_presented: Optional[Callable[[], None]] = None,
        on_completion: Optional[Callable[[Outcome], None]] = None,
        on_cancel: Optional[Callable[[], None]] = None,
        on_error: Optional[Callable[[BaseException], None]] = None,
    ) -> "Future[Outcome]":
        configuration = configuration or OpenDialogConfiguration()
        log, result = self._start(on_completion, on_cancel, on_error)
        self._present(
            result,
            log,
            lambda: self._dialogs.present_open(configuration),
            on_dialog_presented,
            lambda location: self._access(result, log, lambda: self._open_scoped(location, log)),
        )
        return result

    def open_location(
        self,
        location: Location,
        on_completion: Optional[Callable[[Outcome], None]] = None,
        on_cancel: Optional[Callable[[], None]] = None,
        on_error: Optional[Callable[[BaseException], None]] = None,
    ) -> "Future[Outcome]":
        """Skip the dialog; open a known location (e.g. a recents entry)."""
        path = Path(location)
        log, result = self._start(on_completion, on_cancel, on_error)
        self._access(result, log, lambda: self._open_scoped(path, log))
        return result


class CreateCoordinator(_DocumentWorkflow):
    """Save dialog -> write initial content -> scoped open -> record recency."""

    _name = "create"

    @staticmethod
    def dialog_configuration(configuration: SaveDialogConfiguration, mode: SaveMode) -> SaveDialogConfiguration:
        """Package mode asks for a folder name: no extension, no content-kind filter."""
        if mode is SaveMode.FILE:
            return configuration
        return replace(
            configuration,
            default_file_name=Path(configuration.default_file_name).stem,
            allowed_kinds=(),
        )

    @staticmethod
    def document_location(destination: Path, configuration: SaveDialogConfiguration, mode: SaveMode) -> Path:
        if mode is SaveMode.FILE:
            return destination
        ext = configuration.default_kind.preferred_extension or "file"
        return destination / ("%s.%s" % (destination.name, ext))

    def run(
        self,
        configuration: Optional[SaveDialogConfiguration] = None,
        mode: SaveMode = SaveMode.FILE,
        content_provider: Optional[ContentProvider] = None,
        on_dialog_presented: Optional[Callable[[], None]] = None,
        on_completion: Optional[Callable[[Outcome], None]] = None,
        on_cancel: Optional[Callable[[], None]] = None,
        on_error: Optional[Callable[[BaseException], None]] = None,
    ) -> "Future[Outcome]":
        configuration = configuration or SaveDialogConfiguration()
        presented = self.dialog_configuration(configuration, mode)
        log, result = self._start(on_completion, on_cancel, on_error)

        def proceed(destination: Path) -> None:
            location = self.document_location(destination, configuration, mode)
            self._access(
                result,
                log,
                lambda: self._create_scoped(location, configuration, content_provider, log),
            )

        self._present(
            result,
            log,
            lambda: self._dialogs.present_save(presented),
            on_dialog_presented,
            proceed,
        )
        return result

    def _create_scoped(
        self,
        location: Path,
        configuration: SaveDialogConfiguration,
        content_provider: Optional[ContentProvider],
        log,
    ) -> Outcome:
        try:
            if content_provider is not None:
                content = content_provider()
            else:
                content = self._documents.make_untitled(configuration.default_kind).content
        except Exception as e:
            log.warning("Content provider failed: %s", e)
            return Outcome.failed(e, location)
        if isinstance(content, str):
            content = content.encode("utf-8")
        try:
            self._documents.write(location, content)
        except WriteError as e:
            log.warning("Write failed: %s", e)
            return Outcome.failed(e, location)
        log.info("Created %s", location)
        return self._open_scoped(location, log)
