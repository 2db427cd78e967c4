import logging
from concurrent.futures import Executor, Future
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from welcomekit.application.coordinators import ContentProvider, CreateCoordinator, OpenCoordinator, SaveMode
from welcomekit.application.dialogs import DialogPort, OpenDialogConfiguration, SaveDialogConfiguration
from welcomekit.application.documents import DocumentPort, FileDocumentPort
from welcomekit.application.outcome import Outcome
from welcomekit.config import get_config, open_dialog_options, save_dialog_options
from welcomekit.core.capability import CapabilityProvider, Location, PathCapabilityProvider
from welcomekit.core.config import RECENTS_UPDATED
from welcomekit.core.event_bus import EventBus
from welcomekit.core.recents import RecentsStore
from welcomekit.core.storage import KeyValueStorage

logger = logging.getLogger(__name__)


class WelcomeController:
    """
    Wires one RecentsStore to the open/create coordinators. Build once at startup and
    hand the instance to windows and list views; nothing here is looked up globally.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        dialogs: DialogPort,
        documents: Optional[DocumentPort] = None,
        capabilities: Optional[CapabilityProvider] = None,
        event_bus: Optional[EventBus] = None,
        executor: Optional[Executor] = None,
        config: Optional[dict] = None,
    ):
        self.config = config if config is not None else get_config()
        self.capabilities = capabilities if capabilities is not None else PathCapabilityProvider()
        self.documents = documents if documents is not None else FileDocumentPort()
        self.event_bus = event_bus if event_bus is not None else EventBus()
        recents_cfg = self.config["recents"]
        self.store = RecentsStore(
            storage,
            self.capabilities,
            self.event_bus,
            capacity=recents_cfg["capacity"],
            settings_key=recents_cfg["settings_key"],
        )
        self._opener = OpenCoordinator(dialogs, self.documents, self.store, self.capabilities, executor)
        self._creator = CreateCoordinator(dialogs, self.documents, self.store, self.capabilities, executor)
        # dialog settings are checked at construction, not on first use
        self.open_configuration()
        self.save_configuration()

    # -- dialog configuration ----------------------------------------------

    def open_configuration(self, **overrides) -> OpenDialogConfiguration:
        """
        OpenDialogConfiguration from dialogs.open config, then keyword overrides.
        Raises ConfigError on unknown keys or kind names.
        """
        return OpenDialogConfiguration.from_options({**open_dialog_options(self.config), **overrides})

    def save_configuration(self, **overrides) -> SaveDialogConfiguration:
        """SaveDialogConfiguration from dialogs.save config, then keyword overrides."""
        return SaveDialogConfiguration.from_options({**save_dialog_options(self.config), **overrides})

    # -- workflows ---------------------------------------------------------

    def open_document(
        self,
        location: Optional[Location] = None,
        on_completion: Optional[Callable[[Outcome], None]] = None,
        on_cancel: Optional[Callable[[], None]] = None,
        on_error: Optional[Callable[[BaseException], None]] = None,
    ) -> "Future[Outcome]":
        """Open location directly, or ask with the default open dialog when it is None."""
        if location is None:
            return self.open_document_with_dialog(
                on_completion=on_completion, on_cancel=on_cancel, on_error=on_error
            )
        return self._opener.open_location(location, on_completion, on_cancel, on_error)

    def open_document_with_dialog(
        self, configuration: Optional[OpenDialogConfiguration] = None, **callbacks
    ) -> "Future[Outcome]":
        return self._opener.run(configuration or self.open_configuration(), **callbacks)

    def create_file_document_with_dialog(
        self,
        configuration: Optional[SaveDialogConfiguration] = None,
        content_provider: Optional[ContentProvider] = None,
        **callbacks,
    ) -> "Future[Outcome]":
        """Save dialog for a single flat file, e.g. MyNote.txt."""
        return self._creator.run(
            configuration or self.save_configuration(),
            SaveMode.FILE,
            content_provider,
            **callbacks,
        )

    def create_folder_document_with_dialog(
        self,
        configuration: Optional[SaveDialogConfiguration] = None,
        content_provider: Optional[ContentProvider] = None,
        **callbacks,
    ) -> "Future[Outcome]":
        """Save dialog asking for a folder name; the document is <Folder>/<Folder>.<ext>."""
        return self._creator.run(
            configuration or self.save_configuration(),
            SaveMode.PACKAGE,
            content_provider,
            **callbacks,
        )

    # -- recents -----------------------------------------------------------

    def recent_locations(self) -> List[Path]:
        return self.store.list()

    def remove_recents(self, locations: Iterable[Location]) -> List[Path]:
        return self.store.remove(locations)

    def clear_recents(self) -> None:
        self.store.clear()

    def subscribe_recents(self, callback: Callable[..., None]) -> None:
        """callback(event_name, None) after every change; call recent_locations() for data."""
        self.event_bus.subscribe(RECENTS_UPDATED, callback)

    def unsubscribe_recents(self, callback: Callable[..., None]) -> None:
        self.event_bus.unsubscribe(RECENTS_UPDATED, callback)
