"""Recents list for the welcome window: event-bus -> Qt signal bridge and the list panel."""

from pathlib import Path
from typing import Iterable, List, Optional

from PySide6.QtCore import QObject, Qt, QUrl, Signal
from PySide6.QtGui import QDesktopServices, QGuiApplication, QKeySequence, QShortcut
from PySide6.QtWidgets import (
    QAbstractItemView,
    QLabel,
    QListWidget,
    QListWidgetItem,
    QMenu,
    QStackedLayout,
    QWidget,
)

from welcomekit.core.config import RECENTS_UPDATED
from welcomekit.core.event_bus import EventBus

EMPTY_TEXT = "No Recent Projects"


class QtRecentsBridge(QObject):
    """
    Re-emits the store's payload-less change notification as recentsChanged.
    Emission from worker threads is queued to receivers on the UI thread by Qt.
    """

    recentsChanged = Signal()

    def __init__(self, event_bus: EventBus, parent: Optional[QObject] = None):
        super().__init__(parent)
        self._bus = event_bus
        self._bus.subscribe(RECENTS_UPDATED, self._on_recents_updated)

    def _on_recents_updated(self, ev, data):
        try:
            self.recentsChanged.emit()
        except RuntimeError:
            # Qt side already deleted
            self.detach()

    def detach(self) -> None:
        if self._bus is not None:
            self._bus.unsubscribe(RECENTS_UPDATED, self._on_recents_updated)
            self._bus = None


class RecentsPanel(QWidget):
    """
    Recent projects, most recent first. Enter / double-click opens the selection
    through the controller; Delete and the context menu remove entries.
    Refreshes whenever the store changes and selects the first entry.
    """

    openRequested = Signal(list)     # list[Path]
    documentOpened = Signal(str)     # path of a successfully opened recent
    openFailed = Signal(str)         # error message

    def __init__(self, controller, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self._controller = controller

        self._list = QListWidget()
        self._list.setSelectionMode(QAbstractItemView.SelectionMode.ExtendedSelection)
        self._list.setContextMenuPolicy(Qt.ContextMenuPolicy.CustomContextMenu)
        self._list.customContextMenuRequested.connect(self._show_context_menu)
        self._list.itemActivated.connect(lambda _item: self.open_selected())

        self._empty_label = QLabel(EMPTY_TEXT)
        self._empty_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._empty_label.setProperty("class", "muted")

        self._stack = QStackedLayout(self)
        self._stack.addWidget(self._list)
        self._stack.addWidget(self._empty_label)

        delete = QShortcut(QKeySequence(QKeySequence.StandardKey.Delete), self._list)
        delete.activated.connect(lambda: self.remove_locations(self.selected_locations()))

        self._bridge = QtRecentsBridge(controller.event_bus, self)
        self._bridge.recentsChanged.connect(self.refresh)
        self.refresh()

    # -- data --------------------------------------------------------------

    def locations(self) -> List[Path]:
        return [Path(self._list.item(i).data(Qt.ItemDataRole.UserRole)) for i in range(self._list.count())]

    def selected_locations(self) -> List[Path]:
        return [Path(item.data(Qt.ItemDataRole.UserRole)) for item in self._list.selectedItems()]

    def is_empty(self) -> bool:
        return self._list.count() == 0

    def refresh(self) -> None:
        self._list.clear()
        for path in self._controller.recent_locations():
            item = QListWidgetItem(path.name or str(path))
            item.setToolTip(str(path))
            item.setData(Qt.ItemDataRole.UserRole, str(path))
            self._list.addItem(item)
        if self._list.count():
            self._list.setCurrentRow(0)
        self._stack.setCurrentWidget(self._empty_label if self.is_empty() else self._list)

    # -- actions -----------------------------------------------------------

    def open_selected(self) -> None:
        paths = self.selected_locations()
        if not paths:
            return
        self.openRequested.emit(paths)
        for path in paths:
            self._controller.open_document(
                path,
                on_completion=lambda outcome: self.documentOpened.emit(str(outcome.location)),
                on_error=lambda error: self.openFailed.emit(str(error)),
            )

    def remove_locations(self, locations: Iterable[Path]) -> None:
        targets = list(locations)
        if targets:
            self._controller.remove_recents(targets)

    def copy_paths(self, locations: Iterable[Path]) -> None:
        QGuiApplication.clipboard().setText("\n".join(str(p) for p in locations))

    def show_in_file_manager(self, locations: Iterable[Path]) -> None:
        for folder in {p.parent for p in locations}:
            QDesktopServices.openUrl(QUrl.fromLocalFile(str(folder)))

    def _show_context_menu(self, pos) -> None:
        items = self.selected_locations()
        if not items:
            return
        menu = QMenu(self)
        menu.addAction("Show in File Manager", lambda: self.show_in_file_manager(items))
        menu.addAction("Copy path%s" % ("s" if len(items) > 1 else ""), lambda: self.copy_paths(items))
        menu.addSeparator()
        menu.addAction("Remove from Recents", lambda: self.remove_locations(items))
        menu.exec(self._list.viewport().mapToGlobal(pos))
