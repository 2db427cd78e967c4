# Qt adapters: file dialogs, QSettings slots, recents list

from welcomekit.gui.qt_dialogs import QtDialogPort
from welcomekit.gui.qt_recents import QtRecentsBridge, RecentsPanel
from welcomekit.gui.qt_settings import QSettingsStorage

__all__ = ["QtDialogPort", "QtRecentsBridge", "RecentsPanel", "QSettingsStorage"]
