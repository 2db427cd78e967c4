"""DialogPort over QFileDialog. Dialogs are shown with open() so the UI thread is never blocked."""

from concurrent.futures import Future
from pathlib import Path
from typing import Iterable, List, Optional

from PySide6.QtCore import Qt
from PySide6.QtWidgets import QDialog, QFileDialog, QWidget

from welcomekit.application.dialogs import ContentKind, OpenDialogConfiguration, SaveDialogConfiguration


def _name_filters(kinds: Iterable[ContentKind]) -> List[str]:
    return [k.name_filter() for k in kinds if not k.is_directory]


class _FileOrFolderDialog(QFileDialog):
    """Non-native open dialog that accepts a selected folder as well as a file."""

    def accept(self) -> None:
        files = self.selectedFiles()
        if len(files) == 1 and Path(files[0]).is_dir():
            # ExistingFile mode would step into the folder instead
            QDialog.accept(self)
            return
        super().accept()


class QtDialogPort:
    """
    Presents QFileDialog window-modal to parent (application-modal without one).
    The returned future resolves once from QDialog.finished: the chosen Path, or None.
    """

    def __init__(self, parent: Optional[QWidget] = None, use_native_dialogs: bool = True):
        self._parent = parent
        self._use_native = use_native_dialogs
        self._active: set[QFileDialog] = set()

    @property
    def active_dialogs(self) -> List[QFileDialog]:
        return list(self._active)

    def _make_dialog(self, title: str, directory: Optional[Path], dialog_class=QFileDialog) -> QFileDialog:
        dialog = dialog_class(self._parent, title, str(directory) if directory else "")
        if not self._use_native or dialog_class is not QFileDialog:
            dialog.setOption(QFileDialog.Option.DontUseNativeDialog, True)
        dialog.setWindowModality(
            Qt.WindowModality.WindowModal if self._parent is not None else Qt.WindowModality.ApplicationModal
        )
        return dialog

    def present_open(self, configuration: OpenDialogConfiguration) -> "Future[Optional[Path]]":
        files, folders = configuration.can_choose_files, configuration.can_choose_directories
        # Native dialogs pick either files or folders, never both
        dialog_class = _FileOrFolderDialog if files and folders else QFileDialog
        dialog = self._make_dialog(configuration.title, configuration.directory, dialog_class)
        dialog.setAcceptMode(QFileDialog.AcceptMode.AcceptOpen)
        if folders and not files:
            dialog.setFileMode(QFileDialog.FileMode.Directory)
            dialog.setOption(QFileDialog.Option.ShowDirsOnly, True)
        else:
            dialog.setFileMode(QFileDialog.FileMode.ExistingFile)
            filters = _name_filters(configuration.allowed_kinds)
            if filters:
                dialog.setNameFilters(filters)
        return self._show(dialog)

    def present_save(self, configuration: SaveDialogConfiguration) -> "Future[Optional[Path]]":
        dialog = self._make_dialog(configuration.title, configuration.directory)
        dialog.setAcceptMode(QFileDialog.AcceptMode.AcceptSave)
        dialog.setFileMode(QFileDialog.FileMode.AnyFile)
        dialog.setLabelText(QFileDialog.DialogLabel.Accept, configuration.prompt)
        dialog.setLabelText(QFileDialog.DialogLabel.FileName, configuration.name_field_label)
        filters = _name_filters(configuration.allowed_kinds)
        if filters:
            dialog.setNameFilters(filters)
        suffix = configuration.default_suffix()
        if suffix:
            dialog.setDefaultSuffix(suffix)
        dialog.selectFile(configuration.default_file_name)
        return self._show(dialog)

    def _show(self, dialog: QFileDialog) -> "Future[Optional[Path]]":
        future: Future = Future()

        def on_finished(code: int) -> None:
            files = dialog.selectedFiles()
            self._active.discard(dialog)
            dialog.deleteLater()
            if future.done():
                return
            if code == QDialog.DialogCode.Accepted.value and files:
                future.set_result(Path(files[0]))
            else:
                future.set_result(None)

        dialog.finished.connect(on_finished)
        self._active.add(dialog)
        dialog.open()
        return future
