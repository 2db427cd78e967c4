"""
CLI entry point. Usage: welcomekit {list,remove,clear,open,create} [--storage FILE]
Works on the same recents slot as the GUI when pointed at a JSON slot file.
"""
import argparse
import logging
import sys
from concurrent.futures import Future
from pathlib import Path
from typing import Optional

from welcomekit.application.controller import WelcomeController
from welcomekit.application.dialogs import OpenDialogConfiguration, SaveDialogConfiguration
from welcomekit.application.outcome import Outcome, OutcomeKind
from welcomekit.config import load_config, recents_storage_path
from welcomekit.core.exceptions import ConfigError
from welcomekit.core.logger import setup_logging
from welcomekit.core.storage import JsonFileStorage


class PromptDialogPort:
    """DialogPort for terminals: asks for a path on stdin. EOF cancels."""

    def __init__(self, stream=None):
        self._stream = stream

    def _read(self, prompt: str) -> Optional[str]:
        try:
            if self._stream is None:
                return input(prompt).strip()
            print(prompt, end="", flush=True)
            line = self._stream.readline()
        except (EOFError, KeyboardInterrupt):
            return None
        return line.strip() if line else None

    @staticmethod
    def _chosen(raw: Optional[str], directory: Optional[Path]) -> "Future[Optional[Path]]":
        future: Future = Future()
        if not raw:
            future.set_result(None)
            return future
        path = Path(raw).expanduser()
        if not path.is_absolute() and directory is not None:
            path = Path(directory) / path
        future.set_result(path)
        return future

    def present_open(self, configuration: OpenDialogConfiguration) -> "Future[Optional[Path]]":
        # Empty answer cancels
        return self._chosen(self._read("%s: " % configuration.title), configuration.directory)

    def present_save(self, configuration: SaveDialogConfiguration) -> "Future[Optional[Path]]":
        label = configuration.name_field_label.rstrip(": ")
        raw = self._read("%s (%s, default %s): " % (configuration.title, label, configuration.default_file_name))
        if raw == "":
            # Empty answer accepts the default name, like pressing the prompt button
            raw = configuration.default_file_name
        suffix = configuration.default_suffix()
        if raw and suffix and not Path(raw).suffix:
            raw = "%s.%s" % (raw, suffix)
        return self._chosen(raw, configuration.directory or Path.cwd())


def _report(outcome: Outcome) -> int:
    if outcome.kind is OutcomeKind.COMPLETED:
        print("Opened:", outcome.location)
        return 0
    if outcome.kind is OutcomeKind.CANCELLED:
        print("Cancelled.")
        return 0
    print("ERROR:", outcome.error)
    return 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="welcomekit", description="welcomekit: recent documents and open/create workflows")
    parser.add_argument("--storage", "-s", type=str, default=None, help="JSON slot file (default: recents.storage_path from config)")
    parser.add_argument("--config", "-c", type=str, default=None, help="Path to YAML config (default: welcomekit/config/default.yaml + WELCOMEKIT_CONFIG)")
    parser.add_argument("--log-level", type=str, default=None, choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Log level (default: WARNING)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("list", help="Print recent locations, most recent first")
    rm = subparsers.add_parser("remove", help="Remove locations from recents")
    rm.add_argument("paths", nargs="+", type=str)
    subparsers.add_parser("clear", help="Forget all recents")
    op = subparsers.add_parser("open", help="Open a document and record it (asks for a path if omitted)")
    op.add_argument("path", nargs="?", type=str, default=None)
    cr = subparsers.add_parser("create", help="Create an empty document, open it and record it")
    cr.add_argument("--package", action="store_true", help="Create <Folder>/<Folder>.<ext> instead of a flat file")
    cr.add_argument("--directory", "-d", type=str, default=None, help="Directory for relative names (default: cwd)")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    level = getattr(logging, args.log_level) if args.log_level else logging.WARNING
    setup_logging(level=level)

    try:
        cfg = load_config(override_path=args.config)
        storage = JsonFileStorage(Path(args.storage).expanduser() if args.storage else recents_storage_path(cfg))
        controller = WelcomeController(storage, PromptDialogPort(), config=cfg)
    except ConfigError as e:
        print("ERROR:", e)
        return 2

    if args.command == "list":
        for path in controller.recent_locations():
            print(path)
        return 0
    if args.command == "remove":
        controller.remove_recents(args.paths)
        return 0
    if args.command == "clear":
        controller.clear_recents()
        return 0
    if args.command == "open":
        if args.path is None:
            future = controller.open_document_with_dialog(controller.open_configuration(directory=Path.cwd()))
        else:
            future = controller.open_document(args.path)
        return _report(future.result())
    if args.command == "create":
        directory = Path(args.directory).expanduser() if args.directory else Path.cwd()
        configuration = controller.save_configuration(directory=directory)
        if args.package:
            future = controller.create_folder_document_with_dialog(configuration)
        else:
            future = controller.create_file_document_with_dialog(configuration)
        return _report(future.result())
    return 1


if __name__ == "__main__":
    sys.exit(main())
