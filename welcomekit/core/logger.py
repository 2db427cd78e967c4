"""
Logging for welcomekit.* loggers: console plus an optional welcomekit.log file, and a
per-workflow tag so interleaved open/create runs can be told apart, e.g.

    2026-10-19 10:02:11 [INFO] welcomekit.coordinators [open#3] Opened /home/me/notes.txt

Applications call setup_logging() once; library code only calls get_logger().
"""
import logging
import os
from pathlib import Path
from typing import Optional

from .config import ENV_LOG_DIR, ENV_LOG_LEVEL

ROOT_NAME = "welcomekit"
LOG_FILE_NAME = "welcomekit.log"
_FORMAT = "%(asctime)s [%(levelname)s] %(name)s%(workflow)s %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_setup_done = False


class WelcomeKitFormatter(logging.Formatter):
    """Renders the workflow tag, empty for records logged outside a workflow."""

    def __init__(self) -> None:
        super().__init__(fmt=_FORMAT, datefmt=_DATE_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        if not hasattr(record, "workflow"):
            record.workflow = ""
        return super().format(record)


class WorkflowAdapter(logging.LoggerAdapter):
    """Tags every line with the workflow, e.g. [open#3]."""

    def process(self, msg, kwargs):
        workflow = self.extra.get("workflow", "")
        kwargs["extra"] = {**(kwargs.get("extra") or {}), "workflow": f" [{workflow}]" if workflow else ""}
        return msg, kwargs


def setup_logging(level: Optional[int] = None, log_dir: Optional[os.PathLike | str] = None) -> None:
    """
    Attach a console handler (and a file handler when log_dir or WELCOMEKIT_LOG_DIR is
    set) to the welcomekit logger. level defaults to WELCOMEKIT_LOG_LEVEL, else INFO.
    Only the first call has an effect.
    """
    global _setup_done
    if _setup_done:
        return

    if level is None:
        level = getattr(logging, os.environ.get(ENV_LOG_LEVEL, "").strip().upper(), logging.INFO)
    root = logging.getLogger(ROOT_NAME)
    root.setLevel(level)
    formatter = WelcomeKitFormatter()

    handlers = [logging.StreamHandler()]
    log_dir = log_dir or os.environ.get(ENV_LOG_DIR)
    if log_dir:
        path = Path(log_dir).expanduser()
        path.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(path / LOG_FILE_NAME, encoding="utf-8"))
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        root.addHandler(handler)

    _setup_done = True


def get_logger(name: str) -> logging.Logger:
    """Return a logger under welcomekit.* (e.g. welcomekit.recents)."""
    if not name.startswith(ROOT_NAME + "."):
        name = f"{ROOT_NAME}.{name}"
    return logging.getLogger(name)


def get_workflow_logger(logger: logging.Logger, workflow: str) -> WorkflowAdapter:
    """
    Adapter for one coordinator run: get_workflow_logger(get_logger('coordinators'), 'open#3').
    Wrapping an adapter again appends to its tag ("open#3 retry").
    """
    if isinstance(logger, WorkflowAdapter):
        prev = logger.extra.get("workflow", "")
        return WorkflowAdapter(logger.logger, {"workflow": f"{prev} {workflow}".strip()})
    return WorkflowAdapter(logger, {"workflow": workflow})
