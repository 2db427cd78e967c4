"""welcomekit: recent documents and open/create workflows for desktop welcome windows."""

__version__ = "0.1.0"

from welcomekit.application.controller import WelcomeController
from welcomekit.application.coordinators import CreateCoordinator, OpenCoordinator, SaveMode
from welcomekit.application.outcome import Outcome, OutcomeKind
from welcomekit.core.recents import RecentsStore
from welcomekit.core.scope import ScopeGuard

__all__ = [
    "__version__",
    "WelcomeController",
    "OpenCoordinator",
    "CreateCoordinator",
    "SaveMode",
    "Outcome",
    "OutcomeKind",
    "RecentsStore",
    "ScopeGuard",
]
