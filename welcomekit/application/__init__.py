# Application layer: dialogs, documents, coordinators, controller

from welcomekit.application.controller import WelcomeController
from welcomekit.application.coordinators import CreateCoordinator, OpenCoordinator, SaveMode

__all__ = ["WelcomeController", "OpenCoordinator", "CreateCoordinator", "SaveMode"]
