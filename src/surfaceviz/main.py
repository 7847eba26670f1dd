"""
Application Initialization
==========================
This module constructs the MVC (Model-View-Controller) architecture and starts
the Qt Event Loop.

Why is this file needed?
------------------------
It acts as the "Dependency Injection" root. It:
1. Instantiates the Engine State and the Surface Controller.
2. Instantiates the Main Window (View).
3. Passes the Controller into the View so they can communicate.
4. Prevents circular import errors by being the orchestrator.
"""
import sys

from surfaceviz.app.application import create_app
from surfaceviz.config import LOG_LEVEL, LOG_FILE
from surfaceviz.controller.surface import SurfaceController
from surfaceviz.logging_config import setup_logging
from surfaceviz.model.state import EngineState
from surfaceviz.view.main_window import MainWindow


def main() -> None:
    # 1. Setup Logging (Console + Optional File)
    # Set LOG_LEVEL = logging.DEBUG in config to see everything during development
    setup_logging(level=LOG_LEVEL, log_file=LOG_FILE)

    # 2. Create the Qt Application
    app = create_app()

    # 3. Initialize the Model & Controller (starts the first transition)
    controller = SurfaceController(EngineState())

    # 4. Initialize the Main Window, passing the controller
    window = MainWindow(controller)
    window.show()

    # 5. Start Event Loop
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
