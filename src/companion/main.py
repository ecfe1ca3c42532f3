"""
Application Initialization
==========================
This module wires the model and the main window together and starts the Qt
Event Loop.

Why is this file needed?
------------------------
It acts as the "Dependency Injection" root. It:
1. Sets up logging.
2. Instantiates the sound file catalog (Model).
3. Instantiates the Main Window (View) and passes the catalog into it.
4. Optionally opens the project given on the command line.
"""
import logging
import sys

from PySide6.QtWidgets import QApplication, QMessageBox

from companion.logging_config import setup_logging
from companion.model.catalog import SoundFileCatalog
from companion.model.io import ProjectIO
from companion.view.main_window import MainWindow, VISIBLE_APP_NAME

logger = logging.getLogger(__name__)


def main() -> None:
    # 1. Setup Logging (Console + Optional File, see COMPANION_LOG_*)
    setup_logging()

    # 2. Create the Qt Application
    app = QApplication(sys.argv)
    app.setApplicationName(VISIBLE_APP_NAME)

    # 3. Initialize the Data Model
    catalog = SoundFileCatalog()

    # 4. Initialize the Main Window, passing the model
    window = MainWindow(catalog)

    # 5. Open a project passed as first argument
    args = app.arguments()[1:]
    if args:
        try:
            ProjectIO.load_project(window.canvas, catalog, args[0])
            window.filepath = args[0]
            window.sound_list.set_records(catalog.records())
            window.update_window_title()
        except Exception as e:
            QMessageBox.critical(window, "Error", f"The selected file could not be opened:\n{e}")

    window.show()

    # 6. Start Event Loop
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
