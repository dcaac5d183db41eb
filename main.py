"""
Entry point for the Block Program Simulator.
Opens the simulator window, optionally with a project JSON given on the command line.
"""

import sys
from PySide6.QtWidgets import QApplication
from gui.main_window import MainWindow
from utils.logging_utils import get_logger

logger = get_logger(__name__)


def main():
    """Start Qt and show the simulator, loading `argv[1]` as a project if present."""
    app = QApplication(sys.argv)
    app.setApplicationName("Block Program Simulator")

    window = MainWindow()
    if len(sys.argv) > 1:
        logger.info(f"Opening {sys.argv[1]}")
        window.open_project(sys.argv[1])
    window.show()
    sys.exit(app.exec())


if __name__ == '__main__':
    main()
