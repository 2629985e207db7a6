"""PySide6 front end: main window, scan plot, and range dialog."""
