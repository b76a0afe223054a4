import logging
import sys

from PyQt6 import QtWidgets

from .core.settings import SettingsManager
from .ui.main_window import MainWindow

if sys.platform == "win32":
    try:
        import ctypes
        ctypes.windll.shell32.SetCurrentProcessExplicitAppUserModelID(
            "Sitesmith.App")
    except (AttributeError, OSError):
        pass


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main() -> int:
    settings = SettingsManager()
    configure_logging(settings.log_level())
    app = QtWidgets.QApplication(sys.argv)
    app.setApplicationName("Sitesmith")
    win = MainWindow(settings)
    win.show()
    return app.exec()


if __name__ == "__main__":
    raise SystemExit(main())
