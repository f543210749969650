"""Application entry point."""

from __future__ import annotations

import logging
import sys

from PySide6.QtWidgets import QApplication

from dynform.config import load_settings
from dynform.ui.main_window import MainWindow


def main() -> int:
    settings = load_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = QApplication(sys.argv)
    window = MainWindow(settings)
    window.show()
    window.reload_form()
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
