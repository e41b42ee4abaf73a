# main.py
import os
import sys
import traceback
from datetime import datetime

from PyQt6.QtWidgets import QApplication, QMessageBox

from config.settings import init_config
from config.logging_config import setup_logging
from core.utils.exceptions import ConfigurationError
from core.utils.logger import get_module_logger

# --- Constants ---
APP_NAME = "Tracked Attachments Console"


# --- Helper Functions ---
def get_base_path():
    """Directory holding the app, or the executable when frozen."""
    if getattr(sys, 'frozen', False):
        return os.path.dirname(sys.executable)
    return os.path.abspath(os.path.dirname(__file__))


# --- Global variables ---
BASE_PATH = get_base_path()
LOG_DIR = os.path.join(BASE_PATH, 'logs')

logger = get_module_logger(__name__)


# --- Exception Hook ---
def exception_hook(exc_type, exc_value, exc_tb):
    """Write uncaught exceptions to logs/error.log and tell the operator."""
    timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    fn = os.path.join(LOG_DIR, 'error.log')
    error_message = f"An unexpected error occurred:\n\n{exc_type.__name__}: {exc_value}\n\nSee log file for details:\n{fn}"
    logger.error("Uncaught exception", error_type=exc_type.__name__, error=str(exc_value))
    try:
        os.makedirs(LOG_DIR, exist_ok=True)
        with open(fn, 'a', encoding='utf-8') as f:
            f.write(f"\n----- Uncaught Exception ({timestamp}) -----\n")
            traceback.print_exception(exc_type, exc_value, exc_tb, file=f)
            f.write("-----\n")
    except OSError as log_e:
        traceback.print_exception(exc_type, exc_value, exc_tb, file=sys.stderr)
        error_message += f"\n\nNo write log: {log_e}"

    if QApplication.instance():
        QMessageBox.critical(None, "Fatal Error", error_message)
    sys.exit(1)


# --- Main Execution ---
def main():
    global LOG_DIR
    sys.excepthook = exception_hook

    try:
        config = init_config()
    except ConfigurationError as e:
        print(f"FATAL ERROR: {e.get_user_message()}", file=sys.stderr)
        sys.exit(1)

    LOG_DIR = os.path.join(BASE_PATH, config.get('paths.logs_dir', 'logs'))
    setup_logging()

    app = QApplication(sys.argv)
    app.setApplicationName(config.get('app.name', APP_NAME))
    app.setApplicationVersion(config.get('app.version', '1.0.0'))

    from ui.main_window import MainWindow
    window = MainWindow(config=config)
    window.show()
    logger.info(f"{APP_NAME} started", api=config.get('api.base_url'))
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
