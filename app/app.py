import logging
from core.config import BASE_URL, LOG_DIR, LOG_LEVEL, REQUEST_TIMEOUT, TASKS_COLLECTION
from core.logging_setup import setup_logging
from storage.pocketbase import PocketBaseClient
from controller.session_controller import SessionController
from gui.main_window import MainWindow

logger = logging.getLogger(__name__)


def main():
    log_file = setup_logging(log_dir=LOG_DIR, console_level=LOG_LEVEL)
    logger.info("PocketBase at %s (logs: %s)", BASE_URL, log_file)

    client = PocketBaseClient(BASE_URL, timeout=REQUEST_TIMEOUT, tasks_collection=TASKS_COLLECTION)
    ui = MainWindow(SessionController(client), client)
    ui.mainloop()


if __name__ == "__main__":
    main()
