"""Application entry point for Code Archaeology."""

from __future__ import annotations

from code_archaeology.constants.network_constants import DEFAULT_HOST, DEFAULT_PORT
from code_archaeology.constants.storage_constants import DEFAULT_SAVE_DIR
from code_archaeology.core.era_catalog import EraCatalog
from code_archaeology.core.progression_controller import ProgressionController
from code_archaeology.core.services.progress_store import ProgressStore
from code_archaeology.server.api_server import run_api_server
from code_archaeology.utils.logging_config import configure_logging


def main() -> None:
    """Initialize logging, load content and saved progress, and serve the game API."""
    logger = configure_logging()
    logger.info("Starting Code Archaeology…")

    catalog = EraCatalog.from_default_files()
    store = ProgressStore(DEFAULT_SAVE_DIR)
    controller = ProgressionController(catalog=catalog, store=store)
    logger.info("Progress slot at %s", store.path)
    logger.info("Game API available at http://%s:%s/", DEFAULT_HOST, DEFAULT_PORT)

    run_api_server(controller, host=DEFAULT_HOST, port=DEFAULT_PORT)


if __name__ == "__main__":
    main()
