"""
Run the API with uvicorn: python -m task_api
"""

import logging

import uvicorn

from .config import get_settings
from .logging_setup import setup_logging
from .main import build_store, create_app

logger = logging.getLogger(__name__)


def main() -> None:
    settings = get_settings()
    setup_logging(settings.log_level)
    logger.info("Starting task API on %s:%s store=%s", settings.host, settings.port, settings.store)

    app = create_app(store=build_store(settings))
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
