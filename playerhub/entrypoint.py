import uvicorn

from .constants import HOST, LOG_FILE, LOG_LEVEL, PORT
from .logging_config import get_logger, setup_logging

# Setup logging before building the app
setup_logging(log_level=LOG_LEVEL, log_file=LOG_FILE)

from .app import create_app  # noqa: E402

logger = get_logger(__name__)


def main() -> None:
    app = create_app()
    logger.info(f"Player Hub realtime server listening on http://{HOST}:{PORT}")
    uvicorn.run(app, host=HOST, port=PORT, log_config=None)


if __name__ == "__main__":
    main()
