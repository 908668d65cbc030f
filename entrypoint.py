import uvicorn
from constants import HOST, LOG_FILE, LOG_LEVEL, PORT, UVICORN_RELOAD
from logging_config import setup_logging

# Setup logging before importing app
setup_logging(log_level=LOG_LEVEL, log_file=LOG_FILE)

from app import app  # noqa: E402,F401
from logging_config import get_logger

logger = get_logger(__name__)


def main():
    logger.info(f"Starting signaling relay on {HOST}:{PORT}")
    uvicorn.run("app:app", host=HOST, port=PORT, reload=UVICORN_RELOAD)


if __name__ == "__main__":
    main()
