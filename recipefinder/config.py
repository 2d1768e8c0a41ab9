import logging.config
import os

from dotenv import load_dotenv

# Process environment wins over the file
ENV_FILE = os.getenv("ENV_FILE", ".env")
load_dotenv(ENV_FILE)

# Database
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./recipes.db")

# Search
INDEX_QUEUE_SIZE = int(os.getenv("INDEX_QUEUE_SIZE", "50"))
DEFAULT_MAX_RESULTS = int(os.getenv("DEFAULT_MAX_RESULTS", "50"))
# The HTTP layer uses a smaller page than the search orchestrator
API_DEFAULT_MAX_RESULTS = int(os.getenv("API_DEFAULT_MAX_RESULTS", "20"))

# Lexicon mutation endpoints are open when no token is configured
ADMIN_TOKEN = os.getenv("ADMIN_TOKEN") or None

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

LOGGING_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {
            "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "level": LOG_LEVEL,
            "formatter": "standard",
            "stream": "ext://sys.stdout",
        },
    },
    "root": {
        "level": LOG_LEVEL,
        "handlers": ["console"],
    },
}


def setup_logging():
    """Apply LOGGING_CONFIG. Safe to call more than once."""
    logging.config.dictConfig(LOGGING_CONFIG)
