# utils/logger.py
import logging
import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

# Get config from .env (with safe defaults)
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FILE = Path(os.getenv("LOG_FILE", Path("logs") / "delivery_ledger.log"))

# Create formatter
formatter = logging.Formatter(
    fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(filename)s:%(lineno)d | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S"
)

# Console handler (for local runs)
console_handler = logging.StreamHandler()
console_handler.setLevel("INFO")  # Always show INFO+ in console
console_handler.setFormatter(formatter)

_file_handler = None


def _get_file_handler() -> logging.FileHandler:
    """Created on first use so importing the package never touches the disk."""
    global _file_handler
    if _file_handler is None:
        LOG_FILE.parent.mkdir(parents=True, exist_ok=True)
        _file_handler = logging.FileHandler(LOG_FILE, encoding="utf-8")
        _file_handler.setLevel(LOG_LEVEL)
        _file_handler.setFormatter(formatter)
    return _file_handler


def get_logger(name: str = "delivery_ledger") -> logging.Logger:
    """Return a configured logger instance."""
    logger = logging.getLogger(name)
    logger.setLevel(LOG_LEVEL)

    # Avoid duplicate handlers if called multiple times
    if not logger.handlers:
        logger.addHandler(_get_file_handler())
        logger.addHandler(console_handler)

    return logger
