# src/delivery_ledger/utils/config.py
"""
Environment-driven settings with safe defaults.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env from project root
BASE_DIR = Path(__file__).resolve().parents[3]
load_dotenv(BASE_DIR / ".env")


class Config:
    LEDGER_FILE = os.getenv("LEDGER_FILE", "data/ledger.json").strip()
    EXPORT_DIR = os.getenv("EXPORT_DIR", "output/exports").strip()
    DEFAULT_PERIOD = os.getenv("DEFAULT_PERIOD", "all").strip().lower()
    CURRENCY_SYMBOL = os.getenv("CURRENCY_SYMBOL", "€")
    RECENT_DAYS_LIMIT = int(os.getenv("RECENT_DAYS_LIMIT", "5"))

    @property
    def ledger_path(self) -> Path:
        return Path(self.LEDGER_FILE)

    @property
    def export_path(self) -> Path:
        return Path(self.EXPORT_DIR)

    def __repr__(self):
        return f"<Config ledger={self.LEDGER_FILE} exports={self.EXPORT_DIR}>"


# Singleton
config = Config()
