# src/delivery_ledger/utils/file_utils.py

import os
from datetime import datetime, timedelta
import logging
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class AppConfig(BaseSettings):
    model_config = SettingsConfigDict(env_file='.env', env_ignore_empty=True, extra='ignore')

    export_retention_days: int = 30


logger = logging.getLogger(__name__)


def cleanup_old_exports(export_dir: str, retention_days: Optional[int] = None) -> int:
    """
    Deletes CSV exports in the directory older than the retention window.

    :param export_dir: Path to the export directory.
    :param retention_days: Days to keep files (default: EXPORT_RETENTION_DAYS, 30).
    :return: Number of files deleted.
    """
    if retention_days is None:
        retention_days = AppConfig().export_retention_days

    cutoff = datetime.now() - timedelta(days=retention_days)

    if not os.path.exists(export_dir):
        logger.warning(f"Export directory does not exist: {export_dir}")
        return 0

    deleted_count = 0
    for filename in os.listdir(export_dir):
        if filename.endswith(".csv"):
            file_path = os.path.join(export_dir, filename)
            file_mtime = datetime.fromtimestamp(os.path.getmtime(file_path))
            if file_mtime < cutoff:
                try:
                    os.remove(file_path)
                    logger.info(f"Deleted old export: {file_path}")
                    deleted_count += 1
                except OSError as e:
                    logger.error(f"Error deleting {file_path}: {e}")

    logger.info(f"Cleanup complete: {deleted_count} files deleted from {export_dir}.")
    return deleted_count
