# src/fleet_availability/utils/file_utils.py

import os
from datetime import datetime, timedelta
from pathlib import Path

from fleet_availability.utils.logger import get_logger

logger = get_logger(__name__)

REPORT_SUFFIXES = (".xlsx", ".png", ".csv")


def cleanup_old_files(output_root, retention_days: int = 30) -> int:
    """
    Deletes exported reports in the output directory older than the retention window.

    :param output_root: Path to the output directory.
    :param retention_days: Number of days to retain files (default: 30).
    :return: Number of files deleted.
    """
    output_root = Path(output_root)
    cutoff = datetime.now() - timedelta(days=retention_days)

    if not output_root.exists():
        logger.warning(f"Output directory does not exist: {output_root}")
        return 0

    deleted_count = 0
    for file_path in output_root.iterdir():
        if file_path.is_file() and file_path.suffix.lower() in REPORT_SUFFIXES:
            file_mtime = datetime.fromtimestamp(os.path.getmtime(file_path))
            if file_mtime < cutoff:
                try:
                    file_path.unlink()
                    logger.info(f"Deleted old file: {file_path}")
                    deleted_count += 1
                except OSError as e:
                    logger.error(f"Error deleting {file_path}: {e}")

    logger.info(f"Cleanup complete: {deleted_count} files deleted from {output_root}.")
    return deleted_count
