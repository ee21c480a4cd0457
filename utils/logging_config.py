"""
Logging configuration for HighBuy Monitor.

Features:
- Separate log files for system events, sent alerts and errors
- Rotating file handlers (max 50MB per file, keep 5 backups)
- Automatic cleanup of old logs (keeps last 7 days)
- Console output for real-time monitoring
"""
import glob
import logging
import logging.handlers
from datetime import datetime, timedelta
from pathlib import Path


# Log directory structure
LOG_DIR = Path("logs")

# Rotation settings
MAX_BYTES = 50 * 1024 * 1024  # 50 MB per file
BACKUP_COUNT = 5

# Cleanup settings
LOG_RETENTION_DAYS = 7


def _rotating_handler(path: Path, level: int, formatter: logging.Formatter) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        path,
        maxBytes=MAX_BYTES,
        backupCount=BACKUP_COUNT,
        encoding='utf-8'
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging(log_level: str = "INFO", log_dir: Path = LOG_DIR) -> dict:
    """
    Configure logging with rotation and cleanup.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_dir: Directory for log files

    Returns:
        dict: Dictionary of specialized loggers
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    # Console handler (for real-time monitoring)
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.addHandler(console_handler)
    root_logger.addHandler(_rotating_handler(log_dir / "system.log", level, formatter))
    root_logger.addHandler(_rotating_handler(log_dir / "errors.log", logging.ERROR, formatter))

    # Every alert that went out, one line each
    alerts_logger = logging.getLogger('alerts')
    alerts_logger.handlers.clear()
    alerts_logger.addHandler(_rotating_handler(log_dir / "alerts.log", logging.INFO, formatter))
    alerts_logger.propagate = True

    cleanup_old_logs(log_dir)

    root_logger.info("=" * 80)
    root_logger.info("HighBuy Monitor logging system initialized")
    root_logger.info(f"Log directory: {log_dir.absolute()}")
    root_logger.info(f"Log level: {log_level}")
    root_logger.info("=" * 80)

    return {
        'system': root_logger,
        'alerts': alerts_logger,
    }


def cleanup_old_logs(log_dir: Path = LOG_DIR) -> int:
    """
    Delete log files older than LOG_RETENTION_DAYS.

    Returns:
        Number of files deleted
    """
    cutoff_time = datetime.now() - timedelta(days=LOG_RETENTION_DAYS)
    deleted_count = 0
    total_size_freed = 0

    for pattern in ("*.log", "*.log.*"):
        for log_file in glob.glob(str(Path(log_dir) / pattern)):
            log_path = Path(log_file)
            if not log_path.exists():
                continue

            try:
                stat = log_path.stat()
                if datetime.fromtimestamp(stat.st_mtime) < cutoff_time:
                    log_path.unlink()
                    deleted_count += 1
                    total_size_freed += stat.st_size
            except OSError as e:
                logging.error(f"Error cleaning up {log_path}: {e}")

    if deleted_count > 0:
        size_mb = total_size_freed / (1024 * 1024)
        logging.info(f"Cleaned up {deleted_count} old log files ({size_mb:.2f} MB freed)")

    return deleted_count
