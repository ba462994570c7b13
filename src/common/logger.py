"""
Structured logging for the TV show scraper.

Console output is plain text; the log file under LOG_DIR receives one JSON
object per record and is rotated by size. Handlers are attached to the root
logger so module loggers created with ``logging.getLogger(__name__)`` end up
in the same places as the application logger.
"""

import json
import logging
import logging.handlers
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from .constants import LOG_LEVELS

# Attributes every LogRecord carries; anything else came in through ``extra``
_RESERVED_RECORD_KEYS = set(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}


class JSONFormatter(logging.Formatter):
    """Formats records as single-line JSON, keeping extra fields."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_RECORD_KEYS:
                log_entry[key] = value

        return json.dumps(log_entry, default=str, ensure_ascii=False)


class ScraperLogger:
    """Application logger that accepts structured keyword fields."""

    def __init__(
            self,
            name: str = "showscrape",
            log_level: str = "INFO",
            log_dir: Optional[Path] = None,
            enable_console: bool = True,
            max_file_size: int = 10 * 1024 * 1024,  # 10MB
            backup_count: int = 5,
    ):
        """
        Initialize the logger.

        Args:
            name: Logger name, also used for the log file name
            log_level: Log level (DEBUG, INFO, WARN, ERROR)
            log_dir: Directory for log files, default is ./.logs
            enable_console: Whether to enable console output
            max_file_size: Maximum log file size in bytes
            backup_count: Number of backup files to keep
        """
        level = LOG_LEVELS[log_level.upper()]

        root = logging.getLogger()
        root.setLevel(level)
        for handler in list(root.handlers):
            root.removeHandler(handler)
            handler.close()

        if enable_console:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
            root.addHandler(console_handler)

        log_dir = log_dir or Path.cwd() / ".logs"
        log_dir.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            log_dir / f"{name}.log",
            maxBytes=max_file_size,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(JSONFormatter())
        root.addHandler(file_handler)

        # urllib3 logs every connection at DEBUG, including the query string
        logging.getLogger("urllib3").setLevel(logging.WARNING)

        self.logger = logging.getLogger(name)

    def debug(self, message: str, **kwargs) -> None:
        self._log(logging.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs) -> None:
        self._log(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs) -> None:
        self._log(logging.WARNING, message, **kwargs)

    def error(self, message: str, **kwargs) -> None:
        self._log(logging.ERROR, message, **kwargs)

    def _log(self, level: int, message: str, **kwargs) -> None:
        """Log with keyword arguments stored as extra record fields."""
        exc_info = kwargs.pop("exc_info", None)
        kwargs.pop("stack_info", None)
        self.logger.log(level, message, exc_info=exc_info, extra=kwargs)

    def log_tmdb_request(
            self,
            request_type: str,
            query: str,
            success: bool,
            result_count: Optional[int] = None,
            tmdb_id: Optional[int] = None,
            error_message: Optional[str] = None,
    ) -> None:
        """Log the outcome of a TMDb lookup."""
        log_data = {
            "request_type": request_type,
            "query": query,
            "success": success,
        }

        if result_count is not None:
            log_data["result_count"] = result_count

        if tmdb_id is not None:
            log_data["tmdb_id"] = tmdb_id

        if error_message:
            log_data["error"] = error_message

        if success:
            self.info(f"TMDb request completed: {request_type}", **log_data)
        else:
            self.error(f"TMDb request failed: {request_type}", **log_data)

    def log_file_operation(
            self,
            operation: str,
            source_path: Path,
            destination_path: Optional[Path] = None,
            success: bool = True,
            error_message: Optional[str] = None,
    ) -> None:
        """Log a file operation with structured data."""
        log_data = {
            "operation": operation,
            "source_path": str(source_path),
            "success": success,
        }

        if destination_path:
            log_data["destination_path"] = str(destination_path)

        if error_message:
            log_data["error"] = error_message

        if success:
            self.info(f"File operation completed: {operation}", **log_data)
        else:
            self.error(f"File operation failed: {operation}", **log_data)


def setup_logging(
        log_level: str = "INFO",
        log_dir: Optional[Path] = None,
        enable_console: bool = True,
) -> ScraperLogger:
    """Set up logging for a run and return the application logger."""
    if log_dir is None:
        log_dir = Path.cwd() / ".logs"

    return ScraperLogger(
        log_level=log_level,
        log_dir=log_dir,
        enable_console=enable_console,
    )
