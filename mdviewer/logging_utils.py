import logging
import time
from typing import Optional


def setup_logger(name: str = "mdviewer", level: Optional[str] = None) -> logging.Logger:
    """Setup standardized logger for service operations with UTF-8 support."""
    logger = logging.getLogger(name)

    if not logger.handlers:  # Avoid duplicate handlers
        handler = logging.StreamHandler()
        if hasattr(handler.stream, 'reconfigure'):
            handler.stream.reconfigure(encoding='utf-8')

        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    if level is None:
        from .config import settings
        level = settings.log_level
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    return logger


def log_operation(logger: logging.Logger,
                  operation: str,
                  target: str,
                  success: bool,
                  duration_ms: float,
                  result_summary: Optional[str] = None,
                  error_kind: Optional[str] = None,
                  error: Optional[str] = None) -> None:
    """Log one file service operation as a single structured line."""

    log_data = {
        "operation": operation,
        "target": target,
        "success": success,
        "duration_ms": round(duration_ms, 1)
    }

    if result_summary:
        log_data["result"] = result_summary

    if error_kind:
        log_data["error_kind"] = error_kind

    if error:
        log_data["error"] = error

    status_icon = "✅" if success else "❌"
    action_desc = operation.replace("_", " ").title()

    if success:
        logger.info(f"{status_icon} {action_desc}: {log_data}")
    else:
        logger.warning(f"{status_icon} {action_desc}: {log_data}")


def elapsed_ms(start_time: float) -> float:
    """Milliseconds elapsed since ``start_time`` (a ``time.time()`` value)."""
    return (time.time() - start_time) * 1000
