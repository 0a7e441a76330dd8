import logging
from pathlib import Path
from typing import Optional, Union

CONSOLE_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"

# Error log entries read "[timestamp] context: message" followed by the stack
ERROR_LOG_FORMAT = "[%(asctime)s] %(message)s"


def configure_logging(level: Union[int, str] = logging.INFO,
                      error_log_path: Optional[Union[str, Path]] = None) -> logging.Logger:
    """Configure console logging and, optionally, the append-only error log.

    Args:
        level: Root log level for console output
        error_log_path: File that receives every ERROR record with its traceback.
                        The file is opened in append mode and never truncated.

    Returns:
        The root logger
    """
    logging.basicConfig(level=level, format=CONSOLE_FORMAT)
    root = logging.getLogger()
    root.setLevel(level)

    if error_log_path is not None:
        error_log_path = Path(error_log_path)
        error_log_path.parent.mkdir(parents=True, exist_ok=True)

        # Don't stack a second handler on the same file when called twice
        for handler in root.handlers:
            if isinstance(handler, logging.FileHandler) and \
                    Path(handler.baseFilename) == error_log_path.resolve():
                return root

        file_handler = logging.FileHandler(error_log_path, mode="a", encoding="utf-8")
        file_handler.setLevel(logging.ERROR)
        file_handler.setFormatter(logging.Formatter(ERROR_LOG_FORMAT))
        root.addHandler(file_handler)

    return root
