# packages/xai_lib/logging.py

import sys
from pathlib import Path
from typing import Optional

from loguru import logger as _logger  # Aliased to avoid conflict

SERVICE_NAME = "xai-core"


class LogManager:
    # Pass 'debug' flag directly to decouple from settings
    def __init__(
        self, service_name: str, debug: bool = False, log_dir: Optional[Path] = None
    ):
        self.service_name = service_name
        self.debug = debug
        self.log_dir = log_dir
        self._configure()

    def _configure(self):
        _logger.remove()

        # Console Handler
        _logger.add(
            sys.stderr,
            format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{extra[context]}</cyan> | <level>{message}</level>",
            level="DEBUG" if self.debug else "INFO",
            colorize=True,
        )

        # File Handler (only when the deployment asks for one)
        if self.log_dir is not None:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            _logger.add(
                self.log_dir / f"{self.service_name}.json.log",
                rotation="10 MB",
                retention="7 days",
                level="DEBUG" if self.debug else "INFO",
                serialize=True,
                enqueue=True,
            )

    def get_logger(self, context_name: str):
        return _logger.bind(app=self.service_name, context=context_name)


def get_logger(context_name: str):
    """Bound logger for components constructed without an injected one."""
    return _logger.bind(app=SERVICE_NAME, context=context_name)
