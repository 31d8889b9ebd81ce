# Logging and console output for the AI Dock backend.
# Author: AI Dock contributors
# Date: 2025-07-02
# Version: 0.2.0

import logging
import os
from typing import Optional
from rich.logging import RichHandler
from rich.console import Console
from rich.panel import Panel
from rich.theme import Theme

SUCCESS_LEVEL_NUM = 25
LOG_LEVEL_ENV = "AIDOCK_LOG_LEVEL"

logging.addLevelName(SUCCESS_LEVEL_NUM, "SUCCESS")


def _log_success(self, message, *args, **kwargs):
    if self.isEnabledFor(SUCCESS_LEVEL_NUM):
        self._log(SUCCESS_LEVEL_NUM, message, args, **kwargs)


if not hasattr(logging.Logger, "success"):
    logging.Logger.success = _log_success


class ConsoleManager:
    """
    Process-wide console for AI Dock. Log lines go through the 'AI-Dock'
    logger and are rendered by Rich; round-trip rules and error panels are
    printed straight to the console.

    The level comes from AIDOCK_LOG_LEVEL (default INFO). It is read here,
    not from Settings, because the config module itself logs through us.
    """

    def __init__(self, name: str = "AI-Dock", level: Optional[str] = None):
        self._console = Console(theme=Theme({"logging.level.success": "bold green"}))
        self._logger = logging.getLogger(name)
        if not self._logger.handlers:
            self._attach_handler(level or os.environ.get(LOG_LEVEL_ENV, "INFO"))

    def _attach_handler(self, level: str) -> None:
        handler = RichHandler(
            console=self._console,
            rich_tracebacks=True,
            show_path=False,
            keywords=["SUCCESS", "Round trip", "tool"],
        )
        handler.setFormatter(logging.Formatter(fmt="%(message)s", datefmt="[%X]"))
        self._logger.addHandler(handler)
        self._logger.setLevel(level.upper())
        self._logger.propagate = False

    def debug(self, message: str):
        self._logger.debug(message)

    def info(self, message: str):
        self._logger.info(message)

    def success(self, message: str):
        self._logger.success(message)

    def warning(self, message: str):
        self._logger.warning(message)

    def error(self, message: str):
        self._logger.error(message)

    def exception(self, message: str):
        self._logger.exception(message)

    def rule(self, title: str, style: str = "cyan"):
        self._console.rule(f"[bold {style}]{title}[/bold {style}]", style=style)

    def display_error_panel(self, title: str, error_message: str):
        self._console.print(Panel(error_message, title=f"[bold red]{title}[/bold red]", border_style="red"))


console = ConsoleManager()
