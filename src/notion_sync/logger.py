import os
import threading
from contextlib import contextmanager
from datetime import datetime
from enum import Enum

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn, TaskProgressColumn, TimeElapsedColumn


class LogLevel(Enum):
    """Log levels"""
    DEBUG = 0
    INFO = 1
    SUCCESS = 2
    WARNING = 3
    ERROR = 4


_LEVEL_STYLES = {
    LogLevel.DEBUG: "dim",
    LogLevel.INFO: "blue",
    LogLevel.SUCCESS: "green",
    LogLevel.WARNING: "yellow",
    LogLevel.ERROR: "red bold",
}


class Logger:
    """
    Console logger (thread-safe)

    Supports:
    - colored output via rich
    - progress bars
    - level filtering
    - output from worker threads

    Everything goes to stderr so converted Markdown can be piped from stdout.
    """

    def __init__(self, name="NotionSync", level=LogLevel.INFO):
        self.name = name
        self.level = level
        self._lock = threading.Lock()
        self.console = Console(stderr=True)

        env_level = os.getenv("NOTION_SYNC_LOG_LEVEL", "").upper()
        if env_level in LogLevel.__members__:
            self.level = LogLevel[env_level]

    def set_level(self, level: LogLevel):
        """Set the minimum level that gets printed"""
        self.level = level

    def _should_log(self, level: LogLevel) -> bool:
        return level.value >= self.level.value

    def _log(self, level: LogLevel, icon, message):
        if not self._should_log(level):
            return

        timestamp = datetime.now().strftime("%H:%M:%S")
        style = _LEVEL_STYLES[level]

        with self._lock:
            self.console.print(
                f"[cyan][{timestamp}][/cyan] [{style}]{icon} {escape(str(message))}[/{style}]",
                markup=True,
                highlight=False,
            )

    def debug(self, message, icon="🔧"):
        """Debug details - only shown at DEBUG level"""
        self._log(LogLevel.DEBUG, icon, message)

    def info(self, message, icon="ℹ️ "):
        self._log(LogLevel.INFO, icon, message)

    def success(self, message, icon="✅"):
        self._log(LogLevel.SUCCESS, icon, message)

    def warning(self, message, icon="⚠️ "):
        self._log(LogLevel.WARNING, icon, message)

    def error(self, message, icon="❌"):
        self._log(LogLevel.ERROR, icon, message)

    def header(self, message, icon=""):
        """Print a title panel"""
        if not self._should_log(LogLevel.INFO):
            return

        with self._lock:
            title = f"{icon} {message}" if icon else message
            self.console.print(Panel(title, style="bold magenta", width=50))

    @contextmanager
    def progress(self, total: int, description: str = "Working"):
        """Progress bar context manager

        Usage:
            with logger.progress(10, "Deleting blocks") as update:
                for item in items:
                    process(item)
                    update(1)  # Advance by 1
        """
        with Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            BarColumn(bar_width=30),
            TaskProgressColumn(),
            TextColumn("•"),
            TimeElapsedColumn(),
            console=self.console,
            disable=not self._should_log(LogLevel.INFO),
        ) as progress:
            task = progress.add_task(description, total=total)

            def update(advance: int = 1):
                progress.update(task, advance=advance)

            yield update


# Global logger instance
logger = Logger()
