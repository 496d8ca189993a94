"""Console log formatting for stderr."""

import logging
import re
from datetime import datetime

RESET = "\033[0m"

LEVEL_COLORS = {
    "DEBUG": "\033[90m",
    "INFO": "\033[92m",
    "WARNING": "\033[93m",
    "ERROR": "\033[91m",
    "CRITICAL": "\033[41m\033[37m\033[1m",
}

# Longest prefix first
COMPONENT_COLORS = (
    ("mcp_ssh.services.connection", "\033[95m"),
    ("mcp_ssh.services", "\033[94m"),
    ("mcp_ssh.middleware", "\033[33m"),
    ("mcp_ssh.config", "\033[32m"),
    ("mcp_ssh.tools", "\033[36m"),
    ("mcp_ssh", "\033[96m"),
)

# (substring in lowercased message, marker, color); first match wins
EVENT_MARKERS = (
    ("ready", ">>>", "\033[92m"),
    ("shutting down", "<<<", "\033[91m"),
    ("timed out", "T/O", "\033[91m"),
    ("failed", "!!", "\033[91m"),
    ("mismatch", "!!", "\033[91m"),
    ("slow!", "!", "\033[93m"),
    ("opening ssh connection", "+", "\033[96m"),
    ("closed ssh connection", "-", "\033[93m"),
    ("completed", "OK", "\033[92m"),
    ("uploaded", "OK", "\033[92m"),
    ("downloaded", "OK", "\033[92m"),
)

_HIGHLIGHTS = (
    (re.compile(r"(\w+://\S+)"), "\033[94m"),
    (re.compile(r"(\d+(?:\.\d+)?ms)"), "\033[93m"),
    (re.compile(r"([\w.\-]+@[\w.\-]+:\d+)"), "\033[95m"),
)


class ConsoleFormatter(logging.Formatter):
    """Single-line formatter: time | level | component | message.

    With colors enabled, each line is prefixed with a short marker for
    connection and request events, and SSH addresses, URIs and durations
    inside the message are highlighted.
    """

    def __init__(self, use_colors: bool = True) -> None:
        super().__init__()
        self.use_colors = use_colors

    def _paint(self, text: str, color: str) -> str:
        return f"{color}{text}{RESET}" if self.use_colors else text

    @staticmethod
    def component_color(name: str) -> str:
        for prefix, color in COMPONENT_COLORS:
            if name.startswith(prefix):
                return color
        return "\033[37m"

    @staticmethod
    def event_marker(message: str) -> tuple[str, str] | None:
        """Marker and color for a message, or None for ordinary lines."""
        lowered = message.lower()
        for needle, marker, color in EVENT_MARKERS:
            if needle in lowered:
                return marker, color
        return None

    def _highlight(self, message: str) -> str:
        if not self.use_colors:
            return message
        for pattern, color in _HIGHLIGHTS:
            message = pattern.sub(f"{color}\\1{RESET}", message)
        return message

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created)
        timestamp = f"{created:%H:%M:%S}.{int(record.msecs):03d}"
        level = self._paint(
            f"{record.levelname:<8}", LEVEL_COLORS.get(record.levelname, "")
        )
        component = self._paint(
            f"{record.name.removeprefix('mcp_ssh.'):<20}",
            self.component_color(record.name),
        )
        message = record.getMessage()

        line = f"{timestamp} | {level} | {component} | {self._highlight(message)}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"

        if not self.use_colors:
            return line

        event = self.event_marker(message)
        if event is None:
            return f"    {line}"
        marker, color = event
        return f"{color}{marker:<3}{RESET} {line}"
