"""Request logging with timing and credential redaction."""

import json
import logging
import time
from typing import Any

from fastmcp.server.middleware import MiddlewareContext

from mcp_ssh.middleware.base import SSHServerMiddleware
from mcp_ssh.utils.sanitize import REDACTED

# Tool arguments that are never written to the log
SENSITIVE_ARGUMENTS = frozenset({"password", "passphrase"})

_MAX_ARG_DISPLAY = 50


def redact_arguments(args: dict[str, Any] | None) -> dict[str, Any]:
    """Copy of tool arguments with credential values replaced."""
    if not args:
        return {}
    return {
        key: REDACTED if key.lower() in SENSITIVE_ARGUMENTS and value else value
        for key, value in args.items()
    }


def describe_result(result: Any) -> str:
    """One-phrase description of a handler result for the completion line."""
    structured = getattr(result, "structured_content", None)
    if isinstance(structured, dict):
        if "error" in structured:
            return f"rejected ({structured['error']})"
        if "total" in structured:
            return f"{structured.get('succeeded', 0)}/{structured['total']} host(s) succeeded"
        if "hosts" in structured:
            return f"{len(structured['hosts'])} host(s)"

    if result is None:
        return "null"
    if isinstance(result, (str, list, tuple, dict)):
        return f"{len(result)} {'chars' if isinstance(result, str) else 'items'}"

    content = getattr(result, "content", None)
    if isinstance(content, (list, tuple)):
        return f"{len(content)} content item(s)"
    return type(result).__name__


class LoggingMiddleware(SSHServerMiddleware):
    """Logs each tool call and resource read as a start and a completion line.

    Start lines carry the tool arguments with passwords redacted. Calls
    slower than ``slow_threshold_ms`` complete at WARNING level.

    Example:
        >>> mcp.add_middleware(LoggingMiddleware(slow_threshold_ms=5000))
    """

    def __init__(
        self,
        logger: logging.Logger | None = None,
        include_payloads: bool = False,
        max_payload_length: int = 1000,
        slow_threshold_ms: float = 1000.0,
    ) -> None:
        """Initialize logging middleware.

        Args:
            logger: Optional custom logger.
            include_payloads: Also log redacted arguments and results at DEBUG.
            max_payload_length: Characters kept from each logged payload.
            slow_threshold_ms: Duration at which a call counts as slow.
        """
        super().__init__(logger=logger)
        self.include_payloads = include_payloads
        self.max_payload_length = max_payload_length
        self.slow_threshold_ms = slow_threshold_ms

    def _truncate(self, data: Any) -> str:
        try:
            text = json.dumps(data, default=str)
        except (TypeError, ValueError):
            text = str(data)
        if len(text) <= self.max_payload_length:
            return text
        return f"{text[: self.max_payload_length]}... [truncated]"

    @staticmethod
    def _format_call(name: str, args: dict[str, Any] | None) -> str:
        shown = []
        for key, value in redact_arguments(args).items():
            if isinstance(value, str) and len(value) > _MAX_ARG_DISPLAY:
                value = f"{value[:_MAX_ARG_DISPLAY]}..."
            shown.append(f"{key}={value!r}")
        return f"{name}({', '.join(shown)})"

    async def _timed(
        self,
        kind: str,
        label: str,
        context: MiddlewareContext,
        call_next: Any,
    ) -> Any:
        start = time.perf_counter()
        try:
            result = await call_next(context)
        except Exception as e:
            elapsed = (time.perf_counter() - start) * 1000
            self.logger.error(
                "!!! %s: %s -> %s [%.1fms]", kind, label, type(e).__name__, elapsed
            )
            raise

        elapsed = (time.perf_counter() - start) * 1000
        slow = elapsed >= self.slow_threshold_ms
        self.logger.log(
            logging.WARNING if slow else logging.INFO,
            "<<< %s: %s -> %s [%.1fms%s]",
            kind,
            label,
            describe_result(result),
            elapsed,
            " SLOW!" if slow else "",
        )
        if self.include_payloads and result is not None:
            self.logger.debug("    Result: %s", self._truncate(result))
        return result

    async def on_call_tool(self, context: MiddlewareContext, call_next: Any) -> Any:
        """Log a tool call with redacted arguments and its outcome."""
        name = getattr(context.message, "name", "unknown")
        args = getattr(context.message, "arguments", None)

        self.logger.info(">>> TOOL: %s", self._format_call(name, args))
        if self.include_payloads and args:
            self.logger.debug("    Args: %s", self._truncate(redact_arguments(args)))

        return await self._timed("TOOL", name, context, call_next)

    async def on_read_resource(
        self, context: MiddlewareContext, call_next: Any
    ) -> Any:
        """Log a resource read and its outcome."""
        uri = str(getattr(context.message, "uri", "unknown"))
        self.logger.info(">>> RESOURCE: %s", uri)
        return await self._timed("RESOURCE", uri, context, call_next)
