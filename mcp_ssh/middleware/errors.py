"""Last-resort error logging for requests."""

import logging
from collections import Counter
from typing import Any

from fastmcp.server.middleware import MiddlewareContext

from mcp_ssh.middleware.base import SSHServerMiddleware
from mcp_ssh.utils.sanitize import sanitize_error


class ErrorHandlingMiddleware(SSHServerMiddleware):
    """Logs and counts exceptions that escape a request handler.

    Tool handlers put per-host failures in their payloads, so anything
    reaching this middleware is a bug or a protocol error. The message is
    sanitized before logging and the exception is re-raised unchanged.
    """

    def __init__(
        self,
        logger: logging.Logger | None = None,
        include_traceback: bool = False,
    ) -> None:
        super().__init__(logger=logger)
        self.include_traceback = include_traceback
        self._errors: Counter[tuple[str, str]] = Counter()

    def get_error_stats(self) -> dict[str, int]:
        """Error counts keyed by "<method>:<exception type>"."""
        return {f"{method}:{kind}": n for (method, kind), n in self._errors.items()}

    def reset_stats(self) -> None:
        self._errors.clear()

    async def on_message(self, context: MiddlewareContext, call_next: Any) -> Any:
        """Pass the request through, logging anything it raises."""
        try:
            return await call_next(context)
        except Exception as e:
            method = context.method or "unknown"
            self._errors[(method, type(e).__name__)] += 1
            self.logger.error(
                "Unhandled %s in %s: %s",
                type(e).__name__,
                method,
                sanitize_error(e),
                exc_info=self.include_traceback,
            )
            raise
