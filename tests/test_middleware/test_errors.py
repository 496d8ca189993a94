"""Tests for error handling middleware."""

import logging
from unittest.mock import AsyncMock, MagicMock

import pytest

from mcp_ssh.middleware.errors import ErrorHandlingMiddleware


@pytest.fixture
def mock_context() -> MagicMock:
    context = MagicMock()
    context.method = "tools/call"
    return context


@pytest.mark.asyncio
async def test_passes_through_results(mock_context: MagicMock) -> None:
    middleware = ErrorHandlingMiddleware(logger=MagicMock())
    call_next = AsyncMock(return_value="ok")

    assert await middleware.on_message(mock_context, call_next) == "ok"
    assert middleware.get_error_stats() == {}


@pytest.mark.asyncio
async def test_logs_counts_and_reraises(mock_context: MagicMock) -> None:
    mock_logger = MagicMock()
    middleware = ErrorHandlingMiddleware(logger=mock_logger)
    call_next = AsyncMock(side_effect=ValueError("bad input"))

    for _ in range(2):
        with pytest.raises(ValueError, match="bad input"):
            await middleware.on_message(mock_context, call_next)

    assert middleware.get_error_stats() == {"tools/call:ValueError": 2}
    assert mock_logger.error.call_count == 2
    assert mock_logger.error.call_args.kwargs["exc_info"] is False


@pytest.mark.asyncio
async def test_error_message_is_sanitized(mock_context: MagicMock) -> None:
    mock_logger = MagicMock()
    middleware = ErrorHandlingMiddleware(logger=mock_logger)
    call_next = AsyncMock(side_effect=RuntimeError("login failed password=hunter2"))

    with pytest.raises(RuntimeError):
        await middleware.on_message(mock_context, call_next)

    assert "hunter2" not in str(mock_logger.error.call_args_list)


@pytest.mark.asyncio
async def test_include_traceback(
    mock_context: MagicMock, caplog: pytest.LogCaptureFixture
) -> None:
    logger = logging.getLogger("test.errors.traceback")
    middleware = ErrorHandlingMiddleware(logger=logger, include_traceback=True)
    call_next = AsyncMock(side_effect=KeyError("x"))

    with caplog.at_level(logging.ERROR, logger="test.errors.traceback"):
        with pytest.raises(KeyError):
            await middleware.on_message(mock_context, call_next)

    assert "Traceback" in caplog.text
    assert "Unhandled KeyError in tools/call" in caplog.text


def test_reset_stats() -> None:
    middleware = ErrorHandlingMiddleware()
    middleware._errors[("tools/call", "ValueError")] = 3

    middleware.reset_stats()

    assert middleware.get_error_stats() == {}
