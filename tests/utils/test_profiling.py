"""Tests for the timed profiling decorator."""

import pytest
from loguru import logger

from cl_batch_fit.utils.profiling import timed


@pytest.fixture
def log_messages():
    messages: list[str] = []
    sink_id = logger.add(messages.append, level="DEBUG", format="{level} {message}")
    yield messages
    logger.remove(sink_id)


def test_timed_bare(log_messages: list[str]):
    """Test @timed logs the qualified name at DEBUG and returns the result."""

    @timed
    def add(a: int, b: int) -> int:
        return a + b

    assert add(2, 3) == 5
    assert any(
        msg.startswith("DEBUG [PROFILE]") and "add took" in msg for msg in log_messages
    )


def test_timed_with_level(log_messages: list[str]):
    """Test @timed(level=...) logs at the requested level."""

    @timed(level="INFO")
    def noop() -> None:
        return None

    noop()

    assert any(msg.startswith("INFO [PROFILE]") for msg in log_messages)


def test_timed_logs_on_exception(log_messages: list[str]):
    """Test elapsed time is logged even when the function raises."""

    @timed
    def fail() -> None:
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        fail()

    assert any("fail took" in msg for msg in log_messages)


def test_timed_preserves_metadata():
    """Test the wrapper keeps the wrapped function's name."""

    @timed
    def documented() -> None:
        """Docstring."""

    assert documented.__name__ == "documented"
    assert documented.__doc__ == "Docstring."
