"""Fake Time implementation for testing.

FakeTime is an in-memory implementation that tracks sleep() calls without
actually sleeping, enabling fast tests. Its clock starts at a fixed instant
and advances only by the seconds "slept".
"""

from datetime import UTC, datetime, timedelta

from branchfleet.core.time.abc import Time

DEFAULT_START = datetime(2024, 1, 1, 12, 0, 0, tzinfo=UTC)


class FakeTime(Time):
    """In-memory fake implementation that tracks calls without sleeping.

    This class has NO public setup methods. All state is provided via constructor
    or captured during execution.
    """

    def __init__(self, *, start: datetime = DEFAULT_START) -> None:
        """Create FakeTime with empty call tracking.

        Args:
            start: Instant returned by now() before any sleep
        """
        self._start = start
        self._sleep_calls: list[float] = []

    @property
    def sleep_calls(self) -> list[float]:
        """Get the list of sleep() calls that were made.

        Returns list of seconds values passed to sleep().

        This property is for test assertions only.
        """
        return self._sleep_calls

    def sleep(self, seconds: float) -> None:
        """Track sleep call without actually sleeping.

        Args:
            seconds: Number of seconds that would have been slept
        """
        self._sleep_calls.append(seconds)

    def now(self) -> datetime:
        return self._start + timedelta(seconds=sum(self._sleep_calls))
