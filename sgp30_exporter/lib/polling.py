"""Generic async fixed-rate polling service abstraction.

Provides a drift-free timer and a reusable base class for services that do
one unit of work per tick, with sub-tasks running every N ticks.
"""
import asyncio
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable

from sgp30_exporter.lib.config import TICK_PERIOD_SEC, TICKS_PER_CYCLE
from sgp30_exporter.logging import get_logger

logger = get_logger("lib.polling")


def _loop_time() -> float:
    return asyncio.get_running_loop().time()


class FixedRateTimer:
    """Fixed-rate deadlines on a monotonic clock.

    Each deadline is the previous one plus the period, so the schedule does
    not drift with the time spent between ticks. When a deadline is missed
    the schedule is re-anchored on the current instant instead of firing a
    burst of late ticks.
    """

    def __init__(
        self,
        period_sec: float = TICK_PERIOD_SEC,
        *,
        clock: Callable[[], float] = _loop_time,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    ) -> None:
        if period_sec < 0:
            raise ValueError(f"period_sec must be >= 0, got {period_sec}")
        self.period_sec = period_sec
        self._clock = clock
        self._sleep = sleep
        self._deadline: float | None = None

    def start(self) -> None:
        """Anchor the schedule on the current instant."""
        self._deadline = self._clock()

    def advance(self) -> float:
        """Return the next deadline, one period after the previous one."""
        if self._deadline is None:
            self.start()
        assert self._deadline is not None
        self._deadline += self.period_sec
        return self._deadline

    async def sleep_until(self, deadline: float) -> None:
        """Sleep until ``deadline``, or return at once if it already passed."""
        delay = deadline - self._clock()
        if delay > 0:
            await self._sleep(delay)
        elif delay < 0:
            logger.debug("Tick overran its deadline by %.3fs", -delay)
            self._deadline = self._clock()


class PollingService(ABC):
    """Abstract base class for async fixed-rate polling services.

    Implements the common loop pattern with:
    - A tick counter wrapping at ``ticks_per_cycle``
    - Drift-free fixed-rate scheduling
    - Error recovery per tick
    """

    def __init__(
        self,
        name: str,
        *,
        ticks_per_cycle: int = TICKS_PER_CYCLE,
        timer: FixedRateTimer | None = None,
    ) -> None:
        """Initialize the polling service.

        Args:
            name: Service name for logging.
            ticks_per_cycle: Modulus of the tick counter.
            timer: Scheduler, defaults to one tick per second.
        """
        self.name = name
        self.ticks_per_cycle = ticks_per_cycle
        self._timer = timer or FixedRateTimer()
        self._tick = 0
        self._logger = get_logger(f"polling.{name}")

    @property
    def tick_count(self) -> int:
        """Position of the next tick within the cycle."""
        return self._tick

    @abstractmethod
    async def initialize(self) -> None:
        """Prepare resources before the first tick.

        Called once at the start of run(). Errors raised here are fatal.
        """

    @abstractmethod
    async def cleanup(self) -> None:
        """Release resources when the loop exits or is cancelled.

        Must tolerate being called after a partial initialize().
        """

    @abstractmethod
    async def tick(self, tick: int) -> None:
        """Do one tick of work.

        Args:
            tick: Position within the cycle, 0 to ticks_per_cycle - 1.
        """

    def on_tick_error(self, error: Exception) -> None:
        """Handle an error that escaped tick().

        Override to customize error handling. Default logs the error.
        """
        self._logger.error("%s tick %d failed: %s", self.name, self._tick, error)

    async def _run_loop(self, max_ticks: int | None = None) -> None:
        """Run ticks at a fixed rate, forever unless max_ticks is given."""
        self._timer.start()
        done = 0
        while max_ticks is None or done < max_ticks:
            deadline = self._timer.advance()

            try:
                await self.tick(self._tick)
            except Exception as e:
                self.on_tick_error(e)

            self._tick = (self._tick + 1) % self.ticks_per_cycle
            done += 1
            await self._timer.sleep_until(deadline)

    async def run(self) -> None:
        """Run the polling loop.

        This is the main coroutine. It:
        1. Calls initialize()
        2. Enters the tick loop
        3. Calls cleanup() on exit, including cancellation and failed
           initialization
        """
        try:
            await self.initialize()
            self._logger.info("%s polling service started", self.name)
            await self._run_loop()
        finally:
            self._logger.info("Cleaning up resources...")
            await self.cleanup()
            self._logger.info("%s shutdown complete", self.name)
