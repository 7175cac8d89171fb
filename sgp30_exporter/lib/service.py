"""Service runner racing the main coroutine against an interrupt signal."""

import asyncio
import signal
from collections.abc import Awaitable, Callable

from sgp30_exporter.lib.exceptions import StartupError
from sgp30_exporter.logging import configure, get_logger

logger = get_logger("lib.service")

EXIT_OK = 0
EXIT_STARTUP_FAILURE = 1


class ShutdownCoordinator:
    """Completes when the process receives SIGINT."""

    def __init__(self, signals: tuple[signal.Signals, ...] = (signal.SIGINT,)) -> None:
        self._signals = signals
        self._event = asyncio.Event()
        self._received: signal.Signals | None = None

    @property
    def received(self) -> signal.Signals | None:
        return self._received

    def install(self, loop: asyncio.AbstractEventLoop) -> None:
        """Register handlers on the running event loop."""
        for sig in self._signals:
            loop.add_signal_handler(sig, self.request_shutdown, sig)

    def uninstall(self, loop: asyncio.AbstractEventLoop) -> None:
        for sig in self._signals:
            loop.remove_signal_handler(sig)

    def request_shutdown(self, sig: signal.Signals | None = None) -> None:
        if self._event.is_set():
            return
        self._received = sig
        name = sig.name if sig is not None else "shutdown request"
        logger.info("Received %s, initiating graceful shutdown...", name)
        self._event.set()

    async def wait(self) -> None:
        await self._event.wait()


async def race_shutdown(
    main: Awaitable[None], coordinator: ShutdownCoordinator
) -> bool:
    """Run ``main`` until it finishes or shutdown is requested.

    The loser is cancelled and awaited. Exceptions raised by ``main``
    propagate to the caller.

    Returns:
        True if shutdown won the race.
    """
    main_task = asyncio.ensure_future(main)
    shutdown_task = asyncio.ensure_future(coordinator.wait())
    done, pending = await asyncio.wait(
        {main_task, shutdown_task}, return_when=asyncio.FIRST_COMPLETED
    )
    for task in pending:
        task.cancel()
    await asyncio.gather(*pending, return_exceptions=True)

    if main_task in done:
        main_task.result()
        return False
    return True


def run_service(
    main: Callable[[], Awaitable[None]],
    *,
    name: str = "service",
    log_level: int | str = "INFO",
) -> int:
    """Run an async service with signal handling.

    Provides a standard entry point that:
    - Configures logging
    - Races the service against SIGINT, cancelling whichever loses
    - Maps startup failures to a non-zero exit status

    Args:
        main: Async function to run (typically named ``run``).
        name: Service name for logging.
        log_level: Level for the package logger.

    Returns:
        Process exit status.
    """
    configure(log_level)
    service_logger = get_logger(f"{name}.service")

    async def _run() -> bool:
        coordinator = ShutdownCoordinator()
        loop = asyncio.get_running_loop()
        coordinator.install(loop)
        try:
            return await race_shutdown(main(), coordinator)
        finally:
            coordinator.uninstall(loop)

    try:
        interrupted = asyncio.run(_run())
    except StartupError as e:
        service_logger.critical("%s failed to start: %s", name.capitalize(), e)
        return EXIT_STARTUP_FAILURE

    if interrupted:
        service_logger.info("%s service stopped", name.capitalize())
    else:
        service_logger.warning("%s service exited on its own", name.capitalize())
    return EXIT_OK
