"""
Main application entry point for Dining Watch.

Resolves the configured restaurants once, then polls them until SIGINT or
SIGTERM, dispatching every detected opening to the enabled channels.
"""

import sys
import signal
import asyncio
from datetime import datetime
from typing import Optional, Dict, Any, List

from dining_watch.app_factory import create_app, ApplicationContainer
from dining_watch.config import load_settings
from dining_watch.models.dining_models import Target


class DiningWatchApplication:
    """Main Dining Watch application."""

    def __init__(self, container: Optional[ApplicationContainer] = None):
        """
        Initialize the application.

        Args:
            container: Component container (created from the environment if None)
        """
        self.container = container or create_app()
        self.settings = self.container.settings
        self.logger = self.container.logger
        self.error_handler = self.container.error_handler

        self.targets: List[Target] = []
        self.running = False
        self.startup_time = datetime.now()
        self._stop_event: Optional[asyncio.Event] = None

        self.logger.info(
            f"{self.settings.app_name} initialized",
            extra={
                "version": self.settings.app_version,
                "environment": self.settings.environment.value
            }
        )

    async def start(self) -> List[Target]:
        """
        Resolve targets and schedule polling.

        Returns:
            The resolved targets

        Raises:
            DiningAPIError: If the restaurant directory cannot be fetched
        """
        self.error_handler.install_loop_handler(asyncio.get_running_loop())

        self.logger.info("Starting Dining Watch", extra={"config": self.settings.get_configuration_summary()})

        self.targets = await self.container.target_resolver.resolve(self.settings.search.restaurant_names)
        if not self.targets:
            self.logger.warning("None of the configured restaurants were found, nothing to poll")

        manager = self.container.notification_manager
        if not manager.enabled_channels:
            self.logger.warning("No notification channels enabled")

        self.container.scheduler.start()
        manager.start()
        self.container.poller.start(self.targets)

        self.running = True
        return self.targets

    async def run_forever(self):
        """Wait until a shutdown signal arrives, then stop."""
        self._stop_event = asyncio.Event()
        self._setup_signal_handlers()

        try:
            await self._stop_event.wait()
        finally:
            await self.stop()

    def request_stop(self):
        if self._stop_event is not None:
            self._stop_event.set()

    async def stop(self):
        """Cancel scheduled work and release resources."""
        if not self.running:
            return

        self.running = False
        await self.container.shutdown()

    def get_status(self) -> Dict[str, Any]:
        return {
            "running": self.running,
            "targets": [target.name for target in self.targets],
            "uptime_seconds": (datetime.now() - self.startup_time).total_seconds(),
            "components": self.container.get_component_status()
        }

    def _setup_signal_handlers(self):
        """Setup signal handlers for graceful shutdown."""
        loop = asyncio.get_running_loop()

        def signal_handler(signum):
            self.logger.info(f"Received signal {signum}, initiating graceful shutdown...")
            self.request_stop()

        for signum in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(signum, signal_handler, signum)
            except NotImplementedError:
                self.logger.debug(f"Signal handlers not supported on this platform for {signum}")


async def run_application(app: DiningWatchApplication):
    try:
        await app.start()
    except BaseException:
        await app.container.shutdown()
        raise

    await app.run_forever()


def main() -> int:
    """Main entry point."""
    try:
        settings = load_settings()
    except Exception as e:
        print(f"Invalid configuration: {e}")
        return 1

    app = DiningWatchApplication(create_app(settings))

    try:
        asyncio.run(run_application(app))
        return 0

    except KeyboardInterrupt:
        app.logger.info("Interrupted by user")
        return 0

    except Exception as e:
        app.logger.critical(f"Fatal error: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
