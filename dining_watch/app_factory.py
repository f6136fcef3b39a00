"""
Application factory for Dining Watch.

Creates and wires the application components lazily so tests can replace
any of them before first use.
"""

import logging
from typing import Optional, Dict, Any

from dining_watch.config import Settings, get_settings
from dining_watch.utils.logger import setup_logging, configure_third_party_loggers
from dining_watch.utils.error_handler import initialize_error_handler, GlobalErrorHandler
from dining_watch.utils.scheduler import JobScheduler
from dining_watch.api.dining_client import DiningClient
from dining_watch.analysis.opening_log import OpeningLog
from dining_watch.analysis.poller import OpeningPoller
from dining_watch.analysis.target_resolver import TargetResolver
from dining_watch.models.dining_models import ReservationQuery
from dining_watch.notifications.notification_manager import NotificationManager


class ApplicationContainer:
    """
    Dependency container for Dining Watch components.

    Each component is created on first access and cached.
    """

    def __init__(self, settings: Optional[Settings] = None):
        """
        Initialize application container.

        Args:
            settings: Application settings (uses default if None)
        """
        self.settings = settings or get_settings()

        self._logger: Optional[logging.Logger] = None
        self._error_handler: Optional[GlobalErrorHandler] = None
        self._scheduler: Optional[JobScheduler] = None
        self._dining_client: Optional[DiningClient] = None
        self._notification_manager: Optional[NotificationManager] = None
        self._opening_log: Optional[OpeningLog] = None
        self._target_resolver: Optional[TargetResolver] = None
        self._poller: Optional[OpeningPoller] = None

    @property
    def logger(self) -> logging.Logger:
        """Get or create logger."""
        if self._logger is None:
            self._logger = self._create_logger()
        return self._logger

    @property
    def error_handler(self) -> GlobalErrorHandler:
        """Get or create error handler."""
        if self._error_handler is None:
            self._error_handler = initialize_error_handler(self.logger)
        return self._error_handler

    @property
    def scheduler(self) -> JobScheduler:
        if self._scheduler is None:
            self._scheduler = JobScheduler(logger=logging.getLogger("dining_watch.scheduler"))
        return self._scheduler

    @property
    def dining_client(self) -> DiningClient:
        if self._dining_client is None:
            self._dining_client = DiningClient(
                base_url=self.settings.dining.base_url,
                timeout=self.settings.dining.timeout_seconds,
                user_agent=self.settings.dining.user_agent
            )
        return self._dining_client

    @property
    def reservation_query(self) -> ReservationQuery:
        search = self.settings.search
        return ReservationQuery(
            start_date=search.start_date,
            party_size=search.party_size,
            stay_length_days=search.stay_length_days
        )

    @property
    def notification_manager(self) -> NotificationManager:
        """Get or create notification manager with every configured channel."""
        if self._notification_manager is None:
            self._notification_manager = NotificationManager.create_from_settings(
                self.settings,
                self.scheduler,
                error_handler=self.error_handler
            )
        return self._notification_manager

    @property
    def opening_log(self) -> OpeningLog:
        if self._opening_log is None:
            self._opening_log = OpeningLog(self.settings.opening_log_file)
        return self._opening_log

    @property
    def target_resolver(self) -> TargetResolver:
        if self._target_resolver is None:
            self._target_resolver = TargetResolver(self.dining_client, self.reservation_query)
        return self._target_resolver

    @property
    def poller(self) -> OpeningPoller:
        """Get or create the opening poller."""
        if self._poller is None:
            self._poller = OpeningPoller(
                client=self.dining_client,
                notification_manager=self.notification_manager,
                opening_log=self.opening_log,
                scheduler=self.scheduler,
                interval_seconds=self.settings.search.check_interval_seconds,
                error_handler=self.error_handler
            )
        return self._poller

    def get_component_status(self) -> Dict[str, Any]:
        """
        Get status of the created components.

        Returns:
            Component status dictionary
        """
        status: Dict[str, Any] = {}

        if self._scheduler is not None:
            status['scheduler'] = self._scheduler.get_scheduler_stats()
        if self._dining_client is not None:
            status['dining_client'] = self._dining_client.get_stats()
        if self._poller is not None:
            status['poller'] = self._poller.get_poll_stats()
        if self._notification_manager is not None:
            status['notifications'] = self._notification_manager.get_delivery_status()
            if self._notification_manager.sms_limiter is not None:
                status['sms_limiter'] = self._notification_manager.sms_limiter.get_limiter_stats()
        if self._error_handler is not None:
            status['errors'] = self._error_handler.get_error_summary(hours=1)

        return status

    async def shutdown(self):
        """
        Shutdown components in order: scheduler, in-flight checks,
        notification channels, then the provider HTTP session.
        """
        self.logger.info("Shutting down application components...")

        if self._scheduler is not None:
            try:
                self._scheduler.shutdown(wait=False)
            except Exception as e:
                self.logger.error(f"Error shutting down scheduler: {e}")

        if self._poller is not None:
            await self._poller.shutdown()

        if self._notification_manager is not None:
            try:
                await self._notification_manager.close()
            except Exception as e:
                self.logger.error(f"Error closing notification channels: {e}")

        if self._dining_client is not None:
            await self._dining_client.close()

        self.logger.info("Application shutdown complete")

    def _create_logger(self) -> logging.Logger:
        """Create and configure logger."""
        logger = setup_logging(self.settings.logging.to_logger_config())
        configure_third_party_loggers()
        return logger


def create_app(settings: Optional[Settings] = None) -> ApplicationContainer:
    """
    Convenience function to create application.

    Args:
        settings: Application settings, loaded from the environment when omitted

    Returns:
        Configured ApplicationContainer
    """
    return ApplicationContainer(settings)
