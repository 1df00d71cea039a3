"""
Wiring for one page session: builds the client state objects, restores the
saved theme, checks the backend and starts the periodic probe.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from client.analytics import PageViewTracker
from client.api import BackendClient, HttpBackendClient
from client.config import ClientSettings, get_client_settings
from client.contact import ContactForm, ContactIntakeClient, FallbackQueue
from client.notifications import NotificationQueue
from client.scheduler import Scheduler, ThreadingScheduler
from client.storage import (
    InMemoryLocalStorage,
    JsonFileLocalStorage,
    LocalStorage,
    RedisLocalStorage,
)
from client.themes import StyleScope, ThemeRegistry, ThemeSwitcher

logger = logging.getLogger(__name__)


def build_storage(settings: ClientSettings) -> LocalStorage:
    if settings.redis_url:
        return RedisLocalStorage(url=settings.redis_url)
    if settings.storage_path:
        return JsonFileLocalStorage(settings.storage_path)
    return InMemoryLocalStorage()


@dataclass
class PortfolioSession:
    notifications: NotificationQueue
    themes: ThemeSwitcher
    contact: ContactIntakeClient
    contact_form: ContactForm
    page_views: PageViewTracker

    def start(
        self,
        page: str = "/",
        referrer: Optional[str] = None,
        screen_size: Optional[str] = None,
    ) -> bool:
        """
        Restore the theme, check the backend and start probing.

        Returns True when the backend was reachable.
        """
        self.themes.load_saved_theme()
        available = self.contact.probe()
        if available:
            logger.info("Backend connected successfully")
            self.page_views.track(page, referrer=referrer, screen_size=screen_size)
        else:
            logger.info("Backend not available, contact forms will be queued")
        self.contact.start_probe()
        return available

    def close(self) -> None:
        self.contact.stop_probe()
        self.notifications.dismiss()


def create_session(
    settings: Optional[ClientSettings] = None,
    *,
    storage: Optional[LocalStorage] = None,
    backend: Optional[BackendClient] = None,
    scheduler: Optional[Scheduler] = None,
    style: Optional[StyleScope] = None,
) -> PortfolioSession:
    settings = settings or get_client_settings()
    storage = storage if storage is not None else build_storage(settings)
    backend = backend or HttpBackendClient(
        settings.api_base, timeout=settings.request_timeout
    )
    scheduler = scheduler or ThreadingScheduler()

    notifications = NotificationQueue(
        scheduler, default_timeout=settings.notification_timeout_seconds
    )
    themes = ThemeSwitcher(
        ThemeRegistry(),
        style or StyleScope(),
        storage,
        notifications=notifications,
        notification_timeout=settings.theme_notification_timeout_seconds,
    )
    contact = ContactIntakeClient(
        backend,
        FallbackQueue(storage),
        notifications,
        scheduler=scheduler,
        probe_interval=settings.probe_interval_seconds,
    )
    return PortfolioSession(
        notifications=notifications,
        themes=themes,
        contact=contact,
        contact_form=ContactForm(contact),
        page_views=PageViewTracker(backend),
    )
