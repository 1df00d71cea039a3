"""
Page-view tracking. Failures never reach the user.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from client.api import BackendClient, BackendUnavailableError

logger = logging.getLogger(__name__)


class PageViewTracker:
    def __init__(self, backend: BackendClient):
        self.backend = backend

    def track(
        self,
        page: str,
        referrer: Optional[str] = None,
        screen_size: Optional[str] = None,
    ) -> bool:
        payload = {
            "page": page,
            "referrer": referrer or "direct",
            "screenSize": screen_size,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        try:
            self.backend.track_view(payload)
        except BackendUnavailableError as exc:
            logger.debug("Page view not recorded: %s", exc)
            return False
        return True
