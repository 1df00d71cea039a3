"""
Daemon that periodically probes the backend and resends queued contact
submissions from the persisted fallback queue.
"""

from __future__ import annotations

import argparse
import logging
import random
import sys
import time
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from client.api import HttpBackendClient
from client.config import get_client_settings
from client.contact import ContactIntakeClient, FallbackQueue
from client.notifications import NotificationQueue
from client.scheduler import ThreadingScheduler
from client.session import build_storage

logger = logging.getLogger(__name__)


def main() -> int:
    parser = argparse.ArgumentParser(description="Contact fallback queue resync daemon")
    parser.add_argument(
        "--api-base",
        type=str,
        default=None,
        help="Override the backend API base URL",
    )
    parser.add_argument(
        "--interval-seconds",
        type=float,
        default=None,
        help="Seconds between health probes",
    )
    parser.add_argument(
        "--jitter-seconds",
        type=float,
        default=5.0,
        help="Max random jitter added to sleep",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Probe and resync once, then exit",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(name)s %(levelname)s %(asctime)s %(message)s",
        datefmt="%m/%d/%Y %I:%M:%S %p",
    )

    settings = get_client_settings()
    storage = build_storage(settings)
    backend = HttpBackendClient(
        args.api_base or settings.api_base, timeout=settings.request_timeout
    )
    client = ContactIntakeClient(
        backend,
        FallbackQueue(storage),
        NotificationQueue(ThreadingScheduler()),
    )
    interval = args.interval_seconds or settings.probe_interval_seconds

    while True:
        try:
            pending = len(client.queue)
            reachable = client.probe()
            logger.info(
                "Probe %s, %d queued before, %d queued now",
                "ok" if reachable else "failed",
                pending,
                len(client.queue),
            )
        except Exception as exc:
            logger.exception("Resync failed: %s", exc)

        if args.once:
            return 0 if not len(client.queue) else 1

        sleep_for = interval + random.uniform(0, args.jitter_seconds)
        logger.info("Sleeping for %.1fs", sleep_for)
        time.sleep(sleep_for)


if __name__ == "__main__":
    raise SystemExit(main())
