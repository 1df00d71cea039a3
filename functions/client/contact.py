"""
Contact intake: validation, submission, the persisted fallback queue and the
periodic health probe that resends queued submissions.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from enum import StrEnum
from typing import Mapping, Optional, Sequence
from uuid import uuid4

from client.api import BackendClient, BackendUnavailableError
from client.notifications import NotificationQueue, Severity
from client.scheduler import ScheduledTask, Scheduler
from client.storage import LocalStorage, StorageError, load_json, save_json
from shared.types import ContactSubmission

logger = logging.getLogger(__name__)

CONTACTS_STORAGE_KEY = "portfolio_contacts"
PROBE_INTERVAL_SECONDS = 30.0

MISSING_FIELDS_MESSAGE = "Please fill in all required fields"
INVALID_EMAIL_MESSAGE = "Please enter a valid email address"
QUEUED_MESSAGE = "Message saved locally. Will send when connection is restored."
SEND_FAILED_MESSAGE = "Failed to send message"
STORE_FAILED_MESSAGE = "Failed to send message. Please try again later."


class ValidationError(Exception):
    """A required contact field is empty or malformed."""

    def __init__(self, missing: Sequence[str] = (), invalid: Sequence[str] = ()):
        self.missing = list(missing)
        self.invalid = list(invalid)
        problems = [f"missing {name}" for name in self.missing]
        problems += [f"invalid {name}" for name in self.invalid]
        super().__init__(f"Invalid contact form: {', '.join(problems)}")


class SubmitOutcome(StrEnum):
    SENT = "sent"
    REJECTED = "rejected"
    QUEUED = "queued"
    FAILED = "failed"


class FallbackQueue:
    """Ordered, persisted list of submissions awaiting delivery."""

    def __init__(self, storage: LocalStorage, key: str = CONTACTS_STORAGE_KEY):
        self.storage = storage
        self.key = key
        self._lock = threading.RLock()

    def entries(self) -> list[dict]:
        with self._lock:
            entries = load_json(self.storage, self.key, [])
            if not isinstance(entries, list):
                logger.warning("Ignoring malformed fallback queue under %s", self.key)
                return []
            entries = [entry for entry in entries if isinstance(entry, dict)]
            self._repair_ids(entries)
        return entries

    def _repair_ids(self, entries: list[dict]) -> None:
        """Give entries written without a usable id a fresh one and persist it."""
        repaired = 0
        for entry in entries:
            if not isinstance(entry.get("id"), str) or not entry["id"]:
                entry["id"] = uuid4().hex
                repaired += 1
        if not repaired:
            return
        logger.warning("Assigned ids to %d queued contacts under %s", repaired, self.key)
        try:
            save_json(self.storage, self.key, entries)
        except StorageError:
            logger.exception("Failed to persist repaired fallback queue")

    def __len__(self) -> int:
        return len(self.entries())

    def append(self, submission: ContactSubmission) -> dict:
        """
        Persist a submission with a generated id and timestamp.

        Raises:
            StorageError: If the queue cannot be written.
        """
        entry = submission.as_dict()
        entry["id"] = uuid4().hex
        entry["timestamp"] = datetime.now(timezone.utc).isoformat()
        with self._lock:
            entries = self.entries()
            entries.append(entry)
            save_json(self.storage, self.key, entries)
        return entry

    def remove(self, entry_id: str) -> bool:
        with self._lock:
            entries = self.entries()
            remaining = [entry for entry in entries if entry.get("id") != entry_id]
            if len(remaining) == len(entries):
                return False
            if remaining:
                save_json(self.storage, self.key, remaining)
            else:
                self.storage.remove_item(self.key)
            return True

    def clear(self) -> None:
        with self._lock:
            self.storage.remove_item(self.key)


class ContactIntakeClient:
    """Submits contact forms, queuing them locally while the backend is down."""

    def __init__(
        self,
        backend: BackendClient,
        queue: FallbackQueue,
        notifications: NotificationQueue,
        scheduler: Optional[Scheduler] = None,
        probe_interval: float = PROBE_INTERVAL_SECONDS,
    ):
        self.backend = backend
        self.queue = queue
        self.notifications = notifications
        self.scheduler = scheduler
        self.probe_interval = probe_interval
        self.backend_available = False
        self._probe_task: Optional[ScheduledTask] = None
        self._drain_lock = threading.Lock()

    def submit(self, fields: Mapping[str, Optional[str]]) -> SubmitOutcome:
        """
        Validate and send a contact submission.

        Raises:
            ValidationError: If name, email or message is empty, or the email
                is malformed. The user has already been notified and no
                request was made.
        """
        submission = ContactSubmission.from_fields(fields)
        missing = submission.missing_fields()
        if missing:
            self.notifications.notify(MISSING_FIELDS_MESSAGE, Severity.ERROR)
            raise ValidationError(missing=missing)
        if not submission.has_valid_email():
            self.notifications.notify(INVALID_EMAIL_MESSAGE, Severity.ERROR)
            raise ValidationError(invalid=["email"])

        logger.info("Sending contact form from %s", submission.email)
        try:
            result = self.backend.submit_contact(submission.as_dict())
        except BackendUnavailableError as exc:
            logger.warning("Network error sending contact form: %s", exc)
            self.backend_available = False
            return self._queue_locally(submission)

        if result.success:
            self.notifications.notify(result.message, Severity.SUCCESS)
            logger.info("Contact form submitted successfully")
            return SubmitOutcome.SENT

        logger.error("Contact form rejected (%s): %s", result.status_code, result.message)
        self.notifications.notify(result.message or SEND_FAILED_MESSAGE, Severity.ERROR)
        return SubmitOutcome.REJECTED

    def _queue_locally(self, submission: ContactSubmission) -> SubmitOutcome:
        try:
            entry = self.queue.append(submission)
        except StorageError:
            logger.exception("Failed to save contact locally")
            self.notifications.notify(STORE_FAILED_MESSAGE, Severity.ERROR)
            return SubmitOutcome.FAILED
        logger.info("Contact saved locally as %s", entry["id"])
        self.notifications.notify(QUEUED_MESSAGE, Severity.WARNING)
        return SubmitOutcome.QUEUED

    def probe(self) -> bool:
        """Check backend health; resend queued submissions when reachable."""
        try:
            status = self.backend.health()
        except BackendUnavailableError as exc:
            if self.backend_available:
                logger.warning("Backend became unreachable: %s", exc)
            else:
                logger.debug("Backend still unreachable: %s", exc)
            self.backend_available = False
            return False

        if not self.backend_available:
            logger.info("Backend reachable: %s", status)
        self.backend_available = True
        if len(self.queue):
            self.sync_pending()
        return True

    def sync_pending(self) -> int:
        """
        Resend queued submissions one at a time, in insertion order.

        Each acknowledged entry is removed as soon as it is accepted. A network
        failure or server error stops the drain and leaves the rest queued. An
        entry the server rejects outright is dropped, since resending cannot
        succeed. Returns the number of entries delivered.
        """
        if not self._drain_lock.acquire(blocking=False):
            logger.debug("Fallback queue drain already in progress")
            return 0

        delivered = 0
        try:
            entries = self.queue.entries()
            if entries:
                logger.info("Syncing %d locally saved contacts", len(entries))
            for entry in entries:
                try:
                    result = self.backend.submit_contact(entry)
                except BackendUnavailableError as exc:
                    logger.warning("Sync interrupted by network error: %s", exc)
                    self.backend_available = False
                    break

                if result.success:
                    self.queue.remove(entry["id"])
                    delivered += 1
                elif result.retryable:
                    logger.warning(
                        "Sync interrupted by server error (%s): %s",
                        result.status_code,
                        result.message,
                    )
                    break
                else:
                    logger.warning(
                        "Dropping queued contact %s rejected by server (%s): %s",
                        entry["id"],
                        result.status_code,
                        result.message,
                    )
                    self.queue.remove(entry["id"])
        except StorageError:
            logger.exception("Failed to update fallback queue during sync")
        finally:
            self._drain_lock.release()

        if delivered and not len(self.queue):
            logger.info("All contacts synced successfully")
        return delivered

    def start_probe(self) -> None:
        if self.scheduler is None:
            raise RuntimeError("A scheduler is required to run the health probe")
        self.stop_probe()
        self._probe_task = self.scheduler.call_every(self.probe_interval, self.probe)

    def stop_probe(self) -> None:
        if self._probe_task is not None:
            self._probe_task.cancel()
            self._probe_task = None


CONTACT_FORM_FIELDS = ("name", "email", "subject", "message")


class ContactForm:
    """Form field state bound to a ContactIntakeClient."""

    def __init__(self, client: ContactIntakeClient):
        self.client = client
        self.values: dict[str, str] = dict.fromkeys(CONTACT_FORM_FIELDS, "")
        self.submitting = False

    def fill(self, **values: str) -> None:
        for name, value in values.items():
            if name not in self.values:
                raise KeyError(f"Unknown contact form field: {name}")
            self.values[name] = value

    def reset(self) -> None:
        self.values = dict.fromkeys(CONTACT_FORM_FIELDS, "")

    def submit(self) -> Optional[SubmitOutcome]:
        """Submit handler: returns None when validation failed."""
        self.submitting = True
        try:
            outcome = self.client.submit(self.values)
        except ValidationError:
            return None
        finally:
            self.submitting = False
        if outcome is SubmitOutcome.SENT:
            self.reset()
        return outcome
