"""
HTTP routes for the portfolio backend API.
"""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from backend.config import Settings, get_settings
from backend.contact_log import ContactLog
from backend.dependencies import get_contact_log
from backend.schemas import (
    AnalyticsResponse,
    ContactAck,
    ContactRequest,
    ContactResponse,
    ErrorResponse,
    HealthResponse,
)
from shared.types import ContactSubmission

import logging

logger = logging.getLogger(__name__)

router = APIRouter()

CONTACT_THANKS = (
    "Thank you! Your message has been received. I'll get back to you soon."
)
CONTACT_MISSING_FIELDS = "Name, email, and message are required"


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


@router.get("/health", response_model=HealthResponse)
def health(settings: Settings = Depends(get_settings)):
    return HealthResponse(
        status="OK",
        message=f"{settings.service_name} is running",
        timestamp=_utc_now_iso(),
        version=settings.service_version,
    )


@router.post(
    "/contact",
    response_model=ContactResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def contact(
    payload: ContactRequest,
    request: Request,
    contact_log: ContactLog = Depends(get_contact_log),
):
    """
    Validate a contact submission and append it to the contact log.
    """
    submission = ContactSubmission.from_fields(payload.model_dump())
    if submission.missing_fields():
        logger.info(
            "Rejected contact submission, missing: %s",
            ", ".join(submission.missing_fields()),
        )
        return JSONResponse(
            status_code=400,
            content=ErrorResponse(message=CONTACT_MISSING_FIELDS).model_dump(),
        )

    logger.info(
        "Contact form submission from %s <%s>: %s",
        submission.name,
        submission.email,
        submission.subject,
    )
    record = submission.as_dict()
    record["timestamp"] = _utc_now_iso()
    record["ip"] = request.client.host if request.client else None
    contact_log.append(record)

    return ContactResponse(
        success=True,
        message=CONTACT_THANKS,
        data=ContactAck(name=submission.name, email=submission.email),
    )


@router.post("/analytics/view", response_model=AnalyticsResponse)
async def track_view(request: Request):
    """
    Record a page view. Any payload is accepted, including a malformed one.
    """
    try:
        payload = await request.json()
    except ValueError:
        payload = None
    logger.info("Page view: %s", payload)
    return AnalyticsResponse()
