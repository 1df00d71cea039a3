"""
Pydantic schemas for the portfolio backend.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict


class HealthResponse(BaseModel):
    status: Literal["OK"]
    message: str
    timestamp: str
    version: str


class ContactRequest(BaseModel):
    # Required fields are validated by the route so a missing one yields the
    # site's own 400 payload instead of FastAPI's 422.
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    email: Optional[str] = None
    subject: Optional[str] = None
    message: Optional[str] = None


class ContactAck(BaseModel):
    name: str
    email: str


class ContactResponse(BaseModel):
    success: bool
    message: str
    data: Optional[ContactAck] = None


class AnalyticsResponse(BaseModel):
    success: Literal[True] = True


class ErrorResponse(BaseModel):
    success: Literal[False] = False
    message: str
