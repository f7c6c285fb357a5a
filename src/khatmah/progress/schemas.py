"""Request/response schemas for reading and Khatmah endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated

from pydantic import Field

from khatmah.db.models import TOTAL_JUZ
from khatmah.schemas import CamelModel


class ReadingUpdateRequest(CamelModel):
    """Mark one juz complete or incomplete. Types are strict: no "5" or 1 for true."""

    juz_number: Annotated[int, Field(strict=True, ge=1, le=TOTAL_JUZ)]
    is_completed: Annotated[bool, Field(strict=True)]


class ReadingResponse(CamelModel):
    id: int
    user_id: int
    juz_number: int
    is_completed: bool
    completed_at: datetime | None = None


class KhatmahCompleteResponse(CamelModel):
    message: str
    khatmah_count: int


class ProgressResponse(CamelModel):
    """Current-cycle summary for the authenticated user."""

    completed_parts: int
    total_parts: int
    percent_complete: float
    khatmah_count: int
