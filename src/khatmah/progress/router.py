"""Reading progress endpoints: /api/readings, /api/khatmah/complete, /api/progress."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from khatmah.auth.dependencies import get_current_user
from khatmah.dependencies import get_tracker
from khatmah.progress.schemas import (
    KhatmahCompleteResponse,
    ProgressResponse,
    ReadingResponse,
    ReadingUpdateRequest,
)
from khatmah.progress.tracker import ProgressTracker
from khatmah.storage.interface import UserRecord

router = APIRouter(prefix="/api", tags=["Progress"])

KHATMAH_COMPLETED_MESSAGE = "Khatmah completed! Mabrouk!"


@router.get("/readings", response_model=list[ReadingResponse])
async def list_readings(
    user: UserRecord = Depends(get_current_user),
    tracker: ProgressTracker = Depends(get_tracker),
) -> list[ReadingResponse]:
    """The caller's 30 readings, ordered by juz number."""
    readings = await tracker.get_readings(user.id)
    return [ReadingResponse.model_validate(r) for r in readings]


@router.post("/readings", response_model=ReadingResponse)
async def update_reading(
    body: ReadingUpdateRequest,
    user: UserRecord = Depends(get_current_user),
    tracker: ProgressTracker = Depends(get_tracker),
) -> ReadingResponse:
    """Mark a single juz complete or incomplete."""
    reading = await tracker.update_reading(user.id, body.juz_number, body.is_completed)
    return ReadingResponse.model_validate(reading)


@router.post("/khatmah/complete", response_model=KhatmahCompleteResponse)
async def complete_khatmah(
    user: UserRecord = Depends(get_current_user),
    tracker: ProgressTracker = Depends(get_tracker),
) -> KhatmahCompleteResponse:
    """Finish the cycle once all 30 parts are done. Incomplete cycles get a 400."""
    new_count = await tracker.complete_khatmah(user.id)
    return KhatmahCompleteResponse(message=KHATMAH_COMPLETED_MESSAGE, khatmah_count=new_count)


@router.get("/progress", response_model=ProgressResponse)
async def get_progress(
    user: UserRecord = Depends(get_current_user),
    tracker: ProgressTracker = Depends(get_tracker),
) -> ProgressResponse:
    """Completed parts in the current cycle and the lifetime Khatmah count."""
    summary = await tracker.get_progress(user.id)
    return ProgressResponse.model_validate(summary)
