from __future__ import annotations

from fastapi import APIRouter, Request

from app.db.session import SessionLocal
from app.economy.raindrops.rules import available_tiers
from app.economy.raindrops.service import RaindropService

from .challenges_helpers import _tiers_as_response
from .challenges_models import RaindropBalanceResponse
from .student_helpers import _ensure_student, _resolve_student_id

router = APIRouter(prefix="/api/students", tags=["students"])


@router.get("/me/raindrops", response_model=RaindropBalanceResponse)
async def get_my_raindrops(request: Request) -> RaindropBalanceResponse:
    user_id = _resolve_student_id(request)
    async with SessionLocal.begin() as session:
        await _ensure_student(session, user_id=user_id)
        progress = await RaindropService.get_progress(session, student_user_id=user_id)
    return RaindropBalanceResponse(
        total_raindrops=progress.total_raindrops,
        level=progress.level,
        cups_filled=progress.cups_filled,
        cup_progress=progress.cup_progress,
        tiers=_tiers_as_response(available_tiers(progress.total_raindrops)),
    )
