import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from scorehub.api import deps
from scorehub.core.scores.service import ScoreService
from scorehub.db.models.user import User
from scorehub.schemas.score import ScoreRecord, ScoreUpdateRequest

router = APIRouter()


@router.get("/{score_id}", response_model=ScoreRecord)
async def get_score(
    score_id: uuid.UUID,
    db: AsyncSession = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user),
):
    return await ScoreService(db).get_score(score_id)


@router.patch("/{score_id}", response_model=ScoreRecord)
async def update_score(
    score_id: uuid.UUID,
    request: ScoreUpdateRequest,
    db: AsyncSession = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user),
):
    return await ScoreService(db).update_score(score_id, request.points, request.reason)
