import uuid

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from scorehub.api import deps
from scorehub.core.participants.service import ParticipantService
from scorehub.core.scores.aggregator import ScoreAggregator
from scorehub.core.scores.service import ScoreService
from scorehub.db.models.user import User
from scorehub.schemas.participant import Participant, ParticipantUpdateRequest, ParticipantWithTotal
from scorehub.schemas.score import ParticipantScores, ScoreCreateRequest, ScoreRecord

router = APIRouter()


@router.get("/{participant_id}", response_model=ParticipantWithTotal)
async def get_participant(
    participant_id: uuid.UUID,
    db: AsyncSession = Depends(deps.get_db),
    session_factory: async_sessionmaker[AsyncSession] = Depends(deps.get_session_factory),
    current_user: User = Depends(deps.get_current_user),
):
    participant = await ParticipantService(db).get_participant(participant_id)
    total = await ScoreAggregator(session_factory).total_for_participant(participant.id)
    return ParticipantWithTotal(**Participant.model_validate(participant).model_dump(), total=total)


@router.patch("/{participant_id}", response_model=Participant)
async def update_participant(
    participant_id: uuid.UUID,
    request: ParticipantUpdateRequest,
    db: AsyncSession = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user),
):
    return await ParticipantService(db).update_participant(participant_id, request.name)


@router.delete("/{participant_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_participant(
    participant_id: uuid.UUID,
    db: AsyncSession = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user),
):
    await ParticipantService(db).delete_participant(participant_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{participant_id}/scores", response_model=ParticipantScores)
async def list_participant_scores(
    participant_id: uuid.UUID,
    db: AsyncSession = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user),
):
    participant = await ParticipantService(db).get_participant(participant_id)
    records = await ScoreService(db).list_scores_by_participant(participant.id)
    return ParticipantScores(
        participant_id=participant.id,
        total=sum(r.points for r in records),
        items=records,
    )


@router.post("/{participant_id}/scores", response_model=ScoreRecord, status_code=status.HTTP_201_CREATED)
async def add_score(
    participant_id: uuid.UUID,
    request: ScoreCreateRequest,
    db: AsyncSession = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user),
):
    participant = await ParticipantService(db).get_participant(participant_id)
    return await ScoreService(db).add_score(participant.id, participant.activity_id, request.points, request.reason)
