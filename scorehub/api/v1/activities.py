import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from scorehub.api import deps
from scorehub.core.activities.service import ActivityService
from scorehub.core.guard import ensure_can_view
from scorehub.core.participants.service import ParticipantService
from scorehub.core.reports.service import ReportService
from scorehub.core.scores.aggregator import ScoreAggregator
from scorehub.core.scores.service import ScoreService
from scorehub.db.models.user import User
from scorehub.schemas.activity import (
    ActivitiesList,
    Activity,
    ActivityCreateRequest,
    ActivityUpdateRequest,
    JoinRequest,
)
from scorehub.schemas.participant import (
    Participant,
    ParticipantBatchRequest,
    ParticipantBatchResult,
    ParticipantCreateRequest,
    ParticipantImportRequest,
    ParticipantsList,
    ParticipantWithTotal,
)
from scorehub.schemas.score import ScoreBatchCreateRequest, ScoresList

router = APIRouter()


@router.post("", response_model=Activity, status_code=status.HTTP_201_CREATED)
async def create_activity(
    request: ActivityCreateRequest,
    db: AsyncSession = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user),
):
    service = ActivityService(db)
    return await service.create_activity(request.name, request.description, current_user.id)


@router.get("", response_model=ActivitiesList)
async def list_owned_activities(
    include_hidden: bool = Query(False),
    db: AsyncSession = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user),
):
    service = ActivityService(db)
    items = await service.list_owned_activities(current_user.id, include_hidden=include_hidden)
    return ActivitiesList(items=items)


@router.get("/joined", response_model=ActivitiesList)
async def list_joined_activities(
    db: AsyncSession = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user),
):
    service = ActivityService(db)
    return ActivitiesList(items=await service.list_joined_activities(current_user.id))


@router.post("/join", response_model=Activity)
async def join_activity(
    request: JoinRequest,
    db: AsyncSession = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user),
):
    service = ActivityService(db)
    return await service.join_by_pin(current_user.id, request.pin)


@router.get("/{activity_id}", response_model=Activity)
async def get_activity(
    activity_id: uuid.UUID,
    db: AsyncSession = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user),
):
    activity = await ActivityService(db).get_activity(activity_id)
    await ensure_can_view(db, activity, current_user.id)
    return activity


@router.patch("/{activity_id}", response_model=Activity)
async def update_activity(
    activity_id: uuid.UUID,
    request: ActivityUpdateRequest,
    db: AsyncSession = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user),
):
    service = ActivityService(db)
    return await service.update_activity(activity_id, request.name, request.description, current_user.id)


@router.post("/{activity_id}/hide", response_model=Activity)
async def hide_activity(
    activity_id: uuid.UUID,
    db: AsyncSession = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user),
):
    return await ActivityService(db).hide_activity(activity_id, current_user.id)


@router.post("/{activity_id}/restore", response_model=Activity)
async def restore_activity(
    activity_id: uuid.UUID,
    db: AsyncSession = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user),
):
    return await ActivityService(db).restore_activity(activity_id, current_user.id)


@router.get("/{activity_id}/participants", response_model=ParticipantsList)
async def list_participants(
    activity_id: uuid.UUID,
    db: AsyncSession = Depends(deps.get_db),
    session_factory: async_sessionmaker[AsyncSession] = Depends(deps.get_session_factory),
    current_user: User = Depends(deps.get_current_user),
):
    activity = await ActivityService(db).get_activity(activity_id)
    await ensure_can_view(db, activity, current_user.id)

    totals = await ScoreAggregator(session_factory).totals_for_activity(activity_id)
    items = [
        ParticipantWithTotal(**Participant.model_validate(t.participant).model_dump(), total=t.total)
        for t in totals
    ]
    return ParticipantsList(items=items)


@router.post("/{activity_id}/participants", response_model=Participant, status_code=status.HTTP_201_CREATED)
async def create_participant(
    activity_id: uuid.UUID,
    request: ParticipantCreateRequest,
    db: AsyncSession = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user),
):
    return await ParticipantService(db).create_participant(request.name, activity_id)


@router.post("/{activity_id}/participants/batch", response_model=ParticipantBatchResult)
async def create_participants_batch(
    activity_id: uuid.UUID,
    request: ParticipantBatchRequest,
    db: AsyncSession = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user),
):
    submitted = [n for n in request.names if n.strip()]
    created = await ParticipantService(db).create_participants_batch(submitted, activity_id)
    return ParticipantBatchResult(created=created, skipped=len(submitted) - len(created))


@router.post("/{activity_id}/participants/import", response_model=ParticipantBatchResult)
async def import_participants(
    activity_id: uuid.UUID,
    request: ParticipantImportRequest,
    db: AsyncSession = Depends(deps.get_db),
    session_factory: async_sessionmaker[AsyncSession] = Depends(deps.get_session_factory),
    current_user: User = Depends(deps.get_current_user),
):
    service = ReportService(db, session_factory)
    result = await service.import_participants_csv(request.content, activity_id, filename=request.filename)
    return ParticipantBatchResult(created=result.created, skipped=result.skipped)


@router.get("/{activity_id}/scores", response_model=ScoresList)
async def list_activity_scores(
    activity_id: uuid.UUID,
    db: AsyncSession = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user),
):
    activity = await ActivityService(db).get_activity(activity_id)
    await ensure_can_view(db, activity, current_user.id)
    return ScoresList(items=await ScoreService(db).list_scores_by_activity(activity_id))


@router.post("/{activity_id}/scores/batch", response_model=ScoresList, status_code=status.HTTP_201_CREATED)
async def add_scores_batch(
    activity_id: uuid.UUID,
    request: ScoreBatchCreateRequest,
    db: AsyncSession = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user),
):
    await ActivityService(db).get_activity(activity_id)
    records = await ScoreService(db).add_scores_batch(
        request.participant_ids, activity_id, request.points, request.reason
    )
    return ScoresList(items=records)
