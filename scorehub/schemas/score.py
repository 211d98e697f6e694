import uuid
from datetime import datetime
from typing import List

from pydantic import BaseModel, StrictInt
from pydantic.config import ConfigDict


class ScoreCreateRequest(BaseModel):
    # Strict so that booleans and floats are rejected rather than coerced.
    points: StrictInt
    reason: str


class ScoreBatchCreateRequest(BaseModel):
    participant_ids: List[uuid.UUID]
    points: StrictInt
    reason: str


class ScoreUpdateRequest(BaseModel):
    points: StrictInt
    reason: str


class ScoreRecord(BaseModel):
    id: uuid.UUID
    participant_id: uuid.UUID
    activity_id: uuid.UUID
    points: int
    reason: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ScoresList(BaseModel):
    items: List[ScoreRecord]


class ParticipantScores(BaseModel):
    participant_id: uuid.UUID
    total: int
    items: List[ScoreRecord]
