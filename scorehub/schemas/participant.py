import uuid
from datetime import datetime
from typing import List

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


class ParticipantCreateRequest(BaseModel):
    name: str


class ParticipantUpdateRequest(BaseModel):
    name: str


class ParticipantBatchRequest(BaseModel):
    names: List[str] = Field(..., max_length=1000)


class ParticipantImportRequest(BaseModel):
    filename: str
    content: str


class Participant(BaseModel):
    id: uuid.UUID
    activity_id: uuid.UUID
    name: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ParticipantWithTotal(Participant):
    total: int = 0


class ParticipantsList(BaseModel):
    items: List[ParticipantWithTotal]


class ParticipantBatchResult(BaseModel):
    created: List[Participant]
    skipped: int = Field(..., ge=0)

